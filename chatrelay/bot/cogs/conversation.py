"""
ConversationCog: answers messages addressed to the bot.

One response cycle per accepted message:

    MessageIntakeFilter → ModelSelector → seed history
        → TypingSignal { ToolCallOrchestrator } → ReplyDispatcher

Service failures (selection, completion) come back as values and are shown to
the user verbatim. Anything else raised during the cycle is logged and
answered with a generic apology.
"""

from __future__ import annotations

import discord
from discord.ext import commands

from chatrelay.bot.intake import Intake, MessageIntakeFilter
from chatrelay.bot.typing_signal import TypingSignal
from chatrelay.config.logging import get_logger
from chatrelay.gateway.base import ChatChannel
from chatrelay.gateway.discord_channel import DiscordChannel
from chatrelay.llm import ContextAssembler, merge_history
from chatrelay.llm.models import Message

logger = get_logger(__name__)

UNEXPECTED_ERROR_REPLY = "An unexpected error occurred. Please try again later."
EMPTY_ANSWER_REPLY = "I couldn't come up with a response. Please try rephrasing."


class ConversationCog(commands.Cog):
    """Handles @mentions and replies to the bot's own messages."""

    def __init__(self, bot) -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        """
        Entry point for every message the gateway delivers.

        Ignores:
        - Messages from bots (including ourselves)
        - Messages in non-allowed channels (if restriction is configured)
        """
        if self.bot.user is None or message.author.bot:
            return
        if not self.bot.is_allowed_channel(message.channel.id):
            return

        channel = DiscordChannel(message.channel, self.bot.user)
        await self.respond(channel, channel.to_message(message))

    async def respond(self, channel: ChatChannel, message: Message) -> None:
        """Run one response cycle for ``message`` if it is addressed to the bot."""
        settings = self.bot.settings.bot
        intake_filter = MessageIntakeFilter(self.bot.user.id)

        try:
            # Resolving the reply target can fail on the gateway; that shares
            # the cycle's error boundary.
            intake = await intake_filter.check(message, channel)
            if intake is None:
                return

            assembler = ContextAssembler(
                channel, intake_filter.prefix, max_attachments=settings.max_attachments
            )

            selection = await self.bot.selector.select(await assembler.build_turn(message))
            if not selection.ok:
                await channel.reply(message.id, str(selection.error))
                return

            history = await self._seed_history(channel, message, intake)

            async with TypingSignal(channel, interval=settings.typing_interval):
                result = await self.bot.orchestrator.run(
                    channel, assembler, history, selection.value
                )

            if not result.ok:
                await channel.reply(message.id, str(result.error))
                return

            text = result.value.text
            if not text.strip():
                logger.warning(f"Empty answer for message {message.id}")
                text = EMPTY_ANSWER_REPLY
            await self.bot.dispatcher.dispatch(channel, message.id, text)

        except Exception as e:
            logger.exception(f"Unexpected error answering message {message.id}: {e}")
            await channel.reply(message.id, UNEXPECTED_ERROR_REPLY)

    async def _seed_history(
        self, channel: ChatChannel, message: Message, intake: Intake
    ) -> list[Message]:
        """
        The trigger, the message it replies to (if any), and the messages
        immediately preceding the reply target or, failing that, the trigger.
        """
        seed_size = self.bot.settings.bot.history_seed_size
        anchor = message.reference_id or message.id

        preceding: list[Message] = []
        if seed_size > 0:
            preceding = await channel.fetch_history(limit=seed_size, before=anchor)

        reference = [intake.reference] if intake.reference is not None else []
        return merge_history([message], reference, preceding)
