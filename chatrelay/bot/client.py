"""
ChatRelayBot: discord.py bot client.

Manages the bot lifecycle:
- Builds the shared, stateless services (model selector, orchestrator,
  reply dispatcher) once at startup
- Loads the ConversationCog, which runs one response cycle per accepted message
"""

from __future__ import annotations

from pathlib import Path

import discord
from discord.ext import commands

from chatrelay.bot.dispatch import ReplyDispatcher
from chatrelay.config.logging import get_logger
from chatrelay.config.settings import Settings
from chatrelay.llm import ModelSelector, ToolCallOrchestrator

logger = get_logger(__name__)

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"


def load_prompt(name: str) -> str:
    return (PROMPTS_DIR / name).read_text(encoding="utf-8")


class ChatRelayBot(commands.Bot):
    """
    Discord bot that relays conversations to a completion service.

    Holds shared services and exposes them to cogs. The services keep no
    per-conversation state, so concurrent response cycles can share them.

    Args:
        settings: Full application settings (bot token, LLM config, etc.)
    """

    def __init__(self, settings: Settings) -> None:
        intents = discord.Intents.default()
        intents.message_content = True  # Required to read message text for mention handling
        super().__init__(
            # Required by commands.Bot; on_message below never processes commands
            command_prefix=commands.when_mentioned,
            intents=intents,
        )
        self.settings = settings
        self.selector: ModelSelector | None = None
        self.orchestrator: ToolCallOrchestrator | None = None
        self.dispatcher = ReplyDispatcher(chunk_size=settings.bot.reply_chunk_size)

    async def setup_hook(self) -> None:
        """
        Called after login, before connecting to the Gateway.

        Builds the LLM services and loads cogs.
        """
        self.selector = ModelSelector(
            settings=self.settings.llm,
            system_template=load_prompt("select_model.txt"),
        )
        self.orchestrator = ToolCallOrchestrator(
            settings=self.settings.llm,
            system_template=load_prompt("system.txt"),
        )
        logger.info(
            f"LLM services ready (selector: {self.settings.llm.selector_model}, "
            f"attempts: {self.settings.llm.max_attempts})"
        )

        from chatrelay.bot.cogs.conversation import ConversationCog
        await self.add_cog(ConversationCog(self))
        logger.info("Cogs loaded")

    async def on_message(self, message: discord.Message) -> None:
        """Skip command processing; ConversationCog's listener handles every message."""

    async def on_ready(self) -> None:
        """Called when the bot successfully connects to Discord."""
        logger.info(f"Logged in as {self.user} (id: {self.user.id})")
        logger.info(f"Connected to {len(self.guilds)} guild(s)")

    async def close(self) -> None:
        logger.info(f"Shutting down {self.settings.bot.name}...")
        await super().close()

    def is_allowed_channel(self, channel_id: int) -> bool:
        """
        Return True if the bot should respond in this channel.

        If `allowed_channel_ids` is empty (the default), the bot responds everywhere.
        If it's non-empty, the bot only responds in the listed channel IDs.
        """
        allowed = self.settings.bot.allowed_channel_ids
        return not allowed or channel_id in allowed
