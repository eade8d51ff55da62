"""
MessageIntakeFilter: decides whether an inbound message is addressed to the bot.

A message is addressed to the bot when its content starts with the literal
mention prefix ``<@BOT_ID>``, or when it replies to a message the bot wrote.
Messages from bots (this one included) are never accepted.
"""

from __future__ import annotations

from dataclasses import dataclass

from chatrelay.config.logging import get_logger
from chatrelay.gateway.base import ChatChannel
from chatrelay.llm.context import mention_prefix, strip_prefix
from chatrelay.llm.models import Message

logger = get_logger(__name__)


@dataclass(frozen=True)
class Intake:
    """An accepted message: the request text and the message it replies to, if any."""

    prompt: str
    reference: Message | None = None


class MessageIntakeFilter:
    """
    Gate in front of the response cycle.

    Args:
        bot_id: The bot's own user id
    """

    def __init__(self, bot_id: int) -> None:
        self.bot_id = bot_id
        self.prefix = mention_prefix(bot_id)

    async def check(self, message: Message, channel: ChatChannel) -> Intake | None:
        """
        Return an Intake if the bot should answer ``message``, else None.

        A message that addresses the bot but carries no request after the
        prefix (a bare mention) is also None: there is nothing to answer.
        """
        if message.is_bot or message.is_self:
            return None

        if message.content.startswith(self.prefix):
            prompt = strip_prefix(message.content, self.prefix)
            if not prompt:
                logger.debug(f"Ignoring bare mention in message {message.id}")
                return None
            reference = None
            if message.reference_id is not None:
                reference = await channel.fetch_message(message.reference_id)
            return Intake(prompt=prompt, reference=reference)

        if message.reference_id is None:
            return None

        reference = await channel.fetch_message(message.reference_id)
        if reference is None or not reference.is_self:
            return None

        prompt = message.content.lstrip()
        if not prompt:
            return None
        return Intake(prompt=prompt, reference=reference)
