"""
ReplyDispatcher: delivers an answer under Discord's per-message size limit.
"""

from __future__ import annotations

from chatrelay.config.logging import get_logger
from chatrelay.gateway.base import ChatChannel

logger = get_logger(__name__)

DISCORD_MESSAGE_LIMIT = 2000


def split_reply(text: str, limit: int = DISCORD_MESSAGE_LIMIT) -> list[str]:
    """
    Cut ``text`` into consecutive chunks of at most ``limit`` characters.

    ``"".join(split_reply(text)) == text`` for every input; an empty string
    yields no chunks.
    """
    if limit < 1:
        raise ValueError("limit must be positive")
    return [text[i:i + limit] for i in range(0, len(text), limit)]


class ReplyDispatcher:
    """
    Sends the first chunk as a reply to the triggering message and every
    following chunk as a plain message in the same channel, in order.

    Args:
        chunk_size: Maximum characters per outbound message
    """

    def __init__(self, chunk_size: int = DISCORD_MESSAGE_LIMIT) -> None:
        self.chunk_size = chunk_size

    async def dispatch(self, channel: ChatChannel, message_id: int, text: str) -> int:
        """Deliver ``text`` and return the number of messages sent."""
        chunks = split_reply(text, self.chunk_size)
        for index, chunk in enumerate(chunks):
            if index == 0:
                await channel.reply(message_id, chunk)
            else:
                await channel.send(chunk)
        if len(chunks) > 1:
            logger.debug(f"Reply to {message_id} split into {len(chunks)} messages")
        return len(chunks)
