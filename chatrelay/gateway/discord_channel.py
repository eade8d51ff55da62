"""
DiscordChannel: ChatChannel backed by a discord.py messageable channel.
"""

from __future__ import annotations

import discord

from chatrelay.config.logging import get_logger
from chatrelay.gateway.base import ChatChannel
from chatrelay.llm.models import Attachment, Message

logger = get_logger(__name__)


class DiscordChannel(ChatChannel):
    """
    ChatChannel over a discord.py TextChannel, Thread or DMChannel.

    Converted messages keep a handle on their discord.Attachment objects so
    read_attachment() downloads through discord.py's own HTTP session.

    Args:
        channel: The discord.py channel the triggering message arrived in
        bot_user: The bot's own user, used to flag self-authored messages
    """

    def __init__(self, channel: discord.abc.Messageable, bot_user: discord.abc.User) -> None:
        self._channel = channel
        self._bot_user = bot_user
        self._attachments: dict[str, discord.Attachment] = {}

    @property
    def guild_name(self) -> str | None:
        guild = getattr(self._channel, "guild", None)
        return guild.name if guild is not None else None

    @property
    def channel_name(self) -> str | None:
        if isinstance(self._channel, (discord.DMChannel, discord.GroupChannel)):
            return None
        return getattr(self._channel, "name", None)

    def to_message(self, message: discord.Message) -> Message:
        """Snapshot a discord.Message into the orchestration layer's Message."""
        attachments = []
        for attachment in message.attachments:
            self._attachments[attachment.url] = attachment
            attachments.append(
                Attachment(
                    url=attachment.url,
                    filename=attachment.filename,
                    content_type=attachment.content_type,
                )
            )

        return Message(
            id=message.id,
            author_id=message.author.id,
            author_name=message.author.display_name,
            is_self=message.author.id == self._bot_user.id,
            is_bot=message.author.bot,
            content=message.content or "",
            created_at=message.created_at,
            attachments=tuple(attachments),
            reference_id=message.reference.message_id if message.reference else None,
        )

    async def fetch_history(self, limit: int, before: int) -> list[Message]:
        return [
            self.to_message(m)
            async for m in self._channel.history(limit=limit, before=discord.Object(id=before))
        ]

    async def fetch_message(self, message_id: int) -> Message | None:
        try:
            message = await self._channel.fetch_message(message_id)
        except discord.NotFound:
            logger.debug(f"Message {message_id} no longer exists")
            return None
        return self.to_message(message)

    async def read_attachment(self, attachment: Attachment) -> bytes:
        source = self._attachments.get(attachment.url)
        if source is None:
            raise KeyError(f"Attachment {attachment.filename!r} was not seen in this channel")
        return await source.read()

    async def send_typing(self) -> None:
        await self._channel.typing()

    async def reply(self, message_id: int, text: str) -> None:
        await self._channel.get_partial_message(message_id).reply(text)

    async def send(self, text: str) -> None:
        await self._channel.send(text)
