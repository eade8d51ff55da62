"""
Shared fixtures: an in-memory ChatChannel and a Message factory.

Message ids double as timestamps (id N is created N seconds after a fixed
epoch), mirroring Discord snowflakes which grow with time.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from chatrelay.gateway.base import ChatChannel
from chatrelay.llm.models import Attachment, Message

BOT_ID = 999
EPOCH = datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)


class FakeChannel(ChatChannel):
    """Records every outbound call and serves history from an in-memory store."""

    def __init__(self, guild_name: str | None = "Test Guild", channel_name: str | None = "general"):
        self._guild_name = guild_name
        self._channel_name = channel_name
        self.store: dict[int, Message] = {}
        self.attachment_bytes: dict[str, bytes] = {}
        self.history_calls: list[tuple[int, int]] = []
        self.read_calls: list[str] = []
        self.replies: list[tuple[int, str]] = []
        self.sent: list[str] = []
        self.typing_count = 0

    @property
    def guild_name(self) -> str | None:
        return self._guild_name

    @property
    def channel_name(self) -> str | None:
        return self._channel_name

    def add(self, *messages: Message) -> None:
        for message in messages:
            self.store[message.id] = message

    async def fetch_history(self, limit: int, before: int) -> list[Message]:
        self.history_calls.append((limit, before))
        older = sorted(
            (m for m in self.store.values() if m.id < before),
            key=lambda m: m.id,
            reverse=True,  # newest first, like Discord
        )
        return older[:limit]

    async def fetch_message(self, message_id: int) -> Message | None:
        return self.store.get(message_id)

    async def read_attachment(self, attachment: Attachment) -> bytes:
        self.read_calls.append(attachment.url)
        return self.attachment_bytes[attachment.url]

    async def send_typing(self) -> None:
        self.typing_count += 1

    async def reply(self, message_id: int, text: str) -> None:
        self.replies.append((message_id, text))

    async def send(self, text: str) -> None:
        self.sent.append(text)


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def make_message():
    """Factory for Message objects; ``is_self`` is derived from ``author_id``."""

    def _make(
        message_id: int,
        content: str = "",
        author_id: int = 1,
        author_name: str = "alice",
        is_bot: bool | None = None,
        attachments: tuple[Attachment, ...] = (),
        reference_id: int | None = None,
    ) -> Message:
        is_self = author_id == BOT_ID
        return Message(
            id=message_id,
            author_id=author_id,
            author_name=author_name if not is_self else "ChatRelay",
            is_self=is_self,
            is_bot=is_self if is_bot is None else is_bot,
            content=content,
            created_at=EPOCH + timedelta(seconds=message_id),
            attachments=attachments,
            reference_id=reference_id,
        )

    return _make


@pytest.fixture
def make_channel():
    """Factory for FakeChannel with custom guild/channel names (None for DMs)."""
    return FakeChannel
