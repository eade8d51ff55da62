"""
Tests for DiscordChannel, using MagicMock stand-ins for discord.py objects.
"""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from chatrelay.gateway.discord_channel import DiscordChannel
from chatrelay.llm.models import Attachment, AttachmentKind

BOT_ID = 999
CREATED = datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)


def _make_user(user_id: int, name: str = "alice", bot: bool = False) -> MagicMock:
    user = MagicMock()
    user.id = user_id
    user.display_name = name
    user.bot = bot
    return user


def _make_attachment(url: str, filename: str, content_type: str | None) -> MagicMock:
    attachment = MagicMock()
    attachment.url = url
    attachment.filename = filename
    attachment.content_type = content_type
    attachment.read = AsyncMock(return_value=b"payload")
    return attachment


def _make_discord_message(
    message_id: int,
    content: str = "hi",
    author: MagicMock | None = None,
    attachments: list | None = None,
    reference_id: int | None = None,
) -> MagicMock:
    message = MagicMock()
    message.id = message_id
    message.author = author or _make_user(1)
    message.content = content
    message.created_at = CREATED
    message.attachments = attachments or []
    if reference_id is None:
        message.reference = None
    else:
        message.reference = MagicMock()
        message.reference.message_id = reference_id
    return message


class _History:
    """Async iterator mimicking channel.history()."""

    def __init__(self, messages):
        self._messages = list(messages)

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._messages:
            raise StopAsyncIteration
        return self._messages.pop(0)


@pytest.fixture
def raw_channel():
    channel = MagicMock()
    channel.guild.name = "Test Guild"
    channel.name = "general"
    channel.send = AsyncMock()
    channel.typing = AsyncMock()
    channel.fetch_message = AsyncMock()
    return channel


@pytest.fixture
def discord_channel(raw_channel):
    return DiscordChannel(raw_channel, _make_user(BOT_ID, "ChatRelay", bot=True))


class TestToMessage:
    def test_basic_fields(self, discord_channel):
        message = discord_channel.to_message(_make_discord_message(10, content="hello"))
        assert message.id == 10
        assert message.author_name == "alice"
        assert message.content == "hello"
        assert message.created_at == CREATED
        assert not message.is_self
        assert not message.is_bot
        assert message.reference_id is None

    def test_self_authored(self, discord_channel):
        bot_user = _make_user(BOT_ID, "ChatRelay", bot=True)
        message = discord_channel.to_message(_make_discord_message(10, author=bot_user))
        assert message.is_self
        assert message.is_bot

    def test_reference_and_attachments(self, discord_channel):
        raw = _make_discord_message(
            10,
            attachments=[
                _make_attachment("https://cdn/a.png", "a.png", "image/png"),
                _make_attachment("https://cdn/b.bin", "b.bin", None),
            ],
            reference_id=7,
        )
        message = discord_channel.to_message(raw)
        assert message.reference_id == 7
        assert [a.kind for a in message.attachments] == [AttachmentKind.IMAGE, AttachmentKind.OTHER]

    def test_missing_content_becomes_empty_string(self, discord_channel):
        assert discord_channel.to_message(_make_discord_message(10, content=None)).content == ""


class TestChannelNames:
    def test_guild_channel(self, discord_channel):
        assert discord_channel.guild_name == "Test Guild"
        assert discord_channel.channel_name == "general"

    def test_dm_channel_has_no_names(self):
        dm = MagicMock(spec=discord.DMChannel)
        dm.guild = None
        channel = DiscordChannel(dm, _make_user(BOT_ID))
        assert channel.guild_name is None
        assert channel.channel_name is None


class TestGatewayCalls:
    @pytest.mark.asyncio
    async def test_fetch_history_converts_messages(self, discord_channel, raw_channel):
        raw_channel.history = MagicMock(
            return_value=_History([_make_discord_message(9), _make_discord_message(8)])
        )
        messages = await discord_channel.fetch_history(limit=2, before=10)

        assert [m.id for m in messages] == [9, 8]
        kwargs = raw_channel.history.call_args.kwargs
        assert kwargs["limit"] == 2
        assert kwargs["before"].id == 10

    @pytest.mark.asyncio
    async def test_fetch_message_not_found(self, discord_channel, raw_channel):
        raw_channel.fetch_message.side_effect = discord.NotFound(
            MagicMock(status=404, reason="Not Found"), "Unknown Message"
        )
        assert await discord_channel.fetch_message(5) is None

    @pytest.mark.asyncio
    async def test_read_attachment_uses_seen_attachment(self, discord_channel):
        raw = _make_discord_message(
            10, attachments=[_make_attachment("https://cdn/notes.txt", "notes.txt", "text/plain")]
        )
        message = discord_channel.to_message(raw)
        assert await discord_channel.read_attachment(message.attachments[0]) == b"payload"

    @pytest.mark.asyncio
    async def test_read_unknown_attachment_raises(self, discord_channel):
        with pytest.raises(KeyError):
            await discord_channel.read_attachment(Attachment(url="https://cdn/x.txt"))

    @pytest.mark.asyncio
    async def test_reply_and_send(self, discord_channel, raw_channel):
        partial = MagicMock()
        partial.reply = AsyncMock()
        raw_channel.get_partial_message.return_value = partial

        await discord_channel.reply(10, "first")
        await discord_channel.send("second")
        await discord_channel.send_typing()

        raw_channel.get_partial_message.assert_called_once_with(10)
        partial.reply.assert_awaited_once_with("first")
        raw_channel.send.assert_awaited_once_with("second")
        raw_channel.typing.assert_awaited_once()
