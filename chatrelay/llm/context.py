"""
ContextAssembler: chat messages → completion input turns.

Every message becomes exactly one InputTurn, in the order given. Messages the
bot wrote become assistant turns holding a single text block; everyone else's
become user turns holding a text block followed by up to ``max_attachments``
attachment parts:

    image/*  → ImagePart (URL reference, detail "auto")
    text/*   → EmbeddedTextPart (bytes fetched and inlined once per cycle)
    other    → FilePart (URL only, never fetched)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from chatrelay.config.logging import get_logger
from chatrelay.llm.models import (
    Attachment,
    AttachmentKind,
    ContentPart,
    EmbeddedTextPart,
    FilePart,
    ImagePart,
    InputTurn,
    Message,
    Role,
    TextPart,
)

if TYPE_CHECKING:
    from chatrelay.gateway.base import ChatChannel

logger = get_logger(__name__)

MAX_ATTACHMENTS = 10


def mention_prefix(bot_id: int) -> str:
    return f"<@{bot_id}>"


def strip_prefix(content: str, prefix: str) -> str:
    """Remove a literal leading ``prefix`` and the whitespace after it. Other text is untouched."""
    if content.startswith(prefix):
        return content[len(prefix):].lstrip()
    return content


def build_header(message: Message, prefix: str) -> str:
    return "\n".join([
        f"from: {message.author_name}",
        f"time: {message.created_at.isoformat()}",
        strip_prefix(message.content, prefix),
    ])


class ContextAssembler:
    """
    Renders ConversationHistory into InputTurns.

    One assembler lives for one response cycle. Text attachments are fetched
    through the channel the first time they are seen and served from a local
    cache afterwards, so rebuilding turns on a later attempt is deterministic
    and costs no extra downloads.

    Args:
        channel: Channel used to download text attachments
        prefix: Mention prefix stripped from the start of message bodies
        max_attachments: Attachments beyond this count are dropped per message
    """

    def __init__(
        self,
        channel: ChatChannel,
        prefix: str,
        max_attachments: int = MAX_ATTACHMENTS,
    ):
        self._channel = channel
        self._prefix = prefix
        self._max_attachments = max_attachments
        self._text_cache: dict[str, str] = {}

    @property
    def prefix(self) -> str:
        return self._prefix

    async def build_turns(self, messages: list[Message]) -> list[InputTurn]:
        return [await self.build_turn(m) for m in messages]

    async def build_turn(self, message: Message) -> InputTurn:
        if message.is_self:
            return InputTurn(role=Role.ASSISTANT, content=build_header(message, self._prefix))
        return InputTurn(role=Role.USER, content=await self.build_parts(message))

    async def build_parts(self, message: Message) -> list[ContentPart]:
        parts: list[ContentPart] = [TextPart(text=build_header(message, self._prefix))]
        for attachment in message.attachments[: self._max_attachments]:
            parts.append(await self._attachment_part(message, attachment))
        return parts

    async def _attachment_part(self, message: Message, attachment: Attachment) -> ContentPart:
        kind = attachment.kind
        if kind is AttachmentKind.IMAGE:
            return ImagePart(url=attachment.url)
        if kind is AttachmentKind.TEXT:
            body = await self._read_text(attachment)
            return EmbeddedTextPart(
                text="\n".join([
                    f"from: {message.author_name}",
                    f"time: {message.created_at.isoformat()}",
                    f"filename: {attachment.filename}",
                    "content:",
                    body,
                ])
            )
        return FilePart(url=attachment.url)

    async def _read_text(self, attachment: Attachment) -> str:
        cached = self._text_cache.get(attachment.url)
        if cached is not None:
            return cached
        logger.debug(f"Fetching text attachment {attachment.filename!r}")
        data = await self._channel.read_attachment(attachment)
        text = data.decode("utf-8", errors="replace")
        self._text_cache[attachment.url] = text
        return text
