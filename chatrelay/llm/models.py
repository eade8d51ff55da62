"""
Data structures shared by the response-orchestration layer.

Chat-side types (Message, Attachment) are produced by the gateway adapter and
treated as read-only here. Completion-side types (ContentPart, InputTurn) are
rebuilt on every attempt and know how to render themselves into the
chat-completions dicts LiteLLM expects.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Generic, Literal, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class LLMError(Exception):
    """Raised or returned when a completion-service call fails."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class SelectionError(LLMError):
    """The model-tier classification call failed or returned an invalid tier."""


class CompletionError(LLMError):
    """A completion attempt failed, or the attempts ran out without an answer."""


T = TypeVar("T")


@dataclass(frozen=True)
class CallResult(Generic[T]):
    """
    Outcome of an external-service call: exactly one of ``value`` or ``error``.

    Expected service failures travel as values so each call site checks them
    explicitly; only unanticipated faults propagate as exceptions.
    """

    value: T | None = None
    error: LLMError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> CallResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: LLMError) -> CallResult[T]:
        return cls(error=error)


# ---------------------------------------------------------------------------
# Chat messages
# ---------------------------------------------------------------------------

class AttachmentKind(str, Enum):
    IMAGE = "image"
    TEXT = "text"
    OTHER = "other"


def classify_attachment(content_type: str | None) -> AttachmentKind:
    """Map a declared media type to an AttachmentKind. File extensions are ignored."""
    media_type = (content_type or "").strip().lower()
    if media_type.startswith("image/"):
        return AttachmentKind.IMAGE
    if media_type.startswith("text/"):
        return AttachmentKind.TEXT
    return AttachmentKind.OTHER


class Attachment(BaseModel):
    """A file attached to a chat message."""

    url: str = Field(description="CDN URL of the attachment")
    filename: str = Field(default="", description="Original filename")
    content_type: str | None = Field(
        default=None, description="Declared media type, e.g. 'image/png'"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> AttachmentKind:
        return classify_attachment(self.content_type)


class Message(BaseModel):
    """
    A chat message as seen by the orchestration layer.

    Immutable once built. ``is_self`` marks messages written by this bot;
    ``is_bot`` marks messages written by any bot account.
    """

    id: int
    author_id: int
    author_name: str = Field(description="Display name shown in the 'from:' header")
    is_self: bool = False
    is_bot: bool = False
    content: str = ""
    created_at: datetime
    attachments: tuple[Attachment, ...] = ()
    reference_id: int | None = Field(
        default=None, description="Id of the message this one replies to"
    )

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Completion input
# ---------------------------------------------------------------------------

class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class TextPart(BaseModel):
    kind: Literal["text"] = "text"
    text: str

    model_config = ConfigDict(frozen=True)

    def to_litellm(self) -> dict[str, Any]:
        return {"type": "text", "text": self.text}


class ImagePart(BaseModel):
    kind: Literal["image"] = "image"
    url: str
    detail: Literal["auto", "low", "high"] = "auto"

    model_config = ConfigDict(frozen=True)

    def to_litellm(self) -> dict[str, Any]:
        return {"type": "image_url", "image_url": {"url": self.url, "detail": self.detail}}


class FilePart(BaseModel):
    kind: Literal["file"] = "file"
    url: str

    model_config = ConfigDict(frozen=True)

    def to_litellm(self) -> dict[str, Any]:
        return {"type": "file", "file": {"file_id": self.url}}


class EmbeddedTextPart(BaseModel):
    """Inlined contents of a text attachment."""

    kind: Literal["embedded_text"] = "embedded_text"
    text: str

    model_config = ConfigDict(frozen=True)

    def to_litellm(self) -> dict[str, Any]:
        return {"type": "text", "text": self.text}


ContentPart = Annotated[
    Union[TextPart, ImagePart, FilePart, EmbeddedTextPart],
    Field(discriminator="kind"),
]


class InputTurn(BaseModel):
    """One entry of the completion input sequence."""

    role: Role
    content: str | list[ContentPart]

    model_config = ConfigDict(frozen=True)

    def to_litellm(self) -> dict[str, Any]:
        if isinstance(self.content, str):
            content: Any = self.content
        else:
            content = [part.to_litellm() for part in self.content]
        return {"role": self.role.value, "content": content}


# ---------------------------------------------------------------------------
# Model selection and tool calls
# ---------------------------------------------------------------------------

class ModelTier(str, Enum):
    """Completion models, smallest to largest."""

    NANO = "gpt-5-nano"
    MINI = "gpt-5-mini"
    STANDARD = "gpt-5.2"
    CODEX = "gpt-5.1-codex"


class ModelChoice(BaseModel):
    """Structured output schema for the model-tier classification call."""

    model: ModelTier

    model_config = ConfigDict(extra="forbid")


class GetMessagesArgs(BaseModel):
    limit: int = Field(ge=1, le=20)

    model_config = ConfigDict(extra="forbid")


class ToolRequest(BaseModel):
    """A ``get_messages`` call emitted by the completion service."""

    id: str = ""
    name: str
    arguments: GetMessagesArgs


class Answer(BaseModel):
    """Terminal result of an orchestration run."""

    text: str
    model: str
    attempts: int = Field(default=0, ge=0, description="Zero-based index of the answering attempt")
    history: list[Message] = Field(default_factory=list)
