"""
Base class for chat channel adapters.

The orchestration layer never touches discord.py objects directly. It talks to
a ChatChannel: one conversation channel with the handful of operations a
response cycle needs (history, typing, replies, attachment bytes).
"""

from abc import ABC, abstractmethod

from chatrelay.llm.models import Attachment, Message


class ChatChannel(ABC):
    """
    Abstract base class for a chat channel as seen by a response cycle.

    Implementations must return Message objects that are independent
    snapshots; the caller may hold them across suspension points.
    """

    @property
    @abstractmethod
    def guild_name(self) -> str | None:
        """Name of the server the channel belongs to, or None for DMs."""

    @property
    @abstractmethod
    def channel_name(self) -> str | None:
        """Name of the channel, or None for DMs."""

    @abstractmethod
    async def fetch_history(self, limit: int, before: int) -> list[Message]:
        """
        Fetch up to ``limit`` messages strictly older than message ``before``.

        Args:
            limit: Maximum number of messages to return
            before: Message id; only messages created before it are returned

        Returns:
            Messages in no particular order. Callers sort.
        """

    @abstractmethod
    async def fetch_message(self, message_id: int) -> Message | None:
        """Fetch a single message by id, or None if it no longer exists."""

    @abstractmethod
    async def read_attachment(self, attachment: Attachment) -> bytes:
        """Download the raw bytes of an attachment."""

    @abstractmethod
    async def send_typing(self) -> None:
        """Show the typing indicator in the channel."""

    @abstractmethod
    async def reply(self, message_id: int, text: str) -> None:
        """Send ``text`` as a reply referencing message ``message_id``."""

    @abstractmethod
    async def send(self, text: str) -> None:
        """Send ``text`` as a plain message in the channel."""
