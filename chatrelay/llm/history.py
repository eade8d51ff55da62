"""
HistoryExpander: pulls older messages into the working history on demand.

ConversationHistory is a plain ``list[Message]`` kept sorted ascending by
``created_at`` with no duplicate ids. It is never mutated in place: every
merge returns a new list which the caller swaps in for the old one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from chatrelay.config.logging import get_logger
from chatrelay.llm.models import Message

if TYPE_CHECKING:
    from chatrelay.gateway.base import ChatChannel

logger = get_logger(__name__)


def merge_history(*batches: Iterable[Message]) -> list[Message]:
    """
    Merge message batches into one ConversationHistory.

    The first occurrence of an id wins. Ties on ``created_at`` fall back to
    the id (Discord snowflakes grow with time) so the order is total.
    """
    by_id: dict[int, Message] = {}
    for batch in batches:
        for message in batch:
            by_id.setdefault(message.id, message)
    return sorted(by_id.values(), key=lambda m: (m.created_at, m.id))


class HistoryExpander:
    """
    Fetches messages older than the earliest known one and merges them in.

    Args:
        channel: Channel the history belongs to
    """

    def __init__(self, channel: ChatChannel):
        self._channel = channel

    async def expand(self, history: list[Message], limits: list[int]) -> list[Message]:
        """
        Honour one or more ``get_messages`` requests against ``history``.

        Requests are served in order. Each batch is anchored to the earliest
        message known before that batch arrives (the snapshot plus batches
        already fetched), so two requests for 5 fetch 10 distinct messages.
        All batches are merged with the snapshot and sorted once at the end.

        Args:
            history: Current ConversationHistory (not modified)
            limits: Requested batch sizes, one per tool call

        Returns:
            A new ConversationHistory
        """
        snapshot = list(history)
        if not snapshot:
            return snapshot

        earliest = min(snapshot, key=lambda m: (m.created_at, m.id))
        batches: list[list[Message]] = []

        for limit in limits:
            batch = await self._channel.fetch_history(limit=limit, before=earliest.id)
            logger.info(
                f"get_messages(limit={limit}) before {earliest.id}: {len(batch)} message(s)"
            )
            batches.append(batch)
            if batch:
                earliest = min([earliest, *batch], key=lambda m: (m.created_at, m.id))

        return merge_history(snapshot, *batches)
