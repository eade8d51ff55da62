"""
TypingSignal: keeps the typing indicator alive while a request is in flight.

    async with TypingSignal(channel, interval=5.0):
        result = await orchestrator.run(...)

The indicator task is started on enter and cancelled on exit, whichever way
the block is left.
"""

from __future__ import annotations

import asyncio

from chatrelay.config.logging import get_logger
from chatrelay.gateway.base import ChatChannel

logger = get_logger(__name__)


class TypingSignal:
    """
    Scoped background task that calls ``channel.send_typing()`` every
    ``interval`` seconds.

    Args:
        channel: Channel to signal in
        interval: Seconds between signals
    """

    def __init__(self, channel: ChatChannel, interval: float = 5.0) -> None:
        self._channel = channel
        self._interval = interval
        self._task: asyncio.Task | None = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self) -> None:
        while True:
            try:
                await self._channel.send_typing()
            except Exception as e:
                logger.warning(f"Typing indicator failed: {e}")
            await asyncio.sleep(self._interval)

    async def __aenter__(self) -> TypingSignal:
        self._task = asyncio.create_task(self._run())
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                # Only the indicator's own cancellation is absorbed; one aimed
                # at the enclosing task keeps propagating.
                current = asyncio.current_task()
                if current is not None and current.cancelling():
                    raise
        return False
