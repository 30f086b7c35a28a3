"""Tick scheduling strategies.

Simulations never loop on their own; they ask a scheduler for the next
tick and cancel the pending one when paused or closed. Everything runs on
one thread.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Protocol

from orbcascade.utils.constants import FRAME_INTERVAL_S

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class TickScheduler(Protocol):
    """Requests and cancels single future ticks."""

    def request_tick(self, callback: TickCallback) -> Any:
        """Schedule ``callback`` once and return a handle for ``cancel_tick``."""
        ...

    def cancel_tick(self, handle: Any) -> None:
        """Cancel a pending tick. Unknown or already-run handles are ignored."""
        ...


class ManualScheduler:
    """Queues ticks until the host calls ``run_pending``.

    Used by tests and by hosts that drive simulations step by step.
    """

    def __init__(self) -> None:
        self._pending: dict[int, TickCallback] = {}
        self._next_handle = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_tick(self, callback: TickCallback) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel_tick(self, handle: int) -> None:
        self._pending.pop(handle, None)

    def run_pending(self) -> int:
        """Run the ticks queued so far; ticks they request wait for the next call.

        Returns:
            Number of callbacks run.
        """
        batch = self._pending
        self._pending = {}
        for callback in batch.values():
            callback()
        return len(batch)


class AsyncioScheduler:
    """Schedules ticks on an asyncio event loop after a fixed delay.

    The default delay is one display frame. The loop is looked up when a
    tick is requested unless one is given.
    """

    def __init__(self, interval_s: float = FRAME_INTERVAL_S, loop: asyncio.AbstractEventLoop | None = None) -> None:
        if interval_s < 0:
            raise ValueError(f"interval_s must not be negative, got {interval_s}")
        self.interval_s = interval_s
        self._loop = loop

    def request_tick(self, callback: TickCallback) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(self.interval_s, callback)

    def cancel_tick(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()
