"""Cancellable one-shot timers over an event loop.

WHY: The scheduler must be able to cancel a pending advance
synchronously, at the moment of a pause or a speed change, instead of
letting a stale callback fire and check a flag. Different front-ends run
different event loops (asyncio in the terminal, Tk in the desktop app),
so the scheduler depends on this small interface rather than on a loop.

HOW: TimerBackend.call_later returns a handle whose cancel() guarantees
the callback will not run. AsyncioTimers adapts loop.call_later; the Tk
adapter lives next to the tkinter front-end.

RULES:
- Delays are milliseconds (float allowed)
- cancel() is idempotent and safe after the callback has already run
- Callbacks run on the loop thread; no locking is needed
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, Optional


class TimerHandle(ABC):
    """A pending callback that can be cancelled."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running. No-op if already run or cancelled."""


class TimerBackend(ABC):
    """Schedules one-shot callbacks on an event loop."""

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay_ms`` milliseconds."""


class _AsyncioHandle(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()


class AsyncioTimers(TimerBackend):
    """Timers on an asyncio event loop.

    The loop defaults to the running loop at the time of each call, so
    the backend can be built before ``asyncio.run`` starts.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioHandle(loop.call_later(delay_ms / 1000.0, callback))
