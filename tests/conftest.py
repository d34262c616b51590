"""Shared test fixtures for the fasty test suite.

WHY: Playback is all about timing. Tests that sleep are slow and flaky,
so the engine is driven by a virtual clock instead: ManualTimers records
every scheduled callback and fires them only when a test advances time.

HOW: ManualTimers implements the TimerBackend interface. The ``reader``
fixture builds a Reader on it with a snapshot recorder attached.

RULES:
- Time only moves when a test calls timers.advance(ms)
- Callbacks due at the same instant fire in scheduling order
- Cancelled callbacks never fire
"""

from __future__ import annotations

import itertools
from typing import Callable, List, Optional

import pytest

from fasty.config import ReaderSettings
from fasty.core.ir import Snapshot
from fasty.core.reader import Reader
from fasty.core.timers import TimerBackend, TimerHandle

TWO_PARAGRAPHS = "Hello world.\nSecond line here."

STORY = (
    "The cat sat down. It purred!\n"
    "\"Stop!\" said the dog, loudly.\n"
    "The end."
)


class _ManualHandle(TimerHandle):
    def __init__(self) -> None:
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimers(TimerBackend):
    """Deterministic virtual-clock timer backend."""

    def __init__(self) -> None:
        self.now = 0.0
        self._seq = itertools.count()
        self._entries: List[tuple] = []

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = _ManualHandle()
        self._entries.append((self.now + delay_ms, next(self._seq), callback, handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(
            1 for _, _, _, h in self._entries if not h.cancelled and not h.fired
        )

    def next_delay(self) -> Optional[float]:
        live = [e for e in self._entries if not e[3].cancelled and not e[3].fired]
        if not live:
            return None
        return min(live, key=lambda e: (e[0], e[1]))[0] - self.now

    def advance(self, ms: float) -> None:
        """Move the clock forward, firing every callback that comes due."""
        target = self.now + ms
        while True:
            due = [
                e for e in self._entries
                if not e[3].cancelled and not e[3].fired and e[0] <= target
            ]
            if not due:
                break
            entry = min(due, key=lambda e: (e[0], e[1]))
            self.now = entry[0]
            entry[3].fired = True
            entry[2]()
        self.now = target


class Recorder:
    """Collects snapshots pushed by the engine."""

    def __init__(self) -> None:
        self.snapshots: List[Snapshot] = []

    def __call__(self, snapshot: Snapshot) -> None:
        self.snapshots.append(snapshot)

    @property
    def last(self) -> Snapshot:
        return self.snapshots[-1]

    def words(self) -> List[str]:
        """Displayed words in order, collapsing consecutive repeats and blanks."""
        shown: List[str] = []
        for snap in self.snapshots:
            text = snap.split.text
            if text and (not shown or shown[-1] != text):
                shown.append(text)
        return shown


@pytest.fixture
def timers():
    return ManualTimers()


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def make_reader(timers, recorder):
    """Factory building a Reader on the virtual clock.

    300 wpm gives a 200 ms base interval; the sentence pause is off
    unless a test asks for one.
    """

    def _make(text: Optional[str] = None, wpm: int = 300, pause_ms: int = 0) -> Reader:
        reader = Reader(
            settings=ReaderSettings(words_per_minute=wpm, sentence_pause_ms=pause_ms),
            timers=timers,
            on_render=recorder,
        )
        if text is not None:
            reader.load_text(text)
        return reader

    return _make
