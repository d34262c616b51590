"""Reader — one independent reading engine instance.

WHY: Front-ends need a single object to hold, with a small command
surface and one render callback, instead of reaching into the scheduler
and the navigation controller separately. Each Reader is fully
self-contained, so tests and multiple windows can run side by side.

HOW: Reader owns a PlaybackScheduler and a NavigationController that
share the scheduler's state, and forwards commands to whichever owns
them.

RULES:
- All commands are synchronous and must be called on the event-loop thread
- on_render receives a Snapshot after every state change
- Configuration errors raise ValueError before any state is changed
"""

from __future__ import annotations

from typing import Dict, Optional

from fasty.config import ReaderSettings
from fasty.core.ir import Snapshot, StatusKind
from fasty.core.navigation import NavigationController
from fasty.core.scheduler import PlaybackScheduler, RenderCallback
from fasty.core.timers import AsyncioTimers, TimerBackend


class Reader:
    """The engine's command surface.

    Args:
        settings: Initial speed settings (defaults from the environment).
        timers: Timer backend; defaults to the running asyncio loop.
        on_render: Render callback receiving every new Snapshot.
        messages: Optional status wording overrides, keyed by StatusKind.
    """

    def __init__(
        self,
        settings: Optional[ReaderSettings] = None,
        timers: Optional[TimerBackend] = None,
        on_render: Optional[RenderCallback] = None,
        messages: Optional[Dict[StatusKind, str]] = None,
    ) -> None:
        self.scheduler = PlaybackScheduler(
            timers or AsyncioTimers(),
            settings=settings,
            on_render=on_render,
            messages=messages,
        )
        self.navigation = NavigationController(self.scheduler)

    @property
    def settings(self) -> ReaderSettings:
        return self.scheduler.settings

    @property
    def on_render(self) -> Optional[RenderCallback]:
        return self.scheduler.on_render

    @on_render.setter
    def on_render(self, callback: Optional[RenderCallback]) -> None:
        self.scheduler.on_render = callback

    def snapshot(self) -> Snapshot:
        return self.scheduler.snapshot()

    # Text
    def load_text(self, text: str) -> None:
        self.scheduler.load_text(text)

    def start(self, text: Optional[str] = None) -> bool:
        return self.scheduler.start(text)

    def reset(self) -> None:
        self.scheduler.reset()

    # Playback
    def play(self) -> None:
        self.scheduler.play()

    def pause(self) -> None:
        self.scheduler.pause()

    def continue_after_paragraph(self) -> None:
        self.scheduler.continue_after_paragraph()

    def restart_current_paragraph(self) -> None:
        self.scheduler.restart_current_paragraph()

    # Navigation
    def handle_user_activation(self) -> None:
        self.navigation.handle_user_activation()

    def step_backward(self) -> None:
        self.navigation.step_backward()

    def step_forward(self) -> None:
        self.navigation.step_forward()

    # Settings
    def set_words_per_minute(self, words_per_minute: int) -> None:
        self.scheduler.set_words_per_minute(words_per_minute)

    def set_sentence_pause_ms(self, sentence_pause_ms: int) -> None:
        self.scheduler.set_sentence_pause_ms(sentence_pause_ms)
