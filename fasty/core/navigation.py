"""Manual navigation and the unified activation command.

WHY: Users move through the text by hand (one word back or forward) and
drive playback with a single primary gesture (Space, a click, Enter in
the terminal). What that gesture means depends on the reader's state,
and the decision belongs next to the state, not in each front-end.

HOW: NavigationController wraps a PlaybackScheduler. Steps pause first
and then seek; activation dispatches on mode and on whether the
position has run off the end of its paragraph.

RULES:
- Steps are ignored until reading has started
- Steps always pause, then move by one word; a move that would leave
  [0, total - 1] does nothing
- A step never wraps around and never reports a paragraph-break status
- Activation: not started -> start; paused at/after the paragraph end ->
  continue_after_paragraph; paused -> play; playing -> pause
"""

from __future__ import annotations

import logging

from fasty.core.ir import PlaybackMode
from fasty.core.scheduler import PlaybackScheduler
from fasty.core.status import is_at_paragraph_end

logger = logging.getLogger(__name__)


class NavigationController:
    """Word stepping and primary-gesture handling for one scheduler."""

    def __init__(self, scheduler: PlaybackScheduler) -> None:
        self._scheduler = scheduler

    def step_backward(self) -> None:
        self._step(-1)

    def step_forward(self) -> None:
        self._step(1)

    def _step(self, delta: int) -> None:
        scheduler = self._scheduler
        if not scheduler.has_started:
            return

        scheduler.pause()

        current = scheduler.position.current_word_index
        last = scheduler.model.total_words - 1
        target = current + delta
        if target < 0 or target > last:
            return
        logger.debug("Step %+d: word %d -> %d", delta, current, target)
        scheduler.seek(target)

    def handle_user_activation(self) -> None:
        """Start, continue, resume or pause depending on the current state."""
        scheduler = self._scheduler

        if not scheduler.has_started:
            scheduler.start()
        elif scheduler.mode is PlaybackMode.PAUSED:
            if is_at_paragraph_end(scheduler.position, scheduler.paragraphs):
                scheduler.continue_after_paragraph()
            else:
                scheduler.play()
        else:
            scheduler.pause()
