"""Playback state machine and word timing.

WHY: RSVP playback is a chain of timed steps (show a word, wait, maybe
blank the display for a sentence pause, wait again, advance) that
pauses, speed changes, navigation and paragraph breaks can interrupt at
any point. A stale callback firing against superseded state would skip
or repeat words, so every pending step must be cancellable as a unit.

HOW: PlaybackScheduler owns the text model, the position, the mode and
the two timer handles (word timer, sentence-pause timer). Each state
change ends with one snapshot pushed to the render callback. While
playing, the word timer re-arms itself after every advance; crossing a
paragraph's end boundary stops the chain and leaves the reader paused.

RULES:
- Base interval per word is 60000 / words_per_minute milliseconds
- Sentence-ending word with sentence_pause_ms > 0: after the base interval
  the display is blanked, after sentence_pause_ms more the index advances
- pause(), reset(), seek() and every settings change cancel BOTH timers
  before changing anything else; callbacks never check a playing flag
- The snapshot for word N is emitted before the timer for word N+1 is armed
- A speed change while playing re-arms the timer for the same word; during
  a sentence pause it re-arms only the pause and the display stays blank
- Crossing a paragraph's end pauses with a break status; the paragraph
  index stays on the finished paragraph until continue_after_paragraph()
- Counter and progress describe the word last shown, not the next one
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from fasty.config import ReaderSettings, load_settings
from fasty.core.ir import (
    BLANK_SPLIT,
    OrpSplit,
    Paragraph,
    PlaybackMode,
    PlaybackPosition,
    Snapshot,
    StatusKind,
    TextModel,
    WordCounter,
)
from fasty.core.orp import is_sentence_end, split_word_at_orp
from fasty.core.segmenter import segment
from fasty.core.status import derive_status
from fasty.core.timers import TimerBackend, TimerHandle

logger = logging.getLogger(__name__)

RenderCallback = Callable[[Snapshot], None]


class PlaybackScheduler:
    """Timed word sequencing over a segmented text.

    Args:
        timers: Event-loop timer backend used for every delay.
        settings: Initial speed settings; defaults come from the environment.
        on_render: Called with a fresh Snapshot after every state change.
        messages: Optional per-kind overrides for status wording.
    """

    def __init__(
        self,
        timers: TimerBackend,
        settings: Optional[ReaderSettings] = None,
        on_render: Optional[RenderCallback] = None,
        messages: Optional[Dict[StatusKind, str]] = None,
    ) -> None:
        self._timers = timers
        self._settings = settings or load_settings()
        self.on_render = on_render
        self._messages = messages

        self._text = ""
        self._model = TextModel()
        self._position = PlaybackPosition()
        self._mode = PlaybackMode.NOT_STARTED
        self._has_started = False
        self._display: OrpSplit = BLANK_SPLIT
        self._shown_index: Optional[int] = None

        self._word_timer: Optional[TimerHandle] = None
        self._sentence_timer: Optional[TimerHandle] = None

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def settings(self) -> ReaderSettings:
        return self._settings

    @property
    def text(self) -> str:
        return self._text

    @property
    def model(self) -> TextModel:
        return self._model

    @property
    def paragraphs(self) -> List[Paragraph]:
        return self._model.paragraphs

    @property
    def position(self) -> PlaybackPosition:
        return self._position

    @property
    def mode(self) -> PlaybackMode:
        return self._mode

    @property
    def has_started(self) -> bool:
        return self._has_started

    @property
    def is_playing(self) -> bool:
        return self._mode is PlaybackMode.PLAYING

    @property
    def has_pending_timers(self) -> bool:
        return self._word_timer is not None or self._sentence_timer is not None

    def current_paragraph(self) -> Paragraph:
        return self._model.paragraphs[self._position.current_paragraph_index]

    def snapshot(self) -> Snapshot:
        """Capture the renderable state."""
        total = self._model.total_words
        if self._shown_index is None or total == 0:
            counter = WordCounter(current=0, total=total)
            progress = 0.0
        else:
            counter = WordCounter(current=self._shown_index + 1, total=total)
            progress = (self._shown_index + 1) / total * 100
        return Snapshot(
            split=self._display,
            counter=counter,
            progress_percent=progress,
            status=derive_status(
                self._mode,
                bool(self._text.strip()),
                self._position,
                self._model.paragraphs,
                self._messages,
            ),
            mode=self._mode,
            has_started=self._has_started,
            position=self._position,
        )

    # ------------------------------------------------------------------
    # Text lifecycle
    # ------------------------------------------------------------------

    def load_text(self, text: str) -> None:
        """Replace the input text. Changing text after starting resets the reader."""
        if self._has_started:
            self.reset()
        self._text = text
        self._emit()

    def start(self, text: Optional[str] = None) -> bool:
        """Segment the input and start playing from the first word.

        Returns:
            False when the text has no words; the reader state is left
            untouched and the "awaiting text" status is re-emitted.
        """
        candidate = self._text if text is None else text
        model, success = segment(candidate)
        if not success:
            logger.warning("Cannot start reading: input text has no words")
            self._emit()
            return False

        self._text = candidate
        self._cancel_timers()
        self._model = model
        self._position = PlaybackPosition(0, 0)
        self._has_started = True
        self._mode = PlaybackMode.PAUSED
        logger.info(
            "Started reading: %d words in %d paragraphs",
            model.total_words,
            len(model.paragraphs),
        )
        self.play()
        return True

    def reset(self) -> None:
        """Drop the text model and return to NOT_STARTED. Input text is kept."""
        self._cancel_timers()
        self._model = TextModel()
        self._position = PlaybackPosition()
        self._mode = PlaybackMode.NOT_STARTED
        self._has_started = False
        self._display = BLANK_SPLIT
        self._shown_index = None
        logger.debug("Reader reset")
        self._emit()

    # ------------------------------------------------------------------
    # Play / pause
    # ------------------------------------------------------------------

    def play(self) -> None:
        """Resume timed playback from the current word.

        No-op while already playing, before starting, or at the end of
        the text. The current word is redrawn first, which also restores
        a display blanked by an interrupted sentence pause.
        """
        if self._mode is PlaybackMode.PLAYING or not self._has_started:
            return
        if self._position.current_word_index >= self._model.total_words:
            return

        self._mode = PlaybackMode.PLAYING
        self._sync_paragraph_index()
        self._show_current_word()
        self._emit()
        self._arm_word_timer()

    def pause(self) -> None:
        """Stop playback. Cancels both timers unconditionally."""
        self._cancel_timers()
        if not self._has_started:
            return
        self._mode = PlaybackMode.PAUSED
        logger.debug("Paused at word %d", self._position.current_word_index)
        self._emit()

    # ------------------------------------------------------------------
    # Paragraph-level navigation
    # ------------------------------------------------------------------

    def continue_after_paragraph(self) -> None:
        """Move to the next paragraph's first word and play.

        From the last paragraph there is nowhere to go, so reading wraps
        around to the first word of the text.
        """
        if not self._has_started:
            return
        self._cancel_timers()

        next_index = self._position.current_paragraph_index + 1
        if next_index >= len(self._model.paragraphs):
            logger.debug("End of text reached, restarting from the beginning")
            self._position = PlaybackPosition(0, 0)
        else:
            paragraph = self._model.paragraphs[next_index]
            self._position = PlaybackPosition(paragraph.start_word_index, next_index)

        self._mode = PlaybackMode.PAUSED
        self.play()

    def restart_current_paragraph(self) -> None:
        """Jump back to the current paragraph's first word and play."""
        if not self._has_started:
            return
        self._cancel_timers()
        paragraph = self.current_paragraph()
        self._position = PlaybackPosition(paragraph.start_word_index, paragraph.index)
        self._mode = PlaybackMode.PAUSED
        self.play()

    def seek(self, word_index: int) -> None:
        """Pause and show ``word_index``.

        The paragraph index follows the word, so landing on a paragraph's
        first or last word reports an ordinary pause.
        """
        if not self._has_started or not self._model.total_words:
            return
        self._cancel_timers()
        word_index = min(max(word_index, 0), self._model.total_words - 1)
        self._position = PlaybackPosition(
            word_index, self._model.paragraph_index_for(word_index)
        )
        self._mode = PlaybackMode.PAUSED
        self._show_current_word()
        self._emit()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def set_words_per_minute(self, words_per_minute: int) -> None:
        self.update_settings(ReaderSettings(
            words_per_minute=words_per_minute,
            sentence_pause_ms=self._settings.sentence_pause_ms,
        ))

    def set_sentence_pause_ms(self, sentence_pause_ms: int) -> None:
        self.update_settings(ReaderSettings(
            words_per_minute=self._settings.words_per_minute,
            sentence_pause_ms=sentence_pause_ms,
        ))

    def update_settings(self, settings: ReaderSettings) -> None:
        """Apply new speed settings.

        While playing, the in-flight word is shown again and timed with
        the new settings; the position never changes. During a sentence
        pause the word has already had its time, so the display stays
        blank and only the pause is timed again.
        """
        if settings == self._settings:
            return
        self._settings = settings
        logger.debug(
            "Settings changed: %d wpm, %d ms sentence pause",
            settings.words_per_minute,
            settings.sentence_pause_ms,
        )
        if self._mode is not PlaybackMode.PLAYING:
            return

        in_sentence_pause = self._sentence_timer is not None
        self._cancel_timers()
        if in_sentence_pause:
            self._sentence_timer = self._timers.call_later(
                settings.sentence_pause_ms, self._on_sentence_pause_elapsed
            )
            return
        self._show_current_word()
        self._emit()
        self._arm_word_timer()

    # ------------------------------------------------------------------
    # Timer chain
    # ------------------------------------------------------------------

    def _arm_word_timer(self) -> None:
        word = self._model.words[self._position.current_word_index]
        interval = self._settings.base_interval_ms
        if self._settings.sentence_pause_ms > 0 and is_sentence_end(word):
            self._word_timer = self._timers.call_later(interval, self._on_sentence_end)
        else:
            self._word_timer = self._timers.call_later(interval, self._on_word_elapsed)

    def _on_word_elapsed(self) -> None:
        self._word_timer = None
        self._advance()

    def _on_sentence_end(self) -> None:
        self._word_timer = None
        self._display = BLANK_SPLIT
        self._emit()
        self._sentence_timer = self._timers.call_later(
            self._settings.sentence_pause_ms, self._on_sentence_pause_elapsed
        )

    def _on_sentence_pause_elapsed(self) -> None:
        self._sentence_timer = None
        self._advance()

    def _advance(self) -> None:
        """Move to the next word, or stop at the paragraph's end boundary."""
        paragraph = self.current_paragraph()
        word_index = self._position.current_word_index + 1
        self._position = PlaybackPosition(word_index, paragraph.index)

        if word_index >= paragraph.end_word_index:
            self._cancel_timers()
            self._mode = PlaybackMode.PAUSED
            if paragraph.index < len(self._model.paragraphs) - 1:
                logger.debug("End of paragraph %d", paragraph.index)
            else:
                logger.info("End of text")
            self._emit()
            return

        self._show_current_word()
        self._emit()
        self._arm_word_timer()

    def _cancel_timers(self) -> None:
        if self._word_timer is not None:
            self._word_timer.cancel()
            self._word_timer = None
        if self._sentence_timer is not None:
            self._sentence_timer.cancel()
            self._sentence_timer = None

    # ------------------------------------------------------------------
    # Display helpers
    # ------------------------------------------------------------------

    def _sync_paragraph_index(self) -> None:
        index = self._model.paragraph_index_for(self._position.current_word_index)
        if index != self._position.current_paragraph_index:
            self._position = PlaybackPosition(self._position.current_word_index, index)

    def _show_current_word(self) -> None:
        word_index = self._position.current_word_index
        if word_index >= self._model.total_words:
            return
        self._display = split_word_at_orp(self._model.words[word_index])
        self._shown_index = word_index

    def _emit(self) -> None:
        if self.on_render is not None:
            self.on_render(self.snapshot())
