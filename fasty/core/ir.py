"""Data model for segmented text and playback state.

WHY: The scheduler, the navigation controller and both front-ends need
the same view of the text (paragraphs with absolute word offsets) and of
the playback state (position, mode, what is on screen). Keeping these in
one module makes the contract between engine and renderer explicit.

HOW: Plain dataclasses. The text model is built once per reading session
by the segmenter and replaced wholesale; everything the renderer sees is
a frozen Snapshot.

RULES:
- Paragraph.start_word_index is the paragraph's offset into TextModel.words
- TextModel.words is exactly the concatenation of all paragraph words
- Snapshot and its parts are immutable; the engine builds a new one per change
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class Paragraph:
    """One physical line of input text, split into words.

    RULES:
    - index: position of the paragraph in source order (0-based)
    - text: the trimmed source line
    - words: tokens in reading order, never empty strings
    - start_word_index: sum of the word counts of all earlier paragraphs
    """

    index: int
    text: str
    words: List[str]
    start_word_index: int

    @property
    def end_word_index(self) -> int:
        """Absolute index one past this paragraph's last word."""
        return self.start_word_index + len(self.words)


@dataclass(frozen=True)
class TextModel:
    """Segmented text: paragraphs plus the flattened word sequence."""

    paragraphs: List[Paragraph] = field(default_factory=list)
    words: List[str] = field(default_factory=list)

    @property
    def total_words(self) -> int:
        return len(self.words)

    def paragraph_index_for(self, word_index: int) -> int:
        """Index of the paragraph containing ``word_index``.

        Indices at or past the end of the text map to the last paragraph.
        Paragraphs without words never contain an index, so the first
        paragraph whose end boundary lies beyond ``word_index`` wins.
        """
        for paragraph in self.paragraphs:
            if word_index < paragraph.end_word_index:
                return paragraph.index
        return max(len(self.paragraphs) - 1, 0)


@dataclass(frozen=True)
class OrpSplit:
    """A word split around its fixation letter.

    ``focus`` is a single character, or "" when the ORP index falls past
    the end of the word. An all-empty split is the blank display.
    """

    before: str = ""
    focus: str = ""
    after: str = ""

    @property
    def text(self) -> str:
        return self.before + self.focus + self.after

    @property
    def is_blank(self) -> bool:
        return not (self.before or self.focus or self.after)


BLANK_SPLIT = OrpSplit()


@dataclass(frozen=True)
class PlaybackPosition:
    """Current word and paragraph.

    At a paragraph break ``current_word_index`` equals the finished
    paragraph's end boundary while ``current_paragraph_index`` still names
    the finished paragraph; ``continue_after_paragraph`` moves both on.
    """

    current_word_index: int = 0
    current_paragraph_index: int = 0


class PlaybackMode(str, enum.Enum):
    """Top-level playback state. Inherits from str for readable logs."""

    NOT_STARTED = "not_started"
    PLAYING = "playing"
    PAUSED = "paused"


class StatusKind(str, enum.Enum):
    """Which status line is showing.

    Front-ends may map a kind to their own wording (the terminal reader
    says "Enter" where the desktop reader says "Space").
    """

    AWAITING_TEXT = "awaiting_text"
    READY = "ready"
    PAUSED = "paused"
    PARAGRAPH_BREAK = "paragraph_break"
    END_OF_TEXT = "end_of_text"


@dataclass(frozen=True)
class Status:
    """Status line content. ``is_break`` is for styling only."""

    kind: StatusKind
    message: str
    is_break: bool = False


@dataclass(frozen=True)
class WordCounter:
    """1-based position of the displayed word and the total word count."""

    current: int = 0
    total: int = 0

    def __str__(self) -> str:
        return "{} / {}".format(self.current, self.total)


@dataclass(frozen=True)
class Snapshot:
    """Everything a renderer needs, captured after one state change."""

    split: OrpSplit
    counter: WordCounter
    progress_percent: float
    status: Optional[Status]
    mode: PlaybackMode
    has_started: bool
    position: PlaybackPosition

    @property
    def is_playing(self) -> bool:
        return self.mode is PlaybackMode.PLAYING
