"""Status line derivation.

WHY: Whether a pause is an ordinary pause, a paragraph break, or the end
of the text depends only on where the reader is. Deriving it in one
place keeps the boundary comparison out of every command handler.

HOW: ``derive_status`` is a pure function of mode and position. Every
snapshot the engine emits calls it; nothing stores a status.

RULES:
- Playing -> no status (the line is hidden)
- Not started -> AWAITING_TEXT for blank input, READY otherwise
- Paused at/after the current paragraph's end -> PARAGRAPH_BREAK when a
  later paragraph exists, END_OF_TEXT otherwise; both have is_break=True
- Any other pause -> PAUSED
"""

from __future__ import annotations

from typing import Dict, List, Optional

from fasty.core.ir import Paragraph, PlaybackMode, PlaybackPosition, Status, StatusKind

DEFAULT_MESSAGES: Dict[StatusKind, str] = {
    StatusKind.AWAITING_TEXT: "Paste text and click here or press Space",
    StatusKind.READY: "Click here or press Space to start",
    StatusKind.PAUSED: "Paused · Press Space to continue",
    StatusKind.PARAGRAPH_BREAK: "End of paragraph · Press Space to continue",
    StatusKind.END_OF_TEXT: "Done · Edit text or press Space to restart",
}

_BREAK_KINDS = frozenset({StatusKind.PARAGRAPH_BREAK, StatusKind.END_OF_TEXT})


def make_status(kind: StatusKind, messages: Optional[Dict[StatusKind, str]] = None) -> Status:
    text = (messages or DEFAULT_MESSAGES).get(kind, DEFAULT_MESSAGES[kind])
    return Status(kind=kind, message=text, is_break=kind in _BREAK_KINDS)


def is_at_paragraph_end(position: PlaybackPosition, paragraphs: List[Paragraph]) -> bool:
    """True when the position has run off the end of its paragraph."""
    if not paragraphs:
        return False
    paragraph = paragraphs[position.current_paragraph_index]
    return position.current_word_index >= paragraph.end_word_index


def derive_status_kind(
    mode: PlaybackMode,
    has_text: bool,
    position: PlaybackPosition,
    paragraphs: List[Paragraph],
) -> Optional[StatusKind]:
    if mode is PlaybackMode.PLAYING:
        return None
    if mode is PlaybackMode.NOT_STARTED:
        return StatusKind.READY if has_text else StatusKind.AWAITING_TEXT
    if is_at_paragraph_end(position, paragraphs):
        if position.current_paragraph_index < len(paragraphs) - 1:
            return StatusKind.PARAGRAPH_BREAK
        return StatusKind.END_OF_TEXT
    return StatusKind.PAUSED


def derive_status(
    mode: PlaybackMode,
    has_text: bool,
    position: PlaybackPosition,
    paragraphs: List[Paragraph],
    messages: Optional[Dict[StatusKind, str]] = None,
) -> Optional[Status]:
    """Return the status to display for this state, or None to hide it."""
    kind = derive_status_kind(mode, has_text, position, paragraphs)
    if kind is None:
        return None
    return make_status(kind, messages)
