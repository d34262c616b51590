"""Text segmentation into paragraphs and words.

WHY: Playback walks a flat word sequence but pauses at paragraph
boundaries, so every paragraph needs to know where its words sit in the
flat sequence.

HOW: ``segment`` treats each non-blank physical line as a paragraph and
splits it on whitespace. Absolute offsets are a running sum over the
paragraphs in order. ``intelligent_split`` is a separate, explicit
strategy that regroups unbroken text into paragraphs of whole sentences.

RULES:
- Line endings are normalised first: "\\r\\n" and "\\r" become "\\n"
- One physical line = one paragraph; no sentence heuristics in ``segment``
- Words are whitespace-separated tokens; punctuation stays attached
- An input with no words fails (``success`` is False); nothing is raised
- ``intelligent_split`` is never applied implicitly by ``segment``
"""

from __future__ import annotations

import re
from typing import List, Tuple

from fasty.config import DEFAULT_PARAGRAPH_TARGET_WORDS
from fasty.core.ir import Paragraph, TextModel

_WHITESPACE_RE = re.compile(r"\s+")

# Anything up to and including a run of terminal punctuation plus optional
# trailing whitespace (a bare "..." counts), or a trailing fragment with no
# terminator.
_SENTENCE_RE = re.compile(r"[^.!?]*[.!?]+\s*|[^.!?]+$")


def normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def extract_words(text: str) -> List[str]:
    """Split a paragraph into words.

    Newlines and runs of whitespace collapse to single spaces before the
    split, so empty tokens never appear.
    """
    collapsed = _WHITESPACE_RE.sub(" ", text.replace("\n", " ")).strip()
    return [word for word in collapsed.split(" ") if word]


def segment(text: str) -> Tuple[TextModel, bool]:
    """Segment raw input into paragraphs with absolute word offsets.

    Args:
        text: Raw user input, any line-ending convention.

    Returns:
        ``(model, success)``. ``success`` is False when the text contains
        no words at all; the model is then empty and must not be played.
    """
    lines = [line.strip() for line in normalize_line_endings(text).split("\n")]

    paragraphs: List[Paragraph] = []
    words: List[str] = []
    for line in lines:
        if not line:
            continue
        paragraph_words = extract_words(line)
        paragraphs.append(Paragraph(
            index=len(paragraphs),
            text=line,
            words=paragraph_words,
            start_word_index=len(words),
        ))
        words.extend(paragraph_words)

    model = TextModel(paragraphs=paragraphs, words=words)
    return model, bool(words)


def intelligent_split(
    text: str,
    target_words_per_paragraph: int = DEFAULT_PARAGRAPH_TARGET_WORDS,
) -> List[str]:
    """Regroup text lacking line breaks into paragraphs of whole sentences.

    WHY: Text copied from PDFs or web pages often arrives as one huge
    line, which would play as a single paragraph with no breaks.

    HOW: Sentences are accumulated until adding the next one would push
    the running word count past ``target_words_per_paragraph``; that
    sentence then opens a new paragraph.

    RULES:
    - A sentence ends at ".", "!" or "?" (runs allowed) plus optional spaces
    - A run of terminators on its own ("...") is kept as a sentence
    - Trailing text without a terminator is kept as a final sentence
    - A single sentence longer than the target still forms one paragraph
    - Returns ``[text]`` when no sentence can be found
    """
    sentences = [s for s in _SENTENCE_RE.findall(text) if s.strip()]
    if not sentences:
        return [text]

    paragraphs: List[str] = []
    current = ""
    word_count = 0
    for sentence in sentences:
        sentence_words = len(sentence.split())
        if word_count + sentence_words > target_words_per_paragraph and current:
            paragraphs.append(current.strip())
            current = sentence
            word_count = sentence_words
        else:
            current += sentence
            word_count += sentence_words

    if current.strip():
        paragraphs.append(current.strip())

    return paragraphs or [text]


def reflow(
    text: str,
    target_words_per_paragraph: int = DEFAULT_PARAGRAPH_TARGET_WORDS,
) -> str:
    """Rewrite ``text`` as one line per ``intelligent_split`` paragraph.

    Existing line breaks are dropped first, so ``segment`` on the result
    yields exactly the regrouped paragraphs.
    """
    flattened = _WHITESPACE_RE.sub(" ", normalize_line_endings(text)).strip()
    if not flattened:
        return ""
    return "\n".join(intelligent_split(flattened, target_words_per_paragraph))
