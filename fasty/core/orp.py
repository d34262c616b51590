"""Optimal Recognition Point (ORP) calculation.

WHY: RSVP readers align successive words on a fixation letter slightly
left of centre. Keeping that letter at a fixed screen position spares
the eye from re-centring on every word.

HOW: The letters and digits of the word are counted to pick an offset
from a fixed length table, then the offset is shifted past any leading
punctuation so it lands on a letter of the real word.

RULES:
- Only ASCII letters and digits count towards the clean length
- Offset table: 0-2 -> 0, 3-5 -> 1, 6-9 -> 2, 10-13 -> 3, 14+ -> 4
- Leading punctuation is the contiguous non-alphanumeric run at index 0
- The result is always within [0, len(word)]; len(word) means "no focus"
- A sentence end is ".", "!" or "?" at the end, optionally followed by
  one closing quote
"""

from __future__ import annotations

import re

from fasty.core.ir import OrpSplit

_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]")
_LEADING_NON_ALNUM_RE = re.compile(r"^[^A-Za-z0-9]*")
_SENTENCE_END_RE = re.compile(r"[.!?][\"'”’]?$")

# (max clean length, offset), checked in order
_ORP_OFFSETS = (
    (2, 0),
    (3, 1),
    (5, 1),
    (9, 2),
    (13, 3),
)
_LONG_WORD_OFFSET = 4


def _offset_for_length(length: int) -> int:
    for max_length, offset in _ORP_OFFSETS:
        if length <= max_length:
            return offset
    return _LONG_WORD_OFFSET


def calculate_orp(word: str) -> int:
    """Return the index of the fixation letter in ``word``.

    >>> calculate_orp('"Hello')
    2
    """
    clean_word = _NON_ALNUM_RE.sub("", word)
    leading = len(_LEADING_NON_ALNUM_RE.match(word).group(0))
    return leading + _offset_for_length(len(clean_word))


def split_word_at_orp(word: str) -> OrpSplit:
    """Split ``word`` into the parts before, at and after its ORP.

    ``before + focus + after == word`` always holds; ``focus`` is "" when
    the ORP falls past the last character.
    """
    index = calculate_orp(word)
    return OrpSplit(
        before=word[:index],
        focus=word[index:index + 1],
        after=word[index + 1:],
    )


def is_sentence_end(word: str) -> bool:
    return bool(_SENTENCE_END_RE.search(word))
