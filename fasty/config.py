"""Configuration constants, picker choices, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Reading speed defaults and the choice lists shown
by the front-ends are plain data, not buried in widget code, so they
can be changed without touching the engine.

HOW: python-dotenv loads the .env file on import. Defaults are
module-level constants that environment variables may override.
ReaderSettings is a pydantic model that validates every speed setting
the engine accepts, and load_settings() builds one from the environment.

RULES:
- words_per_minute must be > 0, sentence_pause_ms must be >= 0
- Malformed environment values raise ValueError naming the variable
- WPM_CHOICES and SENTENCE_PAUSE_CHOICES are sorted ascending
- A sentence pause of 0 disables sentence blanking entirely
"""

from __future__ import annotations

import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

# Load .env from the project root (where the script is run from)
load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(
            "{} must be an integer, got {!r}".format(name, raw)
        ) from None


# ---------------------------------------------------------------------------
# Reading speed defaults
# ---------------------------------------------------------------------------

DEFAULT_WPM = _env_int("FASTY_WPM", 300)
DEFAULT_SENTENCE_PAUSE_MS = _env_int("FASTY_SENTENCE_PAUSE_MS", 200)
DEFAULT_PARAGRAPH_TARGET_WORDS = _env_int("FASTY_PARAGRAPH_TARGET_WORDS", 75)

# ---------------------------------------------------------------------------
# Picker choices offered by the front-ends
# ---------------------------------------------------------------------------

WPM_CHOICES: List[int] = [150, 200, 250, 300, 350, 400, 450, 500, 600, 700, 800, 1000]
"""Words-per-minute presets for the speed picker."""

SENTENCE_PAUSE_CHOICES: List[int] = [0, 100, 200, 300, 400, 500, 750, 1000]
"""Sentence pause presets in milliseconds (0 = off)."""


class ReaderSettings(BaseModel):
    """Playback speed settings.

    WHY: The engine treats a non-positive rate as undefined behaviour, so
    every value that reaches it goes through this model first.

    RULES:
    - Frozen; change a setting by building a new instance
    - base_interval_ms is 60000 / words_per_minute
    """

    model_config = ConfigDict(frozen=True)

    words_per_minute: int = Field(
        default=DEFAULT_WPM,
        gt=0,
        description="Reading pace; each word is shown for 60000 / wpm milliseconds.",
    )
    sentence_pause_ms: int = Field(
        default=DEFAULT_SENTENCE_PAUSE_MS,
        ge=0,
        description="Blank interval inserted after a sentence-ending word (0 = off).",
    )

    @property
    def base_interval_ms(self) -> float:
        return 60000 / self.words_per_minute


def load_settings() -> ReaderSettings:
    """Build ReaderSettings from the environment defaults.

    RULES:
    - Raises ValueError (pydantic ValidationError) for out-of-range values
    """
    return ReaderSettings(
        words_per_minute=DEFAULT_WPM,
        sentence_pause_ms=DEFAULT_SENTENCE_PAUSE_MS,
    )


def next_choice(choices: List[int], current: int, step: int) -> int:
    """Return the preset ``step`` places away from ``current``, clamped.

    A value that is not itself a preset snaps to the nearest preset in
    the direction of travel.
    """
    if step > 0:
        higher = [c for c in choices if c > current]
        return higher[min(step, len(higher)) - 1] if higher else choices[-1]
    if step < 0:
        lower = [c for c in choices if c < current]
        return lower[max(len(lower) + step, 0)] if lower else choices[0]
    return current
