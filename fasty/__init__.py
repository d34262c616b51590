"""Fasty — RSVP speed reader.

WHY: Reading one word at a time at a fixed pace, with the eye parked on
each word's optimal recognition point (ORP), removes saccades and lets a
reader go much faster than on a page. The hard part is not drawing the
word but sequencing it: pacing, sentence pauses, paragraph breaks and
manual navigation all share one position and one timer.

HOW: Three layers — segment (raw text into indexed paragraphs and
words), schedule (the playback state machine and its timers), render
(terminal or tkinter front-ends that consume engine snapshots).

RULES:
- The engine never touches a display; it emits immutable snapshots
- Front-ends talk to the engine only through the Reader command surface
- At most one word timer and one sentence-pause timer are armed at once
"""

__version__ = "0.1.0"
