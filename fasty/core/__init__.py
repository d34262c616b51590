"""Core reading engine: data model, segmentation, ORP and playback.

WHY: The core package is the display-independent heart of the reader.
Both front-ends drive the same engine, so everything that has timing or
position invariants lives here.

HOW: ir.py defines the data structures, segmenter.py and orp.py are pure
text helpers, status.py derives the status line, timers.py abstracts the
event loop, scheduler.py and navigation.py own the state machine, and
reader.py wires them together.

RULES:
- Nothing in core imports tkinter or writes to a terminal
- Timer callbacks are only armed and cancelled by the scheduler
"""
