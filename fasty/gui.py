"""Tkinter desktop reader for Fasty.

WHY: Most reading happens on pasted text: an article, a chapter, an
email. The desktop reader gives the engine a window with a text box,
speed pickers and a large focus display, and maps the keyboard and mouse
to the engine's commands.

HOW: A single ReaderApp class builds the tkinter UI and owns one Reader.
The engine's timers run on Tk's own event loop through TkTimers (a thin
wrapper over .after()/.after_cancel()), so there are no threads. Every
Snapshot the engine emits is drawn on a Canvas: the focus letter is
centred horizontally, the text before it is right-aligned to its left
edge and the text after it left-aligned to its right edge.

RULES:
- tkinter widgets are ONLY touched from the main thread
- The engine is driven only through Reader commands
- Space / click on the reader panel = start, pause, resume or continue
- Left / Right step one word, R restarts the paragraph
- Space and R typed inside the text box are text, not commands
- Editing the text after starting resets the reader
- "Split into paragraphs" rewrites the text box with intelligent_split
"""

from __future__ import annotations

import logging
import sys
import tkinter as tk
from pathlib import Path
from tkinter import font as tkfont
from tkinter import messagebox, ttk
from typing import Callable, Optional

from fasty.config import (
    DEFAULT_PARAGRAPH_TARGET_WORDS,
    SENTENCE_PAUSE_CHOICES,
    WPM_CHOICES,
    ReaderSettings,
    load_settings,
)
from fasty.core.ir import Snapshot
from fasty.core.reader import Reader
from fasty.core.segmenter import reflow
from fasty.core.timers import TimerBackend, TimerHandle

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WINDOW_TITLE = "Fasty"
_WINDOW_MIN_WIDTH = 640
_WINDOW_MIN_HEIGHT = 520
_PAD = 8

_READER_HEIGHT = 140
_WORD_FONT = ("Helvetica", 40)
_WORD_COLOR = "#e8e8e8"
_FOCUS_COLOR = "#ff4d4d"
_READER_BG = "#1e1e1e"
_GUIDE_COLOR = "#444444"

_STATUS_COLOR = "#555555"
_BREAK_STATUS_COLOR = "#c26a00"


# ---------------------------------------------------------------------------
# Tk timer backend
# ---------------------------------------------------------------------------


class _TkHandle(TimerHandle):
    def __init__(self, widget: tk.Misc) -> None:
        self._widget = widget
        self.after_id: Optional[str] = None

    def cancel(self) -> None:
        if self.after_id is not None:
            self._widget.after_cancel(self.after_id)
            self.after_id = None


class TkTimers(TimerBackend):
    """Timers on the Tk event loop of ``widget``."""

    def __init__(self, widget: tk.Misc) -> None:
        self._widget = widget

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = _TkHandle(self._widget)

        def _fire() -> None:
            handle.after_id = None
            callback()

        handle.after_id = self._widget.after(max(int(round(delay_ms)), 0), _fire)
        return handle


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


class ReaderApp:
    """The desktop reader window.

    HOW: _build_ui() lays out three bands: settings and text input at the
    top, the reader canvas with nav arrows in the middle, status line,
    counter and progress bar at the bottom. _render() is the engine's
    render callback and the only place that updates those widgets.
    """

    def __init__(self, root: tk.Tk, settings: Optional[ReaderSettings] = None) -> None:
        self._root = root
        self._root.title(_WINDOW_TITLE)
        self._root.minsize(_WINDOW_MIN_WIDTH, _WINDOW_MIN_HEIGHT)

        settings = settings or load_settings()
        self._wpm_var = tk.StringVar(value=str(settings.words_per_minute))
        self._pause_var = tk.StringVar(value=str(settings.sentence_pause_ms))
        self._status_var = tk.StringVar()
        self._counter_var = tk.StringVar(value="0 / 0")
        self._snapshot: Optional[Snapshot] = None

        self._build_ui()
        self._word_font = tkfont.Font(root=self._root, font=_WORD_FONT)

        self._reader = Reader(
            settings=settings,
            timers=TkTimers(self._root),
            on_render=self._render,
        )
        self._bind_keys()
        self._render(self._reader.snapshot())

    @property
    def reader(self) -> Reader:
        return self._reader

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        main = ttk.Frame(self._root, padding=_PAD)
        main.pack(fill=tk.BOTH, expand=True)

        # -- Settings row --
        settings_row = ttk.Frame(main)
        settings_row.pack(fill=tk.X, pady=(0, _PAD))

        ttk.Label(settings_row, text="Speed (wpm):").pack(side=tk.LEFT)
        wpm_box = ttk.Combobox(
            settings_row,
            textvariable=self._wpm_var,
            values=[str(c) for c in WPM_CHOICES],
            width=6,
            state="readonly",
        )
        wpm_box.pack(side=tk.LEFT, padx=(4, 2 * _PAD))
        wpm_box.bind("<<ComboboxSelected>>", lambda _e: self._on_wpm_change())

        ttk.Label(settings_row, text="Sentence pause (ms):").pack(side=tk.LEFT)
        pause_box = ttk.Combobox(
            settings_row,
            textvariable=self._pause_var,
            values=[str(c) for c in SENTENCE_PAUSE_CHOICES],
            width=6,
            state="readonly",
        )
        pause_box.pack(side=tk.LEFT, padx=(4, 2 * _PAD))
        pause_box.bind("<<ComboboxSelected>>", lambda _e: self._on_pause_change())

        ttk.Button(
            settings_row,
            text="Split into paragraphs",
            command=self._split_paragraphs,
        ).pack(side=tk.RIGHT)

        # -- Text input --
        text_frame = ttk.Frame(main)
        text_frame.pack(fill=tk.BOTH, expand=True)
        self._text_input = tk.Text(text_frame, height=8, wrap=tk.WORD, undo=True)
        scrollbar = ttk.Scrollbar(text_frame, command=self._text_input.yview)
        self._text_input.configure(yscrollcommand=scrollbar.set)
        self._text_input.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        scrollbar.pack(side=tk.RIGHT, fill=tk.Y)
        self._text_input.bind("<<Modified>>", self._on_text_modified)

        # -- Reader panel --
        reader_row = ttk.Frame(main)
        reader_row.pack(fill=tk.X, pady=_PAD)

        ttk.Button(reader_row, text="◀", width=3, command=self._on_prev).pack(side=tk.LEFT)
        self._canvas = tk.Canvas(
            reader_row,
            height=_READER_HEIGHT,
            background=_READER_BG,
            highlightthickness=0,
        )
        self._canvas.pack(side=tk.LEFT, fill=tk.X, expand=True, padx=_PAD)
        ttk.Button(reader_row, text="▶", width=3, command=self._on_next).pack(side=tk.LEFT)

        self._canvas.bind("<Button-1>", lambda _e: self._reader.handle_user_activation())
        self._canvas.bind("<Configure>", lambda _e: self._draw_word())

        # -- Status, counter, progress --
        self._status_label = ttk.Label(main, textvariable=self._status_var, anchor=tk.CENTER)
        self._status_label.pack(fill=tk.X)

        bottom = ttk.Frame(main)
        bottom.pack(fill=tk.X, pady=(_PAD, 0))
        ttk.Label(bottom, textvariable=self._counter_var, width=14).pack(side=tk.LEFT)
        self._progress = ttk.Progressbar(bottom, maximum=100.0, mode="determinate")
        self._progress.pack(side=tk.LEFT, fill=tk.X, expand=True)

    def _bind_keys(self) -> None:
        self._root.bind("<space>", self._on_space)
        self._root.bind("<Left>", lambda e: self._unless_typing(e, self._reader.step_backward))
        self._root.bind("<Right>", lambda e: self._unless_typing(e, self._reader.step_forward))
        for key in ("r", "R"):
            self._root.bind(
                "<KeyPress-{}>".format(key),
                lambda e: self._unless_typing(e, self._restart_paragraph),
            )

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _unless_typing(self, event: tk.Event, action: Callable[[], None]) -> Optional[str]:
        if event.widget is self._text_input:
            return None
        action()
        return "break"

    def _on_space(self, event: tk.Event) -> Optional[str]:
        return self._unless_typing(event, self._reader.handle_user_activation)

    def _restart_paragraph(self) -> None:
        if self._reader.snapshot().has_started:
            self._reader.restart_current_paragraph()

    def _on_prev(self) -> None:
        self._reader.step_backward()

    def _on_next(self) -> None:
        self._reader.step_forward()

    def _on_text_modified(self, _event: tk.Event) -> None:
        if not self._text_input.edit_modified():
            return
        self._reader.load_text(self._text_input.get("1.0", "end-1c"))
        self._text_input.edit_modified(False)

    def _on_wpm_change(self) -> None:
        self._apply_setting(self._reader.set_words_per_minute, self._wpm_var)

    def _on_pause_change(self) -> None:
        self._apply_setting(self._reader.set_sentence_pause_ms, self._pause_var)

    def _apply_setting(self, setter: Callable[[int], None], var: tk.StringVar) -> None:
        try:
            setter(int(var.get()))
        except ValueError as e:
            messagebox.showerror(_WINDOW_TITLE, "Invalid setting: {}".format(e))

    def _split_paragraphs(self) -> None:
        current = self._text_input.get("1.0", "end-1c")
        regrouped = reflow(current, DEFAULT_PARAGRAPH_TARGET_WORDS)
        if regrouped == current:
            return
        self._text_input.delete("1.0", tk.END)
        self._text_input.insert("1.0", regrouped)

    def set_text(self, text: str) -> None:
        """Replace the text box contents (used for files given on the command line)."""
        self._text_input.delete("1.0", tk.END)
        self._text_input.insert("1.0", text)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot
        self._draw_word()

        self._counter_var.set(str(snapshot.counter))
        self._progress["value"] = snapshot.progress_percent

        if snapshot.status is None:
            self._status_var.set("")
        else:
            self._status_var.set(snapshot.status.message)
            color = _BREAK_STATUS_COLOR if snapshot.status.is_break else _STATUS_COLOR
            self._status_label.configure(foreground=color)

    def _draw_word(self) -> None:
        canvas = self._canvas
        canvas.delete("all")
        width = canvas.winfo_width()
        height = canvas.winfo_height()
        center_x = width / 2
        center_y = height / 2

        canvas.create_line(center_x, 8, center_x, 20, fill=_GUIDE_COLOR)
        canvas.create_line(center_x, height - 20, center_x, height - 8, fill=_GUIDE_COLOR)

        if self._snapshot is None or self._snapshot.split.is_blank:
            return
        split = self._snapshot.split
        half_focus = self._word_font.measure(split.focus) / 2

        canvas.create_text(
            center_x - half_focus, center_y, text=split.before,
            anchor=tk.E, font=self._word_font, fill=_WORD_COLOR,
        )
        canvas.create_text(
            center_x, center_y, text=split.focus,
            anchor=tk.CENTER, font=self._word_font, fill=_FOCUS_COLOR,
        )
        canvas.create_text(
            center_x + half_focus, center_y, text=split.after,
            anchor=tk.W, font=self._word_font, fill=_WORD_COLOR,
        )


def main(input_file: Optional[str] = None) -> None:
    """Launch the desktop reader, optionally preloading a text file."""
    try:
        settings = load_settings()
    except ValueError as e:
        print("Error: invalid settings: {}".format(e), file=sys.stderr)
        sys.exit(1)

    root = tk.Tk()
    app = ReaderApp(root, settings)

    if input_file:
        try:
            app.set_text(Path(input_file).read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Could not read %s: %s", input_file, e)
            messagebox.showerror(_WINDOW_TITLE, "Could not read {}: {}".format(input_file, e))

    root.mainloop()


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)
    main(sys.argv[1] if len(sys.argv) > 1 else None)
