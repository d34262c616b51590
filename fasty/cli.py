"""Terminal reader for Fasty.

WHY: Reading a file at speed should not need a window. The terminal
reader drives the same engine as the desktop app from a shell, and its
auto mode plays piped text straight through with no keyboard.

HOW: Uses argparse for the file, speed and segmentation options. Runs
the engine on an asyncio event loop via asyncio.run(). Each snapshot is
redrawn on one terminal line with the focus letter pinned to a fixed
column. Commands arrive as lines on the controlling terminal through
loop.add_reader(). Status and log output go to stderr.

RULES:
- Positional argument: text file path; omitted or "-" reads stdin
- Text read from stdin (or --auto) plays in auto mode: paragraph breaks
  continue by themselves and the reader exits at the end of the text
- Interactive commands: Enter = start/pause/resume/continue, b = back,
  f = forward, r = restart paragraph, + / - = faster / slower, q = quit
- --reflow regroups the text with intelligent_split before reading
- Invalid settings or unreadable input exit with status 1, Ctrl-C with 130
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, TextIO

from fasty.config import (
    DEFAULT_PARAGRAPH_TARGET_WORDS,
    DEFAULT_SENTENCE_PAUSE_MS,
    DEFAULT_WPM,
    WPM_CHOICES,
    ReaderSettings,
    next_choice,
)
from fasty.core.ir import OrpSplit, Snapshot, StatusKind
from fasty.core.reader import Reader
from fasty.core.segmenter import reflow
from fasty.core.timers import AsyncioTimers

logger = logging.getLogger(__name__)

_FOCUS_COLUMN = 14
_WORD_FIELD_WIDTH = 40
_FOCUS_STYLE = "\x1b[1;31m{}\x1b[0m"
_CLEAR_LINE = "\r\x1b[2K"

TERMINAL_MESSAGES: Dict[StatusKind, str] = {
    StatusKind.AWAITING_TEXT: "No text to read",
    StatusKind.READY: "Press Enter to start",
    StatusKind.PAUSED: "Paused · Enter to continue",
    StatusKind.PARAGRAPH_BREAK: "End of paragraph · Enter to continue",
    StatusKind.END_OF_TEXT: "Done · Enter to restart, q to quit",
}


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: The reader line owns stdout; anything else must not garble it.
    """
    print(msg, file=sys.stderr, flush=True)


def format_split(split: OrpSplit, focus_column: int = _FOCUS_COLUMN, color: bool = False) -> str:
    """Lay out a split so its focus letter sits at ``focus_column``.

    Words whose prefix is longer than the column simply start at 0.
    """
    padding = " " * max(focus_column - len(split.before), 0)
    focus = _FOCUS_STYLE.format(split.focus) if color and split.focus else split.focus
    return padding + split.before + focus + split.after


class TerminalRenderer:
    """Draws snapshots on a single, continuously rewritten terminal line."""

    def __init__(self, stream: Optional[TextIO] = None, color: Optional[bool] = None) -> None:
        self._stream = stream or sys.stdout
        interactive = hasattr(self._stream, "isatty") and self._stream.isatty()
        self._rewrite = interactive
        self._color = interactive if color is None else color
        self.last: Optional[Snapshot] = None

    def render_line(self, snapshot: Snapshot) -> str:
        split = snapshot.split
        word = format_split(split, color=self._color)
        # Escape codes take no screen width
        visible = len(format_split(split))
        word += " " * max(_WORD_FIELD_WIDTH - visible, 1)

        parts = [word, "[{}  {:3.0f}%]".format(snapshot.counter, snapshot.progress_percent)]
        if snapshot.status is not None:
            parts.append(snapshot.status.message)
        return "  ".join(parts)

    def __call__(self, snapshot: Snapshot) -> None:
        self.last = snapshot
        line = self.render_line(snapshot)
        if self._rewrite:
            self._stream.write(_CLEAR_LINE + line)
        else:
            self._stream.write(line + "\n")
        self._stream.flush()


class CommandDispatcher:
    """Maps one input line to a Reader command.

    Returns False from ``dispatch`` when the user asked to quit.
    """

    def __init__(self, reader: Reader) -> None:
        self._reader = reader
        self._commands: Dict[str, Callable[[], None]] = {
            "": reader.handle_user_activation,
            "b": reader.step_backward,
            "f": reader.step_forward,
            "r": reader.restart_current_paragraph,
            "+": lambda: self._change_speed(1),
            "-": lambda: self._change_speed(-1),
        }

    def _change_speed(self, step: int) -> None:
        current = self._reader.settings.words_per_minute
        wpm = next_choice(WPM_CHOICES, current, step)
        if wpm != current:
            self._reader.set_words_per_minute(wpm)
            _status("\nSpeed: {} wpm".format(wpm))

    def dispatch(self, line: str) -> bool:
        command = line.strip().lower()
        logger.debug("Command %r", command)
        if command in ("q", "quit"):
            return False
        action = self._commands.get(command)
        if action is None:
            _status("\nUnknown command {!r} (Enter, b, f, r, +, -, q)".format(command))
            return True
        action()
        return True

    def dispatch_lines(self, lines: List[str]) -> bool:
        """Dispatch lines in order, stopping at a quit command."""
        for line in lines:
            if not self.dispatch(line):
                return False
        return True


class CommandLineBuffer:
    """Splits raw bytes read from the command descriptor into whole lines.

    WHY: Readiness comes from the file descriptor, so reads must bypass
    Python's stream buffer; several lines can arrive in one read and a
    line can be split across reads.
    """

    def __init__(self) -> None:
        self._pending = b""

    def feed(self, data: bytes) -> List[str]:
        lines = (self._pending + data).split(b"\n")
        self._pending = lines.pop()
        return [line.decode("utf-8", errors="replace") for line in lines]


async def _run_reader(
    text: str,
    settings: ReaderSettings,
    auto: bool,
    commands: Optional[TextIO],
) -> int:
    """Play ``text`` until the user quits (interactive) or it ends (auto)."""
    loop = asyncio.get_running_loop()
    finished: asyncio.Future = loop.create_future()
    renderer = TerminalRenderer()

    def _finish() -> None:
        if not finished.done():
            finished.set_result(None)

    def _on_render(snapshot: Snapshot) -> None:
        renderer(snapshot)
        if not auto or snapshot.status is None:
            return
        # Commands are deferred so the engine is never re-entered mid-render
        if snapshot.status.kind is StatusKind.PARAGRAPH_BREAK:
            loop.call_soon(reader.continue_after_paragraph)
        elif snapshot.status.kind is StatusKind.END_OF_TEXT:
            loop.call_soon(_finish)

    reader = Reader(
        settings=settings,
        timers=AsyncioTimers(loop),
        on_render=_on_render,
        messages=TERMINAL_MESSAGES,
    )
    reader.load_text(text)
    if not reader.start():
        _status("\nError: the input contains no words to read.")
        return 1

    if commands is not None:
        dispatcher = CommandDispatcher(reader)
        buffer = CommandLineBuffer()
        fd = commands.fileno()

        def _on_command() -> None:
            data = os.read(fd, 4096)
            if not data or not dispatcher.dispatch_lines(buffer.feed(data)):
                _finish()

        loop.add_reader(fd, _on_command)

    try:
        await finished
    finally:
        if commands is not None:
            loop.remove_reader(commands.fileno())
        reader.pause()
        _status("")
    return 0


def _read_text(source: Optional[str]) -> str:
    if source is None or source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _open_commands(from_stdin: bool) -> Optional[TextIO]:
    """Return the stream interactive commands are read from, if any.

    When the text itself came from stdin, commands come from the
    controlling terminal instead; without one there is no command stream.
    """
    if not from_stdin:
        return sys.stdin if sys.stdin.isatty() else None
    try:
        return open("/dev/tty", "r", encoding="utf-8")
    except OSError:
        return None


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the terminal reader.

    WHY: Separating parser construction from main() makes the CLI
    testable — tests can inspect the parser without running the reader.
    """
    parser = argparse.ArgumentParser(
        prog="fasty",
        description="Speed-read a text file one word at a time (RSVP).",
    )

    parser.add_argument(
        "input_file",
        nargs="?",
        default=None,
        help="Path to a UTF-8 text file. Omit or use '-' to read stdin.",
    )

    parser.add_argument(
        "--wpm",
        type=int,
        default=DEFAULT_WPM,
        help="Reading speed in words per minute (default: %(default)s).",
    )

    parser.add_argument(
        "--pause",
        type=int,
        default=DEFAULT_SENTENCE_PAUSE_MS,
        help="Blank pause after each sentence in ms, 0 = off (default: %(default)s).",
    )

    parser.add_argument(
        "--reflow",
        action="store_true",
        help="Regroup the text into paragraphs of whole sentences before reading.",
    )

    parser.add_argument(
        "--target-words",
        type=int,
        default=DEFAULT_PARAGRAPH_TARGET_WORDS,
        help="Target paragraph length for --reflow (default: %(default)s).",
    )

    parser.add_argument(
        "--auto",
        action="store_true",
        help="Continue through paragraph breaks and exit at the end of the text.",
    )

    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for stderr output (default: %(default)s).",
    )

    parser.add_argument(
        "--gui",
        action="store_true",
        help="Open the desktop reader instead of the terminal reader.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the terminal reader.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.gui:
        from fasty.gui import main as gui_main
        gui_main(args.input_file)
        return

    try:
        settings = ReaderSettings(words_per_minute=args.wpm, sentence_pause_ms=args.pause)
    except ValueError as e:
        logger.debug("Rejected settings wpm=%s pause=%s", args.wpm, args.pause)
        print("Error: invalid settings: {}".format(e), file=sys.stderr)
        sys.exit(1)

    from_stdin = args.input_file is None or args.input_file == "-"
    try:
        text = _read_text(args.input_file)
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Could not read input %s", args.input_file or "stdin", exc_info=True)
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)

    logger.info("Read %d characters from %s", len(text), args.input_file or "stdin")
    if args.reflow:
        text = reflow(text, args.target_words)
        logger.info("Reflowed into paragraphs of about %d words", args.target_words)

    commands = None if args.auto else _open_commands(from_stdin)
    auto = args.auto or commands is None
    if auto and not args.auto:
        _status("No terminal for commands; playing straight through.")

    try:
        exit_code = asyncio.run(_run_reader(text, settings, auto, commands))
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    finally:
        if commands is not None and commands is not sys.stdin:
            commands.close()

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
