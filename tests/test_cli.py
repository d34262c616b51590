"""Tests for the terminal reader.

WHY: The CLI is the only surface that runs the engine on a real event
loop end to end; these tests cover argument parsing, line layout,
command dispatch and the exit codes.

HOW: Parser and layout helpers are tested directly. main() runs in
--auto mode at a very high speed so a short file plays through in
milliseconds.
"""

import asyncio
import io
import logging
import os

import pytest

from fasty.cli import (
    CommandDispatcher,
    CommandLineBuffer,
    TerminalRenderer,
    _run_reader,
    build_parser,
    format_split,
    main,
)
from fasty.config import DEFAULT_SENTENCE_PAUSE_MS, DEFAULT_WPM, ReaderSettings
from fasty.core.ir import OrpSplit, PlaybackMode
from fasty.core.orp import split_word_at_orp


class TestBuildParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.input_file is None
        assert args.wpm == DEFAULT_WPM
        assert args.pause == DEFAULT_SENTENCE_PAUSE_MS
        assert args.reflow is False
        assert args.auto is False
        assert args.gui is False
        assert args.log_level == "WARNING"

    def test_options(self):
        args = build_parser().parse_args([
            "book.txt", "--wpm", "500", "--pause", "0", "--reflow",
            "--target-words", "40", "--auto", "--log-level", "DEBUG",
        ])
        assert args.input_file == "book.txt"
        assert args.wpm == 500
        assert args.pause == 0
        assert args.reflow is True
        assert args.target_words == 40
        assert args.auto is True
        assert args.log_level == "DEBUG"

    def test_rejects_unknown_log_level(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--log-level", "LOUD"])


class TestFormatSplit:
    def test_focus_letter_at_column(self):
        line = format_split(split_word_at_orp("Hello"), focus_column=14)
        assert line.index("e") == 14
        assert line.strip() == "Hello"

    def test_words_share_focus_column(self):
        short = format_split(split_word_at_orp("cat"), focus_column=10)
        long = format_split(split_word_at_orp("information"), focus_column=10)
        assert short[10] == "a"
        assert long[10] == "o"

    def test_long_prefix_starts_at_zero(self):
        split = OrpSplit(before="abcdef", focus="g", after="h")
        assert format_split(split, focus_column=3) == "abcdefgh"

    def test_color_wraps_focus_letter(self):
        line = format_split(split_word_at_orp("cat"), color=True)
        assert "\x1b[1;31ma\x1b[0m" in line
        assert line.endswith("t")

    def test_blank_split(self):
        assert format_split(OrpSplit(), focus_column=4).strip() == ""


class TestTerminalRenderer:
    def test_writes_one_line_per_snapshot_when_not_a_tty(self, make_reader):
        stream = io.StringIO()
        renderer = TerminalRenderer(stream=stream)
        reader = make_reader("alpha beta")
        reader.on_render = renderer
        reader.start()
        reader.pause()

        lines = stream.getvalue().splitlines()
        assert len(lines) == 2
        assert "alpha" in lines[0]
        assert "1 / 2" in lines[0]
        assert "50%" in lines[0]
        assert "\x1b" not in stream.getvalue()
        assert renderer.last.mode is PlaybackMode.PAUSED

    def test_status_message_appended(self, make_reader):
        renderer = TerminalRenderer(stream=io.StringIO())
        reader = make_reader("alpha beta")
        reader.start()
        reader.pause()
        line = renderer.render_line(reader.snapshot())
        assert line.endswith(reader.snapshot().status.message)

    def test_playing_line_has_no_status(self, make_reader):
        renderer = TerminalRenderer(stream=io.StringIO())
        reader = make_reader("alpha beta")
        reader.start()
        assert renderer.render_line(reader.snapshot()).rstrip().endswith("%]")


class TestCommandDispatcher:
    def test_enter_activates(self, make_reader):
        reader = make_reader("a b c")
        assert CommandDispatcher(reader).dispatch("\n") is True
        assert reader.snapshot().is_playing

    @pytest.mark.parametrize("line", ["q\n", "Q", " quit "])
    def test_quit(self, make_reader, line):
        assert CommandDispatcher(make_reader("a b")).dispatch(line) is False

    def test_navigation_commands(self, make_reader):
        reader = make_reader("a b c")
        dispatcher = CommandDispatcher(reader)
        dispatcher.dispatch("")
        dispatcher.dispatch("f")
        dispatcher.dispatch("f")
        assert reader.snapshot().split.text == "c"
        dispatcher.dispatch("b")
        assert reader.snapshot().split.text == "b"
        dispatcher.dispatch("r")
        assert reader.snapshot().split.text == "a"
        assert reader.snapshot().is_playing

    def test_speed_commands_step_through_presets(self, make_reader, capsys):
        reader = make_reader("a b c", wpm=300)
        dispatcher = CommandDispatcher(reader)
        dispatcher.dispatch("+")
        assert reader.settings.words_per_minute == 350
        dispatcher.dispatch("-")
        dispatcher.dispatch("-")
        assert reader.settings.words_per_minute == 250
        assert "Speed: 250 wpm" in capsys.readouterr().err

    def test_speed_clamps_at_fastest_preset(self, make_reader, capsys):
        reader = make_reader("a b", wpm=1000)
        CommandDispatcher(reader).dispatch("+")
        assert reader.settings.words_per_minute == 1000
        assert "Speed" not in capsys.readouterr().err

    def test_unknown_command_prints_help(self, make_reader, capsys):
        reader = make_reader("a b")
        assert CommandDispatcher(reader).dispatch("xyz") is True
        assert "Unknown command" in capsys.readouterr().err
        assert reader.snapshot().has_started is False

    def test_dispatch_lines_handles_every_line(self, make_reader):
        reader = make_reader("a b c d")
        dispatcher = CommandDispatcher(reader)
        assert dispatcher.dispatch_lines(["", "f", "f"]) is True
        assert reader.snapshot().split.text == "c"

    def test_dispatch_lines_stops_at_quit(self, make_reader):
        reader = make_reader("a b c d")
        dispatcher = CommandDispatcher(reader)
        assert dispatcher.dispatch_lines(["", "q", "f"]) is False
        assert reader.snapshot().split.text == "a"


class TestCommandLineBuffer:
    def test_several_lines_in_one_read(self):
        assert CommandLineBuffer().feed(b"f\nf\n") == ["f", "f"]

    def test_partial_line_waits_for_newline(self):
        buffer = CommandLineBuffer()
        assert buffer.feed(b"qu") == []
        assert buffer.feed(b"it\nb") == ["quit"]
        assert buffer.feed(b"\n") == ["b"]

    def test_empty_line_is_a_command(self):
        assert CommandLineBuffer().feed(b"\n") == [""]

    def test_multibyte_character_split_across_reads(self):
        buffer = CommandLineBuffer()
        data = "é\n".encode("utf-8")
        assert buffer.feed(data[:1]) == []
        assert buffer.feed(data[1:]) == ["é"]


class TestRunReader:
    def test_lines_arriving_together_are_all_handled(self, capsys):
        read_fd, write_fd = os.pipe()
        os.write(write_fd, b"f\nf\nq\n")
        os.close(write_fd)
        settings = ReaderSettings(words_per_minute=150, sentence_pause_ms=0)

        with os.fdopen(read_fd, "r") as commands:
            code = asyncio.run(_run_reader("a b c d", settings, False, commands))

        assert code == 0
        out = capsys.readouterr().out
        assert "3 / 4" in out
        assert "4 / 4" not in out

    def test_end_of_command_stream_finishes(self, capsys):
        read_fd, write_fd = os.pipe()
        os.close(write_fd)
        settings = ReaderSettings(words_per_minute=150, sentence_pause_ms=0)

        with os.fdopen(read_fd, "r") as commands:
            code = asyncio.run(_run_reader("a b c d", settings, False, commands))

        assert code == 0
        assert "1 / 4" in capsys.readouterr().out


class TestMain:
    def test_logs_input_size(self, tmp_path, capsys, caplog):
        path = tmp_path / "story.txt"
        path.write_text("one two", encoding="utf-8")
        caplog.set_level(logging.INFO, logger="fasty.cli")

        main([str(path), "--auto", "--wpm", "60000", "--pause", "0"])

        assert "Read 7 characters from {}".format(path) in caplog.text

    def test_auto_plays_file_to_the_end(self, tmp_path, capsys):
        path = tmp_path / "story.txt"
        path.write_text("First line here.\nSecond one.\n", encoding="utf-8")

        main([str(path), "--auto", "--wpm", "60000", "--pause", "0"])

        out = capsys.readouterr().out
        for word in ["First", "line", "here.", "Second", "one."]:
            assert word in out
        assert "5 / 5" in out

    def test_reflow_option(self, tmp_path, capsys):
        path = tmp_path / "story.txt"
        path.write_text("a b. c d. e f.", encoding="utf-8")

        main([str(path), "--auto", "--wpm", "60000", "--pause", "0",
              "--reflow", "--target-words", "4"])

        out = capsys.readouterr().out
        assert "6 / 6" in out

    def test_missing_file_exits_1(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main([str(tmp_path / "missing.txt"), "--auto"])
        assert exc.value.code == 1
        assert "Error" in capsys.readouterr().err

    def test_invalid_wpm_exits_1(self, tmp_path, capsys):
        path = tmp_path / "story.txt"
        path.write_text("words", encoding="utf-8")
        with pytest.raises(SystemExit) as exc:
            main([str(path), "--auto", "--wpm", "0"])
        assert exc.value.code == 1
        assert "invalid settings" in capsys.readouterr().err

    def test_empty_file_exits_1(self, tmp_path, capsys):
        path = tmp_path / "empty.txt"
        path.write_text("  \n\n", encoding="utf-8")
        with pytest.raises(SystemExit) as exc:
            main([str(path), "--auto"])
        assert exc.value.code == 1
        assert "no words" in capsys.readouterr().err
