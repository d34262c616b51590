"""Unit tests for the Reader command surface."""

import pytest

from fasty.config import ReaderSettings
from fasty.core.ir import PlaybackMode, StatusKind
from fasty.core.reader import Reader

from .conftest import ManualTimers, Recorder, TWO_PARAGRAPHS


class TestReaderSurface:
    def test_initial_snapshot(self, make_reader):
        snap = make_reader().snapshot()
        assert snap.mode is PlaybackMode.NOT_STARTED
        assert snap.has_started is False
        assert snap.split.is_blank
        assert str(snap.counter) == "0 / 0"
        assert snap.status.kind is StatusKind.AWAITING_TEXT

    def test_on_render_can_be_replaced(self, make_reader, recorder):
        reader = make_reader("a b")
        other = Recorder()
        reader.on_render = other
        reader.start()
        assert reader.on_render is other
        assert other.last.split.text == "a"
        assert recorder.last.status.kind is StatusKind.READY

    def test_without_render_callback(self, timers):
        reader = Reader(settings=ReaderSettings(words_per_minute=300), timers=timers)
        reader.load_text("a b")
        assert reader.start() is True
        timers.advance(200)
        assert reader.snapshot().split.text == "b"

    def test_settings_are_exposed(self, make_reader):
        reader = make_reader(wpm=450, pause_ms=100)
        assert reader.settings == ReaderSettings(words_per_minute=450, sentence_pause_ms=100)

    def test_settings_setters(self, make_reader):
        reader = make_reader()
        reader.set_words_per_minute(600)
        reader.set_sentence_pause_ms(750)
        assert reader.settings.words_per_minute == 600
        assert reader.settings.sentence_pause_ms == 750
        assert reader.settings.base_interval_ms == pytest.approx(100)

    def test_invalid_setting_leaves_settings_unchanged(self, make_reader):
        reader = make_reader()
        with pytest.raises(ValueError):
            reader.set_words_per_minute(0)
        assert reader.settings.words_per_minute == 300

    def test_custom_status_messages(self, timers):
        reader = Reader(
            settings=ReaderSettings(),
            timers=timers,
            messages={StatusKind.READY: "Go when ready"},
        )
        reader.load_text("text")
        assert reader.snapshot().status.message == "Go when ready"

    def test_reset_keeps_input_text(self, make_reader, recorder):
        reader = make_reader("a b c")
        reader.start()
        reader.reset()
        assert recorder.last.status.kind is StatusKind.READY
        assert reader.start() is True


class TestIndependentInstances:
    def test_two_readers_do_not_share_state(self):
        timers_a, timers_b = ManualTimers(), ManualTimers()
        settings = ReaderSettings(words_per_minute=300, sentence_pause_ms=0)
        reader_a = Reader(settings=settings, timers=timers_a)
        reader_b = Reader(settings=settings, timers=timers_b)

        reader_a.start(TWO_PARAGRAPHS)
        reader_b.start("x y z")
        timers_a.advance(200)
        reader_b.set_words_per_minute(600)

        assert reader_a.snapshot().split.text == "world."
        assert reader_b.snapshot().split.text == "x"
        assert reader_a.settings.words_per_minute == 300
        assert reader_b.settings.words_per_minute == 600
