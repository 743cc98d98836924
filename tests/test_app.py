from __future__ import annotations

import asyncio
import random
import signal

import pytest

import terminal_karaoke.app as app_mod
from terminal_karaoke.app import describe_schedule, load_document, play
from terminal_karaoke.config import PlayerConfig
from terminal_karaoke.errors import LyricsFileNotFound, NoTimedLyrics
from terminal_karaoke.lrc.parse import parse_lrc
from terminal_karaoke.render.ansi import CSI, strip_ansi
from terminal_karaoke.render.finale import FinaleKind
from terminal_karaoke.render.pulse import GLYPH


@pytest.fixture
def lrc_file(tmp_path):
    path = tmp_path / "song.lrc"
    path.write_text("[ti:Song]\n[ar:Band]\n[00:00.00]one\n[00:01.00]two\n[00:00.50]between\n", encoding="utf-8")
    return path


def _fast(**kw) -> PlayerConfig:
    base = dict(speed=1000.0, typing_ms=0, finale=FinaleKind.none)
    base.update(kw)
    return PlayerConfig(**base)


def test_missing_file_raises_before_terminal_is_touched(tmp_path, term, out):
    with pytest.raises(LyricsFileNotFound):
        play(_fast(), tmp_path / "nope.lrc", terminal=term)
    assert out.getvalue() == ""


def test_file_without_timestamps_raises(tmp_path, term, out):
    path = tmp_path / "plain.txt"
    path.write_text("no timing here\n", encoding="utf-8")
    with pytest.raises(NoTimedLyrics):
        play(_fast(), path, terminal=term)
    assert out.getvalue() == ""


def test_load_document_returns_stats(lrc_file):
    doc, stats = load_document(lrc_file)
    assert stats.events_total == 3
    assert doc.title == "Band - Song"


def test_play_renders_lines_in_time_order(lrc_file, term, out):
    assert play(_fast(), lrc_file, terminal=term, rng=random.Random(0)) == 0

    text = out.getvalue()
    plain = strip_ansi(text)
    assert plain.index("one") < plain.index("between") < plain.index("two")
    assert "♫ Band - Song ♫" in plain
    assert "Ctrl+C to exit" in plain
    assert text.startswith(CSI + "?25l")
    assert text.endswith(CSI + "?25h")


def test_play_with_typing_delay(lrc_file, term, out):
    play(_fast(typing_ms=1), lrc_file, terminal=term)
    assert strip_ansi(out.getvalue()).count("♪ ") == 3


def test_play_with_pulse(lrc_file, term, out):
    cfg = _fast(speed=10.0, bpm=600)
    play(cfg, lrc_file, terminal=term)
    assert GLYPH in out.getvalue()


def test_pulse_flag_without_bpm_draws_no_pulse(lrc_file, term, out):
    play(_fast(pulse=True), lrc_file, terminal=term)
    assert GLYPH not in out.getvalue()


def test_finale_runs_after_last_lyric(lrc_file, term, out, monkeypatch):
    seen = []

    async def fake_finale(kind, terminal, rng):
        seen.append((kind, strip_ansi(out.getvalue())))

    monkeypatch.setattr(app_mod, "run_finale", fake_finale)
    play(_fast(finale=FinaleKind.fireworks), lrc_file, terminal=term)

    assert len(seen) == 1
    kind, shown = seen[0]
    assert kind is FinaleKind.fireworks
    assert "two" in shown


def test_interrupt_restores_cursor(lrc_file, term, out, monkeypatch):
    before = signal.getsignal(signal.SIGINT)

    async def interrupted(ctx, doc):
        signal.raise_signal(signal.SIGINT)
        await asyncio.sleep(1)

    monkeypatch.setattr(app_mod, "perform", interrupted)

    assert play(_fast(), lrc_file, terminal=term) == 0
    assert out.getvalue().endswith(CSI + "?25h")
    assert signal.getsignal(signal.SIGINT) is before


def test_invalid_speed_falls_back_to_one(lrc_file, term):
    # would raise inside PlaybackClock if not normalized
    assert play(_fast(speed=-3.0, offset_ms=-5000), lrc_file, terminal=term) == 0


def test_describe_schedule_scales_by_speed():
    doc = parse_lrc("[00:10.00]ten\n")
    lines = describe_schedule(PlayerConfig(speed=2.0, finale=FinaleKind.none), doc)
    assert lines == ["   10.000s -> +   5.000s  ten"]


def test_describe_schedule_lists_finale():
    doc = parse_lrc("[00:01.00]x\n")
    lines = describe_schedule(PlayerConfig(offset_ms=-5000), doc)
    assert "+   0.000s" in lines[0]
    assert lines[-1].endswith("<finale: rain>")


def test_latin1_file_still_plays(tmp_path, term, out):
    path = tmp_path / "latin1.lrc"
    path.write_bytes(b"[00:00.01]caf\xe9\n")

    doc, _stats = load_document(path)
    assert doc.events[0].text == "caf\ufffd"
    assert play(_fast(), path, terminal=term) == 0
    assert "caf" in strip_ansi(out.getvalue())


def test_bom_is_dropped_when_loading(tmp_path):
    path = tmp_path / "bom.lrc"
    path.write_bytes("\ufeff[ti:Song]\n[00:01.00]\n[00:02.00]x\n".encode("utf-8"))

    doc, _stats = load_document(path)
    assert [e.text for e in doc.events] == ["x"]
    assert doc.title == "Song"


class RecordingScheduler(app_mod.Scheduler):
    registered: list[tuple[str, float]] = []

    def at(self, t_ms, action, label=""):
        RecordingScheduler.registered.append((label, t_ms))
        return super().at(t_ms, action, label)


def test_pulse_stop_and_finale_deadlines_follow_last_lyric(lrc_file, term, monkeypatch):
    RecordingScheduler.registered = []

    async def fake_finale(kind, terminal, rng):
        pass

    monkeypatch.setattr(app_mod, "Scheduler", RecordingScheduler)
    monkeypatch.setattr(app_mod, "run_finale", fake_finale)
    play(_fast(speed=100.0, bpm=600, finale=FinaleKind.rain), lrc_file, terminal=term)

    timers = dict(RecordingScheduler.registered)
    # last lyric of the fixture is at 1000 ms
    assert timers["pulse-stop"] == 1000 + 1500
    assert timers["finale-rain"] == 1000 + 1200
    assert [t for label, t in RecordingScheduler.registered if label.startswith("lyric#")] == [0, 500, 1000]


def test_no_pulse_stop_timer_without_pulse(lrc_file, term, monkeypatch):
    RecordingScheduler.registered = []
    monkeypatch.setattr(app_mod, "Scheduler", RecordingScheduler)

    play(_fast(), lrc_file, terminal=term)

    labels = [label for label, _t in RecordingScheduler.registered]
    assert "pulse-stop" not in labels
    assert not any(label.startswith("finale-") for label in labels)
