from __future__ import annotations

import asyncio
import logging
import random
import signal
from pathlib import Path

from terminal_karaoke.config import PlayerConfig
from terminal_karaoke.context import PlaybackContext
from terminal_karaoke.errors import LyricsFileNotFound, NoTimedLyrics
from terminal_karaoke.lrc.model import LrcDocument, LyricEvent
from terminal_karaoke.lrc.parse import LrcParseStats, parse_lrc_with_stats
from terminal_karaoke.render.ansi import Terminal
from terminal_karaoke.render.finale import FinaleKind, run_finale
from terminal_karaoke.render.pulse import Pulse
from terminal_karaoke.render.typewriter import type_lyric
from terminal_karaoke.sync.clock import PlaybackClock
from terminal_karaoke.sync.scheduler import Scheduler

logger = logging.getLogger(__name__)

# logical ms after the last lyric
PULSE_STOP_AFTER_MS = 1500
FINALE_AFTER_MS = 1200


def load_document(lrc_path: Path) -> tuple[LrcDocument, LrcParseStats]:
    if not lrc_path.is_file():
        raise LyricsFileNotFound(lrc_path)
    # undecodable bytes become U+FFFD, a leading BOM is dropped
    text = lrc_path.read_text(encoding="utf-8-sig", errors="replace")
    doc, stats = parse_lrc_with_stats(text)
    logger.debug("parsed %s: %s", lrc_path, stats)
    if not doc.events:
        raise NoTimedLyrics(lrc_path)
    return doc, stats


def write_intro(terminal: Terminal, doc: LrcDocument) -> None:
    theme = terminal.theme
    if doc.title:
        terminal.write(terminal.styled(theme.title, f"♫ {doc.title} ♫") + "\n")
    terminal.write(terminal.styled(theme.intro, "Terminal Karaoke · words only") + "\n")
    terminal.write(terminal.styled(theme.intro, "Ctrl+C to exit") + "\n\n")


def describe_schedule(cfg: PlayerConfig, doc: LrcDocument) -> list[str]:
    """Human-readable schedule relative to the start anchor, for --dry-run."""
    cfg = cfg.normalized()
    clock = PlaybackClock(start=0.0, speed=cfg.speed, offset_ms=cfg.offset_ms)
    out: list[str] = []
    for e in doc.events:
        at_s = max(0.0, clock.deadline(e.t_ms))
        out.append(f"{e.t_ms / 1000:9.3f}s -> +{at_s:8.3f}s  {e.text}")
    if cfg.finale is not FinaleKind.none:
        at_s = max(0.0, clock.deadline(doc.last_t_ms + FINALE_AFTER_MS))
        out.append(f"{'':10} -> +{at_s:8.3f}s  <finale: {cfg.finale.value}>")
    return out


async def render_event(ctx: PlaybackContext, event: LyricEvent, *, last: bool) -> None:
    await type_lyric(ctx.terminal, event.text, ctx.config.typing_ms, last=last)


async def perform(ctx: PlaybackContext, doc: LrcDocument) -> None:
    """
    Schedule everything against ctx.clock and wait until the last effect ends:
    lyrics at their offsets, pulse stop and the finale after the last lyric.
    """
    cfg = ctx.config
    scheduler = Scheduler(ctx.clock)
    last_t_ms = doc.last_t_ms

    pulse = Pulse.from_settings(ctx.terminal, bpm=cfg.bpm, speed=cfg.speed, enabled=cfg.pulse)
    pulse_task: asyncio.Task[None] | None = None
    if pulse is not None:
        pulse_task = asyncio.ensure_future(pulse.run())
        scheduler.at(last_t_ms + PULSE_STOP_AFTER_MS, pulse.stop, label="pulse-stop")

    for i, event in enumerate(doc.events):
        last = i == len(doc.events) - 1
        scheduler.at(
            event.t_ms,
            lambda event=event, last=last: render_event(ctx, event, last=last),
            label=f"lyric#{i}",
        )

    if cfg.finale is not FinaleKind.none:
        scheduler.at(
            last_t_ms + FINALE_AFTER_MS,
            lambda: run_finale(cfg.finale, ctx.terminal, ctx.rng),
            label=f"finale-{cfg.finale.value}",
        )

    await scheduler.run()
    if pulse_task is not None:
        await pulse_task


def play(
    cfg: PlayerConfig,
    lrc_path: Path,
    *,
    terminal: Terminal | None = None,
    rng: random.Random | None = None,
) -> int:
    """
    Idle -> parse -> schedule -> lyrics (+pulse) -> finale -> exit.

    Raises LyricsFileNotFound / NoTimedLyrics before touching the terminal.
    Ctrl+C at any point restores the cursor and returns 0.
    """
    cfg = cfg.normalized()
    doc, _stats = load_document(lrc_path)

    terminal = terminal or Terminal()
    terminal.enter()

    def _on_sigint(signum, frame):
        terminal.exit()
        raise KeyboardInterrupt

    previous = signal.signal(signal.SIGINT, _on_sigint)
    try:
        write_intro(terminal, doc)
        ctx = PlaybackContext.create(cfg, terminal, rng=rng)
        asyncio.run(perform(ctx, doc))
    except KeyboardInterrupt:
        logger.debug("interrupted")
    finally:
        terminal.exit()
        if previous is not None:
            signal.signal(signal.SIGINT, previous)
    return 0
