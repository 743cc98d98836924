"""
Finale effects played after the last lyric.

Both effects run for a fixed duration and stop on their own; every frame is
drawn between save/restore cursor so the lyric cursor survives.
"""

from __future__ import annotations

import asyncio
import enum
import random
import time
from dataclasses import dataclass
from typing import Any

from .ansi import FIREWORK_COLORS, Terminal


class FinaleKind(str, enum.Enum):
    rain = "rain"
    fireworks = "fireworks"
    none = "none"


EMOJIS = ("✨", "💫", "🎉", "🎊", "⭐", "🌟", "💥", "🪄", "🔥", "🎶", "💖")

RAIN_DURATION_MS = 2000
RAIN_TICK_MS = 50
RAIN_MAX_DROPS = 30

FIREWORKS_DURATION_MS = 2200
FIREWORKS_INTERVAL_MS = 130
FIREWORKS_FRAME_MS = 90

# (row offset, col offset, glyph)
BURST_FRAMES: tuple[tuple[tuple[int, int, str], ...], ...] = (
    ((0, 0, "."),),
    ((-1, 0, "o"), (1, 0, "o"), (0, -2, "o"), (0, 2, "o")),
    (
        (-2, 0, "O"), (2, 0, "O"), (0, -4, "O"), (0, 4, "O"),
        (-1, -2, "O"), (-1, 2, "O"), (1, -2, "O"), (1, 2, "O"),
    ),
    (
        (-3, 0, "✦"), (3, 0, "✦"), (0, -6, "✦"), (0, 6, "✦"),
        (-2, -3, "✦"), (-2, 3, "✦"), (2, -3, "✦"), (2, 3, "✦"),
    ),
)


@dataclass(slots=True)
class Drop:
    row: int
    col: int
    glyph: str


def target_drops(cols: int) -> int:
    return min(RAIN_MAX_DROPS, cols // 2)


def rain_tick(terminal: Terminal, rng: random.Random, drops: list[Drop]) -> None:
    cols, rows = terminal.size()
    with terminal.saved_cursor():
        while len(drops) < target_drops(cols):
            drops.append(Drop(row=3, col=2 + rng.randrange(max(1, cols - 2)), glyph=rng.choice(EMOJIS)))
        for d in drops:
            terminal.move(d.row, d.col)
            terminal.write(terminal.styled(terminal.theme.rain, d.glyph))
            d.row += 2 if rng.random() < 0.2 else 1
        drops[:] = [d for d in drops if d.row <= rows]


async def emoji_rain(
    terminal: Terminal,
    rng: random.Random,
    duration_ms: float = RAIN_DURATION_MS,
    tick_ms: float = RAIN_TICK_MS,
) -> None:
    drops: list[Drop] = []
    start = time.monotonic()
    while True:
        rain_tick(terminal, rng, drops)
        if (time.monotonic() - start) * 1000.0 >= duration_ms:
            break
        await asyncio.sleep(tick_ms / 1000.0)


def _in_bounds(row: int, col: int, cols: int, rows: int) -> bool:
    # rows 1-2 belong to the pulse glyph and the banner
    return 2 < row < rows and 1 < col < cols


async def burst(terminal: Terminal, rng: random.Random, frame_ms: float = FIREWORKS_FRAME_MS) -> None:
    cols, rows = terminal.size()
    center_row = 3 + rng.randrange(max(1, rows - 6))
    center_col = 5 + rng.randrange(max(1, cols - 10))
    color = rng.choice(FIREWORK_COLORS)

    for i, frame in enumerate(BURST_FRAMES):
        if i:
            await asyncio.sleep(frame_ms / 1000.0)
        with terminal.saved_cursor():
            for dr, dc, ch in frame:
                row, col = center_row + dr, center_col + dc
                if _in_bounds(row, col, cols, rows):
                    terminal.move(row, col)
                    terminal.write(terminal.styled(color, ch))


async def fireworks(
    terminal: Terminal,
    rng: random.Random,
    duration_ms: float = FIREWORKS_DURATION_MS,
    interval_ms: float = FIREWORKS_INTERVAL_MS,
    frame_ms: float = FIREWORKS_FRAME_MS,
) -> None:
    start = time.monotonic()
    bursts: list[asyncio.Task[Any]] = []
    k = 1
    while k * interval_ms < duration_ms:
        at = start + k * interval_ms / 1000.0
        await asyncio.sleep(max(0.0, at - time.monotonic()))
        bursts.append(asyncio.ensure_future(burst(terminal, rng, frame_ms)))
        k += 1
    if bursts:
        await asyncio.gather(*bursts)


async def run_finale(kind: FinaleKind, terminal: Terminal, rng: random.Random) -> None:
    if kind is FinaleKind.rain:
        await emoji_rain(terminal, rng)
    elif kind is FinaleKind.fireworks:
        await fireworks(terminal, rng)
