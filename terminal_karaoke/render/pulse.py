from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from .ansi import Terminal

logger = logging.getLogger(__name__)

GLYPH = "●"
BLINK_MS = 80


def pulse_interval_ms(bpm: float, speed: float = 1.0) -> float | None:
    if bpm <= 0:
        return None
    return 60000.0 / bpm / speed


class Pulse:
    """
    Metronome glyph near the top-right corner, blinking once per beat until
    stop() is called.
    """

    def __init__(self, terminal: Terminal, interval_ms: float, blink_ms: float = BLINK_MS):
        self.terminal = terminal
        self.interval_ms = interval_ms
        self.blink_ms = blink_ms
        self.beats = 0
        self._stopped = asyncio.Event()
        self._blinks: set[asyncio.Task[Any]] = set()

    @classmethod
    def from_settings(cls, terminal: Terminal, *, bpm: float, speed: float, enabled: bool) -> "Pulse | None":
        if not (enabled or bpm > 0):
            return None
        interval = pulse_interval_ms(bpm, speed)
        if interval is None:
            # requested via --pulse but there is no tempo to follow
            logger.debug("pulse requested without bpm, not scheduling it")
            return None
        return cls(terminal, interval)

    def stop(self) -> None:
        self._stopped.set()

    async def run(self) -> None:
        interval_s = self.interval_ms / 1000.0
        next_beat = time.monotonic() + interval_s
        while not self._stopped.is_set():
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=max(0.0, next_beat - time.monotonic()))
            except asyncio.TimeoutError:
                pass
            if self._stopped.is_set():
                break
            self.beats += 1
            task = asyncio.ensure_future(self.blink())
            self._blinks.add(task)
            task.add_done_callback(self._blinks.discard)
            next_beat += interval_s

        if self._blinks:
            await asyncio.gather(*self._blinks)

    async def blink(self) -> None:
        cols, _rows = self.terminal.size()
        col = max(1, cols - 2)
        with self.terminal.saved_cursor():
            self.terminal.move(1, col)
            self.terminal.write(self.terminal.styled(self.terminal.theme.pulse, GLYPH))
        await asyncio.sleep(self.blink_ms / 1000.0)
        with self.terminal.saved_cursor():
            self.terminal.move(1, col)
            self.terminal.write(" ")
