from __future__ import annotations

import random
from dataclasses import dataclass, field

from terminal_karaoke.config import PlayerConfig
from terminal_karaoke.render.ansi import Terminal
from terminal_karaoke.sync.clock import PlaybackClock


@dataclass(slots=True)
class PlaybackContext:
    """Everything one run shares: settings, output, the anchor clock and randomness."""

    config: PlayerConfig
    terminal: Terminal
    clock: PlaybackClock
    rng: random.Random = field(default_factory=random.Random)

    @classmethod
    def create(cls, config: PlayerConfig, terminal: Terminal, rng: random.Random | None = None) -> "PlaybackContext":
        clock = PlaybackClock.start_now(speed=config.speed, offset_ms=config.offset_ms)
        return cls(config=config, terminal=terminal, clock=clock, rng=rng or random.Random())
