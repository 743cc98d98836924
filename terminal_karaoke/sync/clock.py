from __future__ import annotations

import math
import time
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PlaybackClock:
    """
    Maps logical song time (ms) to monotonic wall-clock deadlines (s):
    deadline = start + (offset_ms + t_ms / speed) / 1000
    """

    start: float
    speed: float = 1.0
    offset_ms: int = 0

    def __post_init__(self) -> None:
        if not (self.speed > 0) or math.isinf(self.speed):
            raise ValueError(f"speed must be a positive finite number, got {self.speed!r}")

    @classmethod
    def start_now(cls, speed: float = 1.0, offset_ms: int = 0) -> "PlaybackClock":
        return cls(start=time.monotonic(), speed=speed, offset_ms=offset_ms)

    def relative_ms(self, t_ms: float) -> float:
        return self.offset_ms + t_ms / self.speed

    def deadline(self, t_ms: float) -> float:
        return self.start + self.relative_ms(t_ms) / 1000.0

    def delay(self, t_ms: float, now: float | None = None) -> float:
        # already-elapsed deadlines fire immediately
        if now is None:
            now = time.monotonic()
        return max(0.0, self.deadline(t_ms) - now)
