from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from typing import Callable, TypeVar

from terminal_karaoke.render.finale import FinaleKind

logger = logging.getLogger(__name__)

_ENV_PREFIX = "TERMINAL_KARAOKE_"

T = TypeVar("T")


@dataclass(frozen=True)
class PlayerConfig:
    # Timing
    speed: float = 1.0
    offset_ms: int = 0

    # Rendering
    typing_ms: int = 18  # per character, 0 = whole line at once
    finale: FinaleKind = FinaleKind.rain

    # Pulse
    bpm: float = 0.0
    pulse: bool = False

    def normalized(self) -> "PlayerConfig":
        speed = self.speed if self.speed > 0 and not math.isinf(self.speed) else 1.0
        typing_ms = max(0, int(self.typing_ms))
        return self.__class__(**{**self.__dict__, "speed": speed, "typing_ms": typing_ms})


def _env(name: str) -> str | None:
    return os.getenv(_ENV_PREFIX + name) or None


def _load_number(name: str, cast: Callable[[str], T], default: T) -> T:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        logger.warning("Bad value '%s' in %s%s, using %s", raw, _ENV_PREFIX, name, default)
        return default


def _load_finale(raw: str | None) -> FinaleKind:
    if not raw:
        return FinaleKind.rain
    try:
        return FinaleKind(raw.strip().lower())
    except ValueError:
        logger.warning("Unknown finale '%s' in %sFINALE, using rain", raw, _ENV_PREFIX)
        return FinaleKind.rain


def load_config() -> PlayerConfig:
    """Defaults, overridden by TERMINAL_KARAOKE_* environment variables."""
    return PlayerConfig(
        speed=_load_number("SPEED", float, 1.0),
        offset_ms=_load_number("OFFSET_MS", int, 0),
        typing_ms=_load_number("TYPING_MS", int, 18),
        finale=_load_finale(_env("FINALE")),
        bpm=_load_number("BPM", float, 0.0),
        pulse=(_env("PULSE") or "0") not in ("0", "false", "False"),
    ).normalized()
