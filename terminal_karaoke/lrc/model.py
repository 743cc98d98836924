from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LyricEvent:
    t_ms: int
    text: str


@dataclass(frozen=True, slots=True)
class LrcDocument:
    events: tuple[LyricEvent, ...]
    tags: dict[str, str] | None = None

    @property
    def last_t_ms(self) -> int:
        return self.events[-1].t_ms if self.events else 0

    @property
    def title(self) -> str | None:
        tags = self.tags or {}
        artist, title = tags.get("ar"), tags.get("ti")
        if artist and title:
            return f"{artist} - {title}"
        return title or artist or None
