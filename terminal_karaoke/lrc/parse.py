from __future__ import annotations

from dataclasses import dataclass
import re

from .model import LrcDocument, LyricEvent

_TS_RE = re.compile(r"\[(\d{2}):(\d{2})(?:[.,](\d{1,3}))?\]")  # [mm:ss] / [mm:ss.x] / [mm:ss.xx] / [mm:ss.xxx]
_TAG_RE = re.compile(r"^\[([a-zA-Z]{1,8}):(.*)\]\s*$")


@dataclass(frozen=True, slots=True)
class LrcParseStats:
    lines_total: int
    events_total: int
    lines_with_timestamps: int
    lines_ignored: int


def _parse_ts_to_ms(m: int, s: int, frac: str | None) -> int:
    if not frac:
        ms = 0
    else:
        # "5" -> 500ms, "50" -> 500ms, "500" -> 500ms
        ms = int(frac.ljust(3, "0")[:3])
    return (m * 60 + s) * 1000 + ms


def parse_lrc(text: str) -> LrcDocument:
    """
    Supported:
    - [mm:ss], [mm:ss.x], [mm:ss.xx], [mm:ss.xxx] (',' works as separator too)
    - multiple timestamps per line, anywhere in the line
    - basic tags: [ar:], [ti:], [al:], ...

    Result:
    - one event per timestamp, all sharing the line text
    - events sorted by time, equal times keep file order
    - malformed timestamps never raise, they just don't match
    """
    doc, _stats = parse_lrc_with_stats(text)
    return doc


def parse_lrc_with_stats(text: str) -> tuple[LrcDocument, LrcParseStats]:
    tags: dict[str, str] = {}
    events: list[LyricEvent] = []

    total = 0
    lines_with_ts = 0
    ignored = 0

    for raw in text.splitlines():
        total += 1
        line = raw.strip().lstrip("\ufeff").strip()
        if not line:
            ignored += 1
            continue

        ts = list(_TS_RE.finditer(line))
        if not ts:
            tag = _TAG_RE.match(line)
            if tag:
                k = tag.group(1).strip().lower()
                v = tag.group(2).strip()
                if k and v:
                    tags[k] = v
            else:
                ignored += 1
            continue

        payload = _TS_RE.sub("", line).strip()
        if not payload:
            ignored += 1
            continue

        lines_with_ts += 1
        for m in ts:
            t_ms = _parse_ts_to_ms(int(m.group(1)), int(m.group(2)), m.group(3))
            events.append(LyricEvent(t_ms=t_ms, text=payload))

    events.sort(key=lambda e: e.t_ms)

    doc = LrcDocument(events=tuple(events), tags=tags)
    stats = LrcParseStats(
        lines_total=total,
        events_total=len(doc.events),
        lines_with_timestamps=lines_with_ts,
        lines_ignored=ignored,
    )
    return doc, stats
