from __future__ import annotations

from pathlib import Path


class KaraokeError(RuntimeError):
    pass


class LyricsFileNotFound(KaraokeError):
    def __init__(self, path: Path):
        super().__init__(f"File not found: {path}")
        self.path = path


class NoTimedLyrics(KaraokeError):
    def __init__(self, path: Path):
        super().__init__("No timed lyrics found.")
        self.path = path
