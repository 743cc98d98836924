from __future__ import annotations

import io
import re

import pytest

from terminal_karaoke.render.ansi import Terminal

MOVE_RE = re.compile(r"\x1b\[(\d+);(\d+)H")


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def term(out):
    return Terminal(stream=out, size=(80, 24))


@pytest.fixture
def moves():
    """Cursor positions (row, col) found in captured output."""

    def _moves(text: str) -> list[tuple[int, int]]:
        return [(int(r), int(c)) for r, c in MOVE_RE.findall(text)]

    return _moves
