from __future__ import annotations

import asyncio
from typing import Sequence

from .ansi import RAINBOW, Terminal, strip_ansi

PREFIX = "\n♪ "


def plain_chunks(terminal: Terminal, text: str) -> list[str]:
    # colored per character so a chunk stays intact if other output interleaves
    return [terminal.styled(terminal.theme.lyric, ch) for ch in strip_ansi(text)]


def rainbow_chunks(terminal: Terminal, text: str) -> list[str]:
    return [terminal.styled(RAINBOW[i % len(RAINBOW)], ch) for i, ch in enumerate(strip_ansi(text))]


async def type_chunks(terminal: Terminal, chunks: Sequence[str], delay_ms: int) -> None:
    """
    delay_ms == 0: the whole line in a single write.
    delay_ms > 0: one chunk per tick, first chunk after one delay.
    A newline follows the last chunk in both modes.
    """
    if delay_ms <= 0:
        terminal.write("".join(chunks) + "\n")
        return

    for chunk in chunks:
        await asyncio.sleep(delay_ms / 1000.0)
        terminal.write(chunk)
    terminal.write("\n")


async def type_lyric(terminal: Terminal, text: str, delay_ms: int, *, last: bool = False) -> None:
    terminal.write(terminal.styled(terminal.theme.prefix, PREFIX))
    chunks = rainbow_chunks(terminal, text) if last else plain_chunks(terminal, text)
    await type_chunks(terminal, chunks, delay_ms)
