from __future__ import annotations

import re
import shutil
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, TextIO

import colorama
from colorama import Fore, Style


CSI = "\x1b["

_ANSI_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]")


def strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


@dataclass(frozen=True, slots=True)
class Theme:
    intro: str = Fore.LIGHTBLACK_EX  # gray
    title: str = Fore.CYAN + Style.BRIGHT
    prefix: str = Style.DIM
    lyric: str = Fore.LIGHTWHITE_EX
    pulse: str = Fore.LIGHTMAGENTA_EX
    rain: str = Fore.LIGHTYELLOW_EX
    reset: str = Style.RESET_ALL


RAINBOW = (
    Fore.LIGHTRED_EX,
    Fore.LIGHTYELLOW_EX,
    Fore.LIGHTGREEN_EX,
    Fore.LIGHTCYAN_EX,
    Fore.LIGHTBLUE_EX,
    Fore.LIGHTMAGENTA_EX,
)

FIREWORK_COLORS = (
    Fore.LIGHTRED_EX,
    Fore.LIGHTYELLOW_EX,
    Fore.LIGHTCYAN_EX,
    Fore.LIGHTGREEN_EX,
    Fore.LIGHTMAGENTA_EX,
    Fore.LIGHTWHITE_EX,
)


class Terminal:
    """
    Thin writer over a text stream: cursor control, colors and size.
    Every write is flushed so timer-driven output shows up immediately.
    """

    def __init__(self, stream: TextIO | None = None, size: tuple[int, int] | None = None, theme: Theme | None = None):
        self.stream = stream if stream is not None else sys.stdout
        self.theme = theme or Theme()
        self._size = size
        self._entered = False

    def __enter__(self):
        self.enter()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.exit()

    def size(self) -> tuple[int, int]:
        """(columns, rows)"""
        if self._size is not None:
            return self._size
        return tuple(shutil.get_terminal_size(fallback=(80, 24)))  # type: ignore[return-value]

    def write(self, s: str) -> None:
        self.stream.write(s)
        self.stream.flush()

    def enter(self) -> None:
        if self._entered:
            return
        if self.stream is sys.stdout:
            colorama.just_fix_windows_console()
        self.hide_cursor()
        self.clear()
        self._entered = True

    def exit(self) -> None:
        # safe to call more than once (signal handler + finally)
        if not self._entered:
            return
        self.write(self.theme.reset)
        self.show_cursor()
        self._entered = False

    def hide_cursor(self) -> None:
        self.write(CSI + "?25l")

    def show_cursor(self) -> None:
        self.write(CSI + "?25h")

    def clear(self) -> None:
        self.write(CSI + "H" + CSI + "2J")  # home + clear

    def move(self, row: int, col: int) -> None:
        self.write(f"{CSI}{row};{col}H")

    def save(self) -> None:
        self.write(CSI + "s")

    def restore(self) -> None:
        self.write(CSI + "u")

    @contextmanager
    def saved_cursor(self) -> Iterator["Terminal"]:
        self.save()
        try:
            yield self
        finally:
            self.restore()

    def styled(self, style: str, text: str) -> str:
        return f"{style}{text}{self.theme.reset}"
