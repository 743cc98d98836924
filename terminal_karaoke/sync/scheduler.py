from __future__ import annotations

import asyncio
import inspect
import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from .clock import PlaybackClock

logger = logging.getLogger(__name__)

Action = Callable[[], "Awaitable[Any] | None"]


@dataclass(order=True, slots=True)
class Timer:
    deadline: float
    seq: int
    t_ms: float = field(compare=False)
    action: Action = field(compare=False, repr=False)
    label: str = field(compare=False, default="")


class Scheduler:
    """
    One-shot timers against a PlaybackClock.

    Timers fire in (deadline, registration) order from a single loop; there is
    no drift correction and nothing is re-synchronized once registered.
    Coroutines returned by actions run as independent tasks, so a slow action
    never delays the timers after it.
    """

    def __init__(self, clock: PlaybackClock, now: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._now = now
        self._seq = itertools.count()
        self._timers: list[Timer] = []
        self._tasks: list[asyncio.Task[Any]] = []

    @property
    def pending(self) -> int:
        return len(self._timers)

    def at(self, t_ms: float, action: Action, label: str = "") -> Timer:
        timer = Timer(
            deadline=self.clock.deadline(t_ms),
            seq=next(self._seq),
            t_ms=t_ms,
            action=action,
            label=label,
        )
        self._timers.append(timer)
        logger.debug("scheduled %s at t=%sms (+%.3fs)", label or "timer", t_ms, self.clock.relative_ms(t_ms) / 1000.0)
        return timer

    async def run(self) -> None:
        timers = sorted(self._timers)
        self._timers = []

        for timer in timers:
            delay = self.clock.delay(timer.t_ms, self._now())
            if delay > 0:
                await asyncio.sleep(delay)
            self._fire(timer)

        if self._tasks:
            tasks, self._tasks = self._tasks, []
            await asyncio.gather(*tasks)

    def _fire(self, timer: Timer) -> None:
        logger.debug("firing %s (t=%sms)", timer.label or "timer", timer.t_ms)
        result = timer.action()
        if inspect.isawaitable(result):
            self._tasks.append(asyncio.ensure_future(result))
