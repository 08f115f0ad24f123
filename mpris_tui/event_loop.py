"""Fixed-rate loop: draw, wait for input until the next tick, dispatch, tick."""

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from .config import TICK_RATE
from .errors import DashboardError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyPress:
    key: str


@dataclass(frozen=True)
class PointerPress:
    x: int
    y: int
    button: int = 1


class EventLoop:
    def __init__(
        self,
        dashboard,
        draw: Callable[[], None],
        next_event: Callable[[float], Awaitable[Optional[object]]],
        clock: Callable[[], float] = time.monotonic,
        tick_rate: float = TICK_RATE,
    ):
        self._dashboard = dashboard
        self._draw = draw
        self._next_event = next_event
        self._clock = clock
        self._tick_rate = tick_rate
        self._last_tick = clock()
        self.ticks = 0

    def remaining(self) -> float:
        return max(0.0, self._tick_rate - (self._clock() - self._last_tick))

    async def step(self) -> bool:
        """Run one iteration. Returns False once the quit flag is set."""
        self._guard("draw", self._draw)

        event = await self._next_event(self.remaining())
        if event is not None:
            self._guard("dispatch", self._dashboard.handle, event)

        if self._clock() - self._last_tick >= self._tick_rate:
            self._guard("update", self._dashboard.on_tick, self._clock())
            self._last_tick = self._clock()
            self.ticks += 1

        return not self._dashboard.should_quit

    async def run(self) -> None:
        log.info("Event loop started")
        while await self.step():
            pass
        log.info("Event loop finished")

    def _guard(self, what: str, fn, *args) -> None:
        try:
            fn(*args)
        except DashboardError as e:
            log.error("Recoverable %s failure: %s", what, e)
