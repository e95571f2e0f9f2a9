"""Cosmetic progress indicator for in-flight generations.

The provider offers no progress signal, so progress is simulated: while a
request is in flight a ticker task raises the percentage by a random step,
never past ``ceiling``. Settling stops the ticker, shows 100% for
``hold_seconds`` and then resets to 0 so the next generation starts clean.

Contract: ticks only between ``start()`` and ``stop()``/``settle()``; a
settled simulator has always shown 100 before showing 0 again.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Callable
from dataclasses import dataclass


logger = logging.getLogger(__name__)

IN_FLIGHT_STEP = "Analyzing prompt and generating code..."
FINALIZING_STEP = "Finalizing..."


@dataclass(frozen=True, slots=True)
class ProgressState:
    percent: int = 0
    step: str = ""


ProgressListener = Callable[[ProgressState], None]


class ProgressSimulator:
    """Randomized, monotonically bounded progress owned by one orchestrator."""

    def __init__(
        self,
        *,
        tick_interval: float = 0.5,
        start_percent: int = 5,
        ceiling: int = 95,
        max_increment: int = 6,
        hold_seconds: float = 1.0,
        rng: random.Random | None = None,
    ) -> None:
        if not 0 <= start_percent <= ceiling <= 100:
            raise ValueError("expected 0 <= start_percent <= ceiling <= 100")
        if max_increment < 1:
            raise ValueError("max_increment must be at least 1")
        self.tick_interval = tick_interval
        self.start_percent = start_percent
        self.ceiling = ceiling
        self.max_increment = max_increment
        self.hold_seconds = hold_seconds
        self._rng = rng or random.Random()
        self._state = ProgressState()
        self._ticker: asyncio.Task[None] | None = None
        self._listeners: list[ProgressListener] = []

    @property
    def state(self) -> ProgressState:
        return self._state

    @property
    def percent(self) -> int:
        return self._state.percent

    @property
    def step(self) -> str:
        return self._state.step

    @property
    def running(self) -> bool:
        """True while the ticker task is alive."""
        return self._ticker is not None and not self._ticker.done()

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        """Register a change listener; returns an unsubscribe callable."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def start(self) -> None:
        """Begin the in-flight phase. Must be called from a running event loop."""
        if self.running:
            raise RuntimeError("progress simulation already running")
        self._set(self.start_percent, IN_FLIGHT_STEP)
        self._ticker = asyncio.get_running_loop().create_task(
            self._tick_forever(), name="progress-ticker"
        )

    def stop(self) -> None:
        """Cancel the ticker. Safe to call repeatedly."""
        ticker, self._ticker = self._ticker, None
        if ticker is not None and not ticker.done():
            ticker.cancel()

    async def settle(self) -> None:
        """Stop ticking, show completion, hold, then reset to zero."""
        self.stop()
        self._set(100, FINALIZING_STEP)
        await asyncio.sleep(self.hold_seconds)
        self._reset()

    def abandon(self) -> None:
        """Stop without the completion hold, still passing through 100."""
        self.stop()
        if self._state.percent:
            self._set(100, FINALIZING_STEP)
        self._reset()

    def _reset(self) -> None:
        self._set(0, "")

    def advance(self) -> int:
        """Apply one random increment, clamped to the in-flight ceiling."""
        increment = self._rng.randint(1, self.max_increment)
        self._set(min(self.ceiling, self._state.percent + increment), self._state.step)
        return self._state.percent

    async def _tick_forever(self) -> None:
        while True:
            await asyncio.sleep(self.tick_interval)
            self.advance()

    def _set(self, percent: int, step: str) -> None:
        new_state = ProgressState(percent=percent, step=step)
        if new_state == self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:  # noqa: BLE001
                logger.exception("Progress listener failed")
