"""Virtual simulation time for catalog queries.

The clock advances by ``speed x period`` every tick. Higher speeds use a
shorter period, so each tick moves simulated time by a bounded step and
fast playback stays smooth.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from orbcascade.core.scheduling import AsyncioScheduler, TickScheduler
from orbcascade.utils.constants import LIVE_TOLERANCE_S

logger = logging.getLogger(__name__)

ClockListener = Callable[[datetime], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def update_interval_s(speed: float) -> float:
    """Tick period in seconds for a speed multiplier."""
    if speed <= 1:
        return 1.0
    if speed <= 60:
        return 0.5
    return 0.25


class SimulationClock:
    """A virtual UTC time advanced on its own periodic tick.

    Args:
        start: Initial simulated time. Defaults to wall-clock now.
        speed: Speed multiplier.
        scheduler_factory: Builds a scheduler for a given tick period in seconds.
        now: Wall-clock source.
    """

    def __init__(
        self,
        start: datetime | None = None,
        speed: float = 1.0,
        scheduler_factory: Callable[[float], TickScheduler] = AsyncioScheduler,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        self._now = now
        self._time = start if start is not None else now()
        self._speed = float(speed)
        self._scheduler_factory = scheduler_factory
        self._scheduler: TickScheduler | None = None
        self._handle: Any = None
        self._playing = False
        self._listeners: list[ClockListener] = []

    @property
    def time(self) -> datetime:
        return self._time

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def update_interval_s(self) -> float:
        return update_interval_s(self._speed)

    @property
    def is_live(self) -> bool:
        """True when running at 1x within a couple of seconds of wall-clock time."""
        drift = abs((self._time - self._now()).total_seconds())
        return self._speed == 1 and drift < LIVE_TOLERANCE_S

    def subscribe(self, listener: ClockListener) -> Callable[[], None]:
        """Call ``listener`` with the new time on every change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def play(self) -> None:
        if self._playing:
            return
        self._schedule(self.update_interval_s)
        self._playing = True
        if self._speed == 1:
            # Resuming at real time jumps back to now
            self._set(self._now())

    def pause(self) -> None:
        self._playing = False
        self._cancel()

    def toggle(self) -> None:
        if self._playing:
            self.pause()
        else:
            self.play()

    def set_speed(self, speed: float) -> None:
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        if self._playing:
            self._schedule(update_interval_s(speed))
        self._speed = float(speed)
        logger.debug("Clock speed set to %gx (period %.2fs)", self._speed, self.update_interval_s)

    def set_time(self, time: datetime) -> None:
        self._set(time)

    def jump(self, minutes: float) -> None:
        self._set(self._time + timedelta(minutes=minutes))

    def reset_to_now(self) -> None:
        self._set(self._now())

    def advance(self) -> datetime:
        """Advance by one tick's worth of simulated time."""
        self._set(self._time + timedelta(seconds=self._speed * self.update_interval_s))
        return self._time

    def close(self) -> None:
        """Stop ticking and drop listeners."""
        self.pause()
        self._listeners.clear()

    def _set(self, time: datetime) -> None:
        self._time = time
        for listener in list(self._listeners):
            listener(time)

    def _tick(self) -> None:
        self._handle = None
        if not self._playing:
            return
        self.advance()
        # a listener may have paused the clock
        if self._playing and self._handle is None:
            self._schedule(self.update_interval_s)

    def _schedule(self, period: float) -> None:
        """Request the next tick, replacing any pending one only once that succeeds."""
        scheduler = self._scheduler_factory(period)
        handle = scheduler.request_tick(self._tick)
        self._cancel()
        self._scheduler = scheduler
        self._handle = handle

    def _cancel(self) -> None:
        if self._handle is not None and self._scheduler is not None:
            self._scheduler.cancel_tick(self._handle)
        self._handle = None
