"""Debris cascade (Kessler syndrome) simulation.

A synthetic debris population drifts on simplified circular tracks.
Every tick there is a small chance of running collision detection; a
detected collision replaces the two colliding fragments with a handful of
smaller ones, so the population only grows. The run ends once the
population passes a fixed ceiling.

The motion and fragmentation models are visual approximations, not
physics: longitude advances linearly with speed, latitude wobbles on a
sine of longitude, and separation is measured in flat degrees.
"""
from __future__ import annotations

import logging
import math
import time
from collections import deque
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Sequence

import numpy as np

from orbcascade.core.scheduling import AsyncioScheduler, TickScheduler
from orbcascade.utils.constants import (
    COLLISION_CHECK_RATE,
    COLLISION_RADIUS_KM,
    KM_PER_DEGREE,
    MAX_FRAGMENTS_PER_COLLISION,
    MIN_FRAGMENTS_PER_COLLISION,
    POPULATION_CEILING,
    RECENT_EVENT_LIMIT,
    RECENT_FRAGMENT_AGE,
    YEARS_PER_TIME_UNIT,
)

logger = logging.getLogger(__name__)

FRAGMENT_LABEL = "collision fragment"

# degrees of longitude per (km/s x time unit)
_LONGITUDE_RATE = 0.1
# peak latitude drift in degrees per time unit
_LATITUDE_WOBBLE = 0.5


class SimulationState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    TERMINATED = "terminated"


class SimulationStateError(RuntimeError):
    """A control operation was requested in a state that does not allow it."""


@dataclass(frozen=True)
class AltitudeBand:
    """An orbital shell the seed population is spread across."""

    altitude_km: float
    count: int
    label: str


SEED_BANDS: tuple[AltitudeBand, ...] = (
    AltitudeBand(400.0, 15, "LEO lower shell"),
    AltitudeBand(550.0, 20, "Starlink shell"),
    AltitudeBand(780.0, 25, "Iridium shell"),
    AltitudeBand(850.0, 15, "LEO upper shell"),
)


@dataclass(frozen=True)
class CascadeConfig:
    """Tunable constants of the cascade model.

    Attributes:
        bands: Seed population shells.
        population_ceiling: The run terminates once the population exceeds this.
        collision_radius_km: Altitude pre-filter and planar collision threshold.
        km_per_degree: Flat conversion used for planar separation.
        collision_check_rate: Chance per tick, at 1x speed, of running detection.
        years_per_time_unit: Simulated years per simulated time unit.
        recent_fragment_age: Age after which a spawned fragment stops counting as new.
        recent_event_limit: Collision events kept for display.
        min_fragments: Fewest fragments spawned by a collision.
        max_fragments: Most fragments spawned by a collision.
        seed_altitude_jitter_km: Full width of the altitude jitter around a band.
        seed_size_range_m: Seed fragment size range.
        seed_velocity_range_km_s: Seed fragment speed range.
        fragment_size_range_m: Spawned fragment size range.
        fragment_velocity_range_km_s: Spawned fragment speed range.
        fragment_spread_deg: Full width of the lat/lng scatter around a collision.
        fragment_altitude_spread_km: Full width of the altitude scatter around a collision.
    """

    bands: tuple[AltitudeBand, ...] = SEED_BANDS
    population_ceiling: int = POPULATION_CEILING
    collision_radius_km: float = COLLISION_RADIUS_KM
    km_per_degree: float = KM_PER_DEGREE
    collision_check_rate: float = COLLISION_CHECK_RATE
    years_per_time_unit: float = YEARS_PER_TIME_UNIT
    recent_fragment_age: float = RECENT_FRAGMENT_AGE
    recent_event_limit: int = RECENT_EVENT_LIMIT
    min_fragments: int = MIN_FRAGMENTS_PER_COLLISION
    max_fragments: int = MAX_FRAGMENTS_PER_COLLISION
    seed_altitude_jitter_km: float = 50.0
    seed_size_range_m: tuple[float, float] = (0.5, 2.5)
    seed_velocity_range_km_s: tuple[float, float] = (7.5, 8.0)
    fragment_size_range_m: tuple[float, float] = (0.1, 0.6)
    fragment_velocity_range_km_s: tuple[float, float] = (7.0, 8.5)
    fragment_spread_deg: float = 10.0
    fragment_altitude_spread_km: float = 30.0

    def __post_init__(self) -> None:
        if not 1 <= self.min_fragments <= self.max_fragments:
            raise ValueError(
                f"Fragment count range must satisfy 1 <= min <= max, got {self.min_fragments}..{self.max_fragments}"
            )
        if self.population_ceiling <= 0:
            raise ValueError(f"population_ceiling must be positive, got {self.population_ceiling}")
        if self.recent_event_limit <= 0:
            raise ValueError(f"recent_event_limit must be positive, got {self.recent_event_limit}")
        if any(band.count < 0 for band in self.bands):
            raise ValueError("Band counts must not be negative")

    @property
    def seed_count(self) -> int:
        return sum(band.count for band in self.bands)


DEFAULT_CONFIG = CascadeConfig()


@dataclass(frozen=True)
class DebrisFragment:
    """One piece of synthetic debris.

    Attributes:
        id: Unique within a run, never reused.
        lat: Latitude in degrees.
        lng: Longitude in degrees, in [-180, 180).
        alt_km: Altitude in km.
        size_m: Characteristic size in meters.
        velocity_km_s: Orbital speed in km/s.
        origin_label: Seed shell name or the collision-fragment label.
        age: Simulated time units since creation.
        is_recent: True for spawned fragments until they age past the recent threshold.
    """

    id: int
    lat: float
    lng: float
    alt_km: float
    size_m: float
    velocity_km_s: float
    origin_label: str
    age: float = 0.0
    is_recent: bool = False


@dataclass(frozen=True)
class CollisionEvent:
    simulated_year: float
    fragment1_label: str
    fragment2_label: str
    fragments_created: int


@dataclass(frozen=True)
class PopulationSample:
    year: int
    count: int


@dataclass(frozen=True)
class CascadeSnapshot:
    """Read-only view of a simulator at one moment.

    ``recent_events`` is ordered most recent first.
    """

    state: SimulationState
    fragments: tuple[DebrisFragment, ...]
    collision_count: int
    simulated_years: float
    speed: float
    history: tuple[PopulationSample, ...]
    recent_events: tuple[CollisionEvent, ...] = field(default=())

    @property
    def population(self) -> int:
        return len(self.fragments)


def _uniform(rng: np.random.Generator, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return float(low + rng.random() * (high - low))


def _wrap_longitude(lng: float) -> float:
    return (lng + 180.0) % 360.0 - 180.0


def _clamp_latitude(lat: float) -> float:
    return max(-90.0, min(90.0, lat))


def seed_population(rng: np.random.Generator, config: CascadeConfig = DEFAULT_CONFIG) -> list[DebrisFragment]:
    """Build the starting population, evenly phased around each band with random jitter.

    Ids run from 0 in band order.
    """
    fragments: list[DebrisFragment] = []
    for band in config.bands:
        for i in range(band.count):
            phase = (i / band.count) * 360.0 + rng.random() * 20.0
            fragments.append(
                DebrisFragment(
                    id=len(fragments),
                    lat=(rng.random() - 0.5) * 140.0,
                    lng=phase % 360.0 - 180.0,
                    alt_km=band.altitude_km + (rng.random() - 0.5) * config.seed_altitude_jitter_km,
                    size_m=_uniform(rng, config.seed_size_range_m),
                    velocity_km_s=_uniform(rng, config.seed_velocity_range_km_s),
                    origin_label=band.label,
                )
            )
    return fragments


def advance_fragments(
    fragments: Sequence[DebrisFragment],
    delta: float,
    config: CascadeConfig = DEFAULT_CONFIG,
) -> list[DebrisFragment]:
    """Move and age every fragment by ``delta`` simulated time units."""
    advanced = []
    for f in fragments:
        lng = _wrap_longitude(f.lng + f.velocity_km_s * delta * _LONGITUDE_RATE)
        lat = _clamp_latitude(f.lat + math.sin(lng * 0.1) * delta * _LATITUDE_WOBBLE)
        age = f.age + delta
        advanced.append(
            replace(f, lat=lat, lng=lng, age=age, is_recent=f.is_recent and age <= config.recent_fragment_age)
        )
    return advanced


def find_collision(
    fragments: Sequence[DebrisFragment],
    config: CascadeConfig = DEFAULT_CONFIG,
) -> tuple[DebrisFragment, DebrisFragment] | None:
    """First colliding pair in enumeration order (i < j, row by row), or None.

    A pair collides when the altitude difference is within the collision
    radius and the planar separation ``hypot(dlat, dlng) * km_per_degree``
    is under it.
    """
    n = len(fragments)
    if n < 2:
        return None

    radius = config.collision_radius_km
    lat = np.array([f.lat for f in fragments])
    lng = np.array([f.lng for f in fragments])
    alt = np.array([f.alt_km for f in fragments])

    same_shell = np.abs(alt[:, None] - alt[None, :]) <= radius
    separation = np.hypot(lat[:, None] - lat[None, :], lng[:, None] - lng[None, :]) * config.km_per_degree
    hits = np.triu(same_shell & (separation < radius), k=1)

    # flatnonzero is row-major, matching pair enumeration order
    flat = np.flatnonzero(hits)
    if flat.size == 0:
        return None
    i, j = divmod(int(flat[0]), n)
    return fragments[i], fragments[j]


def generate_fragments(
    rng: np.random.Generator,
    pair: tuple[DebrisFragment, DebrisFragment],
    next_id: int,
    config: CascadeConfig = DEFAULT_CONFIG,
) -> list[DebrisFragment]:
    """Spawn the fragments of one collision around the pair's midpoint.

    Ids are ``next_id, next_id + 1, ...``. The result depends only on the
    arguments, so a seeded generator reproduces it exactly.
    """
    a, b = pair
    count = int(rng.integers(config.min_fragments, config.max_fragments + 1))
    center_lat = (a.lat + b.lat) / 2
    center_lng = (a.lng + b.lng) / 2
    center_alt = (a.alt_km + b.alt_km) / 2

    spread = config.fragment_spread_deg
    return [
        DebrisFragment(
            id=next_id + k,
            lat=_clamp_latitude(center_lat + (rng.random() - 0.5) * spread),
            lng=_wrap_longitude(center_lng + (rng.random() - 0.5) * spread),
            alt_km=center_alt + (rng.random() - 0.5) * config.fragment_altitude_spread_km,
            size_m=_uniform(rng, config.fragment_size_range_m),
            velocity_km_s=_uniform(rng, config.fragment_velocity_range_km_s),
            origin_label=FRAGMENT_LABEL,
            age=0.0,
            is_recent=True,
        )
        for k in range(count)
    ]


def resolve_collision(
    rng: np.random.Generator,
    population: Sequence[DebrisFragment],
    pair: tuple[DebrisFragment, DebrisFragment],
    next_id: int,
    config: CascadeConfig = DEFAULT_CONFIG,
) -> tuple[list[DebrisFragment], list[DebrisFragment]]:
    """Remove the colliding pair and append its fragments.

    Returns:
        Tuple of (new population, spawned fragments).
    """
    gone = {pair[0].id, pair[1].id}
    spawned = generate_fragments(rng, pair, next_id, config)
    survivors = [f for f in population if f.id not in gone]
    return survivors + spawned, spawned


class CascadeSimulator:
    """State machine driving a debris cascade run.

    ``idle -> running <-> paused``, and ``running -> terminated`` once the
    population passes the ceiling. ``restart`` starts a fresh run from any
    state. Ticks come from a ``TickScheduler``; each tick converts elapsed
    wall time (scaled by the speed multiplier) into simulated time.

    Args:
        config: Model constants.
        scheduler: Tick source. Defaults to frame-driven asyncio scheduling.
        rng: Random source. Built from ``seed`` when omitted.
        seed: Seed for the default random source.
        clock: Monotonic wall-clock source in seconds.
        speed: Initial speed multiplier.
    """

    def __init__(
        self,
        config: CascadeConfig = DEFAULT_CONFIG,
        scheduler: TickScheduler | None = None,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
        clock: Callable[[], float] = time.monotonic,
        speed: float = 1.0,
    ) -> None:
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        self.config = config
        self._scheduler = scheduler if scheduler is not None else AsyncioScheduler()
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._clock = clock
        self._speed = float(speed)

        self._state = SimulationState.IDLE
        self._fragments: list[DebrisFragment] = []
        self._next_id = 0
        self._collision_count = 0
        self._years = 0.0
        self._history: list[PopulationSample] = []
        self._recent: deque[CollisionEvent] = deque(maxlen=config.recent_event_limit)
        self._last_tick: float | None = None
        self._handle: Any = None

    # --- read-only views -------------------------------------------------

    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def fragments(self) -> tuple[DebrisFragment, ...]:
        return tuple(self._fragments)

    @property
    def population(self) -> int:
        return len(self._fragments)

    @property
    def collision_count(self) -> int:
        return self._collision_count

    @property
    def simulated_years(self) -> float:
        return self._years

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def history(self) -> tuple[PopulationSample, ...]:
        return tuple(self._history)

    @property
    def recent_events(self) -> tuple[CollisionEvent, ...]:
        return tuple(self._recent)

    def snapshot(self) -> CascadeSnapshot:
        return CascadeSnapshot(
            state=self._state,
            fragments=tuple(self._fragments),
            collision_count=self._collision_count,
            simulated_years=self._years,
            speed=self._speed,
            history=tuple(self._history),
            recent_events=tuple(self._recent),
        )

    # --- controls --------------------------------------------------------

    def start(self, population: Sequence[DebrisFragment] | None = None) -> None:
        """Seed a population and begin running.

        Args:
            population: Optional seed population used instead of the
                synthetic bands. Ids must be unique.

        Raises:
            SimulationStateError: If the simulator is not idle.
        """
        if self._state is not SimulationState.IDLE:
            raise SimulationStateError(f"Cannot start from state {self._state.value}; use restart()")
        self._begin(population)

    def restart(self, population: Sequence[DebrisFragment] | None = None) -> None:
        """Discard the current run and start a fresh one, from any state.

        If the first tick cannot be scheduled the current run is kept.
        """
        self._begin(population)

    def pause(self) -> None:
        if self._state is not SimulationState.RUNNING:
            raise SimulationStateError(f"Cannot pause from state {self._state.value}")
        self._cancel()
        self._state = SimulationState.PAUSED
        logger.debug("Cascade paused at year %.2f", self._years)

    def resume(self) -> None:
        if self._state is not SimulationState.PAUSED:
            raise SimulationStateError(f"Cannot resume from state {self._state.value}")
        self._handle = self._scheduler.request_tick(self.tick)
        self._state = SimulationState.RUNNING
        # time spent paused does not count
        self._last_tick = self._clock()
        logger.debug("Cascade resumed at year %.2f", self._years)

    def set_speed(self, speed: float) -> None:
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        self._speed = float(speed)

    def close(self) -> None:
        """Cancel any pending tick. A running simulation is left paused."""
        self._cancel()
        if self._state is SimulationState.RUNNING:
            self._state = SimulationState.PAUSED

    # --- advancing -------------------------------------------------------

    def tick(self) -> None:
        """Scheduled callback: advance by the scaled wall time since the last tick."""
        self._handle = None
        if self._state is not SimulationState.RUNNING:
            return
        now = self._clock()
        last = self._last_tick if self._last_tick is not None else now
        self._last_tick = now
        self.step((now - last) * self._speed)
        if self._state is SimulationState.RUNNING:
            self._schedule()

    def step(self, delta: float) -> CollisionEvent | None:
        """Advance a running simulation by ``delta`` simulated time units.

        Returns:
            The collision resolved during this step, if any.

        Raises:
            ValueError: If ``delta`` is negative.
        """
        if delta < 0:
            raise ValueError(f"delta must not be negative, got {delta}")
        if self._state is not SimulationState.RUNNING:
            return None

        fragments = advance_fragments(self._fragments, delta, self.config)

        event = None
        if self._rng.random() < self.config.collision_check_rate * self._speed:
            pair = find_collision(fragments, self.config)
            if pair is not None:
                fragments, spawned = resolve_collision(self._rng, fragments, pair, self._next_id, self.config)
                self._next_id += len(spawned)
                self._collision_count += 1
                event = CollisionEvent(
                    simulated_year=self._years,
                    fragment1_label=pair[0].origin_label,
                    fragment2_label=pair[1].origin_label,
                    fragments_created=len(spawned),
                )
                self._recent.appendleft(event)
                logger.debug(
                    "Collision %d: #%d x #%d -> %d fragments (population %d)",
                    self._collision_count, pair[0].id, pair[1].id, len(spawned), len(fragments),
                )
        self._fragments = fragments

        previous = self._years
        self._years += delta * self.config.years_per_time_unit
        if math.floor(self._years) > math.floor(previous):
            self._history.append(PopulationSample(year=math.floor(self._years), count=len(fragments)))

        if len(fragments) > self.config.population_ceiling:
            self._state = SimulationState.TERMINATED
            self._cancel()
            logger.info(
                "Cascade terminated: %d objects after %.1f years and %d collisions",
                len(fragments), self._years, self._collision_count,
            )
        return event

    # --- internals -------------------------------------------------------

    def _begin(self, population: Sequence[DebrisFragment] | None) -> None:
        if population is None:
            fragments = seed_population(self._rng, self.config)
        else:
            fragments = list(population)
            if len({f.id for f in fragments}) != len(fragments):
                raise ValueError("Seed population ids must be unique")

        # nothing is committed until the first tick is scheduled
        handle = self._scheduler.request_tick(self.tick)
        self._cancel()
        self._handle = handle

        self._fragments = fragments
        self._next_id = max((f.id for f in fragments), default=-1) + 1
        self._collision_count = 0
        self._years = 0.0
        self._history = [PopulationSample(year=0, count=len(fragments))]
        self._recent.clear()
        self._state = SimulationState.RUNNING
        self._last_tick = self._clock()
        logger.info("Cascade started with %d objects", len(fragments))

    def _schedule(self) -> None:
        self._handle = self._scheduler.request_tick(self.tick)

    def _cancel(self) -> None:
        if self._handle is not None:
            self._scheduler.cancel_tick(self._handle)
        self._handle = None
