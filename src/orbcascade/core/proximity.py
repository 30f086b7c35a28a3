"""Proximity analysis: separations, nearby objects and closest approaches."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Mapping

import numpy as np
from numpy.typing import NDArray
from scipy.spatial import cKDTree

from orbcascade.core.catalog import TrackedObject
from orbcascade.core.propagation import GeodeticPosition, resolve_position
from orbcascade.core.risk import RiskTier, classify_risk
from orbcascade.utils.constants import (
    DEFAULT_APPROACH_HORIZON_MINUTES,
    DEFAULT_APPROACH_STEP_MINUTES,
    DEFAULT_NEARBY_RADIUS_KM,
    EARTH_RADIUS_KM,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProximityResult:
    """A candidate found near a target.

    Attributes:
        obj: The nearby object.
        distance_km: Separation from the target in km.
        risk: Risk tier for that separation.
    """

    obj: TrackedObject
    distance_km: float
    risk: RiskTier


@dataclass(frozen=True)
class ClosestApproach:
    """Minimum separation found by a time-stepped search.

    Attributes:
        min_distance_km: Smallest observed separation, ``inf`` if no step resolved.
        time: Instant of the minimum (the start time if no step resolved).
        position_a: First object's position at ``time``.
        position_b: Second object's position at ``time``.
    """

    min_distance_km: float
    time: datetime
    position_a: GeodeticPosition | None
    position_b: GeodeticPosition | None

    @property
    def found(self) -> bool:
        return self.position_a is not None and self.position_b is not None

    @property
    def risk(self) -> RiskTier | None:
        return classify_risk(self.min_distance_km) if self.found else None


@dataclass(frozen=True)
class ProximityPair:
    """Two catalog objects within a search radius of each other."""

    obj_a: TrackedObject
    obj_b: TrackedObject
    distance_km: float
    risk: RiskTier


def to_cartesian(position: GeodeticPosition) -> NDArray[np.float64]:
    """Spherical-Earth Cartesian coordinates (km) of a geodetic position."""
    r = EARTH_RADIUS_KM + position.altitude_km
    lat = math.radians(position.latitude)
    lon = math.radians(position.longitude)
    return np.array(
        [
            r * math.cos(lat) * math.cos(lon),
            r * math.cos(lat) * math.sin(lon),
            r * math.sin(lat),
        ],
        dtype=np.float64,
    )


def distance_km(a: GeodeticPosition, b: GeodeticPosition) -> float:
    """3D separation between two positions on a spherical Earth (R = 6371 km)."""
    return float(np.linalg.norm(to_cartesian(a) - to_cartesian(b)))


def find_nearby_objects(
    target: TrackedObject,
    pool: Iterable[TrackedObject],
    positions: Mapping[int, GeodeticPosition],
    max_distance_km: float = DEFAULT_NEARBY_RADIUS_KM,
) -> list[ProximityResult]:
    """Find every object within ``max_distance_km`` of ``target``.

    Args:
        target: The object of interest.
        pool: Candidate objects; the target itself is excluded by id.
        positions: Positions resolved at one instant, keyed by NORAD id.
            Objects missing from it are skipped.
        max_distance_km: Inclusive search radius.

    Returns:
        Results sorted ascending by distance. Empty if the target has no position.
    """
    target_position = positions.get(target.norad_id)
    if target_position is None:
        return []

    nearby: list[ProximityResult] = []
    for obj in pool:
        if obj.norad_id == target.norad_id:
            continue
        position = positions.get(obj.norad_id)
        if position is None:
            continue

        distance = distance_km(target_position, position)
        if distance <= max_distance_km:
            nearby.append(ProximityResult(obj=obj, distance_km=distance, risk=classify_risk(distance)))

    nearby.sort(key=lambda r: r.distance_km)
    logger.debug("NORAD %d: %d objects within %.1f km", target.norad_id, len(nearby), max_distance_km)
    return nearby


def predict_closest_approach(
    obj_a: TrackedObject,
    obj_b: TrackedObject,
    start_time: datetime,
    horizon_minutes: float = DEFAULT_APPROACH_HORIZON_MINUTES,
    step_minutes: float = DEFAULT_APPROACH_STEP_MINUTES,
) -> ClosestApproach:
    """Discrete search for the minimum separation of two objects.

    Evaluates the distance every ``step_minutes`` from ``start_time`` to
    ``start_time + horizon_minutes`` inclusive. Steps where either object
    is unresolvable are skipped. A minimum between two steps can be missed.

    Raises:
        ValueError: If ``step_minutes`` is not positive.
    """
    if step_minutes <= 0:
        raise ValueError(f"step_minutes must be positive, got {step_minutes}")

    best = ClosestApproach(min_distance_km=math.inf, time=start_time, position_a=None, position_b=None)
    n_steps = math.floor(horizon_minutes / step_minutes + 1e-9)

    for i in range(n_steps + 1):
        t = start_time + timedelta(minutes=i * step_minutes)
        pos_a = resolve_position(obj_a.elements, t)
        if pos_a is None:
            continue
        pos_b = resolve_position(obj_b.elements, t)
        if pos_b is None:
            continue

        distance = distance_km(pos_a, pos_b)
        if distance < best.min_distance_km:
            best = ClosestApproach(min_distance_km=distance, time=t, position_a=pos_a, position_b=pos_b)

    logger.debug(
        "Closest approach NORAD %d/%d: %.3f km at %s",
        obj_a.norad_id, obj_b.norad_id, best.min_distance_km, best.time,
    )
    return best


def find_close_pairs(
    objects: Iterable[TrackedObject],
    positions: Mapping[int, GeodeticPosition],
    max_distance_km: float = DEFAULT_NEARBY_RADIUS_KM,
) -> list[ProximityPair]:
    """Find all pairs of objects within ``max_distance_km`` at one instant.

    Uses a KD-tree over the spherical-Earth Cartesian coordinates, so
    distances agree with ``distance_km``.

    Returns:
        Pairs sorted ascending by distance.
    """
    placed = [obj for obj in objects if obj.norad_id in positions]
    if len(placed) < 2:
        return []

    coords = np.array([to_cartesian(positions[obj.norad_id]) for obj in placed])
    tree = cKDTree(coords)

    pairs: list[ProximityPair] = []
    for i, j in tree.query_pairs(max_distance_km):
        a, b = (i, j) if i < j else (j, i)
        if placed[a].norad_id == placed[b].norad_id:
            continue
        distance = float(np.linalg.norm(coords[a] - coords[b]))
        pairs.append(
            ProximityPair(obj_a=placed[a], obj_b=placed[b], distance_km=distance, risk=classify_risk(distance))
        )

    pairs.sort(key=lambda p: p.distance_km)
    logger.info("find_close_pairs: %d objects, %d pairs within %.1f km", len(placed), len(pairs), max_distance_km)
    return pairs
