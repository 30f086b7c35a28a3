"""Orbital propagation via SGP4 and conversion to geodetic positions.

The propagator is treated as a possibly-failing black box. ``propagate``
raises on failure; ``resolve_position`` and ``resolve_positions`` are the
boundary where every failure collapses into "no position at this instant".
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Iterable

import numpy as np

logger = logging.getLogger(__name__)
from numpy.typing import NDArray
from sgp4.api import SatrecArray, jday
from orbcascade.core.tle import TLE
from orbcascade.utils.constants import (
    ALTITUDE_TOLERANCE_KM,
    WGS84_EQUATORIAL_RADIUS_KM,
    WGS84_FLATTENING,
    WGS84_POLAR_RADIUS_KM,
)

if TYPE_CHECKING:
    from orbcascade.core.catalog import TrackedObject

_E2 = WGS84_FLATTENING * (2.0 - WGS84_FLATTENING)


@dataclass
class StateVector:
    """Position and velocity in TEME frame.

    Attributes:
        position_km: [x, y, z] position in km.
        velocity_km_s: [vx, vy, vz] velocity in km/s.
        epoch: Time of this state vector.
    """

    position_km: NDArray[np.float64]  # shape (3,)
    velocity_km_s: NDArray[np.float64]  # shape (3,)
    epoch: datetime


@dataclass(frozen=True)
class GeodeticPosition:
    """Latitude/longitude/altitude of an object at one instant.

    Attributes:
        latitude: Degrees in [-90, 90].
        longitude: Degrees in [-180, 180].
        altitude_km: Height above the WGS-84 ellipsoid, >= 0.
        speed_km_s: Inertial speed, if known.
    """

    latitude: float
    longitude: float
    altitude_km: float
    speed_km_s: float | None = None


def _julian(t: datetime) -> tuple[float, float]:
    if t.tzinfo is not None:
        t = t.astimezone(timezone.utc)
    return jday(t.year, t.month, t.day, t.hour, t.minute, t.second + t.microsecond / 1e6)


def propagate(tle: TLE, times: list[datetime]) -> list[StateVector]:
    """Propagate a single TLE to multiple times using SGP4.

    Args:
        tle: A parsed TLE object.
        times: List of UTC datetimes to propagate to.

    Returns:
        List of StateVector objects, one per requested time.

    Raises:
        ValueError: If SGP4 propagation fails (error code != 0).
    """
    result = []
    satrec = tle.satrec

    for t in times:
        jd, fr = _julian(t)
        error_code, pos, vel = satrec.sgp4(jd, fr)

        if error_code != 0:
            raise ValueError(
                f"SGP4 propagation failed for NORAD {tle.norad_id} at {t}: error code {error_code}"
            )

        result.append(
            StateVector(
                position_km=np.array(pos, dtype=np.float64),
                velocity_km_s=np.array(vel, dtype=np.float64),
                epoch=t,
            )
        )

    logger.debug("Propagated NORAD %d to %d times", tle.norad_id, len(times))
    return result


def propagate_batch(tles: list[TLE], time: datetime) -> tuple[NDArray[np.float64], NDArray[np.bool_]]:
    """Propagate many TLEs to a single time using vectorized SGP4.

    Returns:
        Tuple of:
            - positions_velocities: Array of shape (n, 6) with [x,y,z,vx,vy,vz] in km, km/s
            - valid_mask: Boolean array of shape (n,) indicating which propagations succeeded
    """
    if not tles:
        return np.empty((0, 6), dtype=np.float64), np.empty(0, dtype=np.bool_)

    satrec_array = SatrecArray([tle.satrec for tle in tles])
    jd, fr = _julian(time)

    # Output shape: errors (n,1), positions (n,1,3), velocities (n,1,3)
    errors, positions, velocities = satrec_array.sgp4(
        np.array([jd], dtype=np.float64), np.array([fr], dtype=np.float64)
    )

    result = np.empty((len(tles), 6), dtype=np.float64)
    result[:, 0:3] = positions[:, 0, :]
    result[:, 3:6] = velocities[:, 0, :]
    valid_mask = (errors[:, 0] == 0) & np.all(np.isfinite(result), axis=1)

    return result, valid_mask


def gmst_rad(jd: float, fr: float = 0.0) -> float:
    """Greenwich Mean Sidereal Time (IAU-82) for a UT1 Julian date, in [0, 2π)."""
    tut1 = (jd - 2451545.0 + fr) / 36525.0
    seconds = (
        -6.2e-6 * tut1 ** 3
        + 0.093104 * tut1 ** 2
        + (876600.0 * 3600.0 + 8640184.812866) * tut1
        + 67310.54841
    )
    # 240 sidereal seconds per degree
    return math.radians(seconds / 240.0) % (2.0 * math.pi)


def teme_to_geodetic(position_km: Iterable[float], gmst: float) -> tuple[float, float, float]:
    """Convert a TEME position to (latitude_deg, longitude_deg, altitude_km) on WGS-84.

    The Earth-fixed rotation is a plain Z rotation by GMST; latitude is
    found by fixed-point iteration on the ellipsoid.
    """
    x, y, z = (float(v) for v in position_km)
    a = WGS84_EQUATORIAL_RADIUS_KM
    p = math.hypot(x, y)

    lon = math.atan2(y, x) - gmst
    lon = (lon + math.pi) % (2.0 * math.pi) - math.pi

    lat = math.atan2(z, p)
    for _ in range(20):
        previous = lat
        c = 1.0 / math.sqrt(1.0 - _E2 * math.sin(lat) ** 2)
        lat = math.atan2(z + a * c * _E2 * math.sin(lat), p)
        if abs(lat - previous) < 1e-12:
            break

    c = 1.0 / math.sqrt(1.0 - _E2 * math.sin(lat) ** 2)
    cos_lat = math.cos(lat)
    if abs(cos_lat) > 1e-10:
        alt = p / cos_lat - a * c
    else:
        alt = abs(z) - WGS84_POLAR_RADIUS_KM

    return math.degrees(lat), math.degrees(lon), alt


def _to_geodetic(
    position_km: NDArray[np.float64],
    velocity_km_s: NDArray[np.float64] | None,
    gmst: float,
) -> GeodeticPosition | None:
    if not np.all(np.isfinite(position_km)):
        return None

    lat, lon, alt = teme_to_geodetic(position_km, gmst)
    if not all(math.isfinite(v) for v in (lat, lon, alt)):
        return None
    if alt < -ALTITUDE_TOLERANCE_KM:
        return None

    speed = None
    if velocity_km_s is not None and np.all(np.isfinite(velocity_km_s)):
        speed = float(np.linalg.norm(velocity_km_s))

    return GeodeticPosition(
        latitude=lat,
        longitude=lon,
        altitude_km=max(alt, 0.0),
        speed_km_s=speed,
    )


def resolve_position(elements: TLE | None, time: datetime) -> GeodeticPosition | None:
    """Geodetic position of an object at ``time``.

    Returns None (unresolvable) when the elements are missing, the
    propagator reports an error or a decayed orbit, or any coordinate is
    not finite. Never raises for bad per-object data.
    """
    if elements is None:
        return None

    try:
        state = propagate(elements, [time])[0]
    except (ValueError, ArithmeticError) as exc:
        logger.debug("Unresolvable position for %s at %s: %s", getattr(elements, "norad_id", "?"), time, exc)
        return None

    jd, fr = _julian(time)
    return _to_geodetic(state.position_km, state.velocity_km_s, gmst_rad(jd, fr))


def resolve_positions(objects: Iterable[TrackedObject], time: datetime) -> dict[int, GeodeticPosition]:
    """Resolve every object at one instant.

    Uses vectorized SGP4. Objects without elements or without a valid
    position are absent from the result.

    Returns:
        Mapping of NORAD id to position.
    """
    resolvable = [obj for obj in objects if obj.elements is not None]
    if not resolvable:
        return {}

    states, valid = propagate_batch([obj.elements for obj in resolvable], time)
    jd, fr = _julian(time)
    gmst = gmst_rad(jd, fr)

    positions: dict[int, GeodeticPosition] = {}
    for obj, state, ok in zip(resolvable, states, valid):
        if not ok:
            continue
        position = _to_geodetic(state[0:3], state[3:6], gmst)
        if position is not None:
            positions[obj.norad_id] = position

    logger.debug("Resolved %d/%d positions at %s", len(positions), len(resolvable), time)
    return positions
