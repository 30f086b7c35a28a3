"""Orbit regime classification and visibility filtering for the globe view."""
from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Collection, Iterable

from orbcascade.core.catalog import Category, TrackedObject
from orbcascade.core.propagation import GeodeticPosition, resolve_positions
from orbcascade.utils.constants import GEO_ALT_KM, GEO_MAX_ALT_KM, LEO_MAX_ALT_KM, MEO_MAX_ALT_KM

logger = logging.getLogger(__name__)


class OrbitRegime(Enum):
    LEO = "LEO"
    MEO = "MEO"
    GEO = "GEO"
    HEO = "HEO"


def orbit_regime(altitude_km: float) -> OrbitRegime:
    """Classify an altitude into LEO, MEO, GEO (a narrow band) or HEO."""
    if altitude_km < LEO_MAX_ALT_KM:
        return OrbitRegime.LEO
    if altitude_km < MEO_MAX_ALT_KM:
        return OrbitRegime.MEO
    if GEO_ALT_KM <= altitude_km <= GEO_MAX_ALT_KM:
        return OrbitRegime.GEO
    return OrbitRegime.HEO


def format_altitude(altitude_km: float) -> str:
    if altitude_km < 1:
        return f"{altitude_km * 1000:.0f} m"
    return f"{altitude_km:.1f} km"


def visible_positions(
    objects: Iterable[TrackedObject],
    time: datetime,
    categories: Collection[Category] | None = None,
    regimes: Collection[OrbitRegime] | None = None,
) -> dict[int, GeodeticPosition]:
    """Resolve positions for objects passing the category and regime filters.

    ``None`` for a filter means everything is enabled.
    """
    selected = [obj for obj in objects if categories is None or obj.category in categories]
    positions = resolve_positions(selected, time)
    if regimes is None:
        return positions
    visible = {
        norad_id: pos for norad_id, pos in positions.items() if orbit_regime(pos.altitude_km) in regimes
    }
    logger.debug("visible_positions: %d of %d resolved objects pass regime filter", len(visible), len(positions))
    return visible
