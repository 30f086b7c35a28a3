"""Tracked objects and their catalog categories."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from orbcascade.core.tle import TLE, parse_tle

logger = logging.getLogger(__name__)


class Category(str, Enum):
    """Catalog groups the globe view can toggle on and off."""

    KOREA = "korea"
    STARLINK = "starlink"
    STATIONS = "stations"
    ACTIVE = "active"
    DEBRIS_COSMOS = "debris_cosmos"
    DEBRIS_IRIDIUM = "debris_iridium"
    DEBRIS_FENGYUN = "debris_fengyun"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def is_debris(self) -> bool:
        return self in (Category.DEBRIS_COSMOS, Category.DEBRIS_IRIDIUM, Category.DEBRIS_FENGYUN)


_DISPLAY_NAMES = {
    Category.KOREA: "Korean satellites",
    Category.STARLINK: "Starlink",
    Category.STATIONS: "Space stations (ISS/CSS)",
    Category.ACTIVE: "Active satellites",
    Category.DEBRIS_COSMOS: "Debris (Cosmos 2251)",
    Category.DEBRIS_IRIDIUM: "Debris (Iridium 33)",
    Category.DEBRIS_FENGYUN: "Debris (Fengyun 1C)",
}


@dataclass(frozen=True)
class TrackedObject:
    """One catalog entry.

    Attributes:
        norad_id: Catalog identifier, unique within a catalog.
        name: Object name.
        category: Catalog group the object was loaded from.
        elements: Orbital elements, or None when the entry carried none.
    """

    norad_id: int
    name: str
    category: Category
    elements: TLE | None = None

    @classmethod
    def from_tle(cls, tle: TLE, category: Category | str) -> TrackedObject:
        return cls(
            norad_id=tle.norad_id,
            name=tle.name,
            category=Category(category),
            elements=tle,
        )


def build_catalog(text: str, category: Category | str) -> list[TrackedObject]:
    """Parse TLE text into tracked objects tagged with ``category``.

    Malformed element sets are skipped by the parser.
    """
    category = Category(category)
    objects = [TrackedObject.from_tle(tle, category) for tle in parse_tle(text)]
    logger.debug("Built %d %s catalog entries", len(objects), category.value)
    return objects
