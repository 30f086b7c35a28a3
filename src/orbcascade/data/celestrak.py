"""CelesTrak catalog client.

Fetches TLE text per catalog group and turns it into tracked objects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

import requests

logger = logging.getLogger(__name__)

from orbcascade.core.catalog import Category, TrackedObject, build_catalog

CATEGORY_GROUPS: dict[Category, str] = {
    Category.KOREA: "active",
    Category.STARLINK: "starlink",
    Category.STATIONS: "stations",
    Category.ACTIVE: "active",
    Category.DEBRIS_COSMOS: "cosmos-2251-debris",
    Category.DEBRIS_IRIDIUM: "iridium-33-debris",
    Category.DEBRIS_FENGYUN: "fengyun-1c-debris",
}
"""CelesTrak GP group queried for each category."""

KOREA_NAME_PATTERNS: tuple[str, ...] = (
    "ARIRANG", "KOMPSAT", "KOREASAT", "COMS", "GEO-KOMPSAT",
    "MUGUNGWHA", "NEXTSAT", "KITSAT", "STSAT",
)
"""Name fragments identifying Korean satellites inside the active group."""


@dataclass
class CelestrakClient:
    """Client for the CelesTrak GP element endpoint.

    Attributes:
        base_url: GP endpoint URL.
        timeout_s: Per-request timeout in seconds.
    """

    base_url: str = "https://celestrak.org/NORAD/elements/gp.php"
    timeout_s: float = 30.0
    _session: requests.Session = field(default_factory=requests.Session, repr=False)

    def _request(self, group: str) -> str:
        """Fetch one group in TLE format.

        Raises:
            requests.HTTPError: If the request fails.
        """
        response = self._session.get(
            self.base_url,
            params={"GROUP": group, "FORMAT": "tle"},
            timeout=self.timeout_s,
        )
        response.raise_for_status()
        return response.text

    def fetch_category(self, category: Category | str) -> list[TrackedObject]:
        """Fetch every object in one category.

        Returns:
            Tracked objects; malformed element sets are skipped.

        Raises:
            requests.HTTPError: If the request fails.
        """
        category = Category(category)
        text = self._request(CATEGORY_GROUPS[category])
        if not text.strip():
            return []

        objects = build_catalog(text, category)
        if category is Category.KOREA:
            objects = [
                obj for obj in objects
                if any(pattern in obj.name.upper() for pattern in KOREA_NAME_PATTERNS)
            ]

        logger.info("Fetched %d objects for %s", len(objects), category.value)
        return objects

    def fetch_all(self, categories: Iterable[Category | str] | None = None) -> list[TrackedObject]:
        """Fetch several categories, skipping any that fail.

        Args:
            categories: Categories to fetch. Defaults to all of them.

        Returns:
            Objects from every category that loaded, in category order.
        """
        if categories is None:
            categories = list(Category)

        objects: list[TrackedObject] = []
        for category in categories:
            try:
                objects.extend(self.fetch_category(category))
            except requests.RequestException as exc:
                logger.warning("Failed to load %s: %s", Category(category).value, exc)
        return objects
