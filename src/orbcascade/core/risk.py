from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Iterable

from orbcascade.utils.constants import (
    CRITICAL_DISTANCE_KM,
    DANGER_DISTANCE_KM,
    WARNING_DISTANCE_KM,
)

if TYPE_CHECKING:
    from orbcascade.core.proximity import ProximityResult

logger = logging.getLogger(__name__)


class RiskTier(Enum):
    """Collision risk derived from separation distance."""

    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"
    CRITICAL = "critical"

    @property
    def severity(self) -> int:
        """0 for SAFE up to 3 for CRITICAL."""
        if self is RiskTier.SAFE:
            return 0
        elif self is RiskTier.WARNING:
            return 1
        elif self is RiskTier.DANGER:
            return 2
        elif self is RiskTier.CRITICAL:
            return 3
        raise ValueError(f"Unknown risk tier: {self!r}")


def classify_risk(distance_km: float) -> RiskTier:
    """
    Classify a separation into a risk tier.

    Boundaries are strict: exactly 1, 10 and 50 km fall into the next
    lower tier.
    """
    if distance_km < CRITICAL_DISTANCE_KM:
        return RiskTier.CRITICAL
    elif distance_km < DANGER_DISTANCE_KM:
        return RiskTier.DANGER
    elif distance_km < WARNING_DISTANCE_KM:
        return RiskTier.WARNING
    else:
        return RiskTier.SAFE


def risk_recommendation(tier: RiskTier) -> str:
    """Generate human-readable guidance for a risk tier."""
    if tier is RiskTier.CRITICAL:
        return "CRITICAL: objects within 1 km - collision imminent"
    elif tier is RiskTier.DANGER:
        return "Danger: close approach within 10 km - track continuously"
    elif tier is RiskTier.WARNING:
        return "Warning: objects within 50 km - monitor the approach"
    elif tier is RiskTier.SAFE:
        return "Safe separation - routine monitoring"
    raise ValueError(f"Unknown risk tier: {tier!r}")


def count_by_risk(results: Iterable[ProximityResult]) -> dict[RiskTier, int]:
    """Count proximity results per tier; every tier is present in the result."""
    counts = {tier: 0 for tier in RiskTier}
    for result in results:
        counts[result.risk] += 1
    logger.debug("Risk counts: %s", {tier.value: n for tier, n in counts.items()})
    return counts
