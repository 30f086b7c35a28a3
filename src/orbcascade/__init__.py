"""
orbcascade: Orbital proximity and debris-cascade simulation for Python.

Resolves catalog objects to positions at any simulated instant, measures
separations and collision risk between them, and runs a simplified
Kessler-syndrome model of debris population growth.
"""

from __future__ import annotations

__version__ = "0.1.0-dev"

from orbcascade.core.tle import TLE, parse_tle
from orbcascade.core.catalog import Category, TrackedObject, build_catalog
from orbcascade.core.propagation import GeodeticPosition, resolve_position, resolve_positions
from orbcascade.core.trajectory import OrbitSample, sample_orbit, split_orbit
from orbcascade.core.risk import RiskTier, classify_risk
from orbcascade.core.proximity import (
    ClosestApproach,
    ProximityResult,
    distance_km,
    find_close_pairs,
    find_nearby_objects,
    predict_closest_approach,
)
from orbcascade.core.cascade import CascadeConfig, CascadeSimulator, SimulationState
from orbcascade.core.clock import SimulationClock
from orbcascade.core.scheduling import AsyncioScheduler, ManualScheduler
from orbcascade.data.celestrak import CelestrakClient

__all__ = [
    "__version__",
    "TLE",
    "parse_tle",
    "Category",
    "TrackedObject",
    "build_catalog",
    "GeodeticPosition",
    "resolve_position",
    "resolve_positions",
    "OrbitSample",
    "sample_orbit",
    "split_orbit",
    "RiskTier",
    "classify_risk",
    "ClosestApproach",
    "ProximityResult",
    "distance_km",
    "find_close_pairs",
    "find_nearby_objects",
    "predict_closest_approach",
    "CascadeConfig",
    "CascadeSimulator",
    "SimulationState",
    "SimulationClock",
    "AsyncioScheduler",
    "ManualScheduler",
    "CelestrakClient",
]
