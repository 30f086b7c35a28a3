from __future__ import annotations

"""Physical constants and default thresholds for proximity and cascade modelling.

Distances in km, times in minutes for catalog queries and in simulated
time units for the debris cascade, unless otherwise noted.
"""

# --- Earth parameters ---
EARTH_RADIUS_KM: float = 6371.0
"""Mean radius of Earth in km (spherical model used for separation)."""

WGS84_EQUATORIAL_RADIUS_KM: float = 6378.137
"""WGS-84 equatorial radius in km."""

WGS84_POLAR_RADIUS_KM: float = 6356.7523142
"""WGS-84 polar radius in km."""

WGS84_FLATTENING: float = 1.0 / 298.257223563
"""WGS-84 flattening."""

ALTITUDE_TOLERANCE_KM: float = 1.0
"""Negative altitudes down to this depth are clamped to zero; deeper ones are invalid."""

# --- Risk tiers ---
CRITICAL_DISTANCE_KM: float = 1.0
"""Separations below this are CRITICAL."""

DANGER_DISTANCE_KM: float = 10.0
"""Separations below this are DANGER."""

WARNING_DISTANCE_KM: float = 50.0
"""Separations below this are WARNING; everything else is SAFE."""

DEFAULT_NEARBY_RADIUS_KM: float = 100.0
"""Default search radius for nearby objects in km."""

# --- Sampling defaults ---
DEFAULT_MINUTES_BEFORE: float = 45.0
DEFAULT_MINUTES_AFTER: float = 45.0
DEFAULT_SAMPLE_STEP_MINUTES: float = 1.0
"""Default trajectory window: roughly one low-orbit period at 1-minute resolution."""

DEFAULT_APPROACH_HORIZON_MINUTES: float = 60.0
DEFAULT_APPROACH_STEP_MINUTES: float = 1.0

# --- Orbit regime boundaries ---
LEO_MAX_ALT_KM: float = 2000.0
"""Maximum altitude for Low Earth Orbit in km."""

MEO_MAX_ALT_KM: float = 35786.0
"""Maximum altitude for Medium Earth Orbit in km."""

GEO_ALT_KM: float = 35786.0
"""Geostationary orbit altitude in km."""

GEO_MAX_ALT_KM: float = 35800.0
"""Upper edge of the geostationary band in km; above this is HEO."""

# --- Debris cascade ---
POPULATION_CEILING: int = 500
"""Population size above which the cascade simulation terminates."""

COLLISION_RADIUS_KM: float = 5.0
"""Separation below which two fragments collide."""

KM_PER_DEGREE: float = 111.0
"""Flat approximation of km per degree of latitude/longitude."""

COLLISION_CHECK_RATE: float = 0.02
"""Per-tick probability of running collision detection at 1x speed."""

YEARS_PER_TIME_UNIT: float = 0.1
"""Simulated years per simulated time unit."""

RECENT_FRAGMENT_AGE: float = 2.0
"""Age (simulated time units) after which a fragment stops being flagged as new."""

RECENT_EVENT_LIMIT: int = 5
"""Number of collision events retained for display."""

MIN_FRAGMENTS_PER_COLLISION: int = 3
MAX_FRAGMENTS_PER_COLLISION: int = 8

# --- Clock and scheduling ---
SPEED_OPTIONS: tuple[int, ...] = (1, 10, 60, 600, 3600)
"""Speed multipliers offered by the time scrubber."""

LIVE_TOLERANCE_S: float = 2.0
"""Simulated time within this many seconds of wall-clock time counts as live."""

FRAME_INTERVAL_S: float = 1.0 / 60.0
"""Frame-driven tick spacing in seconds."""
