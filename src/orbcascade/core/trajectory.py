"""Trajectory sampling around a center time."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from orbcascade.core.catalog import TrackedObject
from orbcascade.core.propagation import GeodeticPosition, resolve_position
from orbcascade.utils.constants import (
    DEFAULT_MINUTES_AFTER,
    DEFAULT_MINUTES_BEFORE,
    DEFAULT_SAMPLE_STEP_MINUTES,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrbitSample:
    """One point of a sampled orbit arc.

    Attributes:
        position: Geodetic position at ``time``.
        time: Instant of the sample.
        is_past: True when ``time`` is strictly before the sampler's center time.
    """

    position: GeodeticPosition
    time: datetime
    is_past: bool


def sample_orbit(
    obj: TrackedObject,
    center_time: datetime,
    minutes_before: float = DEFAULT_MINUTES_BEFORE,
    minutes_after: float = DEFAULT_MINUTES_AFTER,
    step_minutes: float = DEFAULT_SAMPLE_STEP_MINUTES,
) -> list[OrbitSample]:
    """Sample an object's positions across ``[center - before, center + after]``.

    One sample per step starting at the window start; the end is included
    when it lands on a step boundary. Unresolvable instants are skipped,
    so the result can be shorter than the step count.

    Args:
        obj: Object to sample.
        center_time: Reference instant separating past from future samples.
        minutes_before: Window length before the center, in minutes.
        minutes_after: Window length after the center, in minutes.
        step_minutes: Spacing between samples, in minutes.

    Returns:
        Samples in ascending time order.

    Raises:
        ValueError: If ``step_minutes`` is not positive or the window is negative.
    """
    if step_minutes <= 0:
        raise ValueError(f"step_minutes must be positive, got {step_minutes}")
    if minutes_before + minutes_after < 0:
        raise ValueError("Sampling window must not be negative")

    start = center_time - timedelta(minutes=minutes_before)
    # Integer stepping avoids float drift dropping the final boundary sample
    n_steps = math.floor((minutes_before + minutes_after) / step_minutes + 1e-9)

    samples: list[OrbitSample] = []
    for i in range(n_steps + 1):
        t = start + timedelta(minutes=i * step_minutes)
        position = resolve_position(obj.elements, t)
        if position is None:
            continue
        samples.append(OrbitSample(position=position, time=t, is_past=t < center_time))

    logger.debug("Sampled %d/%d points for NORAD %d", len(samples), n_steps + 1, obj.norad_id)
    return samples


def split_orbit(samples: list[OrbitSample]) -> tuple[list[OrbitSample], list[OrbitSample]]:
    """Split a sampled arc into (past, future) segments, keeping time order."""
    past = [s for s in samples if s.is_past]
    future = [s for s in samples if not s.is_past]
    return past, future
