"""TLE (Two-Line Element) parsing.

Element sets are the opaque orbital elements handed to the propagator.
Parsing uses the sgp4 library; a set is immutable once parsed.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from sgp4.api import Satrec, WGS72

logger = logging.getLogger(__name__)

TLE_LINE_LENGTH = 69


@dataclass(frozen=True)
class TLE:
    """A parsed Two-Line Element set.

    Attributes:
        name: Object name (line 0, if provided).
        line1: Raw TLE line 1.
        line2: Raw TLE line 2.
        norad_id: NORAD catalog number.
        epoch: Epoch as a UTC datetime.
        inclination_deg: Orbital inclination in degrees.
        eccentricity: Orbital eccentricity (dimensionless).
        mean_motion_rev_per_day: Mean motion in revolutions per day.
        satrec: Underlying sgp4 Satrec object for propagation.
    """

    name: str
    line1: str
    line2: str
    norad_id: int
    epoch: datetime
    inclination_deg: float
    eccentricity: float
    mean_motion_rev_per_day: float
    satrec: Satrec = field(repr=False, compare=False)

    @classmethod
    def from_lines(cls, line1: str, line2: str, name: str = "") -> TLE:
        """Parse a TLE from two lines.

        Raises:
            ValueError: If the TLE lines are malformed.
        """
        line1 = line1.strip()
        line2 = line2.strip()

        if len(line1) != TLE_LINE_LENGTH or not line1.startswith("1 "):
            raise ValueError(f"Invalid TLE line 1: {line1!r}")
        if len(line2) != TLE_LINE_LENGTH or not line2.startswith("2 "):
            raise ValueError(f"Invalid TLE line 2: {line2!r}")

        try:
            norad_id = int(line1[2:7].strip())
            year = int(line1[18:20])
            day_of_year = float(line1[20:32])
        except ValueError as exc:
            raise ValueError(f"Invalid TLE line 1: {line1!r}") from exc

        sat = Satrec.twoline2rv(line1, line2, WGS72)

        year = year + 2000 if year < 57 else year + 1900
        epoch = datetime(year, 1, 1, tzinfo=timezone.utc) + timedelta(days=day_of_year - 1)

        logger.debug("Parsed TLE for NORAD %d (epoch %s)", norad_id, epoch.isoformat())

        return cls(
            name=name.strip(),
            line1=line1,
            line2=line2,
            norad_id=norad_id,
            epoch=epoch,
            inclination_deg=math.degrees(sat.inclo),
            eccentricity=sat.ecco,
            mean_motion_rev_per_day=sat.no_kozai * 1440 / (2 * math.pi),
            satrec=sat,
        )

    @property
    def period_minutes(self) -> float:
        """Orbital period in minutes, or ``inf`` for a non-positive mean motion."""
        if self.mean_motion_rev_per_day <= 0:
            return math.inf
        return 1440.0 / self.mean_motion_rev_per_day

    def __str__(self) -> str:
        header = f"{self.name}\n" if self.name else ""
        return f"{header}{self.line1}\n{self.line2}"


def parse_tle(text: str) -> list[TLE]:
    """Parse one or more TLEs from text.

    Handles both 2-line and 3-line (with name) formats. Element sets that
    fail to parse are logged and skipped so one bad entry never loses the
    rest of the batch.

    Args:
        text: Raw TLE text, one or more TLE sets separated by newlines.

    Returns:
        A list of parsed TLE objects, in input order.
    """
    lines = [l.rstrip() for l in text.strip().splitlines() if l.strip()]
    tles: list[TLE] = []
    skipped = 0
    i = 0

    while i < len(lines):
        if lines[i].startswith("1 ") and i + 1 < len(lines) and lines[i + 1].startswith("2 "):
            name, line1, line2 = "", lines[i], lines[i + 1]
            i += 2
        elif (
            not lines[i].startswith("1 ")
            and not lines[i].startswith("2 ")
            and i + 2 < len(lines)
            and lines[i + 1].startswith("1 ")
            and lines[i + 2].startswith("2 ")
        ):
            name, line1, line2 = lines[i], lines[i + 1], lines[i + 2]
            i += 3
        else:
            i += 1  # skip unrecognized lines
            continue

        try:
            tles.append(TLE.from_lines(line1, line2, name=name))
        except ValueError as exc:
            skipped += 1
            logger.warning("Skipping malformed element set %r: %s", name or line1[:7], exc)

    logger.debug("Parsed %d TLEs from text (%d skipped)", len(tles), skipped)
    return tles
