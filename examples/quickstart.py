"""orbcascade Quickstart: resolve a TLE, sample its orbit, check neighbours."""

from datetime import timedelta

from orbcascade import (
    Category,
    build_catalog,
    find_nearby_objects,
    predict_closest_approach,
    resolve_positions,
    sample_orbit,
    split_orbit,
)
from orbcascade.core.regimes import format_altitude, orbit_regime

tle_text = """
ISS (ZARYA)
1 25544U 98067A   24045.54896019  .00016717  00000-0  30093-3 0  9993
2 25544  51.6412 207.4925 0004948 290.5508 178.9792 15.49583488439596
CSS (TIANHE)
1 48274U 21035A   24045.50261574  .00021540  00000-0  25163-3 0  9993
2 48274  41.4681 279.1498 0005372 149.8847 345.3740 15.62096269157018
""".strip()

catalog = build_catalog(tle_text, Category.STATIONS)
iss, css = catalog
now = iss.elements.epoch

positions = resolve_positions(catalog, now)
pos = positions[iss.norad_id]
print(f"Object:    {iss.name}")
print(f"Position:  {pos.latitude:.2f}, {pos.longitude:.2f}")
print(f"Altitude:  {format_altitude(pos.altitude_km)} ({orbit_regime(pos.altitude_km).value})")
print(f"Speed:     {pos.speed_km_s:.2f} km/s")

past, future = split_orbit(sample_orbit(iss, now))
print(f"Orbit arc: {len(past)} past / {len(future)} future samples")

for result in find_nearby_objects(iss, catalog, positions, max_distance_km=20000):
    print(f"Nearby:    {result.obj.name} {result.distance_km:.1f} km ({result.risk.value})")

approach = predict_closest_approach(iss, css, now, horizon_minutes=24 * 60, step_minutes=5)
print(f"Closest:   {approach.min_distance_km:.1f} km at +{(approach.time - now) / timedelta(minutes=1):.0f} min")
