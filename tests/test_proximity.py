"""Tests for separation, nearby-object search and closest-approach prediction."""
from __future__ import annotations

import math
from datetime import timedelta

import pytest

from orbcascade.core.catalog import Category, TrackedObject
from orbcascade.core.propagation import GeodeticPosition, resolve_positions
from orbcascade.core.proximity import (
    ClosestApproach,
    ProximityResult,
    distance_km,
    find_close_pairs,
    find_nearby_objects,
    predict_closest_approach,
    to_cartesian,
)
from orbcascade.core.risk import RiskTier
from orbcascade.core.tle import TLE
from orbcascade.utils.constants import EARTH_RADIUS_KM


ISS_TLE_LINES = (
    "1 25544U 98067A   24045.54896019  .00016717  00000-0  30093-3 0  9993",
    "2 25544  51.6412 207.4925 0004948 290.5508 178.9792 15.49583488439596",
)

CSS_TLE_LINES = (
    "1 48274U 21035A   24045.50261574  .00021540  00000-0  25163-3 0  9993",
    "2 48274  41.4681 279.1498 0005372 149.8847 345.3740 15.62096269157018",
)


def _obj(norad_id: int, name: str = "") -> TrackedObject:
    return TrackedObject(norad_id=norad_id, name=name or f"OBJ {norad_id}", category=Category.ACTIVE)


def _pos(lat: float, lon: float, alt: float = 500.0) -> GeodeticPosition:
    return GeodeticPosition(latitude=lat, longitude=lon, altitude_km=alt)


# Arc length of one degree at 500 km altitude on the spherical model
KM_PER_DEG_AT_500 = (EARTH_RADIUS_KM + 500.0) * math.pi / 180.0


@pytest.fixture
def iss() -> TrackedObject:
    return TrackedObject.from_tle(TLE.from_lines(*ISS_TLE_LINES, "ISS (ZARYA)"), Category.STATIONS)


@pytest.fixture
def css() -> TrackedObject:
    return TrackedObject.from_tle(TLE.from_lines(*CSS_TLE_LINES, "CSS (TIANHE)"), Category.STATIONS)


class TestDistance:
    def test_identity(self):
        a = _pos(12.3, -45.6, 420.0)
        assert distance_km(a, a) == 0.0

    @pytest.mark.parametrize(
        "a, b",
        [
            (_pos(0, 0), _pos(10, 20, 800)),
            (_pos(-45, 170), _pos(45, -170, 350)),
            (_pos(89, 0), _pos(-89, 180, 35786)),
        ],
    )
    def test_symmetry(self, a, b):
        assert distance_km(a, b) == pytest.approx(distance_km(b, a))

    def test_radial_separation(self):
        assert distance_km(_pos(10, 10, 400), _pos(10, 10, 450)) == pytest.approx(50.0)

    def test_antipodal(self):
        d = distance_km(_pos(0, 0, 0), _pos(0, 180, 0))
        assert d == pytest.approx(2 * EARTH_RADIUS_KM)

    def test_cartesian_radius(self):
        xyz = to_cartesian(_pos(33, 77, 600))
        assert math.sqrt((xyz ** 2).sum()) == pytest.approx(EARTH_RADIUS_KM + 600)


class TestFindNearbyObjects:
    @pytest.fixture
    def scene(self):
        target = _obj(1, "TARGET")
        pool = [target, _obj(2), _obj(3), _obj(4), _obj(5), _obj(6)]
        positions = {
            1: _pos(0.0, 0.0),
            2: _pos(0.0, 30.0 / KM_PER_DEG_AT_500),  # ~30 km
            3: _pos(0.0, 0.0, 500.5),  # 0.5 km radial
            4: _pos(0.0, 5.0 / KM_PER_DEG_AT_500),  # ~5 km
            5: _pos(10.0, 10.0),  # far
            # 6 has no position
        }
        return target, pool, positions

    def test_sorted_and_tagged(self, scene):
        target, pool, positions = scene
        results = find_nearby_objects(target, pool, positions, max_distance_km=100)
        assert [r.obj.norad_id for r in results] == [3, 4, 2]
        assert [r.risk for r in results] == [RiskTier.CRITICAL, RiskTier.DANGER, RiskTier.WARNING]
        assert all(isinstance(r, ProximityResult) for r in results)

    def test_excludes_target_and_respects_radius(self, scene):
        target, pool, positions = scene
        results = find_nearby_objects(target, pool, positions, max_distance_km=10)
        assert all(r.obj.norad_id != target.norad_id for r in results)
        assert all(r.distance_km <= 10 for r in results)
        distances = [r.distance_km for r in results]
        assert distances == sorted(distances)

    def test_target_without_position(self, scene):
        _, pool, positions = scene
        assert find_nearby_objects(_obj(6), pool, positions) == []

    def test_target_duplicate_in_pool_by_id(self, scene):
        target, pool, positions = scene
        clone = TrackedObject(norad_id=1, name="SAME ID", category=Category.DEBRIS_COSMOS)
        results = find_nearby_objects(target, pool + [clone], positions)
        assert all(r.obj.norad_id != 1 for r in results)

    def test_no_limit_on_result_count(self):
        target = _obj(0)
        pool = [target] + [_obj(i) for i in range(1, 201)]
        positions = {i: _pos(0.0, 0.0, 500.0 + i * 0.1) for i in range(0, 201)}
        assert len(find_nearby_objects(target, pool, positions, max_distance_km=100)) == 200


class TestPredictClosestApproach:
    def test_same_object_is_zero_at_start(self, iss):
        start = iss.elements.epoch
        approach = predict_closest_approach(iss, iss, start, horizon_minutes=10)
        assert isinstance(approach, ClosestApproach)
        assert approach.min_distance_km == 0.0
        assert approach.time == start
        assert approach.risk is RiskTier.CRITICAL

    def test_iss_css_minimum(self, iss, css):
        start = iss.elements.epoch
        approach = predict_closest_approach(iss, css, start, horizon_minutes=90, step_minutes=5)
        assert approach.found
        assert 0 < approach.min_distance_km < 2 * (EARTH_RADIUS_KM + 500)
        assert start <= approach.time <= start + timedelta(minutes=90)
        assert distance_km(approach.position_a, approach.position_b) == pytest.approx(approach.min_distance_km)

    def test_minimum_no_larger_than_any_step(self, iss, css):
        start = iss.elements.epoch
        approach = predict_closest_approach(iss, css, start, horizon_minutes=30, step_minutes=10)
        for minutes in (0, 10, 20, 30):
            positions = resolve_positions([iss, css], start + timedelta(minutes=minutes))
            d = distance_km(positions[iss.norad_id], positions[css.norad_id])
            assert approach.min_distance_km <= d + 1e-6

    def test_unresolvable_object(self, iss):
        start = iss.elements.epoch
        approach = predict_closest_approach(iss, _obj(99), start)
        assert approach.min_distance_km == math.inf
        assert approach.time == start
        assert not approach.found
        assert approach.risk is None

    def test_invalid_step(self, iss):
        with pytest.raises(ValueError):
            predict_closest_approach(iss, iss, iss.elements.epoch, step_minutes=-1)


class TestFindClosePairs:
    def test_pairs_sorted_and_agree_with_distance(self):
        objects = [_obj(1), _obj(2), _obj(3), _obj(4)]
        positions = {
            1: _pos(0.0, 0.0),
            2: _pos(0.0, 0.0, 503.0),
            3: _pos(0.0, 0.0, 520.0),
            4: _pos(45.0, 45.0),
        }
        pairs = find_close_pairs(objects, positions, max_distance_km=25)
        assert [(p.obj_a.norad_id, p.obj_b.norad_id) for p in pairs] == [(1, 2), (2, 3), (1, 3)]
        assert pairs[0].distance_km == pytest.approx(3.0)
        assert pairs[0].risk is RiskTier.DANGER
        for p in pairs:
            expected = distance_km(positions[p.obj_a.norad_id], positions[p.obj_b.norad_id])
            assert p.distance_km == pytest.approx(expected)

    def test_skips_unpositioned(self):
        objects = [_obj(1), _obj(2)]
        assert find_close_pairs(objects, {1: _pos(0, 0)}) == []
