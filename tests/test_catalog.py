"""Tests for tracked objects and catalog building."""
from __future__ import annotations

import pytest

from orbcascade.core.catalog import Category, TrackedObject, build_catalog
from orbcascade.core.tle import TLE

ISS_LINE1 = "1 25544U 98067A   24045.54896019  .00016717  00000-0  30093-3 0  9993"
ISS_LINE2 = "2 25544  51.6412 207.4925 0004948 290.5508 178.9792 15.49583488439596"
HST_LINE1 = "1 20580U 90037B   24045.55478014  .00001456  00000-0  73052-4 0  9994"
HST_LINE2 = "2 20580  28.4701  41.0696 0002622 348.3544 140.2428 15.09435694872912"


def test_build_catalog_tags_category():
    text = f"ISS (ZARYA)\n{ISS_LINE1}\n{ISS_LINE2}\nHST\n{HST_LINE1}\n{HST_LINE2}\n"
    catalog = build_catalog(text, "stations")
    assert [obj.norad_id for obj in catalog] == [25544, 20580]
    assert all(obj.category is Category.STATIONS for obj in catalog)
    assert catalog[0].name == "ISS (ZARYA)"
    assert catalog[0].elements is not None


def test_build_catalog_skips_malformed():
    text = f"BAD\n1 00001U short\n2 00001 short\nISS (ZARYA)\n{ISS_LINE1}\n{ISS_LINE2}\n"
    catalog = build_catalog(text, Category.ACTIVE)
    assert len(catalog) == 1


def test_unknown_category_rejected():
    with pytest.raises(ValueError):
        build_catalog("", "not-a-category")


def test_from_tle():
    tle = TLE.from_lines(ISS_LINE1, ISS_LINE2, "ISS (ZARYA)")
    obj = TrackedObject.from_tle(tle, Category.STATIONS)
    assert obj.norad_id == tle.norad_id
    assert obj.elements is tle


def test_object_without_elements_allowed():
    obj = TrackedObject(norad_id=7, name="PLACEHOLDER", category=Category.ACTIVE)
    assert obj.elements is None


def test_every_category_has_display_name():
    for category in Category:
        assert category.display_name


def test_debris_categories():
    assert Category.DEBRIS_COSMOS.is_debris
    assert not Category.STARLINK.is_debris
