import math

import pytest

from flightplanner.core.geo import (
    GeoPoint,
    coordinate_key,
    distance_km,
    nearest_point_on_polyline,
    point_from_lnglat,
    same_point,
    slice_polyline,
)

EQUATOR_LINE = [GeoPoint(0, 0), GeoPoint(0, 1), GeoPoint(0, 2), GeoPoint(0, 3)]


def test_distance_is_zero_for_same_point_and_symmetric():
    a = GeoPoint(lat=57.1261, lng=-131.4539)
    b = GeoPoint(lat=57.0595, lng=-130.6293)
    assert distance_km(a, a) == 0
    assert distance_km(a, b) == distance_km(b, a)


def test_distance_one_degree_of_latitude():
    assert distance_km(GeoPoint(0, 0), GeoPoint(1, 0)) == pytest.approx(111.195, abs=0.01)


def test_nearest_point_projects_onto_segment_interior():
    p = GeoPoint(lat=0.01, lng=0.5)
    hit = nearest_point_on_polyline(p, EQUATOR_LINE)
    assert hit is not None
    assert hit.segment_index == 0
    assert hit.point.lat == 0
    assert hit.point.lng == pytest.approx(0.5)
    assert hit.distance_km == pytest.approx(1.112, abs=0.001)
    assert hit.distance_km == distance_km(p, hit.point)


def test_nearest_point_is_clamped_to_line_end():
    hit = nearest_point_on_polyline(GeoPoint(lat=0.2, lng=3.5), EQUATOR_LINE)
    assert hit is not None
    assert hit.point == EQUATOR_LINE[-1]
    assert hit.segment_index == 2


def test_nearest_point_needs_two_points():
    assert nearest_point_on_polyline(GeoPoint(0, 0), [GeoPoint(0, 0)]) is None
    assert nearest_point_on_polyline(GeoPoint(0, 0), []) is None


def test_nearest_point_never_farther_than_farthest_vertex():
    line = [GeoPoint(57.12, -131.45), GeoPoint(57.11, -131.3), GeoPoint(57.08, -131.08), GeoPoint(57.07, -130.9)]
    for lat, lng in [(57.2, -131.2), (57.0, -131.5), (57.09, -130.5), (57.11, -131.3), (56.5, -129.0)]:
        p = GeoPoint(lat, lng)
        hit = nearest_point_on_polyline(p, line)
        assert hit is not None
        assert hit.distance_km <= max(distance_km(p, v) for v in line)
        assert hit.distance_km == distance_km(p, hit.point)


def test_slice_polyline_between_interior_points():
    out = slice_polyline(EQUATOR_LINE, GeoPoint(0, 0.5), GeoPoint(0, 2.5))
    assert [p.lng for p in out] == pytest.approx([0.5, 1, 2, 2.5])
    assert all(p.lat == 0 for p in out)


def test_slice_polyline_is_oriented_from_start():
    out = slice_polyline(EQUATOR_LINE, GeoPoint(0, 2.5), GeoPoint(0, 0.5))
    assert [p.lng for p in out] == pytest.approx([2.5, 2, 1, 0.5])


def test_slice_polyline_between_vertices_has_no_duplicates():
    out = slice_polyline(EQUATOR_LINE, GeoPoint(0, 1), GeoPoint(0, 2))
    assert out == [GeoPoint(0, 1), GeoPoint(0, 2)]


def test_slice_polyline_returns_empty_when_point_is_off_line():
    assert slice_polyline(EQUATOR_LINE, GeoPoint(1, 0.5), GeoPoint(0, 2.5), tolerance_km=0.05) == []


def test_point_from_lnglat_converts_and_filters():
    assert point_from_lnglat([10, 20]) == GeoPoint(lat=20, lng=10)
    assert point_from_lnglat(["-131.3", "57.11"]) == GeoPoint(lat=57.11, lng=-131.3)
    assert point_from_lnglat([1, 2, 1500]) == GeoPoint(lat=2, lng=1)
    assert point_from_lnglat(["a", 1]) is None
    assert point_from_lnglat([math.nan, 1]) is None
    assert point_from_lnglat([1]) is None
    assert point_from_lnglat([200, 0]) is None
    assert point_from_lnglat(None) is None


def test_coordinate_key_absorbs_float_noise():
    a = GeoPoint(lat=57.11, lng=-131.3)
    b = GeoPoint(lat=57.11 + 1e-9, lng=-131.3 - 1e-9)
    assert coordinate_key(a) == coordinate_key(b) == (-131300000, 57110000)
    assert same_point(a, b)
    assert not same_point(a, GeoPoint(lat=57.1101, lng=-131.3))


def test_slice_polyline_merges_projection_with_coincident_vertex():
    out = slice_polyline(EQUATOR_LINE, GeoPoint(0, 1 - 1e-9), GeoPoint(0, 2))
    assert len(out) == 2
    assert out[-1] == GeoPoint(0, 2)
