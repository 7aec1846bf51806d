import pytest

from flightplanner.core.errors import DataIntegrityError
from flightplanner.core.geo import GeoPoint
from flightplanner.network.routes import RawRoute, RouteFeature, RouteNetworkIndex

KM_PER_DEG_LAT = 111.195


def _equator_feature(name: str, lat: float = 0.0) -> RouteFeature:
    return RouteFeature(points=(GeoPoint(lat, 0.0), GeoPoint(lat, 0.05), GeoPoint(lat, 0.1)), name=name)


def test_route_feature_requires_two_points():
    with pytest.raises(DataIntegrityError):
        RouteFeature(points=(GeoPoint(0, 0),), name="stub")


def test_load_drops_invalid_coordinates_and_rejects_short_routes():
    index = RouteNetworkIndex()
    issues = index.load(
        [
            RawRoute(coordinates=[[0, 0], ["bad", 1], [0.1, 0]], name="ok"),
            RawRoute(coordinates=[[0, 0], [None, None]], name="too short"),
            _equator_feature("prebuilt", lat=1.0),
        ]
    )
    assert [f.name for f in index.features] == ["ok", "prebuilt"]
    assert len(index.features[0].points) == 2
    assert [i.code for i in issues] == ["FEATURE_TOO_SHORT"]
    assert issues[0].sample == ("too short",)


def test_load_is_one_time():
    index = RouteNetworkIndex()
    index.load([_equator_feature("f")])
    with pytest.raises(RuntimeError):
        index.load([_equator_feature("g")])


def test_snap_within_threshold():
    index = RouteNetworkIndex()
    index.load([_equator_feature("F")])
    click = GeoPoint(lat=0.2 / KM_PER_DEG_LAT, lng=0.02)

    hit = index.snap(click, 0.5)
    assert hit is not None
    assert hit.feature.name == "F"
    assert hit.distance_km == pytest.approx(0.2, abs=0.001)
    assert hit.projected.lat == 0
    assert hit.projected.lng == pytest.approx(0.02)


def test_snap_outside_threshold_returns_none():
    index = RouteNetworkIndex()
    index.load([_equator_feature("F")])
    assert index.snap(GeoPoint(lat=0.8 / KM_PER_DEG_LAT, lng=0.02), 0.5) is None


def test_snap_prefers_closest_feature():
    index = RouteNetworkIndex()
    index.load([_equator_feature("far", lat=0.0), _equator_feature("near", lat=0.001)])
    hit = index.snap(GeoPoint(lat=0.0009, lng=0.03), 0.5)
    assert hit is not None
    assert hit.feature.name == "near"


def test_snap_ties_go_to_first_loaded_feature():
    index = RouteNetworkIndex()
    index.load([_equator_feature("first"), _equator_feature("second")])
    hit = index.snap(GeoPoint(lat=0.001, lng=0.03), 0.5)
    assert hit is not None
    assert hit.feature.name == "first"
