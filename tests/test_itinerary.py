from datetime import datetime

import pytest

from flightplanner.core.geo import GeoPoint
from flightplanner.planner.itinerary import summarize_itinerary
from flightplanner.planner.session import PlannedPath


def _leg(*points: GeoPoint) -> PlannedPath:
    return PlannedPath(points=points, kind="direct", reason="snap_miss")


def test_summarize_itinerary_accumulates_arrivals():
    paths = [_leg(GeoPoint(0, 0), GeoPoint(0, 1)), _leg(GeoPoint(0, 1), GeoPoint(0, 2))]
    start = datetime(2024, 6, 1, 9, 0)
    summary = summarize_itinerary(paths, speed_kmh=111.195, departure=start)

    assert [leg.index for leg in summary.legs] == [1, 2]
    assert summary.total_distance_km == pytest.approx(222.39, abs=0.01)
    assert summary.legs[0].duration_minutes == pytest.approx(60.0, abs=0.01)
    assert summary.legs[1].arrival.hour == 11
    assert summary.total_minutes == pytest.approx(120.0, abs=0.02)


def test_summarize_itinerary_without_departure_or_paths():
    summary = summarize_itinerary([], speed_kmh=100)
    assert summary.legs == []
    assert summary.total_distance_km == 0

    summary = summarize_itinerary([_leg(GeoPoint(0, 0), GeoPoint(0, 1))], speed_kmh=100)
    assert summary.legs[0].arrival is None


def test_summarize_itinerary_rejects_non_positive_speed():
    with pytest.raises(ValueError):
        summarize_itinerary([], speed_kmh=0)
