"""
Leg distances and arrival times for a planned itinerary.

Distances are measured along each connector as planned (network geometry where
available, the direct chord otherwise). Formatting is left to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Sequence

from flightplanner.planner.session import PlannedPath


@dataclass(frozen=True)
class LegSummary:
    index: int
    distance_km: float
    duration_minutes: float
    arrival: datetime | None


@dataclass(frozen=True)
class ItinerarySummary:
    legs: list[LegSummary]
    total_distance_km: float
    total_minutes: float


def summarize_itinerary(
    paths: Sequence[PlannedPath], *, speed_kmh: float, departure: datetime | None = None
) -> ItinerarySummary:
    if speed_kmh <= 0:
        raise ValueError("speed_kmh must be > 0")

    legs: list[LegSummary] = []
    elapsed = 0.0
    total_km = 0.0
    for i, path in enumerate(paths, start=1):
        d = path.distance_km
        minutes = d / speed_kmh * 60.0
        elapsed += minutes
        total_km += d
        arrival = departure + timedelta(minutes=elapsed) if departure is not None else None
        legs.append(LegSummary(index=i, distance_km=d, duration_minutes=minutes, arrival=arrival))
    return ItinerarySummary(legs=legs, total_distance_km=total_km, total_minutes=elapsed)
