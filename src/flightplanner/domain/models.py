"""
API models (Pydantic).

These types are the contract with the presentation layer: every coordinate goes
out as `{lat, lng}` and every connector as an ordered point list.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from flightplanner.core.geo import GeoPoint
from flightplanner.planner.itinerary import ItinerarySummary
from flightplanner.planner.session import Click, PlannedPath, PlanningSession


class LatLng(BaseModel):
    """A geographic point in decimal degrees."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    @classmethod
    def of(cls, p: GeoPoint) -> "LatLng":
        return cls(lat=p.lat, lng=p.lng)

    def to_point(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lng=self.lng)


class SessionCreate(BaseModel):
    settings_overrides: dict[str, Any] | None = None


class RouteOut(BaseModel):
    name: str | None = None
    points: list[LatLng]


class SnappedPointOut(BaseModel):
    projected: LatLng
    route_name: str | None = None
    node: LatLng
    distance_km: float


class ClickOut(BaseModel):
    point: LatLng
    snapped: SnappedPointOut | None = None
    miss_reason: str | None = None

    @classmethod
    def of(cls, click: Click) -> "ClickOut":
        snapped = None
        if click.snapped is not None:
            s = click.snapped
            snapped = SnappedPointOut(
                projected=LatLng.of(s.projected),
                route_name=s.source_feature.name,
                node=LatLng.of(s.resolved_node.point),
                distance_km=s.distance_km,
            )
        return cls(point=LatLng.of(click.point), snapped=snapped, miss_reason=click.miss_reason)


class PlannedPathOut(BaseModel):
    kind: Literal["network", "direct"]
    reason: str | None = None
    points: list[LatLng]
    nodes: list[LatLng] = Field(default_factory=list)
    distance_km: float
    network_weight: float | None = None

    @classmethod
    def of(cls, path: PlannedPath) -> "PlannedPathOut":
        return cls(
            kind=path.kind,
            reason=path.reason,
            points=[LatLng.of(p) for p in path.points],
            nodes=[LatLng.of(n.point) for n in path.nodes],
            distance_km=path.distance_km,
            network_weight=path.network_weight,
        )


class SessionOut(BaseModel):
    session_id: str
    state: Literal["empty", "single", "chained"]
    snap_max_distance_km: float
    clicks: list[ClickOut]
    paths: list[PlannedPathOut]
    stats: dict[str, int]

    @classmethod
    def of(cls, session_id: str, session: PlanningSession) -> "SessionOut":
        return cls(
            session_id=session_id,
            state=session.state,
            snap_max_distance_km=session.snap_max_distance_km,
            clicks=[ClickOut.of(c) for c in session.clicks],
            paths=[PlannedPathOut.of(p) for p in session.paths],
            stats=session.stats.as_dict(),
        )


class LegOut(BaseModel):
    index: int
    distance_km: float
    duration_minutes: float
    arrival: datetime | None = None


class ItineraryOut(BaseModel):
    speed_kmh: float
    legs: list[LegOut]
    total_distance_km: float
    total_minutes: float

    @classmethod
    def of(cls, summary: ItinerarySummary, *, speed_kmh: float) -> "ItineraryOut":
        return cls(
            speed_kmh=speed_kmh,
            legs=[
                LegOut(
                    index=leg.index,
                    distance_km=leg.distance_km,
                    duration_minutes=leg.duration_minutes,
                    arrival=leg.arrival,
                )
                for leg in summary.legs
            ],
            total_distance_km=summary.total_distance_km,
            total_minutes=summary.total_minutes,
        )
