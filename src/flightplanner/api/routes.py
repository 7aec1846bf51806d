"""
API routes.

Endpoints:
- GET    `/api/routes`: loaded route polylines for drawing the network.
- GET    `/api/quality/report`: load issues and edge-geometry fallback counters.
- POST   `/api/sessions`: open a planning session.
- GET    `/api/sessions/{id}`: session snapshot.
- POST   `/api/sessions/{id}/clicks`: add a click.
- DELETE `/api/sessions/{id}/clicks/last`: undo the last click.
- POST   `/api/sessions/{id}/reset`: clear the session.
- DELETE `/api/sessions/{id}`: close the session.
- GET    `/api/sessions/{id}/itinerary`: leg distances and arrival times.
"""

from __future__ import annotations

import logging
from datetime import datetime
from functools import lru_cache

from fastapi import APIRouter, HTTPException

from flightplanner.catalog.loader import load_planner_resources
from flightplanner.config.overrides import apply_settings_overrides
from flightplanner.config.settings import get_settings
from flightplanner.domain.models import (
    ItineraryOut,
    LatLng,
    RouteOut,
    SessionCreate,
    SessionOut,
)
from flightplanner.planner.itinerary import summarize_itinerary
from flightplanner.planner.resources import PlannerResources
from flightplanner.quality.report import build_quality_report

from .sessions import SessionNotFound, SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache
def _resources() -> PlannerResources:
    return load_planner_resources(get_settings())


@lru_cache
def _registry() -> SessionRegistry:
    return SessionRegistry()


def _not_found(session_id: str) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"code": "SESSION_NOT_FOUND", "message": f"Unknown session '{session_id}'."},
    )


@router.get("/api/routes", response_model=list[RouteOut])
def get_routes() -> list[RouteOut]:
    """Return route polylines as `{lat, lng}` lists (empty while data is loading)."""
    resources = _resources()
    if not resources.is_ready:
        return []
    index = resources.index
    return [RouteOut(name=f.name, points=[LatLng.of(p) for p in f.points]) for f in index.features]


@router.get("/api/quality/report")
def get_quality_report() -> dict:
    """Return the data quality report for the loaded routes and graph."""
    return build_quality_report(_resources())


@router.post("/api/sessions", response_model=SessionOut)
def post_session(body: SessionCreate | None = None) -> SessionOut:
    """Open a planning session, optionally with per-session setting overrides."""
    try:
        settings = apply_settings_overrides(get_settings(), body.settings_overrides if body else None)
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": str(e)}) from e
    session_id, entry = _registry().create(_resources(), settings)
    logger.info("Opened planning session %s", session_id)
    return SessionOut.of(session_id, entry.session)


@router.get("/api/sessions/{session_id}", response_model=SessionOut)
def get_session(session_id: str) -> SessionOut:
    try:
        with _registry().use(session_id) as entry:
            return SessionOut.of(session_id, entry.session)
    except SessionNotFound as e:
        raise _not_found(session_id) from e


@router.post("/api/sessions/{session_id}/clicks", response_model=SessionOut)
def post_click(session_id: str, point: LatLng) -> SessionOut:
    """Record a map click and return the updated session."""
    try:
        with _registry().use(session_id) as entry:
            entry.session.add_click(point.to_point())
            return SessionOut.of(session_id, entry.session)
    except SessionNotFound as e:
        raise _not_found(session_id) from e


@router.delete("/api/sessions/{session_id}/clicks/last", response_model=SessionOut)
def delete_last_click(session_id: str) -> SessionOut:
    try:
        with _registry().use(session_id) as entry:
            entry.session.remove_last()
            return SessionOut.of(session_id, entry.session)
    except SessionNotFound as e:
        raise _not_found(session_id) from e


@router.post("/api/sessions/{session_id}/reset", response_model=SessionOut)
def post_reset(session_id: str) -> SessionOut:
    try:
        with _registry().use(session_id) as entry:
            entry.session.reset()
            return SessionOut.of(session_id, entry.session)
    except SessionNotFound as e:
        raise _not_found(session_id) from e


@router.delete("/api/sessions/{session_id}")
def delete_session(session_id: str) -> dict:
    if not _registry().discard(session_id):
        raise _not_found(session_id)
    return {"session_id": session_id, "closed": True}


@router.get("/api/sessions/{session_id}/itinerary", response_model=ItineraryOut)
def get_itinerary(
    session_id: str,
    speed_kmh: float | None = None,
    departure: datetime | None = None,
) -> ItineraryOut:
    """Leg distances, durations and arrival times for the session's connectors."""
    try:
        with _registry().use(session_id) as entry:
            speed = float(speed_kmh if speed_kmh is not None else entry.settings.planner.cruise_speed_kmh)
            paths = entry.session.paths
    except SessionNotFound as e:
        raise _not_found(session_id) from e

    try:
        summary = summarize_itinerary(paths, speed_kmh=speed, departure=departure)
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": str(e)}) from e
    return ItineraryOut.of(summary, speed_kmh=speed)
