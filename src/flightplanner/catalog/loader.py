"""
Route data loader.

Reads the three input shapes the planner consumes:
- a GeoJSON collection of route polylines (`[lng, lat]` coordinates),
- a graph file `{nodes: [[lng,lat]], edges: [{from, to, weight}]}`,
- an edge geometry lookup keyed by `"[fromLng,fromLat]|[toLng,toLat]"`.

Sources can be repo-relative paths or http(s) URLs. Malformed entries are reported
as `IntegrityIssue`s and skipped; the rest of the load proceeds.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from flightplanner.config.settings import Settings
from flightplanner.core.env import resolve_project_path
from flightplanner.core.errors import IntegrityIssue
from flightplanner.core.geo import GeoPoint, point_from_lnglat
from flightplanner.core.http import get_json
from flightplanner.network.build import derive_graph
from flightplanner.network.graph import EdgeSpec, RouteGraph
from flightplanner.network.routes import RawRoute, RouteNetworkIndex
from flightplanner.planner.resources import LoadReport, PlannerResources

logger = logging.getLogger(__name__)


def load_json_source(source: str | Path, *, timeout_seconds: float = 15) -> Any:
    """Load JSON from an http(s) URL or a (project-relative) file path."""
    text = str(source)
    if text.startswith(("http://", "https://")):
        return get_json(text, timeout_seconds=timeout_seconds)
    resolved = resolve_project_path(source)
    return json.loads(resolved.read_text(encoding="utf-8"))


def _iter_features(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        if payload.get("type") == "FeatureCollection":
            return list(payload.get("features") or [])
        if payload.get("type") == "Feature":
            return [payload]
    raise ValueError("Route data must be a GeoJSON FeatureCollection, Feature, or list of Features.")


def parse_route_features(payload: Any) -> tuple[list[RawRoute], list[IntegrityIssue]]:
    """Split a GeoJSON payload into raw routes (one per LineString part)."""
    routes: list[RawRoute] = []
    skipped: list[str] = []
    for i, feature in enumerate(_iter_features(payload)):
        if not isinstance(feature, dict):
            skipped.append(f"feature[{i}]")
            continue
        props = feature.get("properties")
        name = props.get("name") if isinstance(props, dict) else None
        name = name if isinstance(name, str) else None
        geometry = feature.get("geometry")
        kind = geometry.get("type") if isinstance(geometry, dict) else None
        coords = geometry.get("coordinates") if isinstance(geometry, dict) else None

        if kind == "LineString" and isinstance(coords, list):
            routes.append(RawRoute(coordinates=coords, name=name))
        elif kind == "MultiLineString" and isinstance(coords, list):
            for part in coords:
                if isinstance(part, list):
                    routes.append(RawRoute(coordinates=part, name=name))
        else:
            skipped.append(name or f"feature[{i}]")

    issues = []
    if skipped:
        issues.append(
            IntegrityIssue(
                code="FEATURE_INVALID_GEOMETRY",
                message=f"{len(skipped)} feature(s) are not LineString/MultiLineString.",
                sample=tuple(skipped[:8]),
            )
        )
    return routes, issues


def parse_graph_payload(payload: Any) -> tuple[list[GeoPoint], list[EdgeSpec], list[IntegrityIssue]]:
    if not isinstance(payload, dict):
        raise ValueError("Graph data must be an object with `nodes` and `edges`.")

    nodes: list[GeoPoint] = []
    bad_nodes: list[str] = []
    for raw in payload.get("nodes") or []:
        p = point_from_lnglat(raw)
        if p is None:
            bad_nodes.append(repr(raw))
        else:
            nodes.append(p)

    edges: list[EdgeSpec] = []
    bad_edges: list[str] = []
    for raw in payload.get("edges") or []:
        start = point_from_lnglat(raw.get("from")) if isinstance(raw, dict) else None
        end = point_from_lnglat(raw.get("to")) if isinstance(raw, dict) else None
        if start is None or end is None:
            bad_edges.append(repr(raw))
            continue
        edges.append(EdgeSpec(start=start, end=end, weight=raw.get("weight")))

    issues = []
    if bad_nodes:
        issues.append(
            IntegrityIssue(
                code="NODE_INVALID",
                message=f"{len(bad_nodes)} node(s) are not valid [lng, lat] pairs.",
                sample=tuple(bad_nodes[:8]),
            )
        )
    if bad_edges:
        issues.append(
            IntegrityIssue(
                code="EDGE_INVALID_ENDPOINT",
                message=f"{len(bad_edges)} edge(s) have an unreadable endpoint.",
                sample=tuple(bad_edges[:8]),
            )
        )
    return nodes, edges, issues


def _parse_key_part(text: str) -> GeoPoint | None:
    try:
        return point_from_lnglat(json.loads(text))
    except ValueError:
        return None


def parse_edge_geometry(
    payload: Any,
) -> tuple[dict[tuple[GeoPoint, GeoPoint], list[GeoPoint]], list[IntegrityIssue]]:
    """Parse the `"[lng,lat]|[lng,lat]"`-keyed lookup into endpoint pairs."""
    if not isinstance(payload, dict):
        raise ValueError("Edge geometry data must be an object keyed by \"[lng,lat]|[lng,lat]\".")

    out: dict[tuple[GeoPoint, GeoPoint], list[GeoPoint]] = {}
    bad: list[str] = []
    for key, shape in payload.items():
        parts = str(key).split("|")
        ends = [_parse_key_part(p) for p in parts] if len(parts) == 2 else [None, None]
        points: list[GeoPoint] = []
        if isinstance(shape, list):
            points = [p for p in map(point_from_lnglat, shape) if p is not None]
        if ends[0] is None or ends[1] is None or len(points) < 2:
            bad.append(str(key))
            continue
        out[(ends[0], ends[1])] = points

    issues = []
    if bad:
        issues.append(
            IntegrityIssue(
                code="EDGE_GEOMETRY_BAD_KEY",
                message=f"{len(bad)} edge geometry entries have an unreadable key or fewer than 2 points.",
                sample=tuple(bad[:8]),
            )
        )
    return out, issues


def load_planner_resources(settings: Settings, resources: PlannerResources | None = None) -> PlannerResources:
    """Load routes and graph per settings and move `resources` to ready."""
    resources = resources or PlannerResources()
    data = settings.data
    precision = settings.network.coordinate_precision
    report = LoadReport()

    raw_routes, issues = parse_route_features(
        load_json_source(data.routes_path, timeout_seconds=data.http_timeout_seconds)
    )
    report.issues.extend(issues)
    index = RouteNetworkIndex()
    report.issues.extend(index.load(raw_routes))
    report.features_loaded = len(index)

    if data.graph_path:
        nodes, edges, issues = parse_graph_payload(
            load_json_source(data.graph_path, timeout_seconds=data.http_timeout_seconds)
        )
        report.issues.extend(issues)
        geometry: dict[tuple[GeoPoint, GeoPoint], list[GeoPoint]] = {}
        if data.edge_geometry_path:
            geometry, issues = parse_edge_geometry(
                load_json_source(data.edge_geometry_path, timeout_seconds=data.http_timeout_seconds)
            )
            report.issues.extend(issues)
        report.graph_source = "file"
    else:
        derived = derive_graph(index.features, precision=precision)
        nodes, edges, geometry = derived.nodes, derived.edges, derived.geometry
        report.graph_source = "derived"

    graph = RouteGraph.build(nodes, edges, geometry, precision=precision, strict=False)
    report.issues.extend(graph.issues)
    report.nodes = len(graph.nodes)
    report.edges = len(graph.edges)
    report.edge_geometries = len(geometry)

    for issue in report.issues:
        logger.warning("Load issue %s: %s", issue.code, issue.message)
    resources.mark_ready(index, graph, report)
    return resources
