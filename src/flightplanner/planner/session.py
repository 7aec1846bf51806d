"""
Planning session (path composer).

One session owns the ordered clicks of a single planning interaction and the
connectors derived from them. State moves `empty -> single -> chained` as clicks
are added; `remove_last` walks back one click at a time and `reset` returns to
`empty`.

Every consecutive pair of clicks gets a renderable connector:
- on-network: `[prev_click, prev_projected, ...edge geometry..., curr_projected, curr_click]`
- otherwise the direct chord `[prev_click, curr_click]` (snap miss, unreachable
  path, or planning data still loading).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

from flightplanner.core.errors import NoNodesAvailable
from flightplanner.core.geo import GeoPoint, polyline_length_km
from flightplanner.network.graph import GraphNode
from flightplanner.network.routes import RouteFeature
from flightplanner.planner.resources import PlannerResources

logger = logging.getLogger(__name__)

SessionState = Literal["empty", "single", "chained"]
DegradeReason = Literal["snap_miss", "unreachable", "not_ready", "no_nodes"]


@dataclass(frozen=True)
class SnappedPoint:
    original_click: GeoPoint
    projected: GeoPoint
    source_feature: RouteFeature
    resolved_node: GraphNode
    distance_km: float


@dataclass(frozen=True)
class Click:
    """A recorded click plus its snap (None when it did not snap)."""

    point: GeoPoint
    snapped: SnappedPoint | None = None
    miss_reason: DegradeReason | None = None


@dataclass(frozen=True)
class PlannedPath:
    points: tuple[GeoPoint, ...]
    kind: Literal["network", "direct"]
    reason: DegradeReason | None = None
    nodes: tuple[GraphNode, ...] = ()
    network_weight: float | None = None

    @property
    def distance_km(self) -> float:
        return polyline_length_km(self.points)


@dataclass
class PlanningStats:
    """Per-session degradation counters (diagnostics only)."""

    clicks: int = 0
    snapped: int = 0
    snap_misses: int = 0
    unreachable: int = 0
    not_ready: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "clicks": int(self.clicks),
            "snapped": int(self.snapped),
            "snap_misses": int(self.snap_misses),
            "unreachable": int(self.unreachable),
            "not_ready": int(self.not_ready),
        }


@dataclass
class PlanningSession:
    resources: PlannerResources
    snap_max_distance_km: float = 0.5
    stats: PlanningStats = field(default_factory=PlanningStats)
    _clicks: list[Click] = field(default_factory=list, init=False, repr=False)
    _paths: list[PlannedPath] = field(default_factory=list, init=False, repr=False)

    # ---------------- read-only views ----------------

    @property
    def state(self) -> SessionState:
        if not self._clicks:
            return "empty"
        if len(self._clicks) == 1:
            return "single"
        return "chained"

    @property
    def clicks(self) -> tuple[Click, ...]:
        return tuple(self._clicks)

    @property
    def snapped_points(self) -> tuple[SnappedPoint, ...]:
        return tuple(c.snapped for c in self._clicks if c.snapped is not None)

    @property
    def paths(self) -> tuple[PlannedPath, ...]:
        return tuple(self._paths)

    def itinerary_points(self) -> list[GeoPoint]:
        """All connectors concatenated in click order (shared click points appear once)."""
        out: list[GeoPoint] = []
        for path in self._paths:
            pts = path.points[1:] if out else path.points
            out.extend(pts)
        if not out and self._clicks:
            out.append(self._clicks[0].point)
        return out

    # ---------------- mutations ----------------

    def add_click(self, p: GeoPoint) -> PlannedPath | None:
        """Record a click; returns the new connector when this is not the first click."""
        self.stats.clicks += 1
        click = self._snap(p)
        prev = self._clicks[-1] if self._clicks else None
        self._clicks.append(click)
        if prev is None:
            return None
        path = self._connect(prev, click)
        self._paths.append(path)
        return path

    def remove_last(self) -> Click | None:
        """Drop the most recent click and the connector that ended at it."""
        if not self._clicks:
            return None
        removed = self._clicks.pop()
        if self._paths:
            self._paths.pop()
        return removed

    def reset(self) -> None:
        self._clicks.clear()
        self._paths.clear()

    # ---------------- internals ----------------

    def _snap(self, p: GeoPoint) -> Click:
        if not self.resources.is_ready:
            self.stats.not_ready += 1
            logger.info("Planning data still loading; click %s left unsnapped", p.as_lnglat())
            return Click(point=p, miss_reason="not_ready")

        hit = self.resources.index.snap(p, self.snap_max_distance_km)
        if hit is None:
            self.stats.snap_misses += 1
            logger.info("No route within %.3f km of %s", self.snap_max_distance_km, p.as_lnglat())
            return Click(point=p, miss_reason="snap_miss")

        try:
            node = self.resources.graph.nearest_node(hit.projected)
        except NoNodesAvailable:
            logger.error("Click %s snapped to a route but the graph has no nodes", p.as_lnglat())
            return Click(point=p, miss_reason="no_nodes")

        self.stats.snapped += 1
        snapped = SnappedPoint(
            original_click=p,
            projected=hit.projected,
            source_feature=hit.feature,
            resolved_node=node,
            distance_km=hit.distance_km,
        )
        return Click(point=p, snapped=snapped)

    def _connect(self, prev: Click, curr: Click) -> PlannedPath:
        if prev.snapped is None or curr.snapped is None:
            reason = prev.miss_reason or curr.miss_reason or "snap_miss"
            return PlannedPath(points=(prev.point, curr.point), kind="direct", reason=reason)

        graph = self.resources.graph
        nodes = graph.shortest_path(prev.snapped.resolved_node, curr.snapped.resolved_node)
        if nodes is None:
            self.stats.unreachable += 1
            logger.warning(
                "No network path between %s and %s; using direct connector",
                prev.snapped.resolved_node.point.as_lnglat(),
                curr.snapped.resolved_node.point.as_lnglat(),
            )
            return PlannedPath(points=(prev.point, curr.point), kind="direct", reason="unreachable")

        points = [prev.point, prev.snapped.projected, *graph.expand_path(nodes), curr.snapped.projected, curr.point]
        return PlannedPath(
            points=tuple(points),
            kind="network",
            nodes=tuple(nodes),
            network_weight=graph.path_weight(nodes),
        )
