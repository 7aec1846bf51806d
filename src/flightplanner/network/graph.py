"""
Route graph: nodes, weighted undirected edges, optional edge geometry.

Node identity is a quantized integer key (see `coordinate_key`), never a
formatted float string. The precision is part of the data contract between
graph generation (`flightplanner.network.build`) and this module.
"""

from __future__ import annotations

import heapq
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from flightplanner.core.errors import DataIntegrityError, IntegrityIssue, NoNodesAvailable
from flightplanner.core.geo import GeoPoint, coordinate_key, distance_km, same_point

logger = logging.getLogger(__name__)

NodeKey = tuple[int, int]


@dataclass(frozen=True)
class GraphNode:
    """A graph-addressable coordinate; equality and hashing use the quantized key only."""

    key: NodeKey
    point: GeoPoint = field(compare=False)


@dataclass(frozen=True)
class GraphEdge:
    start: GraphNode
    end: GraphNode
    weight: float


@dataclass(frozen=True)
class EdgeSpec:
    """An edge as supplied by the caller, before validation."""

    start: GeoPoint
    end: GeoPoint
    weight: Any


@dataclass
class GeometryStats:
    """Counters for edge geometry lookups (data-quality monitoring)."""

    forward_hits: int = 0
    reverse_hits: int = 0
    missing_edge_geometry: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "forward_hits": int(self.forward_hits),
            "reverse_hits": int(self.reverse_hits),
            "missing_edge_geometry": int(self.missing_edge_geometry),
        }


def _valid_weight(weight: Any) -> float | None:
    try:
        w = float(weight)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(w) or w <= 0:
        return None
    return w


class RouteGraph:
    """Read-only weighted graph with nearest-node lookup and Dijkstra search."""

    def __init__(
        self,
        *,
        nodes: dict[NodeKey, GraphNode],
        edges: list[GraphEdge],
        geometry: dict[tuple[NodeKey, NodeKey], tuple[GeoPoint, ...]],
        precision: int,
        issues: list[IntegrityIssue] | None = None,
    ):
        self._nodes = nodes
        self._edges = edges
        self._geometry = geometry
        self.precision = precision
        self.issues: list[IntegrityIssue] = list(issues or [])
        self.stats = GeometryStats()

        self._adjacency: dict[NodeKey, list[tuple[NodeKey, float]]] = {k: [] for k in nodes}
        for e in edges:
            self._adjacency[e.start.key].append((e.end.key, e.weight))
            self._adjacency[e.end.key].append((e.start.key, e.weight))

    @classmethod
    def build(
        cls,
        nodes: Iterable[GeoPoint],
        edges: Iterable[EdgeSpec],
        edge_geometry: Mapping[tuple[GeoPoint, GeoPoint], Sequence[GeoPoint]] | None = None,
        *,
        precision: int = 6,
        strict: bool = True,
    ) -> "RouteGraph":
        """Validate and index graph data.

        With `strict=True` any edge referencing an unknown node or carrying a
        non-positive weight fails construction with a DataIntegrityError listing
        every offending edge. With `strict=False` those edges are skipped and the
        findings are kept on `graph.issues`.
        """
        node_map: dict[NodeKey, GraphNode] = {}
        for p in nodes:
            key = coordinate_key(p, precision)
            node_map.setdefault(key, GraphNode(key=key, point=p))

        unknown: list[str] = []
        bad_weight: list[str] = []
        valid: list[GraphEdge] = []
        for spec in edges:
            ka = coordinate_key(spec.start, precision)
            kb = coordinate_key(spec.end, precision)
            label = f"{spec.start.as_lnglat()}->{spec.end.as_lnglat()}"
            if ka not in node_map or kb not in node_map:
                unknown.append(label)
                continue
            w = _valid_weight(spec.weight)
            if w is None:
                bad_weight.append(f"{label} (weight={spec.weight!r})")
                continue
            valid.append(GraphEdge(start=node_map[ka], end=node_map[kb], weight=w))

        issues: list[IntegrityIssue] = []
        if unknown:
            issues.append(
                IntegrityIssue(
                    code="EDGE_UNKNOWN_NODE",
                    message=f"{len(unknown)} edge(s) reference a node missing from the node set.",
                    sample=tuple(unknown),
                )
            )
        if bad_weight:
            issues.append(
                IntegrityIssue(
                    code="EDGE_BAD_WEIGHT",
                    message=f"{len(bad_weight)} edge(s) have a non-positive or non-numeric weight.",
                    sample=tuple(bad_weight),
                )
            )
        if issues and strict:
            offending = [*unknown, *bad_weight]
            raise DataIntegrityError(f"Invalid graph edges: {', '.join(offending)}", issues)
        for issue in issues:
            logger.warning("%s: %s", issue.code, issue.message)

        geometry: dict[tuple[NodeKey, NodeKey], tuple[GeoPoint, ...]] = {}
        for (start, end), shape in (edge_geometry or {}).items():
            geometry[(coordinate_key(start, precision), coordinate_key(end, precision))] = tuple(shape)

        graph = cls(nodes=node_map, edges=valid, geometry=geometry, precision=precision, issues=issues)
        logger.info(
            "Built route graph: %d node(s), %d edge(s), %d edge geometries",
            len(node_map),
            len(valid),
            len(geometry),
        )
        return graph

    @property
    def nodes(self) -> tuple[GraphNode, ...]:
        return tuple(self._nodes.values())

    @property
    def edges(self) -> tuple[GraphEdge, ...]:
        return tuple(self._edges)

    def neighbors(self, node: GraphNode) -> list[tuple[GraphNode, float]]:
        return [(self._nodes[k], w) for k, w in self._adjacency.get(node.key, [])]

    def node_for(self, p: GeoPoint) -> GraphNode | None:
        """Exact lookup by quantized coordinate."""
        return self._nodes.get(coordinate_key(p, self.precision))

    def nearest_node(self, p: GeoPoint) -> GraphNode:
        """Return the closest node by great-circle distance (first node wins ties)."""
        if not self._nodes:
            raise NoNodesAvailable("Route graph has no nodes.")
        # min() keeps the first of equally distant nodes.
        return min(self._nodes.values(), key=lambda node: distance_km(p, node.point))

    def shortest_path(self, start: GraphNode, end: GraphNode) -> list[GraphNode] | None:
        """Dijkstra from `start` to `end`; None if `end` is unreachable."""
        if start.key not in self._nodes or end.key not in self._nodes:
            return None
        if start.key == end.key:
            return [self._nodes[start.key]]

        dist: dict[NodeKey, float] = {start.key: 0.0}
        prev: dict[NodeKey, NodeKey] = {}
        visited: set[NodeKey] = set()
        # The counter keeps heap ordering deterministic for equal distances.
        counter = 0
        frontier: list[tuple[float, int, NodeKey]] = [(0.0, counter, start.key)]

        while frontier:
            d, _, u = heapq.heappop(frontier)
            if u in visited:
                continue
            visited.add(u)
            if u == end.key:
                break
            for v, w in self._adjacency[u]:
                if v in visited:
                    continue
                alt = d + w
                if alt < dist.get(v, math.inf):
                    dist[v] = alt
                    prev[v] = u
                    counter += 1
                    heapq.heappush(frontier, (alt, counter, v))
        else:
            return None

        path = [end.key]
        while path[-1] != start.key:
            path.append(prev[path[-1]])
        path.reverse()
        return [self._nodes[k] for k in path]

    def path_weight(self, nodes: Sequence[GraphNode]) -> float:
        """Sum of the cheapest edge weight between each consecutive node pair."""
        total = 0.0
        for a, b in zip(nodes, nodes[1:]):
            weights = [w for k, w in self._adjacency.get(a.key, []) if k == b.key]
            if not weights:
                raise ValueError(f"No edge between {a.point.as_lnglat()} and {b.point.as_lnglat()}")
            total += min(weights)
        return total

    def edge_geometry_between(self, a: GraphNode, b: GraphNode) -> list[GeoPoint]:
        """Geometry for the edge a->b, trying the reversed key before falling back to a chord."""
        shape = self._geometry.get((a.key, b.key))
        if shape is not None:
            self.stats.forward_hits += 1
            return list(shape)
        shape = self._geometry.get((b.key, a.key))
        if shape is not None:
            self.stats.reverse_hits += 1
            return list(reversed(shape))
        self.stats.missing_edge_geometry += 1
        logger.warning(
            "No edge geometry for %s|%s; using direct segment",
            a.point.as_lnglat(),
            b.point.as_lnglat(),
        )
        return [a.point, b.point]

    def expand_path(self, nodes: Sequence[GraphNode]) -> list[GeoPoint]:
        """Concatenate edge geometries along `nodes`, dropping repeated joint points."""
        if len(nodes) == 1:
            return [nodes[0].point]
        out: list[GeoPoint] = []
        for a, b in zip(nodes, nodes[1:]):
            for p in self.edge_geometry_between(a, b):
                if out and same_point(out[-1], p, self.precision):
                    continue
                out.append(p)
        return out
