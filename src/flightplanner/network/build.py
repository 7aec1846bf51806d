"""
Derive a route graph from route polylines.

Every route vertex becomes a node (vertices that quantize to the same key are
merged, which is how routes join). Each consecutive vertex pair becomes one edge
weighted by its great-circle length in kilometers, with the pair itself as the
edge's geometry. Interior vertices therefore stay resolvable, so a click in the
middle of a long route lands on a nearby node instead of a far endpoint.

The output uses the three external JSON shapes the loader consumes, with
coordinates rounded to `precision` decimals so that producer and consumer agree
on node identity.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Sequence

from flightplanner.core.geo import GeoPoint, coordinate_key, distance_km, same_point
from flightplanner.network.graph import EdgeSpec
from flightplanner.network.routes import RouteFeature

NodeKey = tuple[int, int]


@dataclass(frozen=True)
class DerivedGraph:
    nodes: list[GeoPoint]
    edges: list[EdgeSpec]
    geometry: dict[tuple[GeoPoint, GeoPoint], list[GeoPoint]]

    def graph_payload(self, precision: int = 6) -> dict[str, Any]:
        return {
            "nodes": [_lnglat(p, precision) for p in self.nodes],
            "edges": [
                {
                    "from": _lnglat(e.start, precision),
                    "to": _lnglat(e.end, precision),
                    "weight": round(float(e.weight), 6),
                }
                for e in self.edges
            ],
        }

    def edge_geometry_payload(self, precision: int = 6) -> dict[str, list[list[float]]]:
        return {
            edge_geometry_key(a, b, precision): [_lnglat(p, precision) for p in shape]
            for (a, b), shape in self.geometry.items()
        }


def _lnglat(p: GeoPoint, precision: int) -> list[float]:
    return [round(p.lng, precision), round(p.lat, precision)]


def edge_geometry_key(a: GeoPoint, b: GeoPoint, precision: int = 6) -> str:
    """Format the `"[lng,lat]|[lng,lat]"` lookup key for the edge a->b."""
    left = json.dumps(_lnglat(a, precision), separators=(",", ":"))
    right = json.dumps(_lnglat(b, precision), separators=(",", ":"))
    return f"{left}|{right}"


def derive_graph(features: Sequence[RouteFeature], *, precision: int = 6) -> DerivedGraph:
    nodes: dict[NodeKey, GeoPoint] = {}
    hops: dict[frozenset[NodeKey], tuple[float, GeoPoint, GeoPoint]] = {}

    for f in features:
        prev: GeoPoint | None = None
        for p in f.points:
            node = nodes.setdefault(coordinate_key(p, precision), p)
            if prev is not None and not same_point(prev, node, precision):
                length = distance_km(prev, node)
                pair = frozenset((coordinate_key(prev, precision), coordinate_key(node, precision)))
                # Overlapping routes share a hop; the first occurrence fixes its direction.
                hops.setdefault(pair, (length, prev, node))
            prev = node

    edges: list[EdgeSpec] = []
    geometry: dict[tuple[GeoPoint, GeoPoint], list[GeoPoint]] = {}
    for length, start, end in hops.values():
        edges.append(EdgeSpec(start=start, end=end, weight=length))
        geometry[(start, end)] = [start, end]

    return DerivedGraph(nodes=list(nodes.values()), edges=edges, geometry=geometry)
