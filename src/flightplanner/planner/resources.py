"""
Two-phase lifecycle for the read-only planning data.

`PlannerResources` starts in `loading`. Once the route index and graph are built
it moves to `ready` exactly once. Sessions consult `is_ready` on every click and
degrade to unsnapped connectors while data is still loading.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from flightplanner.core.errors import IntegrityIssue
from flightplanner.network.graph import RouteGraph
from flightplanner.network.routes import RouteNetworkIndex

LoadState = Literal["loading", "ready"]


@dataclass
class LoadReport:
    """What the loader found, for the quality report."""

    features_loaded: int = 0
    nodes: int = 0
    edges: int = 0
    edge_geometries: int = 0
    graph_source: Literal["file", "derived", "none"] = "none"
    issues: list[IntegrityIssue] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "features_loaded": int(self.features_loaded),
            "nodes": int(self.nodes),
            "edges": int(self.edges),
            "edge_geometries": int(self.edge_geometries),
            "graph_source": self.graph_source,
            "issues": [i.as_dict() for i in self.issues],
        }


class PlannerResources:
    def __init__(self) -> None:
        self._state: LoadState = "loading"
        self._index: RouteNetworkIndex | None = None
        self._graph: RouteGraph | None = None
        self.report = LoadReport()

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state == "ready"

    @property
    def index(self) -> RouteNetworkIndex:
        if self._index is None:
            raise RuntimeError("Route index is still loading.")
        return self._index

    @property
    def graph(self) -> RouteGraph:
        if self._graph is None:
            raise RuntimeError("Route graph is still loading.")
        return self._graph

    def mark_ready(self, index: RouteNetworkIndex, graph: RouteGraph, report: LoadReport | None = None) -> None:
        if self._state == "ready":
            raise RuntimeError("Planner resources are already ready.")
        self._index, self._graph = index, graph
        if report is not None:
            self.report = report
        self._state = "ready"

    @classmethod
    def ready(cls, index: RouteNetworkIndex, graph: RouteGraph, report: LoadReport | None = None) -> "PlannerResources":
        res = cls()
        res.mark_ready(index, graph, report)
        return res
