"""
Offline data quality report.

Goal: a deterministic view of "are the loaded routes and graph complete and sane?"
Served by the API quality endpoint.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from flightplanner.core.errors import IntegrityIssue
from flightplanner.planner.resources import PlannerResources


@dataclass(frozen=True)
class Issue:
    severity: str  # "info" | "warning" | "error"
    code: str
    message: str
    count: int = 1
    sample: list[str] | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity,
            "code": self.code,
            "message": self.message,
            "count": int(self.count),
            "sample": list(self.sample or []),
        }


_ERROR_CODES = {"EDGE_UNKNOWN_NODE", "EDGE_INVALID_ENDPOINT", "EDGE_BAD_WEIGHT"}


def _from_integrity(issue: IntegrityIssue) -> Issue:
    return Issue(
        severity="error" if issue.code in _ERROR_CODES else "warning",
        code=issue.code,
        message=issue.message,
        count=max(1, len(issue.sample)),
        sample=list(issue.sample[:8]),
    )


def build_quality_report(resources: PlannerResources) -> dict[str, Any]:
    if not resources.is_ready:
        return {"state": resources.state, "ok": False, "issues": [], "counts": {}}

    report = resources.report
    graph = resources.graph
    issues = [_from_integrity(i) for i in report.issues]

    if report.features_loaded == 0:
        issues.append(Issue(severity="error", code="ROUTES_EMPTY", message="No usable route features were loaded."))
    if report.nodes == 0:
        issues.append(Issue(severity="error", code="GRAPH_EMPTY", message="The route graph has no nodes."))

    isolated = [n for n in graph.nodes if not graph.neighbors(n)]
    if isolated:
        issues.append(
            Issue(
                severity="warning",
                code="GRAPH_ISOLATED_NODES",
                message="Some graph nodes have no edges and cannot be routed through.",
                count=len(isolated),
                sample=[str(n.point.as_lnglat()) for n in isolated[:8]],
            )
        )

    if graph.stats.missing_edge_geometry:
        issues.append(
            Issue(
                severity="info",
                code="EDGE_GEOMETRY_FALLBACK",
                message="Edges drawn as direct segments because no geometry was found.",
                count=graph.stats.missing_edge_geometry,
            )
        )

    return {
        "state": resources.state,
        "ok": not any(i.severity == "error" for i in issues),
        "counts": {
            "features": report.features_loaded,
            "nodes": report.nodes,
            "edges": report.edges,
            "edge_geometries": report.edge_geometries,
            "graph_source": report.graph_source,
        },
        "edge_geometry_lookups": graph.stats.as_dict(),
        "issues": [i.as_dict() for i in issues],
    }
