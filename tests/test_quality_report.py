from flightplanner.core.errors import IntegrityIssue
from flightplanner.core.geo import GeoPoint
from flightplanner.network.graph import EdgeSpec, RouteGraph
from flightplanner.network.routes import RouteFeature, RouteNetworkIndex
from flightplanner.planner.resources import LoadReport, PlannerResources
from flightplanner.quality.report import build_quality_report

A, B, C = GeoPoint(0, 0), GeoPoint(0, 1), GeoPoint(5, 5)


def _resources(report: LoadReport) -> PlannerResources:
    index = RouteNetworkIndex()
    index.load([RouteFeature(points=(A, B), name="ab")])
    graph = RouteGraph.build([A, B, C], [EdgeSpec(A, B, 111.2)])
    return PlannerResources.ready(index, graph, report)


def test_quality_report_while_loading():
    out = build_quality_report(PlannerResources())
    assert out == {"state": "loading", "ok": False, "issues": [], "counts": {}}


def test_quality_report_flags_isolated_nodes_and_geometry_fallbacks():
    resources = _resources(LoadReport(features_loaded=1, nodes=3, edges=1, graph_source="file"))
    graph = resources.graph
    graph.expand_path(graph.shortest_path(graph.node_for(A), graph.node_for(B)))

    out = build_quality_report(resources)
    codes = {i["code"]: i for i in out["issues"]}

    assert out["ok"] is True
    assert out["counts"]["graph_source"] == "file"
    assert codes["GRAPH_ISOLATED_NODES"]["count"] == 1
    assert codes["GRAPH_ISOLATED_NODES"]["sample"] == ["[5, 5]"]
    assert codes["EDGE_GEOMETRY_FALLBACK"]["count"] == 1
    assert out["edge_geometry_lookups"]["missing_edge_geometry"] == 1


def test_quality_report_load_errors_make_report_not_ok():
    issue = IntegrityIssue(code="EDGE_BAD_WEIGHT", message="1 edge(s) bad", sample=("x",))
    out = build_quality_report(_resources(LoadReport(features_loaded=1, nodes=3, edges=1, issues=[issue])))

    assert out["ok"] is False
    assert out["issues"][0]["severity"] == "error"
    assert out["issues"][0]["sample"] == ["x"]


def test_quality_report_unreadable_edge_endpoints_are_errors():
    issue = IntegrityIssue(code="EDGE_INVALID_ENDPOINT", message="1 edge(s) unreadable", sample=("{}",))
    out = build_quality_report(_resources(LoadReport(features_loaded=1, nodes=3, edges=1, issues=[issue])))

    assert out["ok"] is False
    assert [(i["code"], i["severity"]) for i in out["issues"]][0] == ("EDGE_INVALID_ENDPOINT", "error")
