import pytest

from flightplanner.core.errors import DataIntegrityError, NoNodesAvailable
from flightplanner.core.geo import GeoPoint
from flightplanner.network.graph import EdgeSpec, RouteGraph

N1, N2, N3, N4 = GeoPoint(0, 0), GeoPoint(0, 1), GeoPoint(1, 1), GeoPoint(1, 0)


def _square_graph(**kwargs) -> RouteGraph:
    edges = [
        EdgeSpec(N1, N2, 1),
        EdgeSpec(N2, N3, 1),
        EdgeSpec(N3, N4, 1),
        EdgeSpec(N4, N1, 1),
        EdgeSpec(N1, N3, 1.5),
    ]
    return RouteGraph.build([N1, N2, N3, N4], edges, **kwargs)


def _simple_paths(graph: RouteGraph, start, end, seen=()):
    if start == end:
        yield [start]
        return
    for nxt, _ in graph.neighbors(start):
        if nxt in seen or nxt == start:
            continue
        for rest in _simple_paths(graph, nxt, end, (*seen, start)):
            yield [start, *rest]


def test_square_graph_prefers_diagonal():
    graph = _square_graph()
    n1, n3 = graph.node_for(N1), graph.node_for(N3)
    path = graph.shortest_path(n1, n3)
    assert [n.point for n in path] == [N1, N3]
    assert graph.path_weight(path) == pytest.approx(1.5)


def test_shortest_path_to_self():
    graph = _square_graph()
    n2 = graph.node_for(N2)
    assert graph.shortest_path(n2, n2) == [n2]


def test_shortest_path_matches_brute_force_optimum():
    a, b, c, d, e = (GeoPoint(0, i) for i in range(5))
    graph = RouteGraph.build(
        [a, b, c, d, e],
        [
            EdgeSpec(a, b, 2),
            EdgeSpec(a, c, 5),
            EdgeSpec(b, c, 1),
            EdgeSpec(b, d, 4),
            EdgeSpec(c, d, 1),
            EdgeSpec(d, e, 3),
        ],
    )
    start, end = graph.node_for(a), graph.node_for(e)
    path = graph.shortest_path(start, end)
    best = min(graph.path_weight(p) for p in _simple_paths(graph, start, end))

    assert [n.point for n in path] == [a, b, c, d, e]
    assert graph.path_weight(path) == pytest.approx(7)
    assert graph.path_weight(path) <= best


def test_disconnected_nodes_have_no_path():
    lonely = GeoPoint(5, 5)
    graph = RouteGraph.build([N1, N2, lonely], [EdgeSpec(N1, N2, 1)])
    assert graph.shortest_path(graph.node_for(N1), graph.node_for(lonely)) is None


def test_build_rejects_bad_edges_when_strict():
    unknown = GeoPoint(9, 9)
    with pytest.raises(DataIntegrityError) as exc:
        RouteGraph.build([N1, N2], [EdgeSpec(N1, unknown, 1), EdgeSpec(N1, N2, 0), EdgeSpec(N2, N1, 2)])
    codes = {i.code for i in exc.value.issues}
    assert codes == {"EDGE_UNKNOWN_NODE", "EDGE_BAD_WEIGHT"}
    assert "[9, 9]" in str(exc.value)


def test_build_skips_bad_edges_when_lenient():
    graph = RouteGraph.build(
        [N1, N2],
        [EdgeSpec(N1, GeoPoint(9, 9), 1), EdgeSpec(N1, N2, -1), EdgeSpec(N1, N2, "x"), EdgeSpec(N2, N1, 2)],
        strict=False,
    )
    assert len(graph.edges) == 1
    assert [i.code for i in graph.issues] == ["EDGE_UNKNOWN_NODE", "EDGE_BAD_WEIGHT"]
    assert len(graph.issues[1].sample) == 2


def test_node_identity_uses_quantized_coordinates():
    noisy = GeoPoint(lat=1 + 1e-9, lng=1 - 1e-9)
    graph = RouteGraph.build([N1, N3], [EdgeSpec(N1, noisy, 1)])
    assert len(graph.edges) == 1
    assert graph.node_for(noisy) == graph.node_for(N3)


def test_nearest_node_scans_all_nodes():
    graph = _square_graph()
    assert graph.nearest_node(GeoPoint(0.9, 0.2)).point == N4


def test_nearest_node_requires_nodes():
    graph = RouteGraph.build([], [])
    with pytest.raises(NoNodesAvailable):
        graph.nearest_node(GeoPoint(0, 0))


def test_edge_geometry_reverse_lookup_is_reversed():
    mid = GeoPoint(0.2, 0.5)
    graph = RouteGraph.build([N1, N2], [EdgeSpec(N1, N2, 1)], {(N1, N2): [N1, mid, N2]})
    a, b = graph.node_for(N1), graph.node_for(N2)

    forward = graph.edge_geometry_between(a, b)
    backward = graph.edge_geometry_between(b, a)
    assert forward == [N1, mid, N2]
    assert backward == [N2, mid, N1]
    assert list(reversed(backward)) == forward
    assert graph.stats.forward_hits == 1
    assert graph.stats.reverse_hits == 1
    assert graph.stats.missing_edge_geometry == 0


def test_edge_geometry_falls_back_to_chord_and_counts():
    graph = _square_graph()
    a, b = graph.node_for(N1), graph.node_for(N2)
    assert graph.edge_geometry_between(a, b) == [N1, N2]
    assert graph.stats.missing_edge_geometry == 1


def test_expand_path_joins_edges_without_repeating_nodes():
    mid = GeoPoint(0.5, 1.2)
    graph = RouteGraph.build(
        [N1, N2, N3],
        [EdgeSpec(N1, N2, 1), EdgeSpec(N2, N3, 1)],
        {(N3, N2): [N3, mid, N2]},
    )
    nodes = graph.shortest_path(graph.node_for(N1), graph.node_for(N3))
    assert graph.expand_path(nodes) == [N1, N2, mid, N3]
    assert graph.stats.missing_edge_geometry == 1
    assert graph.stats.reverse_hits == 1


def test_nearest_node_keeps_first_node_on_ties():
    graph = RouteGraph.build([N2, N1], [EdgeSpec(N1, N2, 1)])
    # (0, 0.5) is equally far from both nodes.
    assert graph.nearest_node(GeoPoint(0, 0.5)).point == N2


def test_expand_path_drops_joint_points_equal_at_graph_precision():
    near_n2 = GeoPoint(1e-9, 1 - 1e-9)
    graph = RouteGraph.build(
        [N1, N2, N3],
        [EdgeSpec(N1, N2, 1), EdgeSpec(N2, N3, 1)],
        {(N1, N2): [N1, near_n2], (N2, N3): [N2, N3]},
    )
    nodes = graph.shortest_path(graph.node_for(N1), graph.node_for(N3))
    assert graph.expand_path(nodes) == [N1, near_n2, N3]
