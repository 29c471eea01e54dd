import pytest

from wayfinder.graph import Graph, GraphError
from wayfinder.profiles import create_car_profile
from wayfinder.tsp_service import TspError, TspErrorCode, TspService

_POSITIONS = {
    1: (0.0, 0.0),
    2: (0.0, 0.01),
    3: (0.01, 0.01),
    4: (0.01, 0.0),
}


def _complete_graph():
    graph = Graph()
    for node_id, (lat, lon) in _POSITIONS.items():
        graph.add_node(node_id, lat, lon)
    edge_id = 100
    for a, coord_a in _POSITIONS.items():
        for b, coord_b in _POSITIONS.items():
            if a == b:
                continue
            meters = graph.node(a).coordinate.distance_to(graph.node(b).coordinate)
            graph.add_edge(edge_id, a, b, meters, True, {"highway": "residential"})
            edge_id += 1
    graph.build_adjacency()
    return graph


def _segment_total(result):
    return sum(edge.distance.meters for edges in result.segment_edges for edge in edges)


@pytest.mark.parametrize("algorithm", ["ig", "IGN", "ilsb"])
def test_tour_visits_every_waypoint(algorithm):
    waypoints = [1, 2, 3, 4]
    result = TspService(_complete_graph()).solve(waypoints, algorithm)
    assert sorted(result.tour) == [0, 1, 2, 3]
    assert result.node_ids == waypoints
    assert len(result.segment_edges) == 3
    assert result.total_distance == pytest.approx(_segment_total(result))
    assert result.tsp_algorithm_name == algorithm


def test_segments_join_consecutive_waypoints():
    waypoints = [1, 2, 3, 4]
    result = TspService(_complete_graph()).solve(waypoints, "ign")
    for position, nodes in enumerate(result.segment_nodes):
        assert nodes[0] == waypoints[result.tour[position]]
        assert nodes[-1] == waypoints[result.tour[position + 1]]


def test_return_to_start_closes_loop():
    waypoints = [1, 2, 3, 4]
    result = TspService(_complete_graph()).solve(waypoints, "ig", return_to_start=True)
    assert len(result.segment_edges) == len(result.tour)
    assert result.segment_nodes[-1][-1] == waypoints[result.tour[0]]
    assert result.total_distance == pytest.approx(_segment_total(result))


def test_progress_reaches_hundred():
    reported = []
    TspService(_complete_graph()).solve([1, 2, 3], "ign", progress=reported.append)
    assert reported == sorted(reported)
    assert reported[-1] == 100
    assert len(reported) == 3


def test_no_graph_raises():
    with pytest.raises(GraphError):
        TspService().solve([1, 2], "ig")


def test_too_few_waypoints():
    with pytest.raises(TspError) as info:
        TspService(_complete_graph()).solve([1], "ig")
    assert info.value.code is TspErrorCode.INSUFFICIENT_NODES


def test_invalid_waypoints_listed():
    with pytest.raises(TspError) as info:
        TspService(_complete_graph()).solve([1, 99, 2], "ig")
    assert info.value.code is TspErrorCode.INVALID_NODES
    assert info.value.node_ids == [99]


def _one_way_graph(highway="residential"):
    graph = Graph()
    graph.add_node(1, 0.0, 0.0)
    graph.add_node(2, 0.0, 0.01)
    graph.add_edge(7, 1, 2, 100.0, True, {"highway": highway})
    graph.build_adjacency()
    return graph


def test_unreachable_waypoints_reported():
    with pytest.raises(TspError) as info:
        TspService(_one_way_graph()).solve([1, 2], "ig")
    assert info.value.code is TspErrorCode.UNREACHABLE_NODES
    assert info.value.node_ids == [2, 1]
    assert "vehicle profile" not in info.value.message


def test_unreachable_with_profile_suggests_change():
    with pytest.raises(TspError) as info:
        TspService(_one_way_graph("footway")).solve(
            [1, 2], "ig", vehicle_profile=create_car_profile()
        )
    assert info.value.code is TspErrorCode.UNREACHABLE_NODES
    assert "different vehicle profile" in info.value.message


def test_unknown_tsp_algorithm():
    with pytest.raises(ValueError):
        TspService(_complete_graph()).solve([1, 2], "bogus")


def test_async_solve():
    future = TspService(_complete_graph()).solve_async([1, 2, 3, 4], "ilsb", "astar")
    result = future.result(timeout=60)
    assert sorted(result.tour) == [0, 1, 2, 3]


def test_async_error_through_future():
    future = TspService(_complete_graph()).solve_async([1], "ig")
    error = future.exception(timeout=10)
    assert isinstance(error, TspError)
    assert error.code is TspErrorCode.INSUFFICIENT_NODES