import math

import pytest

from wayfinder.graph import Graph
from wayfinder.pathfinding import DijkstraAlgorithm
from wayfinder.profiles import create_car_profile
from wayfinder.tsp_matrix import MatrixEntry, TspMatrix


@pytest.fixture
def graph():
    g = Graph()
    g.add_node(1, 0.0, 0.0)
    g.add_node(2, 0.0, 0.001)
    g.add_node(3, 0.0, 0.002)
    g.add_node(4, 0.0, 0.003)
    g.add_edge(10, 1, 2, 100.0, True)
    g.add_edge(11, 2, 1, 100.0, True)
    g.add_edge(12, 2, 3, 50.0, True)
    g.add_edge(13, 3, 2, 50.0, True)
    g.add_edge(14, 3, 4, 30.0, True)
    g.build_adjacency()
    return g


def test_entries_start_empty():
    matrix = TspMatrix([5, 6])
    assert matrix.size == 2
    assert matrix.entry(0, 1) == MatrixEntry(0.0, [])
    assert matrix.path(1, 0) == []


def test_node_lookup():
    matrix = TspMatrix([5, 6, 7])
    assert matrix.node_id(2) == 7
    assert matrix.node_index(6) == 1
    matrix.set_distance(0, 2, 42.0)
    assert matrix.entry_by_id(5, 7).distance == 42.0


def test_node_index_missing_raises():
    matrix = TspMatrix([5, 6])
    with pytest.raises(KeyError):
        matrix.node_index(99)


def test_tour_cost_open_and_closed():
    matrix = TspMatrix([1, 2, 3])
    matrix.set_distance(0, 1, 10.0)
    matrix.set_distance(1, 2, 20.0)
    matrix.set_distance(2, 0, 5.0)
    open_cost = matrix.tour_cost([0, 1, 2])
    assert open_cost == matrix.entry(0, 1).distance + matrix.entry(1, 2).distance
    closed_cost = matrix.tour_cost([0, 1, 2], return_to_start=True)
    assert closed_cost == open_cost + matrix.entry(2, 0).distance


def test_tour_cost_single_node_is_zero():
    matrix = TspMatrix([1])
    assert matrix.tour_cost([0], return_to_start=True) == 0.0


def test_nearest_neighbor_route():
    matrix = TspMatrix([1, 2, 3, 4])
    for i in range(4):
        for j in range(4):
            if i != j:
                matrix.set_distance(i, j, 100.0)
    matrix.set_distance(0, 2, 1.0)
    matrix.set_distance(2, 1, 1.0)
    assert matrix.nearest_neighbor_route(0) == [0, 2, 1, 3]


def test_nearest_neighbor_route_is_permutation():
    matrix = TspMatrix([1, 2, 3, 4, 5])
    route = matrix.nearest_neighbor_route(3)
    assert route[0] == 3
    assert sorted(route) == list(range(5))


def test_precompute_paths_and_distances(graph):
    matrix = TspMatrix([1, 2, 3])
    matrix.precompute(graph, DijkstraAlgorithm())
    assert matrix.path(0, 2) == [10, 12]
    assert matrix.entry(0, 2).distance == pytest.approx(
        matrix.entry(0, 1).distance + matrix.entry(1, 2).distance
    )
    assert matrix.entry(1, 1) == MatrixEntry(0.0, [])
    assert matrix.has_valid_solution()
    assert matrix.unreachable_pairs() == []


def test_precompute_marks_unreachable(graph):
    matrix = TspMatrix([3, 4])
    matrix.precompute(graph, DijkstraAlgorithm())
    assert math.isinf(matrix.entry(1, 0).distance)
    assert matrix.path(1, 0) == []
    assert matrix.unreachable_pairs() == [(1, 0)]
    assert not matrix.has_valid_solution()


def test_precompute_reports_progress(graph):
    calls = []
    matrix = TspMatrix([1, 2, 3])
    matrix.precompute(graph, DijkstraAlgorithm(), progress=lambda *args: calls.append(args))
    assert len(calls) == 3
    assert calls[-1] == (9, 9, 100)
    assert [c[0] for c in calls] == sorted(c[0] for c in calls)


def test_precompute_respects_vehicle_profile():
    g = Graph()
    g.add_node(1)
    g.add_node(2)
    g.add_edge(1, 1, 2, 10.0, True, {"highway": "footway"})
    g.add_edge(2, 2, 1, 10.0, True, {"highway": "footway"})
    g.build_adjacency()
    matrix = TspMatrix([1, 2])
    matrix.precompute(g, DijkstraAlgorithm(), create_car_profile())
    assert matrix.unreachable_pairs() == [(0, 1), (1, 0)]
    walking = TspMatrix([1, 2])
    walking.precompute(g, DijkstraAlgorithm())
    assert walking.has_valid_solution()