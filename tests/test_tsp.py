import itertools
import math
import random

import pytest

from wayfinder.tsp import (
    IGAlgorithm,
    IGNAlgorithm,
    ILSBAlgorithm,
    create_tsp_algorithm,
)
from wayfinder.tsp_matrix import TspMatrix

POINTS = [(0.0, 0.0), (10.0, 0.0), (1.0, 1.0), (9.0, 1.0), (5.0, 7.0), (2.0, 8.0)]


def _matrix(points=POINTS):
    ids = [100 + i for i in range(len(points))]
    matrix = TspMatrix(ids)
    for i, a in enumerate(points):
        for j, b in enumerate(points):
            matrix.set_distance(i, j, math.dist(a, b))
    return matrix, ids


def _best_possible(matrix, size, closed):
    return min(
        matrix.tour_cost(list(perm), closed)
        for perm in itertools.permutations(range(size))
    )


ALGORITHMS = [IGAlgorithm, IGNAlgorithm, ILSBAlgorithm]


@pytest.mark.parametrize("cls", ALGORITHMS)
def test_solution_is_permutation(cls):
    matrix, ids = _matrix()
    algo = cls(max_iterations=50, rng=random.Random(1))
    tour = algo.solve(matrix, ids)
    assert sorted(tour) == list(range(len(ids)))


@pytest.mark.parametrize("cls", [IGNAlgorithm, ILSBAlgorithm])
def test_tour_starts_with_first_waypoint(cls):
    matrix, ids = _matrix()
    tour = cls(max_iterations=50, rng=random.Random(2)).solve(matrix, ids)
    assert tour[0] == 0


@pytest.mark.parametrize("cls", [IGNAlgorithm, ILSBAlgorithm])
def test_empty_node_list_gives_empty_tour(cls):
    matrix = TspMatrix([])
    assert cls(max_iterations=5).solve(matrix, []) == []


@pytest.mark.parametrize("cls", ALGORITHMS)
@pytest.mark.parametrize("closed", [False, True])
def test_cost_bounded_by_nearest_neighbor_and_optimum(cls, closed):
    matrix, ids = _matrix()
    algo = cls(max_iterations=100, return_to_start=closed, rng=random.Random(3))
    tour = algo.solve(matrix, ids)
    cost = matrix.tour_cost(tour, closed)
    optimum = _best_possible(matrix, len(ids), closed)
    assert cost >= optimum - 1e-9
    if closed or cls is IGAlgorithm:
        nn_cost = matrix.tour_cost(matrix.nearest_neighbor_route(0), closed)
        assert cost <= nn_cost + 1e-9


def test_ig_zero_iterations_still_improves_nearest_neighbor():
    matrix, ids = _matrix()
    tour = IGAlgorithm(max_iterations=0).solve(matrix, ids)
    nn = matrix.nearest_neighbor_route(0)
    assert matrix.tour_cost(tour) <= matrix.tour_cost(nn)
    assert sorted(tour) == list(range(len(ids)))


@pytest.mark.parametrize("cls", ALGORITHMS)
def test_two_waypoints(cls):
    matrix, ids = _matrix([(0.0, 0.0), (3.0, 4.0)])
    tour = cls(max_iterations=10, rng=random.Random(4)).solve(matrix, ids)
    assert sorted(tour) == [0, 1]
    assert matrix.tour_cost(tour) == pytest.approx(5.0)


def test_ilsb_finds_optimum_on_small_closed_instance():
    points = [(0.0, 0.0), (4.0, 0.0), (4.0, 3.0), (0.0, 3.0)]
    matrix, ids = _matrix(points)
    tour = ILSBAlgorithm(max_iterations=50, return_to_start=True,
                         rng=random.Random(5)).solve(matrix, ids)
    assert matrix.tour_cost(tour, True) == pytest.approx(
        _best_possible(matrix, 4, True)
    )


def test_same_seed_gives_same_tour():
    matrix, ids = _matrix()
    first = IGNAlgorithm(max_iterations=200, rng=random.Random(9)).solve(matrix, ids)
    second = IGNAlgorithm(max_iterations=200, rng=random.Random(9)).solve(matrix, ids)
    assert first == second


def test_default_settings():
    assert IGAlgorithm().max_iterations == 5000
    assert IGNAlgorithm().max_iterations == 10000
    assert ILSBAlgorithm().max_iterations == 5000
    assert IGAlgorithm().return_to_start is False


@pytest.mark.parametrize(
    "name, cls",
    [
        ("ig", IGAlgorithm), ("IG", IGAlgorithm),
        ("ign", IGNAlgorithm), ("IGN", IGNAlgorithm),
        ("ilsb", ILSBAlgorithm), ("ILSB", ILSBAlgorithm),
        ("ils_b", ILSBAlgorithm), ("ILS_B", ILSBAlgorithm),
    ],
)
def test_factory_names(name, cls):
    algo = create_tsp_algorithm(name)
    assert type(algo) is cls
    assert algo.name == cls.name


@pytest.mark.parametrize("name", ["igsa", "IGSA"])
def test_factory_igsa_unavailable(name):
    with pytest.raises(ValueError, match="requires threading"):
        create_tsp_algorithm(name)


def test_factory_unknown_name():
    with pytest.raises(ValueError, match="Unknown TSP algorithm: foo"):
        create_tsp_algorithm("foo")