"""Heuristic solvers for the travelling-salesman problem over a TspMatrix."""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from collections.abc import Sequence

from wayfinder.tsp_matrix import TspMatrix

logger = logging.getLogger(__name__)


def _remove_and_reinsert(route: list[int], rng: random.Random, min_size: int) -> None:
    """Remove up to three random waypoints and put them back at random positions."""
    if len(route) < min_size:
        return
    count = min(3, len(route))
    removed = [route.pop(rng.randrange(len(route))) for _ in range(count)]
    for node in removed:
        route.insert(rng.randint(0, len(route)), node)


def _ensure_start_node(route: list[int], start_index: int) -> None:
    """Rotate ``route`` in place so that it begins with ``start_index``."""
    if not route or route[0] == start_index or start_index not in route:
        return
    pos = route.index(start_index)
    route[:] = route[pos:] + route[:pos]


class TspAlgorithm(ABC):
    """A solver that orders the waypoints of a precomputed matrix."""

    name: str = ""

    def __init__(
        self,
        max_iterations: int,
        return_to_start: bool = False,
        rng: random.Random | None = None,
    ) -> None:
        self.max_iterations = max_iterations
        self.return_to_start = return_to_start
        self._rng = rng if rng is not None else random.Random()

    @abstractmethod
    def solve(self, matrix: TspMatrix, node_ids: Sequence[int]) -> list[int]:
        """Return the tour as matrix indices (0 to N-1)."""

    def _route_distance(self, route: Sequence[int], matrix: TspMatrix) -> float:
        return matrix.tour_cost(route, self.return_to_start)


class IGAlgorithm(TspAlgorithm):
    """Iterated Greedy: destroy/rebuild three waypoints, then swap-based local search."""

    name = "IG"

    def __init__(
        self,
        max_iterations: int = 5000,
        return_to_start: bool = False,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(max_iterations, return_to_start, rng)

    def _local_search(self, route: list[int], matrix: TspMatrix) -> float:
        best = self._route_distance(route, matrix)
        improved = True
        while improved:
            improved = False
            for i in range(len(route)):
                for j in range(i + 1, len(route)):
                    route[i], route[j] = route[j], route[i]
                    dist = self._route_distance(route, matrix)
                    if dist < best:
                        best = dist
                        improved = True
                    else:
                        route[i], route[j] = route[j], route[i]
        return best

    def solve(self, matrix: TspMatrix, node_ids: Sequence[int]) -> list[int]:
        current = matrix.nearest_neighbor_route(0)
        best_dist = self._local_search(current, matrix)
        best = list(current)

        for iteration in range(self.max_iterations):
            candidate = list(current)
            _remove_and_reinsert(candidate, self._rng, min_size=4)
            dist = self._local_search(candidate, matrix)
            if dist < best_dist:
                best_dist = dist
                best = list(candidate)
                current = candidate
            else:
                current = list(best)
            if iteration % 1000 == 0:
                logger.debug(
                    "IG iteration %d/%d, best %.2f m", iteration, self.max_iterations, best_dist
                )

        logger.info("IG best distance: %.2f m", best_dist)
        return best


class IGNAlgorithm(TspAlgorithm):
    """Iterated Greedy from a nearest-neighbour start, without local search."""

    name = "IGN"

    def __init__(
        self,
        max_iterations: int = 10000,
        return_to_start: bool = False,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(max_iterations, return_to_start, rng)

    def solve(self, matrix: TspMatrix, node_ids: Sequence[int]) -> list[int]:
        if not node_ids:
            return []

        current = matrix.nearest_neighbor_route(0)
        best = list(current)
        best_dist = self._route_distance(best, matrix)
        logger.debug("IGN initial distance: %.2f", best_dist)

        for _ in range(self.max_iterations):
            candidate = list(current)
            _remove_and_reinsert(candidate, self._rng, min_size=3)
            dist = self._route_distance(candidate, matrix)
            if dist < best_dist:
                best_dist = dist
                best = list(candidate)
                current = candidate
            else:
                current = list(best)

        _ensure_start_node(best, 0)
        logger.info(
            "IGN route distance: %.2f over %d nodes",
            self._route_distance(best, matrix), len(best),
        )
        return best


class ILSBAlgorithm(TspAlgorithm):
    """Iterated Local Search: shuffle perturbation and segment-reversal 2-opt."""

    name = "ILSB"

    def __init__(
        self,
        max_iterations: int = 5000,
        return_to_start: bool = False,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(max_iterations, return_to_start, rng)

    def _local_search(self, route: list[int], matrix: TspMatrix) -> float:
        best = self._route_distance(route, matrix)
        improved = True
        while improved:
            improved = False
            for i in range(len(route) - 1):
                for j in range(i + 2, len(route)):
                    route[i + 1:j + 1] = route[i + 1:j + 1][::-1]
                    dist = self._route_distance(route, matrix)
                    if dist < best:
                        best = dist
                        improved = True
                    else:
                        route[i + 1:j + 1] = route[i + 1:j + 1][::-1]
        return best

    def solve(self, matrix: TspMatrix, node_ids: Sequence[int]) -> list[int]:
        if not node_ids:
            return []

        current = matrix.nearest_neighbor_route(0)
        best_dist = self._local_search(current, matrix)
        best = list(current)
        logger.debug("ILSB initial distance after local search: %.2f", best_dist)

        for _ in range(self.max_iterations):
            current = list(best)
            self._rng.shuffle(current)
            dist = self._local_search(current, matrix)
            if dist < best_dist:
                best_dist = dist
                best = list(current)

        _ensure_start_node(best, 0)
        logger.info(
            "ILSB route distance: %.2f over %d nodes",
            self._route_distance(best, matrix), len(best),
        )
        return best


def create_tsp_algorithm(name: str) -> TspAlgorithm:
    """Build a TSP solver by name; raises ValueError for unknown or unavailable ones."""
    if name in ("ig", "IG"):
        return IGAlgorithm()
    if name in ("ign", "IGN"):
        return IGNAlgorithm()
    if name in ("ilsb", "ILSB", "ils_b", "ILS_B"):
        return ILSBAlgorithm()
    if name in ("igsa", "IGSA"):
        raise ValueError(
            "IGSA algorithm requires threading implementation (not available yet)"
        )
    raise ValueError(f"Unknown TSP algorithm: {name}")