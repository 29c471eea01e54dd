"""Distance matrix between waypoints, with the shortest paths behind it."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from wayfinder.graph import Graph
from wayfinder.pathfinding import PathfindingAlgorithm
from wayfinder.vehicle import VehicleProfile

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, int], None]


@dataclass
class MatrixEntry:
    """Distance between two waypoints and the edge ids of the path."""

    distance: float = 0.0
    path_edge_ids: list[int] = field(default_factory=list)


class TspMatrix:
    """An N x N matrix of waypoint-to-waypoint distances and paths."""

    def __init__(self, node_ids: Sequence[int]) -> None:
        self._node_ids = list(node_ids)
        self._matrix = [[MatrixEntry() for _ in self._node_ids] for _ in self._node_ids]

    @property
    def size(self) -> int:
        return len(self._node_ids)

    @property
    def node_ids(self) -> list[int]:
        return list(self._node_ids)

    def precompute(
        self,
        graph: Graph,
        algorithm: PathfindingAlgorithm,
        vehicle_profile: VehicleProfile | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        """Fill every entry with a shortest path found by ``algorithm``.

        Unreachable pairs get an infinite distance and an empty path.
        ``progress`` is called after each row with (completed pairs,
        total pairs, percent).
        """
        size = self.size
        logger.info("Computing TSP matrix %dx%d with %s", size, size, algorithm.name)
        total_pairs = size * size

        for row, from_id in enumerate(self._node_ids):
            for col, to_id in enumerate(self._node_ids):
                if row == col:
                    self._matrix[row][col] = MatrixEntry(0.0, [])
                    continue
                path = algorithm.find_path(graph, from_id, to_id, vehicle_profile)
                distance = self._path_distance(graph, path) if path else math.inf
                self._matrix[row][col] = MatrixEntry(distance, list(path))

            completed = row + 1
            logger.debug("TSP matrix: %d/%d rows", completed, size)
            if progress is not None:
                completed_pairs = completed * size
                progress(completed_pairs, total_pairs, completed_pairs * 100 // total_pairs)

        logger.info("TSP matrix completed")

    @staticmethod
    def _path_distance(graph: Graph, edge_ids: Sequence[int]) -> float:
        total = 0.0
        for edge_id in edge_ids:
            edge = graph.edge(edge_id)
            if edge is not None:
                total += edge.distance.meters
        return total

    def entry(self, from_idx: int, to_idx: int) -> MatrixEntry:
        return self._matrix[from_idx][to_idx]

    def entry_by_id(self, from_id: int, to_id: int) -> MatrixEntry:
        return self._matrix[self.node_index(from_id)][self.node_index(to_id)]

    def path(self, from_idx: int, to_idx: int) -> list[int]:
        return self._matrix[from_idx][to_idx].path_edge_ids

    def set_distance(self, from_idx: int, to_idx: int, distance: float) -> None:
        self._matrix[from_idx][to_idx].distance = distance

    def node_id(self, idx: int) -> int:
        return self._node_ids[idx]

    def node_index(self, node_id: int) -> int:
        """Index of ``node_id``; raises KeyError if it is not a waypoint."""
        try:
            return self._node_ids.index(node_id)
        except ValueError:
            raise KeyError("Node ID not found in TspMatrix") from None

    def tour_cost(self, tour: Sequence[int], return_to_start: bool = False) -> float:
        """Sum of distances along ``tour``, optionally closing the loop."""
        total = sum(
            self._matrix[a][b].distance for a, b in zip(tour, tour[1:])
        )
        if return_to_start and len(tour) > 1:
            total += self._matrix[tour[-1]][tour[0]].distance
        return total

    def nearest_neighbor_route(self, start_idx: int = 0) -> list[int]:
        """Greedy tour that always moves to the closest unvisited waypoint."""
        remaining = set(range(self.size))
        route = [start_idx]
        remaining.discard(start_idx)
        current = start_idx
        while remaining:
            row = self._matrix[current]
            nearest = min(remaining, key=lambda candidate: (row[candidate].distance, candidate))
            route.append(nearest)
            remaining.remove(nearest)
            current = nearest
        return route

    def unreachable_pairs(self) -> list[tuple[int, int]]:
        """(from, to) index pairs whose distance is infinite."""
        return [
            (i, j)
            for i, row in enumerate(self._matrix)
            for j, entry in enumerate(row)
            if i != j and math.isinf(entry.distance)
        ]

    def has_valid_solution(self) -> bool:
        """True when every waypoint can reach every other."""
        return not self.unreachable_pairs()