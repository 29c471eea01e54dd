"""Shortest-path algorithms over a road graph."""

from __future__ import annotations

import heapq
import itertools
import logging
import time
from abc import ABC, abstractmethod

from wayfinder.graph import Edge, Graph, GraphError
from wayfinder.vehicle import VehicleProfile

logger = logging.getLogger(__name__)


class PathfindingAlgorithm(ABC):
    """A shortest-path search returning the edge ids of the route."""

    name: str = ""

    def __init__(self) -> None:
        self.nodes_explored = 0
        self.execution_time = 0.0

    @abstractmethod
    def find_path(
        self,
        graph: Graph,
        start_id: int,
        end_id: int,
        vehicle_profile: VehicleProfile | None = None,
    ) -> list[int]:
        """Edge ids from start to end, or an empty list if there is no route."""


class DijkstraAlgorithm(PathfindingAlgorithm):
    """Dijkstra's algorithm with lazy initialisation of distances."""

    name = "dijkstra"

    def find_path(
        self,
        graph: Graph,
        start_id: int,
        end_id: int,
        vehicle_profile: VehicleProfile | None = None,
    ) -> list[int]:
        started = time.perf_counter()
        self.nodes_explored = 0
        self.execution_time = 0.0

        if not graph.has_node(start_id):
            raise GraphError("Start node not found in graph")
        if not graph.has_node(end_id):
            raise GraphError("End node not found in graph")

        distances: dict[int, float] = {start_id: 0.0}
        previous_edge: dict[int, int] = {}
        visited: set[int] = set()
        counter = itertools.count()
        queue: list[tuple[float, int, int]] = [(0.0, next(counter), start_id)]

        while queue:
            _, _, current = heapq.heappop(queue)
            if current in visited:
                continue
            visited.add(current)
            self.nodes_explored += 1

            if current == end_id:
                break

            for edge in graph.outgoing_edges(current):
                if vehicle_profile is not None and self.is_edge_restricted(edge, vehicle_profile):
                    continue
                neighbor = edge.target.id
                new_dist = distances[current] + edge.distance.meters
                known = distances.get(neighbor)
                if known is None or new_dist < known:
                    distances[neighbor] = new_dist
                    previous_edge[neighbor] = edge.id
                    heapq.heappush(queue, (new_dist, next(counter), neighbor))

        path: list[int] = []
        if end_id not in previous_edge and start_id != end_id:
            self.execution_time = (time.perf_counter() - started) * 1000.0
            return path

        current = end_id
        while current != start_id:
            edge_id = previous_edge.get(current)
            if edge_id is None:
                break
            path.append(edge_id)
            edge = graph.edge(edge_id)
            if edge is None:
                break
            current = edge.source.id

        path.reverse()
        self.execution_time = (time.perf_counter() - started) * 1000.0
        return path

    def is_edge_restricted(self, edge: Edge, vehicle_profile: VehicleProfile | None) -> bool:
        """True when the profile may not use this edge."""
        if vehicle_profile is None:
            return False
        highway = edge.tags.get("highway")
        if highway is not None and vehicle_profile.is_highway_blocked(highway):
            return True
        return not vehicle_profile.is_road_suitable(edge.tags)


class AStarAlgorithm(PathfindingAlgorithm):
    """A* search guided by a scaled Manhattan-degree heuristic."""

    name = "a_star"
    HEURISTIC_SCALE = 0.95
    MAX_EXPANSIONS = 200_000
    METERS_PER_DEGREE = 111_000.0

    def _heuristic(self, graph: Graph, from_id: int, to_id: int) -> float:
        from_node = graph.node(from_id)
        to_node = graph.node(to_id)
        if from_node is None or to_node is None:
            return 0.0
        degrees = from_node.coordinate.manhattan_distance_to(to_node.coordinate)
        return degrees * self.METERS_PER_DEGREE * self.HEURISTIC_SCALE

    @staticmethod
    def _is_restricted(edge: Edge, vehicle_profile: VehicleProfile | None) -> bool:
        if vehicle_profile is None:
            return False
        highway = edge.tags.get("highway")
        if highway is None:
            return False
        return vehicle_profile.is_highway_blocked(highway)

    def find_path(
        self,
        graph: Graph,
        start_id: int,
        end_id: int,
        vehicle_profile: VehicleProfile | None = None,
    ) -> list[int]:
        started = time.perf_counter()
        self.nodes_explored = 0

        g_score: dict[int, float] = {start_id: 0.0}
        came_from: dict[int, int] = {}
        came_from_edge: dict[int, int] = {}
        visited: set[int] = set()
        counter = itertools.count()
        open_set = [(self._heuristic(graph, start_id, end_id), next(counter), start_id)]

        expansions = 0
        found = False
        while open_set and expansions < self.MAX_EXPANSIONS:
            _, _, current = heapq.heappop(open_set)
            if current in visited:
                continue
            visited.add(current)
            self.nodes_explored += 1
            expansions += 1

            if current == end_id:
                found = True
                break

            for edge in graph.outgoing_edges(current):
                neighbor = edge.target.id
                if neighbor in visited:
                    continue
                if self._is_restricted(edge, vehicle_profile):
                    continue
                tentative = g_score[current] + edge.distance.meters
                known = g_score.get(neighbor)
                if known is None or tentative < known:
                    came_from[neighbor] = current
                    came_from_edge[neighbor] = edge.id
                    g_score[neighbor] = tentative
                    f = tentative + self._heuristic(graph, neighbor, end_id)
                    heapq.heappush(open_set, (f, next(counter), neighbor))

        path: list[int] = []
        if not found:
            logger.warning("A*: no path found after %d expansions", expansions)
        else:
            current = end_id
            while current != start_id:
                edge_id = came_from_edge.get(current)
                previous = came_from.get(current)
                if edge_id is None or previous is None:
                    logger.error("A*: path reconstruction failed")
                    path.clear()
                    break
                path.append(edge_id)
                current = previous
            path.reverse()
            logger.debug("A*: path found, %d expansions, %d edges", expansions, len(path))

        self.execution_time = (time.perf_counter() - started) * 1000.0
        return path


def create_algorithm(name: str) -> PathfindingAlgorithm:
    """Build a pathfinding algorithm by name; raises ValueError for unknown names."""
    if name == "dijkstra":
        return DijkstraAlgorithm()
    if name in ("astar", "a*", "a_star"):
        return AStarAlgorithm()
    raise ValueError(f"Unknown algorithm: {name}")