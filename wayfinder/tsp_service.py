"""Multi-waypoint route optimisation: distance matrix plus a TSP heuristic."""

from __future__ import annotations

import copy
import enum
import logging
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import TypeVar

from wayfinder.graph import Edge, Graph, GraphError
from wayfinder.pathfinding import create_algorithm
from wayfinder.tsp import IGAlgorithm, create_tsp_algorithm
from wayfinder.tsp_matrix import TspMatrix
from wayfinder.vehicle import VehicleProfile

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

PercentCallback = Callable[[int], None]


def _run_in_thread(work: Callable[[], _T], name: str) -> Future[_T]:
    future: Future[_T] = Future()

    def run() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(work())
        except BaseException as exc:  # delivered through the future
            future.set_exception(exc)

    threading.Thread(target=run, name=name, daemon=True).start()
    return future


class TspErrorCode(enum.Enum):
    INSUFFICIENT_NODES = "insufficient_nodes"
    INVALID_NODES = "invalid_nodes"
    UNREACHABLE_NODES = "unreachable_nodes"


class TspError(Exception):
    """A TSP request that cannot be solved, with the waypoints at fault."""

    def __init__(
        self, code: TspErrorCode, message: str, node_ids: Sequence[int] = ()
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.node_ids = list(node_ids)


@dataclass
class TspResult:
    """An ordered tour over the waypoints and the paths between them."""

    tour: list[int] = field(default_factory=list)
    node_ids: list[int] = field(default_factory=list)
    segment_edges: list[list[Edge]] = field(default_factory=list)
    segment_nodes: list[list[int]] = field(default_factory=list)
    total_distance: float = 0.0
    execution_time_ms: float = 0.0
    precompute_time_ms: float = 0.0
    tsp_algorithm_name: str = ""


class TspService:
    """Orders waypoints on the current graph to minimise travel distance."""

    def __init__(self, graph: Graph | None = None) -> None:
        self.graph = graph

    def solve(
        self,
        waypoint_ids: Sequence[int],
        tsp_algorithm_name: str,
        pathfinding_algorithm_name: str = "dijkstra",
        vehicle_profile: VehicleProfile | None = None,
        return_to_start: bool = False,
        progress: PercentCallback | None = None,
    ) -> TspResult:
        """Solve the tour; ``progress`` receives the matrix completion percent.

        Raises GraphError without a graph, TspError for bad or unreachable
        waypoints and ValueError for unknown algorithm names.
        """
        graph = self.graph
        if graph is None:
            raise GraphError("Graph not loaded")

        waypoints = list(waypoint_ids)
        if len(waypoints) < 2:
            raise TspError(
                TspErrorCode.INSUFFICIENT_NODES,
                f"TSP requires at least 2 waypoints. Provided: {len(waypoints)}",
            )

        invalid = [node_id for node_id in waypoints if graph.node(node_id) is None]
        if invalid:
            raise TspError(
                TspErrorCode.INVALID_NODES,
                f"{len(invalid)} waypoint(s) not found in graph",
                invalid,
            )

        total_started = time.perf_counter()
        matrix = TspMatrix(waypoints)

        precompute_started = time.perf_counter()
        pathfinder = create_algorithm(pathfinding_algorithm_name)

        def on_row(_completed: int, _total: int, percent: int) -> None:
            if progress is not None:
                progress(percent)

        matrix.precompute(graph, pathfinder, vehicle_profile, on_row)
        precompute_ms = (time.perf_counter() - precompute_started) * 1000.0

        if not matrix.has_valid_solution():
            unreachable = matrix.unreachable_pairs()
            problematic: dict[int, None] = {}
            for from_idx, to_idx in unreachable:
                problematic.setdefault(matrix.node_id(from_idx))
                problematic.setdefault(matrix.node_id(to_idx))
            message = f"TSP validation failed: {len(unreachable)} unreachable pairs found."
            if vehicle_profile is not None:
                message += (
                    " Try using a different vehicle profile or removing restricted waypoints."
                )
            raise TspError(TspErrorCode.UNREACHABLE_NODES, message, list(problematic))

        solver = create_tsp_algorithm(tsp_algorithm_name)
        if isinstance(solver, IGAlgorithm):
            solver.return_to_start = return_to_start

        tsp_started = time.perf_counter()
        tour = solver.solve(matrix, waypoints)
        now = time.perf_counter()
        tsp_ms = (now - tsp_started) * 1000.0
        total_ms = (now - total_started) * 1000.0
        logger.info("TSP algorithm computation time: %.3f ms", tsp_ms)
        logger.info("Total time (matrix + TSP): %.3f ms", total_ms)

        segment_count = len(tour) if return_to_start else len(tour) - 1
        segment_edges: list[list[Edge]] = []
        segment_nodes: list[list[int]] = []
        for position in range(segment_count):
            from_idx = tour[position]
            to_idx = tour[(position + 1) % len(tour)]
            edges, nodes = self._segment(graph, matrix.path(from_idx, to_idx))
            segment_edges.append(edges)
            segment_nodes.append(nodes)

        return TspResult(
            tour=list(tour),
            node_ids=waypoints,
            segment_edges=segment_edges,
            segment_nodes=segment_nodes,
            total_distance=matrix.tour_cost(tour, return_to_start),
            execution_time_ms=total_ms,
            precompute_time_ms=precompute_ms,
            tsp_algorithm_name=tsp_algorithm_name,
        )

    @staticmethod
    def _segment(graph: Graph, path: Sequence[int]) -> tuple[list[Edge], list[int]]:
        edges: list[Edge] = []
        nodes: list[int] = []
        if path:
            first = graph.edge(path[0])
            if first is not None:
                nodes.append(first.source.id)
        for edge_id in path:
            edge = graph.edge(edge_id)
            if edge is None:
                continue
            edges.append(edge)
            nodes.append(edge.target.id)
        return edges, nodes

    def solve_async(
        self,
        waypoint_ids: Sequence[int],
        tsp_algorithm_name: str,
        pathfinding_algorithm_name: str = "dijkstra",
        vehicle_profile: VehicleProfile | None = None,
        return_to_start: bool = False,
        progress: PercentCallback | None = None,
    ) -> Future[TspResult]:
        """Solve on a background thread; the future holds the result or error."""
        waypoints = list(waypoint_ids)
        profile = copy.deepcopy(vehicle_profile)
        return _run_in_thread(
            lambda: self.solve(
                waypoints,
                tsp_algorithm_name,
                pathfinding_algorithm_name,
                profile,
                return_to_start,
                progress,
            ),
            name=f"tsp-{tsp_algorithm_name}",
        )