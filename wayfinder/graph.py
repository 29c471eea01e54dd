"""Road graph: nodes, edges, adjacency and bounding box."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field

from wayfinder.values import Coordinate, Distance

_HIGHWAY_NAMES = {
    "residential": "Camino Residencial",
    "footway": "Senda",
    "primary": "Vía Principal",
    "secondary": "Vía Secundaria",
    "tertiary": "Vía Terciaria",
    "trunk": "Vía Troncal",
    "motorway": "Autopista",
    "living_street": "Calle Residencial",
    "pedestrian": "Zona Peatonal",
    "cycleway": "Ciclovía",
    "path": "Sendero",
    "track": "Camino Rural",
    "service": "Vía de Servicio",
    "unclassified": "Camino Sin Clasificar",
    "steps": "Escalones",
    "bridleway": "Camino de Herradura",
    "tertiary_link": "Enlace Terciario",
    "primary_link": "Enlace Principal",
    "secondary_link": "Enlace Secundario",
    "trunk_link": "Enlace Troncal",
    "corridor": "Pasillo",
    "raceway": "Pista de Carreras",
    "construction": "En Construcción",
}


class GraphError(ValueError):
    """Raised when a graph operation refers to missing data."""


@dataclass(eq=False)
class Node:
    """A graph vertex identified by its id."""

    id: int
    coordinate: Coordinate

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(eq=False)
class Edge:
    """A road segment between two nodes, identified by its id."""

    id: int
    source: Node
    target: Node
    one_way: bool = False
    distance: Distance = field(default_factory=Distance)
    tags: dict[str, str] = field(default_factory=dict)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Edge):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def street_name(self) -> str:
        """The ``name`` tag, or a name derived from the highway type."""
        name = self.tags.get("name")
        if name:
            return name
        highway = self.tags.get("highway")
        if highway:
            return _HIGHWAY_NAMES.get(highway, "Vía " + highway)
        return "Vía sin nombre"


@dataclass
class RouteSegment:
    """One step of a route, with travel time and directions."""

    source: Node
    target: Node
    edge: Edge
    duration_seconds: float
    road_name: str = ""
    instruction: str = ""


class Graph:
    """Nodes and edges keyed by id, with an adjacency index."""

    def __init__(self) -> None:
        self._nodes: dict[int, Node] = {}
        self._edges: dict[int, Edge] = {}
        self._adjacency: dict[int, list[Edge]] = {}
        self._bounds = (0.0, 0.0, 0.0, 0.0)
        self._bounds_set = False

    def add_node(self, node_id: int, lat: float = 0.0, lon: float = 0.0) -> Node:
        node = Node(node_id, Coordinate(lat, lon))
        self._nodes[node_id] = node
        return node

    def add_edge(
        self,
        edge_id: int,
        from_id: int,
        to_id: int,
        distance: Distance | float | None = None,
        one_way: bool = False,
        tags: dict[str, str] | None = None,
    ) -> Edge:
        source = self._nodes.get(from_id)
        target = self._nodes.get(to_id)
        if source is None or target is None:
            raise GraphError("Cannot create edge: one or both node IDs do not exist.")
        if distance is None:
            distance = Distance(0.0)
        elif not isinstance(distance, Distance):
            distance = Distance(float(distance))
        edge = Edge(edge_id, source, target, one_way, distance, dict(tags or {}))
        self._edges[edge_id] = edge
        return edge

    def build_adjacency(self) -> None:
        """Rebuild the node-to-edges index; two-way edges are listed at both ends."""
        adjacency: defaultdict[int, list[Edge]] = defaultdict(list)
        for edge in self._edges.values():
            adjacency[edge.source.id].append(edge)
            if not edge.one_way:
                adjacency[edge.target.id].append(edge)
        self._adjacency = dict(adjacency)

    def node(self, node_id: int) -> Node | None:
        return self._nodes.get(node_id)

    def edge(self, edge_id: int) -> Edge | None:
        return self._edges.get(edge_id)

    def has_node(self, node_id: int) -> bool:
        return node_id in self._nodes

    def has_edge(self, edge_id: int) -> bool:
        return edge_id in self._edges

    def nodes(self) -> list[Node]:
        return list(self._nodes.values())

    def edges(self) -> list[Edge]:
        return list(self._edges.values())

    def node_count(self) -> int:
        return len(self._nodes)

    def edge_count(self) -> int:
        return len(self._edges)

    def outgoing_edges(self, node_id: int) -> list[Edge]:
        return list(self._adjacency.get(node_id, ()))

    def neighbors(self, node_id: int) -> list[Node]:
        return [
            edge.target if edge.source.id == node_id else edge.source
            for edge in self._adjacency.get(node_id, ())
        ]

    def has_direct_edge(self, from_id: int, to_id: int) -> bool:
        return any(
            edge.target.id == to_id or (not edge.one_way and edge.source.id == to_id)
            for edge in self._adjacency.get(from_id, ())
        )

    @property
    def bounds_set(self) -> bool:
        return self._bounds_set

    def set_bounds(self, min_lat: float, max_lat: float, min_lon: float, max_lon: float) -> None:
        self._bounds = (min_lat, max_lat, min_lon, max_lon)
        self._bounds_set = True

    def is_within_bounds(self, lat: float, lon: float) -> bool:
        """True when inside the bounding box, or when no box is set."""
        if not self._bounds_set:
            return True
        min_lat, max_lat, min_lon, max_lon = self._bounds
        return min_lat <= lat <= max_lat and min_lon <= lon <= max_lon

    def bounds(self) -> tuple[float, float, float, float]:
        """(min_lat, max_lat, min_lon, max_lon)."""
        return self._bounds

    def clear(self) -> None:
        self._nodes.clear()
        self._edges.clear()
        self._adjacency.clear()
        self._bounds_set = False

    def is_empty(self) -> bool:
        return not self._nodes