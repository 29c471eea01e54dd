"""Build a road graph from an OpenStreetMap XML extract."""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from collections.abc import Callable, Iterator
from pathlib import Path

from wayfinder.graph import Graph
from wayfinder.values import Coordinate

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float], None]

_ONEWAY_VALUES = frozenset({"yes", "true", "1"})
_WAYS_PER_REPORT = 100
_ESTIMATED_WAYS = 10000.0


class OsmError(RuntimeError):
    """Raised when an OSM file cannot be read or parsed."""


def _to_int(text: str | None) -> int:
    try:
        return int(text or "")
    except ValueError:
        return 0


def _to_float(text: str | None) -> float:
    try:
        return float(text or "")
    except ValueError:
        return 0.0


def _node_positions(path: Path) -> dict[int, tuple[float, float]]:
    positions: dict[int, tuple[float, float]] = {}
    for _, element in ET.iterparse(path, events=("end",)):
        if element.tag == "node":
            positions[_to_int(element.get("id"))] = (
                _to_float(element.get("lat")),
                _to_float(element.get("lon")),
            )
            element.clear()
    return positions


def _ways(path: Path) -> Iterator[tuple[list[int], dict[str, str]]]:
    for _, element in ET.iterparse(path, events=("end",)):
        if element.tag != "way":
            continue
        refs = [_to_int(child.get("ref")) for child in element.iter("nd")]
        tags = {child.get("k", ""): child.get("v", "") for child in element.iter("tag")}
        yield refs, tags
        element.clear()


def _is_one_way(tags: dict[str, str]) -> bool:
    value = tags.get("oneway")
    return value is not None and value.lower() in _ONEWAY_VALUES


def load_osm(path: str | os.PathLike[str], progress: ProgressCallback | None = None) -> Graph:
    """Parse highway ways from an OSM file into a graph with adjacency built.

    Each consecutive pair of way nodes becomes an edge weighted by haversine
    distance; ways that are not one-way also get the reverse edge.
    ``progress`` receives (message, fraction) updates.
    """
    path = Path(path)

    def report(message: str, fraction: float) -> None:
        if progress is not None:
            progress(message, fraction)

    report("Parsing OSM file...", 0.0)
    logger.debug("Starting OSM parsing for file: %s", path)

    coordinates: dict[int, Coordinate] = {}
    edges: list[tuple[int, int, int, float, bool, dict[str, str]]] = []
    next_edge_id = 1
    processed_ways = 0

    try:
        positions = _node_positions(path)
        logger.debug("Total nodes parsed: %d", len(positions))
        report("Parsed nodes. Now parsing ways...", 0.3)

        for refs, tags in _ways(path):
            if "highway" not in tags or len(refs) < 2:
                continue

            one_way = _is_one_way(tags)
            edge_tags = {key: value for key, value in tags.items() if key}

            for from_id, to_id in zip(refs, refs[1:]):
                if from_id not in positions or to_id not in positions:
                    continue
                from_coord = coordinates.setdefault(from_id, Coordinate(*positions[from_id]))
                to_coord = coordinates.setdefault(to_id, Coordinate(*positions[to_id]))
                weight = from_coord.distance_to(to_coord)

                edges.append((next_edge_id, from_id, to_id, weight, one_way, edge_tags))
                next_edge_id += 1
                if not one_way:
                    edges.append((next_edge_id, to_id, from_id, weight, False, edge_tags))
                    next_edge_id += 1

            processed_ways += 1
            if processed_ways % _WAYS_PER_REPORT == 0:
                report(
                    f"Procesados {processed_ways} ways...",
                    0.3 + 0.6 * processed_ways / _ESTIMATED_WAYS,
                )
    except OSError as exc:
        raise OsmError(f"Could not open OSM file: {path}") from exc
    except ET.ParseError as exc:
        raise OsmError(f"Error parsing OSM XML: {exc}") from exc

    logger.debug(
        "OSM parsing completed: %d ways, %d nodes, %d edges",
        processed_ways, len(coordinates), len(edges),
    )
    report("Finished parsing OSM file...", 1.0)

    graph = Graph()
    for node_id in sorted(coordinates):
        coord = coordinates[node_id]
        graph.add_node(node_id, coord.latitude, coord.longitude)

    if coordinates:
        lats = [coord.latitude for coord in coordinates.values()]
        lons = [coord.longitude for coord in coordinates.values()]
        graph.set_bounds(min(lats), max(lats), min(lons), max(lons))

    for edge_id, from_id, to_id, weight, one_way, edge_tags in edges:
        graph.add_edge(edge_id, from_id, to_id, weight, one_way, edge_tags)

    graph.build_adjacency()
    report("Graph built successfully.", 1.0)
    logger.debug("Final graph: %d nodes, %d edges", graph.node_count(), graph.edge_count())
    return graph