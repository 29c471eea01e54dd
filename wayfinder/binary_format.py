"""Compact little-endian binary file format for road graphs."""

from __future__ import annotations

import logging
import os
import struct
from pathlib import Path

from wayfinder.graph import Graph

logger = logging.getLogger(__name__)

MAGIC = b"OGRGRAPH"
VERSION = 1

_HEADER = struct.Struct("<8siqqdddd72s")
_INT32 = struct.Struct("<i")
_STRING_ENTRY = struct.Struct("<ii")
_NODE = struct.Struct("<qdd")
_EDGE = struct.Struct("<qqqbd7x")
_TAG = struct.Struct("<ii")


class BinaryFormatError(ValueError):
    """Raised when a binary graph file is malformed."""


def _string_order(text: str) -> bytes:
    return text.encode("utf-16-be", errors="surrogatepass")


def save_graph(graph: Graph, path: str | os.PathLike[str]) -> None:
    """Write ``graph`` to ``path``, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    nodes = graph.nodes()
    edges = graph.edges()
    min_lat, max_lat, min_lon, max_lon = graph.bounds()

    strings = sorted(
        {text for edge in edges for pair in edge.tags.items() for text in pair},
        key=_string_order,
    )
    string_ids = {text: index for index, text in enumerate(strings)}

    logger.debug("Serializing graph to %s: %d nodes, %d edges", path, len(nodes), len(edges))

    chunks = [
        _HEADER.pack(
            MAGIC, VERSION, len(nodes), len(edges),
            min_lat, max_lat, min_lon, max_lon, bytes(72),
        ),
        _INT32.pack(len(strings)),
    ]
    for text in strings:
        data = text.encode("utf-8")
        chunks.append(_STRING_ENTRY.pack(string_ids[text], len(data)))
        chunks.append(data)

    for node in nodes:
        chunks.append(_NODE.pack(node.id, node.coordinate.latitude, node.coordinate.longitude))

    for edge in edges:
        chunks.append(
            _EDGE.pack(
                edge.id, edge.source.id, edge.target.id,
                1 if edge.one_way else 0, edge.distance.meters,
            )
        )
        chunks.append(_INT32.pack(len(edge.tags)))
        for key, value in edge.tags.items():
            chunks.append(_TAG.pack(string_ids.get(key, -1), string_ids.get(value, -1)))

    with path.open("wb") as handle:
        handle.write(b"".join(chunks))
    logger.debug("Graph serialization completed: %s", path)


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._offset = 0

    def _advance(self, count: int) -> int:
        start = self._offset
        end = start + count
        if count < 0 or end > len(self._data):
            raise BinaryFormatError("Unexpected end of binary graph file")
        self._offset = end
        return start

    def unpack(self, layout: struct.Struct) -> tuple:
        start = self._advance(layout.size)
        return layout.unpack_from(self._data, start)

    def take(self, count: int) -> bytes:
        start = self._advance(count)
        return self._data[start:start + count]


def load_graph(path: str | os.PathLike[str]) -> Graph:
    """Read a graph written by :func:`save_graph`, with adjacency built."""
    data = Path(path).read_bytes()
    if data[:len(MAGIC)] != MAGIC:
        raise BinaryFormatError(f"Invalid binary graph file (bad magic): {path}")

    reader = _Reader(data)
    (_, version, node_count, edge_count,
     min_lat, max_lat, min_lon, max_lon, _) = reader.unpack(_HEADER)
    logger.debug(
        "Loading graph %s: version %d, %d nodes, %d edges",
        path, version, node_count, edge_count,
    )

    (string_count,) = reader.unpack(_INT32)
    strings: dict[int, str] = {}
    for _ in range(string_count):
        string_id, length = reader.unpack(_STRING_ENTRY)
        strings[string_id] = reader.take(length).decode("utf-8", errors="replace")

    graph = Graph()
    for _ in range(node_count):
        node_id, lat, lon = reader.unpack(_NODE)
        graph.add_node(node_id, lat, lon)
    graph.set_bounds(min_lat, max_lat, min_lon, max_lon)

    for _ in range(edge_count):
        edge_id, from_id, to_id, one_way, meters = reader.unpack(_EDGE)
        (tag_count,) = reader.unpack(_INT32)
        tags: dict[str, str] = {}
        for _ in range(tag_count):
            key_id, value_id = reader.unpack(_TAG)
            key = strings.get(key_id, "")
            if key:
                tags[key] = strings.get(value_id, "")
        graph.add_edge(edge_id, from_id, to_id, meters, one_way != 0, tags)

    graph.build_adjacency()
    logger.debug("Binary graph loaded: %d nodes, %d edges", graph.node_count(), graph.edge_count())
    return graph