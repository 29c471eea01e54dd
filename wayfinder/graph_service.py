"""Load road graphs, preferring a cached binary file over the OSM source."""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future
from pathlib import Path

from wayfinder.binary_format import load_graph, save_graph
from wayfinder.graph import Graph
from wayfinder.osm import load_osm

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float], None]


class LoadCancelled(Exception):
    """Raised when a graph load was cancelled."""

    def __init__(self, message: str = "Graph loading cancelled.") -> None:
        super().__init__(message)


class GraphService:
    """Loads graphs by base name from ``data/graphs`` or ``data/maps``.

    The binary ``data/graphs/<name>.bin`` is tried first; failing that,
    ``data/maps/<name>.osm`` is parsed and a binary is written for next time.
    """

    def __init__(self, root: str | os.PathLike[str] = ".") -> None:
        self.root = Path(root)
        self.graph: Graph | None = None
        self.load_time_ms = 0.0
        self._cancel = threading.Event()

    def binary_path(self, base_name: str) -> Path:
        return self.root / "data" / "graphs" / f"{base_name}.bin"

    def osm_path(self, base_name: str) -> Path:
        return self.root / "data" / "maps" / f"{base_name}.osm"

    def cancel(self) -> None:
        """Ask a running load to stop; it raises LoadCancelled when it checks."""
        self._cancel.set()

    def load(self, base_name: str, progress: ProgressCallback | None = None) -> Graph:
        """Load a graph synchronously and keep it as ``self.graph``."""
        self._cancel.clear()
        return self._load(base_name, progress)

    def load_async(
        self, base_name: str, progress: ProgressCallback | None = None
    ) -> Future[Graph]:
        """Load a graph on a background thread; the future holds the result."""
        self._cancel.clear()
        future: Future[Graph] = Future()

        def run() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(self._load(base_name, progress))
            except BaseException as exc:  # delivered through the future
                future.set_exception(exc)

        threading.Thread(target=run, name=f"graph-load-{base_name}", daemon=True).start()
        return future

    def _check_cancelled(self) -> None:
        if self._cancel.is_set():
            raise LoadCancelled()

    def _load(self, base_name: str, progress: ProgressCallback | None) -> Graph:
        started = time.perf_counter()

        def report(message: str, fraction: float) -> None:
            if progress is not None:
                progress(message, fraction)

        bin_path = self.binary_path(base_name)
        if bin_path.exists():
            report("Loading graph from binary (Faster)...", 0.1)
            logger.debug("Loading graph from .bin: %s", bin_path)
            loaded = load_graph(bin_path)
            self._check_cancelled()
            return self._finish(loaded, started)

        osm_path = self.osm_path(base_name)
        if not osm_path.exists():
            message = f"No graph file found: {bin_path} or {osm_path}"
            logger.debug(message)
            raise FileNotFoundError(message)

        report("Loading graph from OSM (first time, slower)...", 0.2)
        logger.debug("Loading graph from .osm: %s", osm_path)

        def scaled(message: str, fraction: float) -> None:
            if not self._cancel.is_set():
                report(message, 0.2 + fraction * 0.6)

        loaded = load_osm(osm_path, scaled)
        self._check_cancelled()

        report("Saving graph to binary for future loads...", 0.85)
        try:
            save_graph(loaded, bin_path)
            logger.debug("Binary generated: %s", bin_path)
        except OSError as exc:
            logger.warning("Could not generate .bin (will read .osm again next time): %s", exc)

        graph = self._finish(loaded, started)
        report("Load complete", 1.0)
        return graph

    def _finish(self, graph: Graph, started: float) -> Graph:
        self.graph = graph
        self.load_time_ms = (time.perf_counter() - started) * 1000.0
        logger.debug(
            "Graph loaded in %.0f ms: %d nodes, %d edges",
            self.load_time_ms, graph.node_count(), graph.edge_count(),
        )
        return graph