# wayfinder

Routing over road networks built from OpenStreetMap data.

- Load a road graph from an `.osm` XML file (`wayfinder.osm.load_osm`) or from a
  compact binary cache (`wayfinder.binary_format.load_graph` / `save_graph`).
- Let `wayfinder.graph_service.GraphService` pick between the two: it reads the
  binary cache when present, otherwise parses the OSM file and writes the cache.
- Find shortest paths with Dijkstra or A\* (`wayfinder.pathfinding.create_algorithm`,
  names `"dijkstra"`, `"astar"`, `"a*"`, `"a_star"`), optionally honouring a vehicle
  profile (`wayfinder.profiles.get_profile("car")` or `get_profile("peaton")`) that
  blocks unsuitable road types.
- Plan a visiting order for several waypoints with iterated-greedy and
  iterated-local-search heuristics (`wayfinder.tsp.create_tsp_algorithm`, names
  `"ig"`, `"ign"`, `"ilsb"`), or let `wayfinder.tsp_service.TspService` build the
  distance matrix, solve the tour and collect the edges of each leg.

## Installation

```
pip install .
```

The package has no dependencies outside the standard library.

## Usage

Loading a graph and planning a tour:

```python
from wayfinder.graph_service import GraphService
from wayfinder.tsp_service import TspService, TspError

graphs = GraphService()            # looks under ./data
graph = graphs.load("arequipa")    # data/graphs/arequipa.bin, else data/maps/arequipa.osm

tours = TspService(graph)
try:
    result = tours.solve([a, b, c, d], "ig", "dijkstra", None, True, None)
except TspError as err:
    print(err.code, err.node_ids)
else:
    print(result.tour, result.total_distance)
```

`GraphService.load_async` and `TspService.solve_async` run the same work on a
background thread and return a `concurrent.futures.Future`. `GraphService.cancel`
asks a running load to stop; it then raises `LoadCancelled`.

Working with a graph directly:

```python
from wayfinder.graph import Graph
from wayfinder.values import Distance
from wayfinder.pathfinding import DijkstraAlgorithm

g = Graph()
g.add_node(1, 0.0, 0.0)
g.add_node(2, 0.0, 0.001)
g.add_edge(10, 1, 2, Distance(111.0), False, {"highway": "residential"})
g.build_adjacency()
print(DijkstraAlgorithm().find_path(g, 1, 2, None))   # [10]
```

Path searches return the ids of the edges along the route; look them up with
`Graph.edge` to get distances, end nodes and `Edge.street_name()`.

## What the package does not do

It is a library only: there is no command-line program and no map display.
There is no ready-made single-route result object; a shortest-path search gives
edge ids, and totalling the distance or listing the nodes passed is left to the
caller.

## Tests

```
pip install .[test]
pytest
```