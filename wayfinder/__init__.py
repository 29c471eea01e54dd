"""Road-network routing: OSM and binary graph loading, shortest paths and tour optimisation."""

__version__ = "0.1.0"