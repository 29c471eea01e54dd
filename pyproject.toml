[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wayfinder"
version = "0.1.0"
description = "Road-network routing: OSM graph loading, shortest paths with vehicle profiles, and multi-stop tour optimisation."
requires-python = ">=3.10"
dependencies = []
keywords = ["routing", "openstreetmap", "osm", "dijkstra", "a-star", "tsp", "graph", "gis"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: GIS",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["wayfinder"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
