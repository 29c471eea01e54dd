"""Built-in vehicle profiles for cars and pedestrians."""

from __future__ import annotations

from wayfinder.vehicle import VehicleProfile

_CAR_FACTORS = {
    # Preferred road types
    "residential": 1.0,
    "primary": 1.3,
    "secondary": 1.2,
    "tertiary": 1.1,
    "trunk": 1.4,
    "motorway": 1.5,
    "unclassified": 0.9,
    "tertiary_link": 1.1,
    "primary_link": 1.3,
    "secondary_link": 1.2,
    "trunk_link": 1.4,
    "corridor": 0.8,
    # Avoided road types
    "track": 0.3,
    # Blocked road types
    "footway": 0.0,
    "pedestrian": 0.0,
    "cycleway": 0.0,
    "path": 0.0,
    "service": 0.0,
    "steps": 0.0,
    "bridleway": 0.0,
    "living_street": 0.0,
    "raceway": 0.0,
    "construction": 0.0,
}

_PEDESTRIAN_FACTORS = {
    # Preferred road types
    "footway": 1.5,
    "pedestrian": 1.4,
    "cycleway": 1.2,
    "path": 1.6,
    "service": 1.1,
    "steps": 0.8,
    "bridleway": 1.3,
    "construction": 0.9,
    "residential": 1.0,
    # Avoided road types
    "primary": 0.4,
    "secondary": 0.5,
    "tertiary": 0.7,
    "unclassified": 0.6,
    "track": 1.1,
    "corridor": 0.8,
    # Blocked road types
    "trunk": 0.0,
    "motorway": 0.0,
    "living_street": 0.0,
    "raceway": 0.0,
    "tertiary_link": 0.0,
    "primary_link": 0.0,
    "secondary_link": 0.0,
    "trunk_link": 0.0,
}


def create_car_profile() -> VehicleProfile:
    """A car travelling at 80 km/h, barred from footpaths and service roads."""
    return VehicleProfile("Auto", "CAR", 80.0, dict(_CAR_FACTORS))


def create_pedestrian_profile() -> VehicleProfile:
    """A pedestrian walking at 5 km/h, barred from motorways and trunk roads."""
    return VehicleProfile("Peaton", "PEDESTRIAN", 5.0, dict(_PEDESTRIAN_FACTORS))


def get_profile(name: str) -> VehicleProfile:
    """Return a fresh profile by name; raises ValueError for unknown names."""
    if name in ("car", "CAR"):
        return create_car_profile()
    if name in ("peaton", "PEDESTRIAN"):
        return create_pedestrian_profile()
    raise ValueError(f"Vehicle profile not supported: {name}")


def available_profiles() -> list[str]:
    return ["CAR", "PEDESTRIAN"]