"""Immutable value objects: geographic coordinates and distances."""

from __future__ import annotations

import math
from dataclasses import dataclass

EARTH_RADIUS_M = 6371e3
METERS_PER_MILE = 1609.34


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in degrees."""

    latitude: float
    longitude: float

    def distance_to(self, other: Coordinate) -> float:
        """Great-circle (haversine) distance to ``other`` in meters."""
        phi1 = math.radians(self.latitude)
        phi2 = math.radians(other.latitude)
        delta_phi = math.radians(other.latitude - self.latitude)
        delta_lambda = math.radians(other.longitude - self.longitude)

        a = (
            math.sin(delta_phi / 2) ** 2
            + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
        )
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
        return EARTH_RADIUS_M * c

    def manhattan_distance_to(self, other: Coordinate) -> float:
        """Sum of absolute latitude and longitude differences, in degrees."""
        return abs(self.latitude - other.latitude) + abs(self.longitude - other.longitude)


@dataclass(frozen=True, order=True)
class Distance:
    """A non-negative length in meters."""

    meters: float = 0.0

    def __post_init__(self) -> None:
        if self.meters < 0:
            raise ValueError("Distance cannot be negative")

    @property
    def kilometers(self) -> float:
        return self.meters / 1000.0

    @property
    def miles(self) -> float:
        return self.meters / METERS_PER_MILE

    def __add__(self, other: Distance) -> Distance:
        if not isinstance(other, Distance):
            return NotImplemented
        return Distance(self.meters + other.meters)

    def __sub__(self, other: Distance) -> Distance:
        """Difference of two distances, clamped at zero."""
        if not isinstance(other, Distance):
            return NotImplemented
        return Distance(max(self.meters - other.meters, 0.0))