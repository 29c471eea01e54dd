"""Vehicle profiles: per-road-type speed factors and access rules."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass
class VehicleProfile:
    """A vehicle's speed and its preference for each highway type.

    A factor above 1.0 marks a preferred road type, below 1.0 an avoided
    one, and 0.0 or less a blocked one. Unlisted types have factor 1.0.
    """

    name: str
    vehicle_type: str
    speed: float = 0.0
    speed_factors: dict[str, float] = field(default_factory=dict)

    def set_speed_factor(self, road_type: str, factor: float) -> None:
        self.speed_factors[road_type] = factor

    def speed_factor(self, road_type: str) -> float:
        return self.speed_factors.get(road_type, 1.0)

    def is_highway_blocked(self, highway: str) -> bool:
        return self.speed_factor(highway) <= 0.0

    def is_road_suitable(self, tags: Mapping[str, str]) -> bool:
        """True unless the ``highway`` tag names a blocked type."""
        highway = tags.get("highway")
        if highway is None:
            return True
        return not self.is_highway_blocked(highway)

    def preferred_tags(self) -> list[str]:
        return [tag for tag, factor in self.speed_factors.items() if factor > 1.0]

    def avoided_tags(self) -> list[str]:
        return [tag for tag, factor in self.speed_factors.items() if factor < 1.0]

    def blocked_tags(self) -> list[str]:
        return [tag for tag, factor in self.speed_factors.items() if factor <= 0.0]