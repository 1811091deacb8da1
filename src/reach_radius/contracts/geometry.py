from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

from reach_radius.errors import InputError


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not (-90.0 <= self.lat <= 90.0):
            raise InputError(f"latitude out of range: {self.lat}")
        if not (-180.0 <= self.lng <= 180.0):
            raise InputError(f"longitude out of range: {self.lng}")

    def as_lnglat(self) -> Tuple[float, float]:
        return (self.lng, self.lat)


@dataclass(frozen=True)
class BoundingBox:
    south: float
    west: float
    north: float
    east: float

    @property
    def south_west(self) -> Coordinate:
        return Coordinate(self.south, self.west)


@dataclass(frozen=True)
class BoundaryPolygon:
    """Closed, simple ring of coordinates. Build through geo.polygon.make_polygon."""

    ring: Tuple[Coordinate, ...]

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self.ring)

    def __len__(self) -> int:
        return len(self.ring)

    def lnglat_ring(self) -> list[list[float]]:
        return [[c.lng, c.lat] for c in self.ring]


@dataclass(frozen=True)
class HotNode:
    position: Coordinate
    weight: float
    category: str = "synthetic"


@dataclass(frozen=True)
class HeatPoint:
    position: Coordinate
    intensity: float  # 0..1
