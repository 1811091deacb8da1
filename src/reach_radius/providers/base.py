from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Sequence

from reach_radius.contracts.geometry import BoundingBox, Coordinate
from reach_radius.core.models import TransportMode


@dataclass(frozen=True)
class Route:
    geometry: List[Coordinate]
    duration_s: float


@dataclass(frozen=True)
class PoiFeature:
    position: Coordinate
    category: str  # station / cafe / parking / residential / commercial


POI_CATEGORIES = ("station", "cafe", "parking", "residential", "commercial")


class RoutingProvider(ABC):
    """Point-to-point routing."""

    name = "routing"

    @abstractmethod
    def route(self, origin: Coordinate, destination: Coordinate, mode: TransportMode) -> Route:
        raise NotImplementedError


class IsochroneProvider(ABC):
    """Time-based isochrone polygons."""

    name = "isochrone"

    @abstractmethod
    def isochrone(self, origin: Coordinate, mode: TransportMode, range_s: float) -> List[Coordinate]:
        raise NotImplementedError


class PoiProvider(ABC):
    """Bulk points-of-interest lookup within a bounding box."""

    name = "poi"

    @abstractmethod
    def query(self, bbox: BoundingBox, categories: Sequence[str] = POI_CATEGORIES) -> List[PoiFeature]:
        raise NotImplementedError
