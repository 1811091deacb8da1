from __future__ import annotations

from typing import List, Optional, Sequence

from reach_radius.contracts.geometry import BoundingBox, Coordinate
from reach_radius.core.models import TransportMode
from reach_radius.errors import ProviderError
from reach_radius.geo.geodesy import bearing_deg, destination, haversine_km, wrap_lng
from reach_radius.providers.base import (
    POI_CATEGORIES,
    IsochroneProvider,
    PoiFeature,
    PoiProvider,
    Route,
    RoutingProvider,
)


class MockRoutingProvider(RoutingProvider):
    """
    Deterministic fake routing so the pipeline runs end-to-end without APIs.
    Routes follow the straight line at a constant speed, with a few
    intermediate vertices so along-route interpolation is exercised.
    """

    name = "mock-routing"

    def __init__(self, speed_kmh: float = 50.0, segments: int = 4):
        self.speed_kmh = speed_kmh
        self.segments = max(1, segments)
        self.calls: List[tuple[Coordinate, Coordinate]] = []

    def route(self, origin: Coordinate, dest: Coordinate, mode: TransportMode) -> Route:
        self.calls.append((origin, dest))
        dist = haversine_km(origin, dest)
        brg = bearing_deg(origin, dest)
        geometry = [origin]
        for i in range(1, self.segments):
            geometry.append(destination(origin, dist * i / self.segments, brg))
        geometry.append(dest)
        return Route(geometry=geometry, duration_s=dist / self.speed_kmh * 3600.0)


class MockIsochroneProvider(IsochroneProvider):
    """Circle of radius speed * range, 32 vertices, closed."""

    name = "mock-isochrone"

    def __init__(self, speed_kmh: float = 50.0, vertices: int = 32):
        self.speed_kmh = speed_kmh
        self.vertices = vertices

    def isochrone(self, origin: Coordinate, mode: TransportMode, range_s: float) -> List[Coordinate]:
        radius = self.speed_kmh * range_s / 3600.0
        ring = [destination(origin, radius, 360.0 * i / self.vertices) for i in range(self.vertices)]
        ring.append(ring[0])
        return ring


class MockPoiProvider(PoiProvider):
    """One feature per category, spread around the bbox center."""

    name = "mock-poi"

    def __init__(self, features: Optional[List[PoiFeature]] = None):
        self.features = features

    def query(self, bbox: BoundingBox, categories: Sequence[str] = POI_CATEGORIES) -> List[PoiFeature]:
        if self.features is not None:
            return list(self.features)
        lat0 = (bbox.south + bbox.north) / 2
        lng0 = (bbox.west + bbox.east) / 2
        dlat = (bbox.north - bbox.south) / 8
        dlng = (bbox.east - bbox.west) / 8
        out = []
        for i, cat in enumerate(categories):
            out.append(PoiFeature(Coordinate(lat0 + dlat * (i % 3 - 1), wrap_lng(lng0 + dlng * (i % 2))), cat))
        return out


class FailingRoutingProvider(RoutingProvider):
    name = "failing-routing"

    def __init__(self, reason: str = "429 Too Many Requests"):
        self.reason = reason
        self.calls = 0

    def route(self, origin: Coordinate, dest: Coordinate, mode: TransportMode) -> Route:
        self.calls += 1
        raise ProviderError(self.name, self.reason)


class FailingIsochroneProvider(IsochroneProvider):
    name = "failing-isochrone"

    def isochrone(self, origin: Coordinate, mode: TransportMode, range_s: float) -> List[Coordinate]:
        raise ProviderError(self.name, "503 Service Unavailable")


class FailingPoiProvider(PoiProvider):
    name = "failing-poi"

    def query(self, bbox: BoundingBox, categories: Sequence[str] = POI_CATEGORIES) -> List[PoiFeature]:
        raise ProviderError(self.name, "overpass timeout")
