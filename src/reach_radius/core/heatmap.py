"""Probability heatmap: rejection-sampled points inside the boundary."""
from __future__ import annotations

import math
import random
from typing import Iterator, Optional, Sequence

from reach_radius.contracts.geometry import BoundaryPolygon, Coordinate, HeatPoint, HotNode
from reach_radius.errors import InputError
from reach_radius.geo.geodesy import haversine_km, wrap_lng
from reach_radius.geo.polygon import PolygonTester, bounding_box

BASE_SAMPLES = 600
DENSITY_PER_KM = 15.0
PROXIMITY_FACTOR = 0.35


def sample_count(radius_km: float, base: int = BASE_SAMPLES, density_per_km: float = DENSITY_PER_KM) -> int:
    return base + math.floor(radius_km * density_per_km)


def generate_heat_points(
    center: Coordinate,
    radius_km: float,
    polygon: BoundaryPolygon,
    hot_nodes: Sequence[HotNode] = (),
    rng: Optional[random.Random] = None,
    base_samples: int = BASE_SAMPLES,
    density_per_km: float = DENSITY_PER_KM,
    proximity_factor: float = PROXIMITY_FACTOR,
) -> Iterator[HeatPoint]:
    """
    Yield intensity-weighted points inside ``polygon``.

    Candidates are drawn uniformly from the polygon's bounding box; those
    outside the polygon are dropped, so fewer points than candidates come
    out. Intensity decays linearly with distance from ``center`` and gains
    an additive contribution from every hot node within
    ``radius_km * proximity_factor``. Hot nodes outside the polygon are
    ignored. Every call draws fresh randomness.
    """
    if not radius_km > 0:
        raise InputError(f"heatmap radius must be > 0, got {radius_km}")
    r = rng if rng is not None else random.Random()

    tester = PolygonTester(polygon)
    bbox = bounding_box(polygon)
    threshold = radius_km * proximity_factor
    nodes = [n for n in hot_nodes if tester.contains(n.position)]

    for _ in range(sample_count(radius_km, base_samples, density_per_km)):
        lng = bbox.west + r.random() * (bbox.east - bbox.west)
        lat = bbox.south + r.random() * (bbox.north - bbox.south)
        pt = Coordinate(lat, wrap_lng(lng))
        if not tester.contains(pt):
            continue

        intensity = 1.0 - haversine_km(center, pt) / radius_km
        for node in nodes:
            d = haversine_km(node.position, pt)
            if d < threshold:
                intensity += node.weight * (1.0 - d / threshold)

        yield HeatPoint(pt, min(1.0, max(0.0, intensity)))
