"""Procedural blob: the no-network ("cold logic") boundary."""
from __future__ import annotations

import math
from typing import List, Optional

from reach_radius.boundary.base import BoundaryRequest, BoundaryStrategy
from reach_radius.contracts.geometry import Coordinate
from reach_radius.contracts.outcome import ProceduralOutcome
from reach_radius.core.cancel import CancelToken
from reach_radius.errors import InputError
from reach_radius.geo.geodesy import destination
from reach_radius.geo.polygon import make_polygon

# Straight-line reach over road distance (Manhattan / road-curve approximation)
ROAD_CURVATURE = 1.35
VERTICES = 64
COLD_LOGIC_AMPLITUDE = 1.0
FALLBACK_AMPLITUDE = 0.5


def noise(theta: float) -> float:
    """Deterministic per-angle perturbation in [-0.3, 0.3]."""
    return math.sin(3 * theta) * math.cos(5 * theta) * 0.3


def effective_radius_km(request: BoundaryRequest) -> float:
    if request.budget.speed_kmh <= 0:
        raise InputError(f"speed must be > 0, got {request.budget.speed_kmh}")
    radius = (request.budget.speed_kmh / 3600.0) * request.target_seconds
    if radius < 0:
        raise InputError(f"radius must be >= 0, got {radius}")
    if not request.mode.rail_like:
        radius /= ROAD_CURVATURE
    return radius


def blob_ring(center: Coordinate, radius_km: float, amplitude: float, vertices: int = VERTICES) -> List[Coordinate]:
    ring: List[Coordinate] = []
    for i in range(vertices + 1):
        frac = i / vertices
        theta = frac * 2 * math.pi
        r = radius_km * (1 + amplitude * noise(theta))
        ring.append(destination(center, r, frac * 360.0))
    ring[-1] = ring[0]
    return ring


class ProceduralBlobStrategy(BoundaryStrategy):
    """Always available. Fails only on invalid input or a zero radius."""

    name = "procedural_blob"

    def __init__(self, cold_logic: bool = True, vertices: int = VERTICES):
        self.cold_logic = cold_logic
        self.vertices = max(VERTICES, vertices)

    def build(self, request: BoundaryRequest, cancel: Optional[CancelToken] = None) -> ProceduralOutcome:
        if cancel is not None:
            cancel.raise_if_cancelled()
        radius = effective_radius_km(request)
        amplitude = COLD_LOGIC_AMPLITUDE if self.cold_logic else FALLBACK_AMPLITUDE
        polygon = make_polygon(blob_ring(request.center, radius, amplitude, self.vertices))
        return ProceduralOutcome(polygon=polygon, radius_km=radius, cold_logic=self.cold_logic)
