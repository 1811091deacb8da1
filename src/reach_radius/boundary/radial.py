"""Radial sampling: probe the reachable distance along evenly spaced bearings."""
from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Tuple, Union

from reach_radius.boundary.base import BoundaryRequest, BoundaryStrategy
from reach_radius.contracts.geometry import Coordinate
from reach_radius.contracts.outcome import (
    RemoteDegradedOutcome,
    RemoteOutcome,
    StrategyFailure,
    StrategyOutcome,
)
from reach_radius.core.cancel import CancelToken
from reach_radius.errors import GeometryError, ProviderError
from reach_radius.geo.geodesy import along, destination, path_length_km
from reach_radius.geo.polygon import close_ring, convex_hull, make_polygon
from reach_radius.providers.base import Route, RoutingProvider

log = logging.getLogger(__name__)

# Routes aim past the theoretical reach so the cut happens on the route itself
_PROBE_OVERSHOOT = 1.5
_HULL_MIN_RAYS = 8


def reach_point(route: Route, target_seconds: float) -> Coordinate:
    """
    Where along ``route`` the traveller is after ``target_seconds``.

    Assumes uniform speed along the path: the cut is made at the same
    fraction of distance as of duration. This is an approximation, not a
    time-accurate cut.
    """
    if route.duration_s <= target_seconds:
        return route.geometry[-1]
    ratio = target_seconds / route.duration_s
    return along(route.geometry, path_length_km(route.geometry) * ratio)


class RadialSamplingStrategy(BoundaryStrategy):
    name = "radial_sampling"

    def __init__(
        self,
        provider: RoutingProvider,
        ray_count: int = 16,
        delay_s: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if ray_count < 3:
            raise ValueError(f"ray_count must be >= 3, got {ray_count}")
        self.provider = provider
        self.ray_count = ray_count
        self.delay_s = delay_s
        self.sleep = sleep

    def _cast_rays(
        self, request: BoundaryRequest, cancel: Optional[CancelToken]
    ) -> Tuple[List[Coordinate], int]:
        target_s = request.target_seconds
        max_radius = request.max_radius_km
        step = 360.0 / self.ray_count

        points: List[Coordinate] = []
        failed = 0
        for i in range(self.ray_count):
            if cancel is not None:
                cancel.raise_if_cancelled()

            angle = step * i
            probe = destination(request.center, max_radius * _PROBE_OVERSHOOT, angle)
            try:
                route = self.provider.route(request.center, probe, request.mode)
                points.append(reach_point(route, target_s))
            except ProviderError as e:
                log.warning("Ray %d failed, using straight-line point: %s", i, e)
                failed += 1
                points.append(destination(request.center, max_radius, angle))

            # Pacing for public routing servers; keep even when rays fail
            self.sleep(self.delay_s)

        return points, failed

    def build(
        self, request: BoundaryRequest, cancel: Optional[CancelToken] = None
    ) -> Union[StrategyOutcome, StrategyFailure]:
        points, failed = self._cast_rays(request, cancel)
        ring = close_ring(points)

        try:
            if self.ray_count >= _HULL_MIN_RAYS:
                ring = convex_hull(points)
            polygon = make_polygon(ring)
        except GeometryError as e:
            log.warning("Radial sampling produced a degenerate ring: %s", e)
            return StrategyFailure(self.name, f"GeometryError: {e}")

        if failed:
            log.info("Radial sampling degraded: %d/%d rays fell back", failed, self.ray_count)
            return RemoteDegradedOutcome(polygon=polygon, failed_ray_count=failed, strategy=self.name)
        return RemoteOutcome(polygon=polygon, strategy=self.name)
