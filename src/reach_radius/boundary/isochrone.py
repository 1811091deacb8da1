from __future__ import annotations

import logging
from typing import Optional, Union

from reach_radius.boundary.base import BoundaryRequest, BoundaryStrategy
from reach_radius.contracts.outcome import RemoteOutcome, StrategyFailure, StrategyOutcome
from reach_radius.core.cancel import CancelToken
from reach_radius.errors import GeometryError, ProviderError
from reach_radius.geo.polygon import make_polygon
from reach_radius.providers.base import IsochroneProvider

log = logging.getLogger(__name__)


class RemoteIsochroneStrategy(BoundaryStrategy):
    """One isochrone request; the returned ring is the boundary, unreshaped."""

    name = "remote_isochrone"

    def __init__(self, provider: IsochroneProvider):
        self.provider = provider

    def build(
        self, request: BoundaryRequest, cancel: Optional[CancelToken] = None
    ) -> Union[StrategyOutcome, StrategyFailure]:
        try:
            ring = self.provider.isochrone(request.center, request.mode, request.target_seconds)
            polygon = make_polygon(ring)
        except (ProviderError, GeometryError) as e:
            log.warning("Isochrone request failed: %s", e)
            return StrategyFailure(self.name, f"{type(e).__name__}: {e}")

        return RemoteOutcome(polygon=polygon, strategy=self.name)
