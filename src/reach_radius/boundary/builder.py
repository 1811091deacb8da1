"""Boundary builder: try each strategy in fallback order."""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

from reach_radius.boundary.base import BoundaryRequest, BoundaryStrategy
from reach_radius.boundary.isochrone import RemoteIsochroneStrategy
from reach_radius.boundary.procedural import ProceduralBlobStrategy
from reach_radius.boundary.radial import RadialSamplingStrategy
from reach_radius.contracts.geometry import BoundaryPolygon, Coordinate
from reach_radius.contracts.outcome import StrategyFailure, StrategyOutcome
from reach_radius.core.cancel import CancelToken
from reach_radius.core.models import TransportMode, TravelBudget
from reach_radius.providers.registry import ProviderSet

if TYPE_CHECKING:
    from reach_radius.config import Settings

log = logging.getLogger(__name__)


class BoundaryBuilder:
    def __init__(self, providers: Optional[ProviderSet] = None, sleep: Callable[[float], None] = time.sleep):
        self.providers = providers or ProviderSet()
        self.sleep = sleep
        self.failures: List[StrategyFailure] = []

    def remote_strategies(self, config: "Settings") -> List[BoundaryStrategy]:
        out: List[BoundaryStrategy] = []
        if config.isochrone_enabled and self.providers.isochrone is not None:
            out.append(RemoteIsochroneStrategy(self.providers.isochrone))
        if config.routing_enabled and self.providers.routing is not None:
            out.append(RadialSamplingStrategy(
                self.providers.routing,
                ray_count=config.ray_count,
                delay_s=config.ray_delay_s,
                sleep=self.sleep,
            ))
        return out

    def build(
        self,
        center: Coordinate,
        budget: TravelBudget,
        mode: TransportMode,
        error_margin_percent: float,
        config: "Settings",
        cancel: Optional[CancelToken] = None,
    ) -> Tuple[BoundaryPolygon, StrategyOutcome]:
        request = BoundaryRequest(center, budget, mode, error_margin_percent)
        self.failures = []

        remote = self.remote_strategies(config)
        for strategy in remote:
            if cancel is not None:
                cancel.raise_if_cancelled()
            result = strategy.build(request, cancel)
            if isinstance(result, StrategyFailure):
                log.warning("Strategy %s failed (%s); falling back", result.strategy, result.reason)
                self.failures.append(result)
                continue
            return result.polygon, result

        # Cold logic when no remote strategy was even attempted
        procedural = ProceduralBlobStrategy(cold_logic=not remote)
        outcome = procedural.build(request, cancel)
        return outcome.polygon, outcome
