from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, List, Optional

from reach_radius.boundary.builder import BoundaryBuilder
from reach_radius.contracts.geometry import BoundaryPolygon, HeatPoint, HotNode
from reach_radius.contracts.outcome import ProceduralOutcome, StrategyFailure, StrategyOutcome
from reach_radius.core.budget import compute_budget
from reach_radius.core.cancel import CancelToken
from reach_radius.core.heatmap import generate_heat_points
from reach_radius.core.hotnodes import HotNodeResolver
from reach_radius.core.models import Query, TravelBudget
from reach_radius.geo.polygon import approx_radius_km, area_sq_km, bounding_box
from reach_radius.providers.registry import ProviderSet

if TYPE_CHECKING:
    from reach_radius.config import Settings

log = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    query: Query
    budget: TravelBudget
    polygon: BoundaryPolygon
    outcome: StrategyOutcome
    approx_radius_km: float
    area_sq_km: float
    heat_points: List[HeatPoint] = field(default_factory=list)
    hot_nodes: List[HotNode] = field(default_factory=list)
    failures: List[StrategyFailure] = field(default_factory=list)

    @property
    def effective_minutes(self) -> float:
        return self.budget.effective_minutes

    @property
    def traffic_penalty_percent(self) -> float:
        return self.budget.applied_penalty_percent

    @property
    def degraded(self) -> bool:
        return self.outcome.degraded


def run_analysis(
    query: Query,
    config: "Settings",
    providers: Optional[ProviderSet] = None,
    rng: Optional[random.Random] = None,
    cancel: Optional[CancelToken] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> AnalysisResult:
    """Budget -> boundary -> hot nodes -> heatmap for one query."""
    providers = providers or ProviderSet()
    rng = rng if rng is not None else random.Random()
    token = cancel or CancelToken()

    budget = compute_budget(query, config, rng)
    token.raise_if_cancelled()

    builder = BoundaryBuilder(providers, sleep=sleep)
    polygon, outcome = builder.build(
        query.center, budget, query.transport_mode, query.error_margin_percent, config, cancel=token
    )
    token.raise_if_cancelled()

    if isinstance(outcome, ProceduralOutcome):
        radius = outcome.radius_km
    else:
        radius = approx_radius_km(query.center, polygon)
    area = area_sq_km(polygon)

    log.info(
        "analysis: strategy=%s effective=%.0fmin radius=%.2fkm area=%.0fkm2",
        outcome.strategy, budget.effective_minutes, radius, area,
    )

    result = AnalysisResult(
        query=query,
        budget=budget,
        polygon=polygon,
        outcome=outcome,
        approx_radius_km=radius,
        area_sq_km=area,
        failures=list(builder.failures),
    )

    if query.heatmap:
        resolver = HotNodeResolver(providers.poi, rng)
        result.hot_nodes = resolver.resolve(bounding_box(polygon))
        token.raise_if_cancelled()
        result.heat_points = list(generate_heat_points(
            query.center,
            radius,
            polygon,
            result.hot_nodes,
            rng,
            base_samples=config.heatmap_base_samples,
            density_per_km=config.heatmap_density_per_km,
            proximity_factor=config.heatmap_proximity_factor,
        ))

    token.raise_if_cancelled()
    return result
