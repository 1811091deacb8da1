from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

from reach_radius.contracts.geometry import Coordinate
from reach_radius.contracts.outcome import StrategyFailure, StrategyOutcome
from reach_radius.core.budget import theoretical_max_radius_km
from reach_radius.core.cancel import CancelToken
from reach_radius.core.models import TransportMode, TravelBudget


@dataclass(frozen=True)
class BoundaryRequest:
    center: Coordinate
    budget: TravelBudget
    mode: TransportMode
    error_margin_percent: float = 0.0

    @property
    def target_seconds(self) -> float:
        return self.budget.target_seconds(self.error_margin_percent)

    @property
    def max_radius_km(self) -> float:
        return theoretical_max_radius_km(self.budget, self.mode, self.target_seconds)


class BoundaryStrategy(ABC):
    """Turns a travel budget into a boundary ring, or reports why it could not."""

    name = "strategy"

    @abstractmethod
    def build(
        self, request: BoundaryRequest, cancel: Optional[CancelToken] = None
    ) -> Union[StrategyOutcome, StrategyFailure]:
        raise NotImplementedError
