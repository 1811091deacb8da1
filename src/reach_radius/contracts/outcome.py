"""Which boundary strategy produced the polygon, as an explicit tagged value."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from reach_radius.contracts.geometry import BoundaryPolygon


@dataclass(frozen=True)
class RemoteOutcome:
    polygon: BoundaryPolygon
    strategy: str = "remote_isochrone"

    kind = "remote"

    @property
    def degraded(self) -> bool:
        return False


@dataclass(frozen=True)
class RemoteDegradedOutcome:
    polygon: BoundaryPolygon
    failed_ray_count: int
    strategy: str = "radial_sampling"

    kind = "remote_degraded"

    @property
    def degraded(self) -> bool:
        return True


@dataclass(frozen=True)
class ProceduralOutcome:
    polygon: BoundaryPolygon
    radius_km: float
    # True when network strategies were disabled; False when reached as a fallback
    cold_logic: bool = True
    strategy: str = "procedural_blob"

    kind = "procedural"

    @property
    def degraded(self) -> bool:
        return not self.cold_logic


StrategyOutcome = Union[RemoteOutcome, RemoteDegradedOutcome, ProceduralOutcome]


@dataclass(frozen=True)
class StrategyFailure:
    """A strategy that was unavailable or failed as a whole."""

    strategy: str
    reason: str
