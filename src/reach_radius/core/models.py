from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from reach_radius.contracts.geometry import Coordinate
from reach_radius.errors import InputError


class TransportMode(str, Enum):
    """Transport profiles. Values match the original form's radio buttons."""

    CAR = "driving-car"
    OFF_ROAD = "off-road"
    WALK = "foot-walking"
    BIKE = "cycling-regular"
    BUS = "transit"
    TRAIN = "train"

    @property
    def rail_like(self) -> bool:
        # Rail follows straighter paths than the road network
        return self is TransportMode.TRAIN

    @property
    def transit_like(self) -> bool:
        # Scheduled services get a wider search envelope than their base speed suggests
        return self in (TransportMode.BUS, TransportMode.TRAIN)


class LogisticsFlags(BaseModel):
    model_config = ConfigDict(frozen=True)

    weather: bool = False
    pit_stops: bool = False
    border_crossing: bool = False
    traffic_heuristic: bool = False
    historical_timestamp: Optional[datetime] = None


class Query(BaseModel):
    """One analysis request. Immutable; lives for a single computation."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(ge=-180, le=180, allow_inf_nan=False)
    nominal_minutes: float = Field(ge=0, allow_inf_nan=False)
    transport_mode: TransportMode = TransportMode.CAR
    error_margin_percent: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    flags: LogisticsFlags = Field(default_factory=LogisticsFlags)
    heatmap: bool = True

    @property
    def center(self) -> Coordinate:
        return Coordinate(self.lat, self.lng)

    @classmethod
    def build(cls, **data: Any) -> "Query":
        """Validate raw input, raising InputError instead of pydantic's ValidationError."""
        try:
            return cls(**data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise InputError(f"invalid query: {problems}") from e


class TravelBudget(BaseModel):
    model_config = ConfigDict(frozen=True)

    effective_minutes: float = Field(ge=0)
    speed_kmh: float = Field(gt=0)
    # weather x traffic; scales the reachable time window
    speed_multiplier: float = Field(default=1.0, gt=0, le=1)
    traffic_multiplier: float = Field(default=1.0, ge=0.1, le=1)
    applied_penalty_percent: float = Field(default=0.0, ge=0, le=100)
    weather_applied: bool = False

    def target_seconds(self, error_margin_percent: float = 0.0) -> float:
        """Boundary search envelope in seconds, inflated by the error margin."""
        secs = self.effective_minutes * 60.0 * self.speed_multiplier
        return secs * (1.0 + error_margin_percent / 100.0)


def parse_center(text: str) -> Coordinate:
    """Parse a ``"lat, lng"`` string as typed into the finish-point field."""
    if not text or not text.strip():
        raise InputError("no finish point given")
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 2:
        raise InputError(f"expected 'lat, lng', got {text!r}")
    try:
        lat, lng = float(parts[0]), float(parts[1])
    except ValueError as e:
        raise InputError(f"non-numeric coordinate in {text!r}") from e
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise InputError(f"non-finite coordinate in {text!r}")
    return Coordinate(lat, lng)
