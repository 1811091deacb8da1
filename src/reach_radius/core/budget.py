"""Travel-time adjustment: nominal minutes + logistics -> effective travel budget."""
from __future__ import annotations

import logging
import math
import random
from typing import TYPE_CHECKING, Optional

from reach_radius.core.models import LogisticsFlags, Query, TransportMode, TravelBudget
from reach_radius.core.traffic import penalty_percent, traffic_multiplier
from reach_radius.errors import InputError

if TYPE_CHECKING:
    from reach_radius.config import Settings

log = logging.getLogger(__name__)

PIT_STOP_CYCLE_MIN = 180
PIT_STOP_MIN = 15
BORDER_DELAY_MIN = 60
WEATHER_MULTIPLIER = 0.8
TRANSIT_RADIUS_FACTOR = 1.5


def adjust_minutes(nominal_minutes: float, flags: Optional[LogisticsFlags] = None) -> float:
    """
    Apply logistics deductions to a nominal duration.

    1. pit stops: 15 min for every full 3-hour cycle
    2. border crossing: a fixed hour, only while more than an hour remains
    3. clamp at zero
    """
    if not isinstance(nominal_minutes, (int, float)) or not math.isfinite(nominal_minutes):
        raise InputError(f"travel time must be a finite number, got {nominal_minutes!r}")
    if nominal_minutes < 0:
        raise InputError(f"travel time must be >= 0, got {nominal_minutes}")

    flags = flags or LogisticsFlags()
    minutes = float(nominal_minutes)

    if flags.pit_stops:
        cycles = math.floor(nominal_minutes / PIT_STOP_CYCLE_MIN)
        minutes -= cycles * PIT_STOP_MIN

    if flags.border_crossing and minutes > BORDER_DELAY_MIN:
        minutes -= BORDER_DELAY_MIN

    return max(0.0, minutes)


def speed_for(mode: TransportMode, config: "Settings") -> float:
    speed = config.speeds_kmh.get(mode)
    if speed is None:
        raise InputError(f"no base speed configured for {mode.value}")
    if speed <= 0:
        raise InputError(f"base speed for {mode.value} must be > 0, got {speed}")
    return float(speed)


def compute_budget(
    query: Query,
    config: "Settings",
    rng: Optional[random.Random] = None,
) -> TravelBudget:
    effective = adjust_minutes(query.nominal_minutes, query.flags)
    speed = speed_for(query.transport_mode, config)

    multiplier = 1.0
    if query.flags.weather:
        multiplier *= WEATHER_MULTIPLIER

    traffic = 1.0
    applied = 0.0
    if query.flags.traffic_heuristic:
        traffic = traffic_multiplier(query.flags.historical_timestamp, rng)
        multiplier *= traffic
        applied = penalty_percent(traffic)

    log.debug(
        "budget: nominal=%.1f effective=%.1f speed=%.1f multiplier=%.3f",
        query.nominal_minutes, effective, speed, multiplier,
    )

    return TravelBudget(
        effective_minutes=effective,
        speed_kmh=speed,
        speed_multiplier=multiplier,
        traffic_multiplier=traffic,
        applied_penalty_percent=applied,
        weather_applied=query.flags.weather,
    )


def theoretical_max_radius_km(
    budget: TravelBudget, mode: TransportMode, target_seconds: float
) -> float:
    """Straight-line reach at base speed; bus and train get 1.5x."""
    radius = (budget.speed_kmh / 3600.0) * target_seconds
    if mode.transit_like:
        radius *= TRANSIT_RADIUS_FACTOR
    return radius
