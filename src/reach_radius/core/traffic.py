"""Traffic heuristic: simulated rush-hour speed penalty by weekday and hour."""
from __future__ import annotations

import random
from datetime import datetime
from typing import Optional

_FLOOR = 0.1
_VARIANCE = 0.05  # up to 5% extra slowdown per request


def _schedule_multiplier(weekday: int, decimal_hours: float) -> float:
    """Base multiplier before variance. ``weekday`` follows datetime.weekday() (Mon=0)."""
    if weekday >= 5:
        # Weekend: mid-day slowdown only
        return 0.85 if 12.0 <= decimal_hours <= 16.0 else 0.95

    if 7.5 <= decimal_hours <= 9.5:
        return 0.60
    if 17.0 <= decimal_hours <= 19.5:
        return 0.55  # evening rush is usually worse
    if 9.5 < decimal_hours < 17.0:
        return 0.80
    return 0.95


def traffic_multiplier(
    timestamp: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> float:
    """
    Speed multiplier in [0.1, 1.0] for the given moment (1.0 = free flow).

    Uses local "now" when ``timestamp`` is None.
    """
    t = timestamp if timestamp is not None else datetime.now()
    r = rng if rng is not None else random.Random()

    decimal_hours = t.hour + t.minute / 60.0
    m = _schedule_multiplier(t.weekday(), decimal_hours)
    m -= r.random() * _VARIANCE
    return min(1.0, max(_FLOOR, m))


def penalty_percent(multiplier: float) -> float:
    """User-facing traffic penalty, e.g. 0.6 -> 40.0."""
    return 100.0 * (1.0 - multiplier)
