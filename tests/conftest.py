"""
Shared fixtures for the reach_radius test suite.

Key concern: tests never touch the network. Remote collaborators are
replaced by the deterministic providers in reach_radius.providers.mock or
by small duck-typed fakes, and ray pacing sleeps are recorded instead of
slept.
"""

import random

import pytest

from reach_radius.config import Settings
from reach_radius.contracts.geometry import Coordinate
from reach_radius.core.models import TravelBudget

MOSCOW = Coordinate(55.7558, 37.6173)


class FixedRandom(random.Random):
    """random() always returns the same value; everything else is seeded."""

    def __init__(self, value: float, seed: int = 0):
        super().__init__(seed)
        self.value = value

    def random(self) -> float:
        return self.value


class SleepRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture()
def center() -> Coordinate:
    return MOSCOW


@pytest.fixture()
def settings() -> Settings:
    """Network strategies enabled in principle, but no pacing delay."""
    return Settings(isochrone_api_key="", ray_delay_s=0.0, cold_logic=False)


@pytest.fixture()
def cold_settings() -> Settings:
    return Settings(cold_logic=True)


@pytest.fixture()
def hour_budget() -> TravelBudget:
    """60 effective minutes at 60 km/h: 3600 s target, 60 km straight-line reach."""
    return TravelBudget(effective_minutes=60, speed_kmh=60)


@pytest.fixture()
def sleep() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(1234)
