"""Centralized settings for the reach-radius engine."""
from __future__ import annotations

from typing import Dict

from pydantic import Field
from pydantic_settings import BaseSettings

from reach_radius.core.models import TransportMode


DEFAULT_SPEEDS_KMH: Dict[TransportMode, float] = {
    TransportMode.CAR: 60.0,
    TransportMode.OFF_ROAD: 35.0,
    TransportMode.WALK: 5.0,
    TransportMode.BIKE: 15.0,
    TransportMode.BUS: 25.0,
    TransportMode.TRAIN: 60.0,
}

# Public OSRM only serves car / bike / foot
DEFAULT_OSRM_PROFILES: Dict[TransportMode, str] = {
    TransportMode.CAR: "car",
    TransportMode.OFF_ROAD: "car",
    TransportMode.WALK: "foot",
    TransportMode.BIKE: "bike",
    TransportMode.BUS: "car",
    TransportMode.TRAIN: "car",
}

DEFAULT_ORS_PROFILES: Dict[TransportMode, str] = {
    TransportMode.CAR: "driving-car",
    TransportMode.OFF_ROAD: "driving-car",
    TransportMode.WALK: "foot-walking",
    TransportMode.BIKE: "cycling-regular",
    TransportMode.BUS: "driving-car",
    TransportMode.TRAIN: "driving-car",
}


class Settings(BaseSettings):
    model_config = {"env_prefix": "REACH_RADIUS_"}

    # Isochrone provider (OpenRouteService): empty key means disabled
    isochrone_api_key: str = ""
    isochrone_base_url: str = "https://api.openrouteservice.org/v2/isochrones"

    # Routing provider (OSRM): empty URL means disabled
    osrm_base_url: str = "https://router.project-osrm.org/route/v1"

    # POI provider (Overpass): empty URL means synthesized hot nodes only
    overpass_url: str = "https://overpass-api.de/api/interpreter"
    poi_limit: int = 100

    user_agent: str = "ReachRadius/0.1.0"
    http_timeout_s: int = 15
    http_tries: int = 2
    http_backoff_s: float = 0.5

    # Radial sampling
    ray_count: int = 16
    ray_delay_s: float = 0.1  # pacing between ray requests, never 0 against public OSRM

    # Skip every network boundary strategy
    cold_logic: bool = False

    # Heatmap sampling
    heatmap_base_samples: int = 600
    heatmap_density_per_km: float = 15.0
    heatmap_proximity_factor: float = 0.35

    speeds_kmh: Dict[TransportMode, float] = Field(default_factory=lambda: dict(DEFAULT_SPEEDS_KMH))
    osrm_profiles: Dict[TransportMode, str] = Field(default_factory=lambda: dict(DEFAULT_OSRM_PROFILES))
    ors_profiles: Dict[TransportMode, str] = Field(default_factory=lambda: dict(DEFAULT_ORS_PROFILES))

    @property
    def isochrone_enabled(self) -> bool:
        return bool(self.isochrone_api_key) and not self.cold_logic

    @property
    def routing_enabled(self) -> bool:
        return bool(self.osrm_base_url) and not self.cold_logic


settings = Settings()
