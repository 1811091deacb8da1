from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from reach_radius.providers.base import IsochroneProvider, PoiProvider, RoutingProvider

if TYPE_CHECKING:
    from reach_radius.config import Settings


@dataclass
class ProviderSet:
    """The external collaborators one analysis may call. Any of them may be absent."""

    routing: Optional[RoutingProvider] = None
    isochrone: Optional[IsochroneProvider] = None
    poi: Optional[PoiProvider] = None


def build_providers(provider_str: str, config: "Settings") -> ProviderSet:
    """
    Build a provider set from a CLI string like:
      "osrm+ors+overpass"
      "osrm"
      "mock"
    """
    tokens = [t.strip().lower() for t in provider_str.split("+") if t.strip()]
    if not tokens:
        tokens = ["osrm", "ors", "overpass"]

    # Local imports to avoid circular imports
    from reach_radius.providers.http import HTTPClient
    from reach_radius.providers.mock import MockIsochroneProvider, MockPoiProvider, MockRoutingProvider
    from reach_radius.providers.ors import ORSIsochroneProvider
    from reach_radius.providers.osrm import OSRMRoutingProvider
    from reach_radius.providers.overpass import OverpassPoiProvider

    http = HTTPClient(
        user_agent=config.user_agent,
        timeout_s=config.http_timeout_s,
        tries=config.http_tries,
        backoff_s=config.http_backoff_s,
    )

    ps = ProviderSet()
    for t in tokens:
        if t == "osrm":
            if config.osrm_base_url:
                ps.routing = OSRMRoutingProvider(http, config.osrm_base_url, config.osrm_profiles)
        elif t == "ors":
            if config.isochrone_api_key:
                ps.isochrone = ORSIsochroneProvider(
                    http, config.isochrone_api_key, config.isochrone_base_url, config.ors_profiles
                )
        elif t == "overpass":
            if config.overpass_url:
                ps.poi = OverpassPoiProvider(http, config.overpass_url, config.poi_limit, config.http_timeout_s)
        elif t == "mock":
            ps.routing = MockRoutingProvider()
            ps.isochrone = MockIsochroneProvider()
            ps.poi = MockPoiProvider()
        else:
            raise ValueError(f"Unknown provider token: '{t}' (supported: osrm, ors, overpass, mock)")

    return ps
