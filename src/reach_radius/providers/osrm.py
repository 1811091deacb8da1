"""OSRM point-to-point routing (public demo server by default)."""
from __future__ import annotations

from typing import Dict, Optional

import requests

from reach_radius.contracts.geometry import Coordinate
from reach_radius.core.models import TransportMode
from reach_radius.errors import InputError, ProviderError
from reach_radius.providers.base import Route, RoutingProvider
from reach_radius.providers.http import HTTPClient


class OSRMRoutingProvider(RoutingProvider):
    name = "osrm"

    def __init__(self, http: HTTPClient, base_url: str, profiles: Dict[TransportMode, str]):
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.profiles = profiles

    def _url(self, origin: Coordinate, dest: Coordinate, mode: TransportMode) -> str:
        profile = self.profiles.get(mode, "car")
        return (
            f"{self.base_url}/{profile}/{origin.lng},{origin.lat};{dest.lng},{dest.lat}"
            "?overview=full&geometries=geojson"
        )

    def route(self, origin: Coordinate, destination: Coordinate, mode: TransportMode) -> Route:
        url = self._url(origin, destination, mode)
        try:
            data = self.http.get_json(url)
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(self.name, f"request failed: {type(e).__name__}: {e}") from e

        return self._parse(data)

    def _parse(self, data: Optional[dict]) -> Route:
        if not isinstance(data, dict):
            raise ProviderError(self.name, "response is not a JSON object")
        code = data.get("code")
        if code != "Ok":
            raise ProviderError(self.name, f"routing error code {code!r}")

        try:
            r0 = data["routes"][0]
            coords = r0["geometry"]["coordinates"]
            geometry = [Coordinate(float(lat), float(lng)) for lng, lat in coords]
            duration = float(r0["duration"])
        except (KeyError, IndexError, TypeError, ValueError, InputError) as e:
            raise ProviderError(self.name, f"malformed route: {type(e).__name__}: {e}") from e

        if not geometry:
            raise ProviderError(self.name, "route has empty geometry")
        return Route(geometry=geometry, duration_s=duration)
