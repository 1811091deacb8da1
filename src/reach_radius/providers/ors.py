"""OpenRouteService isochrones. Needs an API key.

API docs: https://openrouteservice.org/dev/#/api-docs/v2/isochrones
"""
from __future__ import annotations

from typing import Dict, List

import requests

from reach_radius.contracts.geometry import Coordinate
from reach_radius.core.models import TransportMode
from reach_radius.errors import InputError, ProviderError
from reach_radius.providers.base import IsochroneProvider
from reach_radius.providers.http import HTTPClient


class ORSIsochroneProvider(IsochroneProvider):
    name = "ors"

    def __init__(self, http: HTTPClient, api_key: str, base_url: str, profiles: Dict[TransportMode, str]):
        self.http = http
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.profiles = profiles

    def isochrone(self, origin: Coordinate, mode: TransportMode, range_s: float) -> List[Coordinate]:
        profile = self.profiles.get(mode, "driving-car")
        body = {
            "locations": [[origin.lng, origin.lat]],
            "range": [int(round(range_s))],
            "range_type": "time",
        }
        headers = {"Authorization": self.api_key, "Content-Type": "application/json"}

        try:
            data = self.http.post_json(f"{self.base_url}/{profile}", json=body, headers=headers)
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(self.name, f"request failed: {type(e).__name__}: {e}") from e

        try:
            geom = data["features"][0]["geometry"]
            if geom["type"] != "Polygon":
                raise ValueError(f"unexpected geometry type {geom['type']}")
            outer = geom["coordinates"][0]
            return [Coordinate(float(lat), float(lng)) for lng, lat, *_ in outer]
        except (KeyError, IndexError, TypeError, ValueError, InputError) as e:
            raise ProviderError(self.name, f"malformed isochrone: {type(e).__name__}: {e}") from e
