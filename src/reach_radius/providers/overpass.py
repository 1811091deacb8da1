"""Overpass (OpenStreetMap) POI lookup for heatmap hot nodes."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import requests

from reach_radius.contracts.geometry import BoundingBox, Coordinate
from reach_radius.errors import InputError, ProviderError
from reach_radius.geo.geodesy import wrap_lng
from reach_radius.providers.base import POI_CATEGORIES, PoiFeature, PoiProvider
from reach_radius.providers.http import HTTPClient

# category -> (element type, tag filter)
_FILTERS = {
    "station": ("node", '["public_transport"="station"]'),
    "cafe": ("node", '["amenity"="cafe"]'),
    "parking": ("node", '["amenity"="parking"]'),
    "residential": ("way", '["landuse"="residential"]'),
    "commercial": ("way", '["landuse"="commercial"]'),
}


def build_query(bbox: BoundingBox, categories: Sequence[str], limit: int, timeout_s: int) -> str:
    # Across the antimeridian the east edge is sent wrapped, so west > east
    east = wrap_lng(bbox.east) if bbox.east > 180.0 else bbox.east
    b = f"({bbox.south},{bbox.west},{bbox.north},{east})"
    lines = [f"[out:json][timeout:{timeout_s}];", "("]
    for cat in categories:
        if cat not in _FILTERS:
            continue
        kind, tag = _FILTERS[cat]
        lines.append(f"  {kind}{tag}{b};")
    lines.append(");")
    lines.append(f"out center limit {limit};")
    return "\n".join(lines)


def _category(tags: Dict[str, Any]) -> str:
    landuse = tags.get("landuse")
    amenity = tags.get("amenity")
    if landuse in ("commercial", "residential"):
        return landuse
    if amenity in ("parking", "cafe"):
        return amenity
    if tags.get("public_transport") == "station":
        return "station"
    return "other"


def _position(el: Dict[str, Any]) -> Optional[Coordinate]:
    lat = el.get("lat")
    lon = el.get("lon")
    if lat is None or lon is None:
        center = el.get("center") or {}
        lat, lon = center.get("lat"), center.get("lon")
    if lat is None or lon is None:
        return None
    return Coordinate(float(lat), float(lon))


class OverpassPoiProvider(PoiProvider):
    name = "overpass"

    def __init__(self, http: HTTPClient, url: str, limit: int = 100, timeout_s: int = 15):
        self.http = http
        self.url = url
        self.limit = limit
        self.timeout_s = timeout_s

    def query(self, bbox: BoundingBox, categories: Sequence[str] = POI_CATEGORIES) -> List[PoiFeature]:
        ql = build_query(bbox, categories, self.limit, self.timeout_s)
        try:
            data = self.http.post_json(self.url, data={"data": ql})
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(self.name, f"request failed: {type(e).__name__}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("elements"), list):
            raise ProviderError(self.name, "response has no elements list")

        out: List[PoiFeature] = []
        for el in data["elements"]:
            if not isinstance(el, dict):
                continue
            try:
                pos = _position(el)
                category = _category(el.get("tags") or {})
            except (AttributeError, TypeError, ValueError, InputError):
                continue
            if pos is None:
                continue
            out.append(PoiFeature(position=pos, category=category))
        return out
