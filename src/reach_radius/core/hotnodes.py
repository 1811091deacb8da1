"""Weighted points of interest that bias the heatmap toward plausible locations."""
from __future__ import annotations

import logging
import random
from typing import List, Optional

from reach_radius.contracts.geometry import BoundingBox, Coordinate, HotNode
from reach_radius.errors import ProviderError
from reach_radius.geo.geodesy import wrap_lng
from reach_radius.providers.base import POI_CATEGORIES, PoiProvider

log = logging.getLogger(__name__)

CATEGORY_WEIGHTS = {
    "commercial": 1.2,
    "parking": 1.0,
    "residential": 0.9,
}
DEFAULT_WEIGHT = 0.8  # stations, cafes, anything else
WEIGHT_JITTER = 0.3

SYNTHETIC_MIN = 3
SYNTHETIC_MAX = 6


def category_weight(category: str) -> float:
    return CATEGORY_WEIGHTS.get(category, DEFAULT_WEIGHT)


def synthesize_nodes(bbox: BoundingBox, rng: random.Random) -> List[HotNode]:
    count = rng.randint(SYNTHETIC_MIN, SYNTHETIC_MAX)
    nodes = []
    for _ in range(count):
        lat = bbox.south + rng.random() * (bbox.north - bbox.south)
        lng = bbox.west + rng.random() * (bbox.east - bbox.west)
        nodes.append(HotNode(Coordinate(lat, wrap_lng(lng)), weight=0.5 + rng.random() * 0.5))
    return nodes


class HotNodeResolver:
    """Fetches POIs, or synthesizes a handful of nodes when the provider can't help."""

    def __init__(self, provider: Optional[PoiProvider] = None, rng: Optional[random.Random] = None):
        self.provider = provider
        self.rng = rng if rng is not None else random.Random()

    def resolve(self, bbox: BoundingBox) -> List[HotNode]:
        nodes: List[HotNode] = []
        if self.provider is not None:
            try:
                features = self.provider.query(bbox, POI_CATEGORIES)
            except ProviderError as e:
                log.info("POI lookup failed, using synthetic hot nodes: %s", e)
                features = []
            for f in features:
                w = category_weight(f.category) + self.rng.random() * WEIGHT_JITTER
                nodes.append(HotNode(f.position, weight=w, category=f.category))

        if not nodes:
            nodes = synthesize_nodes(bbox, self.rng)
        return nodes
