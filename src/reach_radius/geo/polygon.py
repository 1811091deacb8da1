"""Boundary ring construction, validation and measurement (shapely-backed)."""
from __future__ import annotations

from math import radians, sin
from typing import Iterable, List, Sequence, Tuple

from shapely import prepare
from shapely.geometry import MultiPoint, Point, Polygon

from reach_radius.contracts.geometry import BoundaryPolygon, BoundingBox, Coordinate
from reach_radius.errors import GeometryError
from reach_radius.geo.geodesy import haversine_km, unwrap_lng, wrap_lng

# Turf / Mapbox ring-area uses the WGS-84 semi-major axis
_AREA_RADIUS_M = 6378137.0


def close_ring(points: Sequence[Coordinate]) -> List[Coordinate]:
    pts = list(points)
    if pts and pts[0] != pts[-1]:
        pts.append(pts[0])
    return pts


def _planar(points: Sequence[Coordinate]) -> List[Tuple[float, float]]:
    """
    (lng, lat) pairs with longitudes unwrapped against the first point.

    A ring that straddles the antimeridian stays contiguous in this frame
    instead of wrapping the long way round the globe.
    """
    if not points:
        return []
    ref = points[0].lng
    return [(unwrap_lng(c.lng, ref), c.lat) for c in points]


def to_shapely(polygon: BoundaryPolygon) -> Polygon:
    return Polygon(_planar(polygon.ring))


def make_polygon(ring: Sequence[Coordinate]) -> BoundaryPolygon:
    """
    Validate a ring and freeze it into a BoundaryPolygon.

    The ring must already be closed (first == last), have at least four
    vertices, not self-intersect and enclose a positive area.
    """
    pts = tuple(ring)
    if len(pts) < 4:
        raise GeometryError(f"ring needs >= 4 vertices, got {len(pts)}")
    if pts[0] != pts[-1]:
        raise GeometryError("ring is not closed")

    shp = Polygon(_planar(pts))
    if shp.area <= 0:
        raise GeometryError("ring encloses zero area")
    if not shp.is_valid:
        raise GeometryError("ring self-intersects")

    return BoundaryPolygon(ring=pts)


def convex_hull(points: Iterable[Coordinate]) -> List[Coordinate]:
    """Closed convex-hull ring of the given points."""
    hull = MultiPoint(_planar(list(points))).convex_hull
    if hull.geom_type != "Polygon":
        raise GeometryError(f"convex hull is degenerate ({hull.geom_type})")
    return [Coordinate(lat, wrap_lng(lng)) for lng, lat in hull.exterior.coords]


def bounding_box(polygon: BoundaryPolygon) -> BoundingBox:
    """Lat/lng extent. ``west`` is a normal longitude; ``east`` passes 180 across the antimeridian."""
    planar = _planar(polygon.ring)
    lats = [lat for _, lat in planar]
    lngs = [lng for lng, _ in planar]
    west, east = min(lngs), max(lngs)
    if west < -180.0:
        west += 360.0
        east += 360.0
    return BoundingBox(south=min(lats), west=west, north=max(lats), east=east)


def area_sq_km(polygon: BoundaryPolygon) -> float:
    """Spherical ring area in km² (Chamberlain & Duquette, as Turf's area())."""
    pts = _planar(polygon.ring[:-1])
    n = len(pts)
    if n < 3:
        return 0.0
    total = 0.0
    for i in range(n):
        lower_lng = pts[i - 1][0]
        middle_lat = pts[i][1]
        upper_lng = pts[(i + 1) % n][0]
        total += (radians(upper_lng) - radians(lower_lng)) * sin(radians(middle_lat))
    return abs(total * _AREA_RADIUS_M * _AREA_RADIUS_M / 2.0) / 1e6


def approx_radius_km(center: Coordinate, polygon: BoundaryPolygon) -> float:
    """Distance from the center to the bounding box's south-west corner."""
    return haversine_km(center, bounding_box(polygon).south_west)


class PolygonTester:
    """Prepared point-in-polygon test; boundary points count as inside."""

    def __init__(self, polygon: BoundaryPolygon):
        self._ref = polygon.ring[0].lng
        self._shape = to_shapely(polygon)
        prepare(self._shape)

    def contains(self, c: Coordinate) -> bool:
        return self._shape.covers(Point(unwrap_lng(c.lng, self._ref), c.lat))
