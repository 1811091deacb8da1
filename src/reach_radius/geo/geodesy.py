"""Spherical geodesy on WGS-84 lat/lng (same mean-radius model as Turf)."""
from __future__ import annotations

from math import asin, atan2, cos, degrees, radians, sin, sqrt
from typing import Sequence

from reach_radius.contracts.geometry import Coordinate

EARTH_RADIUS_KM = 6371.0088


def wrap_lng(lng: float) -> float:
    """Normalize a longitude into [-180, 180)."""
    if -180.0 <= lng < 180.0:
        return lng
    return ((lng + 540.0) % 360.0) - 180.0


def unwrap_lng(lng: float, reference: float) -> float:
    """Longitude shifted by whole turns to lie within 180 degrees of ``reference``."""
    if abs(lng - reference) <= 180.0:
        return lng
    return reference + wrap_lng(lng - reference)


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in kilometres."""
    lat1, lng1, lat2, lng2 = map(radians, [a.lat, a.lng, b.lat, b.lng])
    dlat = lat2 - lat1
    dlng = lng2 - lng1
    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * asin(min(1.0, sqrt(h)))


def bearing_deg(a: Coordinate, b: Coordinate) -> float:
    """Initial bearing (degrees clockwise from true north)."""
    lat1, lng1, lat2, lng2 = map(radians, [a.lat, a.lng, b.lat, b.lng])
    dlng = lng2 - lng1
    x = sin(dlng) * cos(lat2)
    y = cos(lat1) * sin(lat2) - sin(lat1) * cos(lat2) * cos(dlng)
    return (degrees(atan2(x, y)) + 360.0) % 360.0


def destination(origin: Coordinate, distance_km: float, bearing: float) -> Coordinate:
    """Point reached by travelling ``distance_km`` from ``origin`` on ``bearing`` degrees."""
    lat1 = radians(origin.lat)
    lng1 = radians(origin.lng)
    brg = radians(bearing)
    d = distance_km / EARTH_RADIUS_KM

    lat2 = asin(sin(lat1) * cos(d) + cos(lat1) * sin(d) * cos(brg))
    lng2 = lng1 + atan2(sin(brg) * sin(d) * cos(lat1), cos(d) - sin(lat1) * sin(lat2))
    return Coordinate(max(-90.0, min(90.0, degrees(lat2))), wrap_lng(degrees(lng2)))


def path_length_km(path: Sequence[Coordinate]) -> float:
    return sum(haversine_km(path[i - 1], path[i]) for i in range(1, len(path)))


def along(path: Sequence[Coordinate], distance_km: float) -> Coordinate:
    """Point ``distance_km`` along a polyline, measured from its first vertex."""
    if not path:
        raise ValueError("along() needs a non-empty path")
    if distance_km <= 0:
        return path[0]

    travelled = 0.0
    for i in range(1, len(path)):
        a, b = path[i - 1], path[i]
        seg = haversine_km(a, b)
        if seg > 0 and travelled + seg >= distance_km:
            return destination(a, distance_km - travelled, bearing_deg(a, b))
        travelled += seg
    return path[-1]
