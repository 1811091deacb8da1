"""GeoJSON export and Street View link for a finished analysis."""
from __future__ import annotations

from typing import Any, Dict

from reach_radius.contracts.geometry import Coordinate
from reach_radius.core.engine import AnalysisResult


def street_view_url(center: Coordinate) -> str:
    return f"https://www.google.com/maps/@?api=1&map_action=pano&viewpoint={center.lat},{center.lng}"


def summary(result: AnalysisResult) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "effective_minutes": round(result.effective_minutes, 2),
        "approx_radius_km": round(result.approx_radius_km, 3),
        "area_sq_km": round(result.area_sq_km, 3),
        "traffic_penalty_percent": round(result.traffic_penalty_percent, 1),
        "weather_applied": result.budget.weather_applied,
        "strategy": result.outcome.strategy,
        "outcome": result.outcome.kind,
        "degraded": result.degraded,
        "transport_mode": result.query.transport_mode.value,
        "center": [result.query.lat, result.query.lng],
    }
    failed = getattr(result.outcome, "failed_ray_count", None)
    if failed is not None:
        out["failed_ray_count"] = failed
    if result.failures:
        out["fallbacks"] = [{"strategy": f.strategy, "reason": f.reason} for f in result.failures]
    return out


def to_geojson(result: AnalysisResult) -> Dict[str, Any]:
    """FeatureCollection: the boundary polygon first, then one Point per heat point."""
    features = [
        {
            "type": "Feature",
            "geometry": {"type": "Polygon", "coordinates": [result.polygon.lnglat_ring()]},
            "properties": {"kind": "boundary", **summary(result)},
        }
    ]
    for hp in result.heat_points:
        features.append(
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [hp.position.lng, hp.position.lat]},
                "properties": {"kind": "heat", "intensity": round(hp.intensity, 4)},
            }
        )
    return {"type": "FeatureCollection", "features": features}
