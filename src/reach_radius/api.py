"""FastAPI front end for the reachability engine."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from reach_radius.config import settings
from reach_radius.core.export import street_view_url, summary
from reach_radius.core.models import LogisticsFlags, Query, TransportMode
from reach_radius.core.session import SessionRegistry
from reach_radius.errors import AnalysisCancelled, GeometryError, InputError
from reach_radius.providers.registry import build_providers

log = logging.getLogger(__name__)

app = FastAPI(title="Reach Radius", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Sessions keyed by client id: a new analysis supersedes only that client's one in flight
_sessions = SessionRegistry(settings, build_providers("osrm+ors+overpass", settings))


def get_sessions() -> SessionRegistry:
    return _sessions


# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------

class AnalyzeRequest(BaseModel):
    lat: float
    lng: float
    minutes: float
    mode: TransportMode = TransportMode.CAR
    error_margin_percent: float = 0.0
    weather: bool = False
    pit_stops: bool = False
    border_crossing: bool = False
    traffic_heuristic: bool = False
    historical_time: Optional[datetime] = None
    heatmap: bool = True
    session_id: Optional[str] = Field(None, max_length=128, description="Client id; a newer request with the same id cancels this one")


class AnalyzeResponse(BaseModel):
    polygon: List[List[float]] = Field(..., description="[lat, lng] ring, first == last")
    heat_points: List[List[float]] = Field(default_factory=list, description="[lat, lng, intensity]")
    summary: Dict[str, Any]
    street_view_url: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.get("/health")
def health():
    return {
        "status": "ok",
        "isochrone": settings.isochrone_enabled,
        "routing": settings.routing_enabled,
        "poi": bool(settings.overpass_url),
    }


@app.post("/analyze", response_model=AnalyzeResponse)
def analyze(req: AnalyzeRequest):
    try:
        query = Query.build(
            lat=req.lat,
            lng=req.lng,
            nominal_minutes=req.minutes,
            transport_mode=req.mode,
            error_margin_percent=req.error_margin_percent,
            flags=LogisticsFlags(
                weather=req.weather,
                pit_stops=req.pit_stops,
                border_crossing=req.border_crossing,
                traffic_heuristic=req.traffic_heuristic,
                historical_timestamp=req.historical_time,
            ),
            heatmap=req.heatmap,
        )
        result = get_sessions().get(req.session_id).run(query)
    except InputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except GeometryError as e:
        raise HTTPException(status_code=422, detail=f"analysis could not complete: {e}")
    except AnalysisCancelled as e:
        raise HTTPException(status_code=409, detail=str(e))

    return AnalyzeResponse(
        polygon=[[c.lat, c.lng] for c in result.polygon.ring],
        heat_points=[[hp.position.lat, hp.position.lng, hp.intensity] for hp in result.heat_points],
        summary=summary(result),
        street_view_url=street_view_url(query.center),
    )
