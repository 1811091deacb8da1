from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.table import Table

from reach_radius.config import Settings
from reach_radius.core.engine import run_analysis
from reach_radius.core.export import street_view_url, summary, to_geojson
from reach_radius.core.models import LogisticsFlags, Query, TransportMode, parse_center
from reach_radius.errors import GeometryError, InputError
from reach_radius.providers.registry import build_providers


def _save_json(path: Path, obj) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, indent=2), encoding="utf-8")


def _parse_args(argv=None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Estimate the reachable area and probability heatmap around a finish point.")
    ap.add_argument("--center", required=True, help="Finish point as 'lat, lng'")
    ap.add_argument("--minutes", type=float, required=True, help="Travel time in minutes")
    ap.add_argument("--mode", default=TransportMode.CAR.value, choices=[m.value for m in TransportMode])
    ap.add_argument("--margin", type=float, default=0.0, help="General error margin, percent")
    ap.add_argument("--weather", action="store_true", help="Weather impact (-20%% speed)")
    ap.add_argument("--pit-stops", action="store_true", help="15 min stop every 3 hours")
    ap.add_argument("--border", action="store_true", help="Fixed 1 hour border crossing delay")
    ap.add_argument("--traffic", action="store_true", help="Rush-hour traffic heuristic")
    ap.add_argument("--at", default=None, help="Historical time for the traffic heuristic, ISO format")
    ap.add_argument("--no-heatmap", action="store_true")
    ap.add_argument("--provider", default="osrm+ors+overpass", help="e.g. osrm+ors+overpass, osrm, mock")
    ap.add_argument("--cold-logic", action="store_true", help="Skip every network boundary strategy")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--export", default="runs/last_run.geojson", help="GeoJSON output path")
    ap.add_argument("--debug", action="store_true")
    return ap.parse_args(argv)


def main(argv=None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s [reach_radius] %(levelname)s %(message)s",
    )
    console = Console()

    config = Settings()
    if args.cold_logic:
        config = config.model_copy(update={"cold_logic": True})

    try:
        center = parse_center(args.center)
        at = datetime.fromisoformat(args.at) if args.at else None
        query = Query.build(
            lat=center.lat,
            lng=center.lng,
            nominal_minutes=args.minutes,
            transport_mode=TransportMode(args.mode),
            error_margin_percent=args.margin,
            flags=LogisticsFlags(
                weather=args.weather,
                pit_stops=args.pit_stops,
                border_crossing=args.border,
                traffic_heuristic=args.traffic,
                historical_timestamp=at,
            ),
            heatmap=not args.no_heatmap,
        )
        providers = build_providers(args.provider, config)
    except (InputError, ValueError) as e:
        console.print(f"[red]Input error:[/red] {e}")
        sys.exit(2)

    rng = random.Random(args.seed) if args.seed is not None else None

    with console.status("Analyzing graph data..."):
        try:
            result = run_analysis(query, config, providers, rng=rng)
        except GeometryError as e:
            console.print(f"[red]Analysis could not complete:[/red] {e}")
            sys.exit(1)

    s = summary(result)
    table = Table(title="SYS_STATUS: ANALYSIS_COMPLETE")
    table.add_column("Metric")
    table.add_column("Value")
    table.add_row("EFF_TRAVEL_TIME", f"{result.effective_minutes:.0f} min")
    table.add_row("MAX_RADIUS_SPREAD", f"{result.approx_radius_km:.2f} km")
    table.add_row("COVERED_AREA", f"{result.area_sq_km:.0f} km²")
    table.add_row("TRAFFIC_HEURISTIC_PENALTY", f"-{round(result.traffic_penalty_percent)}%")
    table.add_row("STRATEGY", f"{s['strategy']} ({s['outcome']})")
    if "failed_ray_count" in s:
        table.add_row("FAILED_RAYS", str(s["failed_ray_count"]))
    table.add_row("HEAT_POINTS", str(len(result.heat_points)))
    console.print(table)

    if result.degraded:
        console.print("[yellow]Routing fallback: boundary partly or fully built via cold logic.[/yellow]")
    for f in result.failures:
        console.print(f"[yellow]{f.strategy}:[/yellow] {f.reason}")

    console.print(f"Street View: {street_view_url(query.center)}")

    out_path = Path(args.export)
    _save_json(out_path, to_geojson(result))
    console.print(f"Saved: {out_path.resolve()}")


if __name__ == "__main__":
    main()
