"""
test_boundary.py: The three boundary strategies and the fallback chain.

Run:
    pytest tests/test_boundary.py -v
"""

import math

import pytest

from reach_radius.boundary.base import BoundaryRequest
from reach_radius.boundary.builder import BoundaryBuilder
from reach_radius.boundary.isochrone import RemoteIsochroneStrategy
from reach_radius.boundary.procedural import ProceduralBlobStrategy, blob_ring, noise
from reach_radius.boundary.radial import RadialSamplingStrategy, reach_point
from reach_radius.config import Settings
from reach_radius.contracts.geometry import Coordinate
from reach_radius.contracts.outcome import (
    ProceduralOutcome,
    RemoteDegradedOutcome,
    RemoteOutcome,
    StrategyFailure,
)
from reach_radius.core.cancel import CancelToken
from reach_radius.core.models import TransportMode, TravelBudget
from reach_radius.errors import AnalysisCancelled, GeometryError, ProviderError
from reach_radius.geo.geodesy import destination, haversine_km
from reach_radius.geo.polygon import area_sq_km, bounding_box
from reach_radius.providers.base import IsochroneProvider, Route, RoutingProvider
from reach_radius.providers.mock import (
    FailingIsochroneProvider,
    FailingRoutingProvider,
    MockIsochroneProvider,
    MockRoutingProvider,
)
from reach_radius.providers.registry import ProviderSet


class FlakyRoutingProvider(RoutingProvider):
    """Fails every other ray."""

    def __init__(self):
        self.inner = MockRoutingProvider(speed_kmh=30.0)
        self.calls = 0

    def route(self, origin, dest, mode):
        self.calls += 1
        if self.calls % 2 == 0:
            raise ProviderError("flaky", "429 Too Many Requests")
        return self.inner.route(origin, dest, mode)


class DegenerateIsochroneProvider(IsochroneProvider):
    def isochrone(self, origin, mode, range_s):
        return [origin, origin, origin, origin]


# ── Remote Radial Sampling ───────────────────────────────────────────────────

class TestRadialSampling:

    def test_all_rays_fail_gives_fallback_circle(self, center, hour_budget, sleep):
        """16 failed rays → 16 points at max radius + closing duplicate."""
        provider = FailingRoutingProvider()
        req = BoundaryRequest(center, hour_budget, TransportMode.CAR)
        out = RadialSamplingStrategy(provider, ray_count=16, delay_s=0.1, sleep=sleep).build(req)

        assert isinstance(out, RemoteDegradedOutcome)
        assert out.failed_ray_count == 16
        assert out.degraded
        ring = out.polygon.ring
        assert len(ring) == 17
        assert ring[0] == ring[-1]
        for c in ring:
            assert haversine_km(center, c) == pytest.approx(60.0, rel=1e-9)
        assert provider.calls == 16

    def test_delay_between_every_ray(self, center, hour_budget, sleep):
        req = BoundaryRequest(center, hour_budget, TransportMode.CAR)
        RadialSamplingStrategy(FailingRoutingProvider(), ray_count=16, delay_s=0.1, sleep=sleep).build(req)
        assert sleep.calls == [0.1] * 16

    def test_slow_routes_are_cut_proportionally(self, center, hour_budget, sleep):
        """30 km/h routes toward 90 km probes: 1/3 of the route fits in the hour."""
        provider = MockRoutingProvider(speed_kmh=30.0)
        req = BoundaryRequest(center, hour_budget, TransportMode.CAR)
        out = RadialSamplingStrategy(provider, ray_count=16, delay_s=0.0, sleep=sleep).build(req)

        assert isinstance(out, RemoteOutcome)
        assert out.strategy == "radial_sampling"
        for c in out.polygon.ring:
            assert haversine_km(center, c) == pytest.approx(30.0, rel=1e-4)

    def test_fast_routes_take_terminal_point(self, center, hour_budget, sleep):
        provider = MockRoutingProvider(speed_kmh=200.0)
        req = BoundaryRequest(center, hour_budget, TransportMode.CAR)
        out = RadialSamplingStrategy(provider, ray_count=16, delay_s=0.0, sleep=sleep).build(req)

        for c in out.polygon.ring:
            assert haversine_km(center, c) == pytest.approx(90.0, rel=1e-6)

    def test_probes_aim_past_max_radius(self, center, hour_budget, sleep):
        provider = MockRoutingProvider()
        req = BoundaryRequest(center, hour_budget, TransportMode.CAR)
        RadialSamplingStrategy(provider, ray_count=16, delay_s=0.0, sleep=sleep).build(req)

        assert len(provider.calls) == 16
        for i, (origin, dest) in enumerate(provider.calls):
            assert origin == center
            expected = destination(center, 90.0, 22.5 * i)
            assert haversine_km(dest, expected) < 1e-6

    def test_partial_failures_are_local(self, center, hour_budget, sleep):
        req = BoundaryRequest(center, hour_budget, TransportMode.CAR)
        out = RadialSamplingStrategy(FlakyRoutingProvider(), ray_count=16, delay_s=0.0, sleep=sleep).build(req)
        assert isinstance(out, RemoteDegradedOutcome)
        assert out.failed_ray_count == 8
        assert area_sq_km(out.polygon) > 0

    def test_few_rays_keep_raw_ring(self, center, hour_budget, sleep):
        req = BoundaryRequest(center, hour_budget, TransportMode.CAR)
        out = RadialSamplingStrategy(FailingRoutingProvider(), ray_count=6, delay_s=0.0, sleep=sleep).build(req)
        assert len(out.polygon.ring) == 7
        assert out.polygon.ring[0] == destination(center, 60.0, 0.0)

    def test_cancelled_before_rays(self, center, hour_budget, sleep):
        token = CancelToken()
        token.cancel()
        req = BoundaryRequest(center, hour_budget, TransportMode.CAR)
        with pytest.raises(AnalysisCancelled):
            RadialSamplingStrategy(MockRoutingProvider(), sleep=sleep).build(req, token)
        assert sleep.calls == []

    def test_reach_point_within_budget(self, center):
        end = destination(center, 10.0, 0.0)
        assert reach_point(Route([center, end], duration_s=100.0), 200.0) == end

    def test_reach_point_interpolates_by_distance(self, center):
        end = destination(center, 10.0, 0.0)
        p = reach_point(Route([center, end], duration_s=400.0), 100.0)
        assert haversine_km(center, p) == pytest.approx(2.5, rel=1e-6)


# ── Procedural Blob ──────────────────────────────────────────────────────────

class TestProceduralBlob:

    @pytest.mark.parametrize("lat, lng", [(55.7558, 37.6173), (0.0, 0.0), (-33.9, 151.2), (64.1, -21.9)])
    @pytest.mark.parametrize("minutes", [1, 30, 240])
    def test_ring_closed_and_positive_area(self, lat, lng, minutes):
        req = BoundaryRequest(Coordinate(lat, lng), TravelBudget(effective_minutes=minutes, speed_kmh=60), TransportMode.CAR)
        out = ProceduralBlobStrategy().build(req)
        ring = out.polygon.ring
        assert ring[0] == ring[-1]
        assert len(ring) >= 65
        assert area_sq_km(out.polygon) > 0

    def test_moscow_hour_by_car(self, center, hour_budget):
        """60 km/h for an hour, road-curvature corrected → ≈44.4 km."""
        req = BoundaryRequest(center, hour_budget, TransportMode.CAR)
        out = ProceduralBlobStrategy(cold_logic=True).build(req)
        assert out.radius_km == pytest.approx(60 / 1.35)

        dists = [haversine_km(center, c) for c in out.polygon.ring]
        assert max(dists) <= 44.4 * 1.3
        assert min(dists) >= 44.4 * 0.7

    def test_noise_is_deterministic_per_angle(self, center, hour_budget):
        req = BoundaryRequest(center, hour_budget, TransportMode.CAR)
        a = ProceduralBlobStrategy().build(req).polygon
        b = ProceduralBlobStrategy().build(req).polygon
        assert a == b

    def test_fallback_amplitude_is_half(self, center):
        ring = blob_ring(center, 10.0, amplitude=0.5)
        for c in ring:
            assert 10.0 * 0.85 - 1e-9 <= haversine_km(center, c) <= 10.0 * 1.15 + 1e-9

    def test_vertex_distance_follows_noise(self, center):
        ring = blob_ring(center, 10.0, amplitude=1.0, vertices=64)
        theta = 5 / 64 * 2 * math.pi
        assert haversine_km(center, ring[5]) == pytest.approx(10.0 * (1 + noise(theta)), rel=1e-9)

    def test_rail_skips_curvature_correction(self, center, hour_budget):
        req = BoundaryRequest(center, hour_budget, TransportMode.TRAIN)
        assert ProceduralBlobStrategy().build(req).radius_km == pytest.approx(60.0)

    def test_bus_keeps_curvature_correction(self, center, hour_budget):
        req = BoundaryRequest(center, hour_budget, TransportMode.BUS)
        assert ProceduralBlobStrategy().build(req).radius_km == pytest.approx(60.0 / 1.35)

    def test_zero_budget_is_degenerate(self, center):
        req = BoundaryRequest(center, TravelBudget(effective_minutes=0, speed_kmh=60), TransportMode.CAR)
        with pytest.raises(GeometryError):
            ProceduralBlobStrategy().build(req)

    def test_cancelled_before_build(self, center, hour_budget):
        token = CancelToken()
        token.cancel()
        with pytest.raises(AnalysisCancelled):
            ProceduralBlobStrategy().build(BoundaryRequest(center, hour_budget, TransportMode.CAR), token)


# ── Remote Isochrone ─────────────────────────────────────────────────────────

class TestRemoteIsochrone:

    def test_ring_used_as_is(self, center, hour_budget):
        req = BoundaryRequest(center, hour_budget, TransportMode.CAR)
        out = RemoteIsochroneStrategy(MockIsochroneProvider(speed_kmh=50.0)).build(req)
        assert isinstance(out, RemoteOutcome)
        assert len(out.polygon.ring) == 33
        assert haversine_km(center, out.polygon.ring[3]) == pytest.approx(50.0, rel=1e-9)

    def test_target_includes_error_margin(self, center, hour_budget):
        seen = {}

        class Recording(IsochroneProvider):
            def isochrone(self, origin, mode, range_s):
                seen["range_s"] = range_s
                return MockIsochroneProvider().isochrone(origin, mode, range_s)

        req = BoundaryRequest(center, hour_budget, TransportMode.CAR, error_margin_percent=25)
        RemoteIsochroneStrategy(Recording()).build(req)
        assert seen["range_s"] == pytest.approx(4500)

    def test_provider_error_is_failure_value(self, center, hour_budget):
        req = BoundaryRequest(center, hour_budget, TransportMode.CAR)
        out = RemoteIsochroneStrategy(FailingIsochroneProvider()).build(req)
        assert isinstance(out, StrategyFailure)
        assert "ProviderError" in out.reason

    def test_degenerate_ring_is_failure_value(self, center, hour_budget):
        req = BoundaryRequest(center, hour_budget, TransportMode.CAR)
        out = RemoteIsochroneStrategy(DegenerateIsochroneProvider()).build(req)
        assert isinstance(out, StrategyFailure)


# ── BoundaryBuilder fallback order ───────────────────────────────────────────

class TestBoundaryBuilder:

    def _build(self, providers, config, center, budget, sleep):
        return BoundaryBuilder(providers, sleep=sleep).build(center, budget, TransportMode.CAR, 0, config)

    def test_isochrone_first_when_key_configured(self, center, hour_budget, sleep):
        config = Settings(isochrone_api_key="k", ray_delay_s=0.0)
        routing = MockRoutingProvider()
        providers = ProviderSet(routing=routing, isochrone=MockIsochroneProvider())
        polygon, outcome = self._build(providers, config, center, hour_budget, sleep)
        assert outcome.strategy == "remote_isochrone"
        assert polygon is outcome.polygon
        assert routing.calls == []

    def test_no_key_skips_isochrone(self, center, hour_budget, sleep):
        config = Settings(isochrone_api_key="", ray_delay_s=0.0)
        providers = ProviderSet(routing=MockRoutingProvider(), isochrone=MockIsochroneProvider())
        _, outcome = self._build(providers, config, center, hour_budget, sleep)
        assert outcome.strategy == "radial_sampling"

    def test_isochrone_failure_falls_to_radial(self, center, hour_budget, sleep):
        config = Settings(isochrone_api_key="k", ray_delay_s=0.0)
        providers = ProviderSet(routing=MockRoutingProvider(), isochrone=FailingIsochroneProvider())
        builder = BoundaryBuilder(providers, sleep=sleep)
        _, outcome = builder.build(center, hour_budget, TransportMode.CAR, 0, config)
        assert outcome.strategy == "radial_sampling"
        assert [f.strategy for f in builder.failures] == ["remote_isochrone"]

    def test_falls_to_procedural_after_remote_failures(self, center, hour_budget, sleep):
        config = Settings(isochrone_api_key="k", ray_delay_s=0.0)
        providers = ProviderSet(isochrone=FailingIsochroneProvider())
        _, outcome = self._build(providers, config, center, hour_budget, sleep)
        assert isinstance(outcome, ProceduralOutcome)
        assert not outcome.cold_logic
        assert outcome.degraded

    def test_cold_logic_skips_network(self, center, hour_budget, sleep):
        config = Settings(isochrone_api_key="k", cold_logic=True)
        routing = MockRoutingProvider()
        providers = ProviderSet(routing=routing, isochrone=MockIsochroneProvider())
        _, outcome = self._build(providers, config, center, hour_budget, sleep)
        assert isinstance(outcome, ProceduralOutcome)
        assert outcome.cold_logic
        assert not outcome.degraded
        assert routing.calls == []

    def test_no_providers_is_cold_logic(self, center, hour_budget, sleep):
        _, outcome = self._build(ProviderSet(), Settings(), center, hour_budget, sleep)
        assert isinstance(outcome, ProceduralOutcome)
        assert outcome.cold_logic

    def test_ray_pacing_from_config(self, center, hour_budget, sleep):
        config = Settings(ray_delay_s=0.25, ray_count=12)
        providers = ProviderSet(routing=FailingRoutingProvider())
        self._build(providers, config, center, hour_budget, sleep)
        assert sleep.calls == [0.25] * 12


# ── Antimeridian ─────────────────────────────────────────────────────────────

DATELINE = Coordinate(0.0, 179.9)
EQUATOR = Coordinate(0.0, 0.0)


class TestAntimeridian:

    def test_procedural_blob_across_the_line(self, hour_budget):
        out = ProceduralBlobStrategy().build(BoundaryRequest(DATELINE, hour_budget, TransportMode.CAR))
        ref = ProceduralBlobStrategy().build(BoundaryRequest(EQUATOR, hour_budget, TransportMode.CAR))

        assert out.polygon.ring[0] == out.polygon.ring[-1]
        assert any(c.lng < 0 for c in out.polygon.ring)
        assert area_sq_km(out.polygon) == pytest.approx(area_sq_km(ref.polygon), rel=1e-6)

    def test_radial_hull_across_the_line(self, hour_budget, sleep):
        req = BoundaryRequest(DATELINE, hour_budget, TransportMode.CAR)
        out = RadialSamplingStrategy(FailingRoutingProvider(), ray_count=16, delay_s=0.0, sleep=sleep).build(req)
        ref = RadialSamplingStrategy(
            FailingRoutingProvider(), ray_count=16, delay_s=0.0, sleep=sleep
        ).build(BoundaryRequest(EQUATOR, hour_budget, TransportMode.CAR))

        assert len(out.polygon.ring) == 17
        for c in out.polygon.ring:
            assert haversine_km(DATELINE, c) == pytest.approx(60.0, rel=1e-9)
        assert area_sq_km(out.polygon) == pytest.approx(area_sq_km(ref.polygon), rel=1e-6)
        bb = bounding_box(out.polygon)
        assert bb.east - bb.west < 2.0
