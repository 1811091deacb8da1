"""Error taxonomy for the reachability engine."""
from __future__ import annotations


class ReachRadiusError(Exception):
    """Base class for every error raised by reach_radius."""


class InputError(ReachRadiusError, ValueError):
    """Invalid query input. Raised before any computation starts."""


class ProviderError(ReachRadiusError):
    """A remote provider failed (network, status, rate limit, bad payload).

    Always recovered locally by the caller: strategy fall-through,
    per-ray fallback or synthesized hot nodes.
    """

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class GeometryError(ReachRadiusError):
    """Degenerate boundary (too few vertices, open ring, self-intersection, zero area)."""


class AnalysisCancelled(ReachRadiusError):
    """The request was superseded by a newer one."""
