"""Request-level failures of the route optimization engine.

Per-stop geocoding failures and per-cell unreachable pairs are not errors:
they are absorbed and reported in the result metadata.
"""

from __future__ import annotations


class RouteOptimizationError(Exception):
    """Base class; ``detail`` is safe to show to API callers."""

    detail = "Route optimization failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.detail)


class Unauthorized(RouteOptimizationError):
    detail = "Unauthorized"


class EmptyRequest(RouteOptimizationError):
    detail = "No deliveries provided"


class InvalidRequest(RouteOptimizationError):
    detail = "Invalid request"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message)
        if message:
            self.detail = message


class NoValidDestinations(RouteOptimizationError):
    detail = "No valid delivery locations found"


class RoutingProviderError(RouteOptimizationError):
    detail = "Routing provider unavailable"


class ProviderConfigurationError(RouteOptimizationError):
    detail = "Service configuration error"
