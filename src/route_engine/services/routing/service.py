"""Route optimization orchestration service."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from ...config import settings
from ...models.domain import DeliveryStop, StartLocation
from ...schemas.routing import DeliveryModel, OptimizeRouteRequest, OptimizeRouteResponse
from .errors import EmptyRequest, InvalidRequest, NoValidDestinations, ProviderConfigurationError, Unauthorized
from .geocoding import resolve_coordinates
from .maps_client import GoogleMapsClient
from .matrix import build_cost_matrix
from .metrics import aggregate_route_metrics
from .models import RouteResult
from .navigation import build_navigation_url
from .observer import LoggingObserver, RouteOptimizationObserver
from .sequencer import nearest_neighbor_order

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def authenticate(authorization: Optional[str], accepted_tokens: Sequence[str] | None = None) -> str:
    """Return the bearer token from an ``Authorization`` header or raise ``Unauthorized``."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise Unauthorized()
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise Unauthorized()
    accepted = settings.api_tokens if accepted_tokens is None else accepted_tokens
    if accepted and token not in accepted:
        raise Unauthorized("Bearer token not recognised")
    return token


def _validate_stops(stops: Sequence[DeliveryStop]) -> None:
    if not stops:
        raise EmptyRequest()
    seen: set[str] = set()
    for stop in stops:
        if stop.id in seen:
            raise InvalidRequest(f"Duplicate delivery id: {stop.id}")
        seen.add(stop.id)


async def optimize_route(
    start: StartLocation,
    stops: Sequence[DeliveryStop],
    client: GoogleMapsClient,
    *,
    observer: RouteOptimizationObserver | None = None,
) -> RouteResult:
    """Resolve, sequence and measure a single-vehicle delivery route.

    Each step consumes the full output of the previous one; any request-level
    failure aborts the whole run with no partial result.
    """
    _validate_stops(stops)
    observer = observer or LoggingObserver()
    logger.info(f"Optimizing route for {len(stops)} deliveries")

    resolution = await resolve_coordinates(stops, client, observer=observer)
    resolved = resolution.resolved
    if not resolved:
        raise NoValidDestinations()

    if len(resolved) == 1:
        result = RouteResult(
            order=[0],
            total_distance_km=0.0,
            total_duration_minutes=0,
            resolved_stops=resolved,
            unresolved_count=resolution.unresolved_count,
            navigation_url=build_navigation_url(start, resolved),
        )
        observer.route_computed(result)
        return result

    matrix = await build_cost_matrix(start, resolved, client, observer=observer)
    order = nearest_neighbor_order(matrix, len(resolved))
    metrics = aggregate_route_metrics(order, matrix)
    if len(order) < len(resolved):
        logger.warning(f"Route covers {len(order)} of {len(resolved)} stops; the rest are unreachable")

    result = RouteResult(
        order=order,
        total_distance_km=metrics.total_distance_km,
        total_duration_minutes=metrics.total_duration_minutes,
        resolved_stops=resolved,
        unresolved_count=resolution.unresolved_count,
        navigation_url=build_navigation_url(start, [resolved[index] for index in order]),
        unreachable_pairs=len(matrix.unreachable_pairs()),
    )
    observer.route_computed(result)
    return result


def _to_response(result: RouteResult) -> OptimizeRouteResponse:
    return OptimizeRouteResponse(
        optimized_order=result.order,
        total_distance=result.total_distance_km,
        total_duration=result.total_duration_minutes,
        deliveries=[DeliveryModel.from_domain(stop) for stop in result.resolved_stops],
        geocoding_failures=result.unresolved_count,
        navigation_url=result.navigation_url,
        unreachable_pairs=result.unreachable_pairs,
    )


async def handle_optimization_request(
    payload: OptimizeRouteRequest,
    authorization: Optional[str],
    *,
    client_factory: Callable[[], GoogleMapsClient] | None = None,
    observer: RouteOptimizationObserver | None = None,
) -> OptimizeRouteResponse:
    """Authenticate the caller, validate the payload and run the optimizer."""
    authenticate(authorization)

    stops = [delivery.to_domain() for delivery in payload.deliveries]
    _validate_stops(stops)

    factory = client_factory or GoogleMapsClient
    try:
        client = factory()
    except ValueError as exc:
        logger.error(f"Maps client unavailable: {exc}")
        raise ProviderConfigurationError() from exc

    async with client:
        result = await optimize_route(payload.start_location.to_domain(), stops, client, observer=observer)
    return _to_response(result)
