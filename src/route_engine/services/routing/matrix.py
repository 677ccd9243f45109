"""Build the travel cost matrix for one optimization request."""

from __future__ import annotations

import logging
from typing import Sequence

from ...models.domain import DeliveryStop, StartLocation
from .errors import NoValidDestinations, RoutingProviderError
from .maps_client import GoogleMapsClient, NetworkFailure, ProviderFailure, ProviderSuccess
from .models import TravelCostMatrix
from .observer import LoggingObserver, RouteOptimizationObserver

logger = logging.getLogger(__name__)


def build_coordinate_lists(
    start: StartLocation, stops: Sequence[DeliveryStop]
) -> tuple[list[tuple[float, float]], list[tuple[float, float]]]:
    """Return ``(origins, destinations)``: origins are ``[start, *stops]``, destinations are ``stops``."""
    destinations = [stop.coordinates for stop in stops]
    return [start.coordinates, *destinations], destinations


async def build_cost_matrix(
    start: StartLocation,
    stops: Sequence[DeliveryStop],
    client: GoogleMapsClient,
    *,
    mode: str | None = None,
    observer: RouteOptimizationObserver | None = None,
) -> TravelCostMatrix:
    """Fetch distances and durations from the start and every stop to every stop.

    The whole grid is requested in one round trip. A non-OK overall status
    fails the request; a non-OK cell only marks that pair unreachable.
    """
    if not stops:
        raise NoValidDestinations()
    observer = observer or LoggingObserver()

    origins, destinations = build_coordinate_lists(start, stops)
    logger.info(f"Requesting {len(origins)}x{len(destinations)} distance matrix")
    outcome = await client.distance_matrix(origins, destinations, mode=mode)

    if isinstance(outcome, NetworkFailure):
        logger.error(f"Distance matrix request failed: {outcome.message}")
        raise RoutingProviderError(outcome.message)
    if isinstance(outcome, ProviderFailure):
        logger.error(f"Distance matrix provider returned {outcome.status}: {outcome.message}")
        raise RoutingProviderError(f"Distance matrix status {outcome.status}")
    if not isinstance(outcome, ProviderSuccess):
        raise RoutingProviderError("Unexpected distance matrix outcome")

    rows = outcome.payload
    if len(rows) != len(origins):
        logger.warning(f"Distance matrix returned {len(rows)} rows for {len(origins)} origins")

    matrix = TravelCostMatrix.from_rows(rows, stop_count=len(stops))
    for pair in matrix.unreachable_pairs():
        observer.pair_unreachable(pair)
    return matrix
