"""Observer hooks the engine reports per-request events to."""

from __future__ import annotations

import logging
from typing import Protocol

from .models import GeocodingFailure, RouteResult, UnreachablePair

logger = logging.getLogger(__name__)


class RouteOptimizationObserver(Protocol):
    def geocoding_failed(self, failure: GeocodingFailure) -> None: ...

    def pair_unreachable(self, pair: UnreachablePair) -> None: ...

    def route_computed(self, result: RouteResult) -> None: ...


class LoggingObserver:
    """Default observer: writes engine events to the module logger."""

    def geocoding_failed(self, failure: GeocodingFailure) -> None:
        logger.warning(f"Failed to geocode delivery {failure.stop_id}: {failure.reason}")

    def pair_unreachable(self, pair: UnreachablePair) -> None:
        origin = "start" if pair.from_stop is None else f"stop {pair.from_stop}"
        logger.debug(f"No route from {origin} to stop {pair.to_stop} ({pair.status})")

    def route_computed(self, result: RouteResult) -> None:
        logger.info(
            f"Optimized route over {len(result.order)}/{len(result.resolved_stops)} stops: "
            f"{result.total_distance_km:.1f} km, {result.total_duration_minutes} min, "
            f"{result.unresolved_count} geocoding failures"
        )
