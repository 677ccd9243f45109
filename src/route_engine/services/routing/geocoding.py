"""Fill in missing delivery coordinates through concurrent geocoding lookups."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from ...config import settings
from ...models.domain import DeliveryStop
from .maps_client import GoogleMapsClient, NetworkFailure, ProviderFailure, ProviderSuccess
from .models import GeocodingFailure, ResolutionResult
from .observer import LoggingObserver, RouteOptimizationObserver

logger = logging.getLogger(__name__)


def validate_location(lat: float, lng: float) -> bool:
    return -90 <= lat <= 90 and -180 <= lng <= 180


async def _geocode_stop(
    client: GoogleMapsClient,
    stop: DeliveryStop,
    region: str | None,
    limiter: asyncio.Semaphore,
) -> Optional[str]:
    """Resolve one stop in place. Returns a failure reason, or None on success."""
    if not stop.address or not stop.address.strip():
        return "Empty address provided"

    async with limiter:
        outcome = await client.geocode(stop.address, region=region)

    if isinstance(outcome, NetworkFailure):
        return f"Geocoding request failed: {outcome.message}"
    if isinstance(outcome, ProviderFailure):
        return f"Geocoding provider returned {outcome.status}"
    if not isinstance(outcome, ProviderSuccess):
        return "Unexpected geocoding outcome"
    if not outcome.payload:
        return "Address could not be geocoded"

    # First candidate is the provider's best match.
    lat, lng = outcome.payload[0]
    if not validate_location(lat, lng):
        return f"Invalid coordinates lat={lat}, lng={lng}"
    stop.latitude = lat
    stop.longitude = lng
    return None


async def resolve_coordinates(
    stops: Sequence[DeliveryStop],
    client: GoogleMapsClient,
    *,
    region: str | None = None,
    max_concurrency: int | None = None,
    observer: RouteOptimizationObserver | None = None,
) -> ResolutionResult:
    """Geocode every stop lacking coordinates and drop the ones that fail.

    All lookups are awaited together; one failed lookup never cancels the
    others. Stops that already carry coordinates are passed through untouched,
    and resolved stops keep their input order.
    """
    observer = observer or LoggingObserver()
    region = region if region is not None else settings.geocoding_region
    limiter = asyncio.Semaphore(max_concurrency or settings.geocoding_max_concurrency)

    pending = [stop for stop in stops if not stop.has_coordinates]
    if pending:
        logger.info(f"Geocoding {len(pending)} of {len(stops)} deliveries")

    outcomes = await asyncio.gather(
        *(_geocode_stop(client, stop, region, limiter) for stop in pending),
        return_exceptions=True,
    )

    failures: list[GeocodingFailure] = []
    failed_ids: set[int] = set()
    for stop, outcome in zip(pending, outcomes):
        if outcome is None:
            continue
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.exception(f"Unexpected error geocoding delivery {stop.id}", exc_info=outcome)
            reason = f"Geocoding failed: {type(outcome).__name__}"
        else:
            reason = outcome
        failure = GeocodingFailure(stop_id=stop.id, address=stop.address, reason=reason)
        failures.append(failure)
        failed_ids.add(id(stop))
        observer.geocoding_failed(failure)

    resolved = [stop for stop in stops if id(stop) not in failed_ids and stop.has_coordinates]
    return ResolutionResult(resolved=resolved, failures=failures)
