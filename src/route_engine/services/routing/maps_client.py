"""Async HTTP client for the Google Maps Geocoding and Distance Matrix services."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Generic, Sequence, TypeVar, Union

import httpx

from ...config import settings
from .models import MatrixCell

logger = logging.getLogger(__name__)

# monotonic timestamp and result of the last provider health probe
_health_cache: dict[str, tuple[float, bool]] = {}

T = TypeVar("T")

Coordinate = tuple[float, float]


@dataclass(slots=True, frozen=True)
class ProviderSuccess(Generic[T]):
    payload: T


@dataclass(slots=True, frozen=True)
class ProviderFailure:
    """The provider answered, but with a non-OK status or an unusable body."""

    status: str
    message: str | None = None


@dataclass(slots=True, frozen=True)
class NetworkFailure:
    """The provider could not be reached or did not answer in time."""

    message: str


GeocodeOutcome = Union[ProviderSuccess[list[Coordinate]], ProviderFailure, NetworkFailure]
MatrixOutcome = Union[ProviderSuccess[list[list[MatrixCell]]], ProviderFailure, NetworkFailure]


def _format_coordinates(coordinates: Sequence[Coordinate]) -> str:
    return "|".join(f"{lat},{lng}" for lat, lng in coordinates)


def _parse_candidates(data: dict) -> list[Coordinate]:
    candidates: list[Coordinate] = []
    for result in data.get("results") or []:
        location = (result.get("geometry") or {}).get("location") or {}
        lat = location.get("lat")
        lng = location.get("lng")
        if lat is None or lng is None:
            continue
        candidates.append((float(lat), float(lng)))
    return candidates


def _parse_cell(element: Any) -> MatrixCell:
    if not isinstance(element, dict):
        return MatrixCell(distance_meters=None, duration_seconds=None, status="MISSING")
    status = element.get("status", "MISSING")
    distance = (element.get("distance") or {}).get("value")
    duration = (element.get("duration") or {}).get("value")
    if status == "OK" and distance is None:
        # An OK element without a distance cannot be routed over.
        status = "MISSING"
    return MatrixCell(distance_meters=distance, duration_seconds=duration, status=status)


def _parse_rows(data: dict) -> list[list[MatrixCell]]:
    rows = data.get("rows")
    if not isinstance(rows, list):
        raise ValueError("Distance matrix response missing rows.")
    return [[_parse_cell(element) for element in (row or {}).get("elements") or []] for row in rows]


class GoogleMapsClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.google_maps_api_key
        if not self.api_key:
            raise ValueError("Google Maps API key is not configured.")
        self.base_url = (base_url or settings.maps_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.provider_timeout_seconds
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            transport=transport,
        )

    async def __aenter__(self) -> "GoogleMapsClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_json(self, endpoint: str, params: dict) -> ProviderSuccess[dict] | ProviderFailure | NetworkFailure:
        url = f"{self.base_url}/{endpoint}/json"
        try:
            response = await self._client.get(url, params={**params, "key": self.api_key})
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            return NetworkFailure(message=f"HTTP {exc.response.status_code} from {endpoint}")
        except httpx.HTTPError as exc:
            # str(exc) may embed the request URL, which carries the API key.
            return NetworkFailure(message=f"{type(exc).__name__} calling {endpoint}")
        except ValueError:
            return ProviderFailure(status="INVALID_RESPONSE", message=f"{endpoint} returned a non-JSON body")
        if not isinstance(data, dict):
            return ProviderFailure(status="INVALID_RESPONSE", message=f"{endpoint} returned an unexpected payload")
        return ProviderSuccess(payload=data)

    async def geocode(self, address: str, region: str | None = None) -> GeocodeOutcome:
        """Look up candidate coordinates for a free-text address.

        ``ZERO_RESULTS`` is a successful lookup with no candidates.
        """
        params = {"address": address}
        if region:
            params["region"] = region
        outcome = await self._get_json("geocode", params)
        if not isinstance(outcome, ProviderSuccess):
            return outcome

        data = outcome.payload
        status = data.get("status", "UNKNOWN_ERROR")
        if status == "ZERO_RESULTS":
            return ProviderSuccess(payload=[])
        if status != "OK":
            return ProviderFailure(status=status, message=data.get("error_message"))
        return ProviderSuccess(payload=_parse_candidates(data))

    async def distance_matrix(
        self,
        origins: Sequence[Coordinate],
        destinations: Sequence[Coordinate],
        mode: str | None = None,
    ) -> MatrixOutcome:
        """Request every origin x destination leg in a single batched call.

        The returned grid is row-major: one row per origin, one cell per destination.
        """
        if not origins or not destinations:
            raise ValueError("At least one origin and one destination are required.")
        params = {
            "origins": _format_coordinates(origins),
            "destinations": _format_coordinates(destinations),
            "units": "metric",
            "mode": mode or settings.travel_mode,
        }
        outcome = await self._get_json("distancematrix", params)
        if not isinstance(outcome, ProviderSuccess):
            return outcome

        data = outcome.payload
        status = data.get("status", "UNKNOWN_ERROR")
        if status != "OK":
            return ProviderFailure(status=status, message=data.get("error_message"))
        try:
            rows = _parse_rows(data)
        except ValueError as exc:
            return ProviderFailure(status="INVALID_RESPONSE", message=str(exc))
        return ProviderSuccess(payload=rows)


async def _probe(client: GoogleMapsClient) -> bool:
    outcome = await client.geocode(settings.health_check_address, region=settings.geocoding_region)
    if isinstance(outcome, ProviderSuccess):
        return True
    logger.warning(f"Maps provider health check failed: {outcome}")
    return False


async def check_health(client: GoogleMapsClient | None = None) -> bool:
    """Check provider reachability with a single geocoding lookup.

    Without an explicit client the answer is cached for
    ``settings.health_check_cache_seconds`` so repeated probes are not billed.
    """
    if client is not None:
        return await _probe(client)
    if not settings.google_maps_api_key:
        return False

    now = time.monotonic()
    cached = _health_cache.get("maps")
    if cached is not None and now - cached[0] < settings.health_check_cache_seconds:
        return cached[1]
    async with GoogleMapsClient() as owned_client:
        healthy = await _probe(owned_client)
    _health_cache["maps"] = (now, healthy)
    return healthy
