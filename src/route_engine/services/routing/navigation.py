"""Navigation links for an ordered set of stops."""

from __future__ import annotations

from typing import Sequence
from urllib.parse import quote

from ...config import settings
from ...models.domain import DeliveryStop, StartLocation


def _coordinate_segment(lat: float, lng: float) -> str:
    return f"{lat},{lng}"


def build_navigation_url(
    start: StartLocation,
    ordered_stops: Sequence[DeliveryStop],
    base_url: str | None = None,
) -> str:
    """Render a Google Maps directions link visiting ``ordered_stops`` in order.

    Stops without coordinates are skipped. When none of them has coordinates
    the link falls back to their addresses; with no stops at all it is empty.
    """
    base = (base_url or settings.navigation_base_url).rstrip("/")
    if not ordered_stops:
        return ""

    located = [stop for stop in ordered_stops if stop.has_coordinates]
    if located:
        segments = [_coordinate_segment(start.latitude, start.longitude)]
        segments.extend(_coordinate_segment(stop.latitude, stop.longitude) for stop in located)
        return f"{base}/{'/'.join(segments)}"

    addresses = [quote(stop.address, safe="") for stop in ordered_stops if stop.address]
    if not addresses:
        return ""
    return f"{base}/{_coordinate_segment(start.latitude, start.longitude)}/{'/'.join(addresses)}"
