"""Total distance and duration of a sequenced route."""

from __future__ import annotations

import math
from typing import Optional, Sequence

from .models import RouteMetrics, TravelCostMatrix


def _round_minutes(seconds: float) -> int:
    # Half-up, so 90s is 2 minutes rather than banker's-rounded.
    return int(math.floor(seconds / 60 + 0.5))


def aggregate_route_metrics(order: Sequence[int], matrix: TravelCostMatrix) -> RouteMetrics:
    """Sum every leg from the start through ``order``.

    Unreachable legs contribute nothing instead of failing the aggregation.
    """
    total_meters = 0.0
    total_seconds = 0.0
    previous: Optional[int] = None
    for stop_index in order:
        cell = matrix.leg(previous, stop_index)
        if cell.reachable:
            total_meters += cell.distance_meters
            total_seconds += cell.duration_seconds or 0
        previous = stop_index

    return RouteMetrics(
        total_distance_km=total_meters / 1000,
        total_duration_minutes=_round_minutes(total_seconds),
    )
