"""Nearest-neighbour visit sequencing over a travel cost matrix."""

from __future__ import annotations

import math
from typing import Optional

from .models import TravelCostMatrix


def nearest_neighbor_order(matrix: TravelCostMatrix, stop_count: int | None = None) -> list[int]:
    """Build a visiting order by always stepping to the closest unvisited stop.

    Starts at the start location. Ties go to the lowest stop index. Once the
    current stop has no reachable unvisited neighbour the walk ends, so the
    order may cover only part of the stops. This is a greedy heuristic with no
    optimality guarantee; it runs in O(n^2) and is fully deterministic.
    """
    count = matrix.stop_count if stop_count is None else stop_count
    visited: set[int] = set()
    order: list[int] = []
    current: Optional[int] = None  # the start location

    while len(order) < count:
        nearest: Optional[int] = None
        shortest = math.inf
        for candidate in range(count):
            if candidate in visited:
                continue
            cost = matrix.leg(current, candidate).distance_cost
            # Strict comparison keeps the lowest index on ties.
            if cost < shortest:
                shortest = cost
                nearest = candidate
        if nearest is None:
            break
        visited.add(nearest)
        order.append(nearest)
        current = nearest

    return order
