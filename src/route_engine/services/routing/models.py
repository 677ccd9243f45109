"""Routing domain models."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ...models.domain import DeliveryStop

START_ROW = 0


@dataclass(slots=True, frozen=True)
class MatrixCell:
    distance_meters: Optional[float]
    duration_seconds: Optional[float]
    status: str = "OK"

    @property
    def reachable(self) -> bool:
        return self.status == "OK" and self.distance_meters is not None

    @property
    def distance_cost(self) -> float:
        """Distance used for sequencing; unreachable cells are infinitely far."""
        if not self.reachable:
            return math.inf
        return float(self.distance_meters)


UNREACHABLE_CELL = MatrixCell(distance_meters=None, duration_seconds=None, status="MISSING")


def origin_row(stop_index: Optional[int]) -> int:
    """Map a stop index to its origin row in the cost matrix.

    Origin rows are ``[start, stop 0, stop 1, ...]`` while destination columns
    are ``[stop 0, stop 1, ...]``. ``None`` denotes the start location.
    """
    if stop_index is None:
        return START_ROW
    if stop_index < 0:
        raise IndexError(f"Stop index must be non-negative, got {stop_index}.")
    return stop_index + 1


@dataclass(slots=True, frozen=True)
class UnreachablePair:
    """An origin/destination pair the provider could not route."""

    from_stop: Optional[int]
    to_stop: int
    status: str


@dataclass(slots=True, frozen=True)
class TravelCostMatrix:
    """Pairwise travel costs from the start and every stop to every stop.

    ``rows[origin_row(i)][j]`` holds the leg from stop ``i`` (or the start when
    ``i`` is ``None``) to stop ``j``. Cells absent from the provider payload
    read as unreachable.
    """

    rows: tuple[tuple[MatrixCell, ...], ...]
    stop_count: int

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[MatrixCell]], stop_count: int) -> "TravelCostMatrix":
        return cls(rows=tuple(tuple(row) for row in rows), stop_count=stop_count)

    def leg(self, from_stop: Optional[int], to_stop: int) -> MatrixCell:
        row_index = origin_row(from_stop)
        if row_index >= len(self.rows) or not 0 <= to_stop < self.stop_count:
            return UNREACHABLE_CELL
        row = self.rows[row_index]
        if to_stop >= len(row):
            return UNREACHABLE_CELL
        return row[to_stop]

    def unreachable_pairs(self) -> list[UnreachablePair]:
        pairs: list[UnreachablePair] = []
        origins: list[Optional[int]] = [None, *range(self.stop_count)]
        for from_stop in origins:
            for to_stop in range(self.stop_count):
                if from_stop == to_stop:
                    continue
                cell = self.leg(from_stop, to_stop)
                if not cell.reachable:
                    pairs.append(UnreachablePair(from_stop=from_stop, to_stop=to_stop, status=cell.status))
        return pairs


@dataclass(slots=True, frozen=True)
class GeocodingFailure:
    stop_id: str
    address: str
    reason: str


@dataclass(slots=True)
class ResolutionResult:
    resolved: List[DeliveryStop]
    failures: List[GeocodingFailure] = field(default_factory=list)

    @property
    def unresolved_count(self) -> int:
        return len(self.failures)


@dataclass(slots=True, frozen=True)
class RouteMetrics:
    total_distance_km: float
    total_duration_minutes: int


@dataclass(slots=True)
class RouteResult:
    order: List[int]
    total_distance_km: float
    total_duration_minutes: int
    resolved_stops: List[DeliveryStop]
    unresolved_count: int
    navigation_url: str
    unreachable_pairs: int = 0
