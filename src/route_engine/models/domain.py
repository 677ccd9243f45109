"""Domain models for delivery stops and the route start location."""

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class DeliveryStop:
    """A delivery destination. Coordinates are either both known or both missing."""

    id: str
    address: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def coordinates(self) -> tuple[float, float]:
        if not self.has_coordinates:
            raise ValueError(f"Delivery {self.id} has no coordinates.")
        return (self.latitude, self.longitude)


@dataclass(slots=True, frozen=True)
class StartLocation:
    """Depot or driver position the route starts from."""

    latitude: float
    longitude: float
    address: str = ""

    @property
    def coordinates(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)
