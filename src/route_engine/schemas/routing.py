"""Route optimization request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.domain import DeliveryStop, StartLocation


class DeliveryModel(BaseModel):
    id: str = Field(..., min_length=1)
    address: str = ""
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    @model_validator(mode="after")
    def _coordinates_come_in_pairs(self) -> "DeliveryModel":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be provided together")
        return self

    def to_domain(self) -> DeliveryStop:
        return DeliveryStop(id=self.id, address=self.address, latitude=self.latitude, longitude=self.longitude)

    @classmethod
    def from_domain(cls, stop: DeliveryStop) -> "DeliveryModel":
        return cls(id=stop.id, address=stop.address, latitude=stop.latitude, longitude=stop.longitude)


class StartLocationModel(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str = ""

    def to_domain(self) -> StartLocation:
        return StartLocation(latitude=self.latitude, longitude=self.longitude, address=self.address)


class OptimizeRouteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    deliveries: Optional[List[DeliveryModel]] = Field(default_factory=list)
    start_location: StartLocationModel = Field(..., alias="startLocation")

    @field_validator("deliveries", mode="after")
    @classmethod
    def _null_deliveries_are_empty(cls, value: Optional[List[DeliveryModel]]) -> List[DeliveryModel]:
        return value if value is not None else []


class OptimizeRouteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    optimized_order: List[int] = Field(..., alias="optimizedOrder", description="Indices into `deliveries`.")
    total_distance: float = Field(..., alias="totalDistance", description="Kilometres.")
    total_duration: int = Field(..., alias="totalDuration", description="Minutes.")
    deliveries: List[DeliveryModel]
    geocoding_failures: int = Field(..., alias="geocodingFailures")
    navigation_url: str = Field("", alias="navigationUrl")
    unreachable_pairs: int = Field(0, alias="unreachablePairs")
