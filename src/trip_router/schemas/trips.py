"""Trip request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import Stop, Trip
from ..services.routing.models import OptimizationReport


class TripLocationInput(BaseModel):
    address: str
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class TripCreateRequest(BaseModel):
    name: Optional[str] = None
    start_address: str
    start_lat: float = Field(..., ge=-90, le=90)
    start_lng: float = Field(..., ge=-180, le=180)
    scheduled_at: Optional[datetime] = None
    locations: List[TripLocationInput] = Field(..., min_length=1)


class TripLocationModel(BaseModel):
    id: int
    address: Optional[str] = None
    lat: float
    lng: float
    sequence: int
    status: str

    @classmethod
    def from_domain(cls, stop: Stop) -> "TripLocationModel":
        return cls(
            id=stop.id,
            address=stop.address,
            lat=stop.lat,
            lng=stop.lng,
            sequence=stop.sequence,
            status=stop.status,
        )


class TripModel(BaseModel):
    id: int
    name: Optional[str] = None
    start_address: Optional[str] = None
    start_lat: float
    start_lng: float
    scheduled_at: Optional[datetime] = None
    status: str
    meta: dict
    locations: List[TripLocationModel] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, trip: Trip, stops: List[Stop] | None = None) -> "TripModel":
        return cls(
            id=trip.id,
            name=trip.name,
            start_address=trip.start_address,
            start_lat=trip.start_lat,
            start_lng=trip.start_lng,
            scheduled_at=trip.scheduled_at,
            status=trip.status,
            meta=trip.meta,
            locations=[TripLocationModel.from_domain(stop) for stop in stops or []],
        )


class TripOptimizationResponse(BaseModel):
    trip_id: int
    order: List[int]
    method: Literal["ai", "heuristic"]
    time_ms: float
    locations_count: int
    fingerprint: str
    cached: bool
    optimized_at: datetime

    @classmethod
    def from_report(cls, report: OptimizationReport) -> "TripOptimizationResponse":
        return cls(
            trip_id=report.trip_id,
            order=report.order,
            method=report.method.value,
            time_ms=report.time_ms,
            locations_count=report.locations_count,
            fingerprint=report.fingerprint,
            cached=report.cached,
            optimized_at=report.optimized_at,
        )
