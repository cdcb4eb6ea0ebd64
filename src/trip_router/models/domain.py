"""Domain models for delivery trips and their stops."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(slots=True, frozen=True)
class Stop:
    """A geographic waypoint belonging to a trip."""

    id: int
    lat: float
    lng: float
    updated_at: Optional[datetime] = None
    address: Optional[str] = None
    sequence: int = 0
    status: str = "pending"


@dataclass(slots=True)
class Trip:
    """Aggregate root for a delivery run starting at a fixed origin."""

    id: int
    start_lat: float
    start_lng: float
    start_address: Optional[str] = None
    name: Optional[str] = None
    status: str = "planned"
    scheduled_at: Optional[datetime] = None
    meta: dict = field(default_factory=dict)
