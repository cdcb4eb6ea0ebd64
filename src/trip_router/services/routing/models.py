"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Union


class OptimizationMethod(str, Enum):
    AI = "ai"
    HEURISTIC = "heuristic"


@dataclass(slots=True, frozen=True)
class OptimizationResult:
    """Visiting order for a trip and the strategy that produced it."""

    order: List[int]
    method: OptimizationMethod

    def to_dict(self) -> dict:
        return {"order": list(self.order), "method": self.method.value}

    @classmethod
    def from_dict(cls, payload: dict) -> "OptimizationResult":
        order = payload["order"]
        if not isinstance(order, list):
            raise ValueError("Cached order must be a list.")
        return cls(order=list(order), method=OptimizationMethod(payload["method"]))


@dataclass(slots=True, frozen=True)
class OptimizationReport:
    """Outcome of one optimize call, including per-call telemetry."""

    trip_id: int
    order: List[int]
    method: OptimizationMethod
    time_ms: float
    locations_count: int
    fingerprint: str
    cached: bool
    optimized_at: datetime

    def to_meta(self) -> dict:
        return {
            "optimized_at": self.optimized_at.isoformat(),
            "method": self.method.value,
            "time_ms": self.time_ms,
            "locations_count": self.locations_count,
            "fingerprint": self.fingerprint,
        }


# AI ordering outcomes. The orchestrator falls back to the heuristic for
# anything other than Accepted.


@dataclass(slots=True, frozen=True)
class Accepted:
    order: List[int]


@dataclass(slots=True, frozen=True)
class Rejected:
    reason: str


@dataclass(slots=True, frozen=True)
class Unavailable:
    reason: str


AiOrderingOutcome = Union[Accepted, Rejected, Unavailable]
