"""Errors raised by the routing services."""

from __future__ import annotations


class InvalidStopDataError(ValueError):
    """A trip or stop carries coordinates that cannot be routed."""


class TripNotFoundError(LookupError):
    def __init__(self, trip_id: int) -> None:
        super().__init__(f"Trip {trip_id} not found.")
        self.trip_id = trip_id


class AiServiceError(RuntimeError):
    """The reasoning service answered without usable content."""
