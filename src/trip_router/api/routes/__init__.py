"""Route group exports."""

from . import health, trips

__all__ = ["health", "trips"]
