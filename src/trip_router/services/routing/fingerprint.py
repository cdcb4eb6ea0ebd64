"""Content fingerprint of a trip's stop set, used to key cached orderings."""

from __future__ import annotations

import hashlib
from typing import Sequence

from ...models.domain import Stop

FIELD_SEPARATOR = ","
STOP_SEPARATOR = "|"


def _stop_token(stop: Stop) -> str:
    updated = stop.updated_at.isoformat() if stop.updated_at is not None else ""
    return FIELD_SEPARATOR.join((str(stop.id), repr(float(stop.lat)), repr(float(stop.lng)), updated))


def stop_set_fingerprint(stops: Sequence[Stop]) -> str:
    """Return a SHA-256 digest over every stop's ID, coordinates and update time.

    Stops are sorted by ID first so the digest does not depend on the order
    the store happened to return them in. Any change to a stop's ID,
    latitude, longitude or ``updated_at`` yields a different digest.
    """
    ordered = sorted(stops, key=lambda stop: stop.id)
    payload = STOP_SEPARATOR.join(_stop_token(stop) for stop in ordered)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
