"""AI-assisted visiting order with strict permutation validation.

The reasoning service is a soft dependency: whatever it returns is checked
against the trip's actual stop IDs, and any failure is reported as an
outcome value instead of an exception so the caller can fall back.
"""

from __future__ import annotations

import json
import logging
import re
from collections import Counter
from typing import Any, Sequence

from ...models.domain import Stop, Trip
from .ai_client import ReasoningClient
from .models import Accepted, AiOrderingOutcome, Rejected, Unavailable

logger = logging.getLogger(__name__)

PROMPT_PREAMBLE = (
    "You are a logistics expert. Given the following JSON payload, return ONLY a JSON array "
    "containing the IDs of the locations in the most time-efficient visiting order starting "
    "after the start point. Do not include any other text. JSON: "
)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def build_prompt(trip: Trip, stops: Sequence[Stop]) -> str:
    payload = {
        "start": {"lat": trip.start_lat, "lng": trip.start_lng},
        "locations": [{"id": stop.id, "lat": stop.lat, "lng": stop.lng} for stop in stops],
    }
    return PROMPT_PREAMBLE + json.dumps(payload)


def parse_ai_order(text: str) -> list[Any]:
    """Extract the JSON array from a completion, tolerating Markdown fences."""
    cleaned = text.strip()
    fenced = _CODE_FENCE.match(cleaned)
    if fenced:
        cleaned = fenced.group(1)
    parsed = json.loads(cleaned)
    if not isinstance(parsed, list):
        raise ValueError(f"Expected a JSON array, got {type(parsed).__name__}.")
    return parsed


def validate_ai_order(candidate: Sequence[Any], stops: Sequence[Stop]) -> list[int] | None:
    """Map a proposed order onto stop IDs if it is an exact permutation.

    IDs are compared by their string form so ``"3"`` matches stop ``3``.
    Returns None on any missing, foreign or duplicated ID, including a
    duplicate that masks an omission.
    """
    by_key = {str(stop.id): stop.id for stop in stops}
    keys: list[str] = []
    for item in candidate:
        if isinstance(item, bool) or not isinstance(item, (int, str)):
            return None
        keys.append(str(item).strip())

    if Counter(keys) != Counter(by_key.keys()):
        return None
    return [by_key[key] for key in keys]


def order_with_ai(
    client: ReasoningClient | None,
    trip: Trip,
    stops: Sequence[Stop],
    *,
    max_tokens: int,
    temperature: float,
) -> AiOrderingOutcome:
    """Ask the reasoning service for a visiting order. Never raises."""
    if client is None:
        return Unavailable("AI ordering is not configured")

    prompt = build_prompt(trip, stops)
    try:
        reply = client.complete(prompt, max_tokens=max_tokens, temperature=temperature)
        candidate = parse_ai_order(reply)
    except Exception as exc:
        logger.warning(f"AI route optimisation failed for trip {trip.id}: {exc}")
        return Unavailable(str(exc))

    order = validate_ai_order(candidate, stops)
    if order is None:
        reason = f"proposed order {candidate!r} is not a permutation of the trip's {len(stops)} stops"
        logger.warning(f"Discarding AI order for trip {trip.id}: {reason}")
        return Rejected(reason)
    return Accepted(order)
