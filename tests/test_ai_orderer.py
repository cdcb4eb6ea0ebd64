import json
import logging

import httpx
import pytest

from trip_router.models.domain import Stop, Trip
from trip_router.services.routing.ai_orderer import (
    build_prompt,
    order_with_ai,
    parse_ai_order,
    validate_ai_order,
)
from trip_router.services.routing.models import Accepted, Rejected, Unavailable


class FakeReasoningClient:
    def __init__(self, reply: str | None = None, error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []

    def complete(self, prompt, max_tokens, temperature):
        self.calls.append({"prompt": prompt, "max_tokens": max_tokens, "temperature": temperature})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def trip() -> Trip:
    return Trip(id=7, start_lat=0.0, start_lng=0.0)


@pytest.fixture
def stops() -> list[Stop]:
    return [Stop(id=1, lat=0.0, lng=1.0), Stop(id=2, lat=0.0, lng=3.0), Stop(id=3, lat=0.0, lng=2.0)]


def _run(client, trip, stops):
    return order_with_ai(client, trip, stops, max_tokens=100, temperature=0.2)


def test_prompt_embeds_origin_and_stops(trip, stops):
    prompt = build_prompt(trip, stops)

    assert "ONLY a JSON array" in prompt
    payload = json.loads(prompt.split("JSON: ", 1)[1])
    assert payload["start"] == {"lat": 0.0, "lng": 0.0}
    assert [loc["id"] for loc in payload["locations"]] == [1, 2, 3]


def test_valid_permutation_is_accepted(trip, stops):
    client = FakeReasoningClient("[2, 1, 3]")

    outcome = _run(client, trip, stops)

    assert outcome == Accepted([2, 1, 3])
    assert client.calls[0]["max_tokens"] == 100
    assert client.calls[0]["temperature"] == 0.2


def test_string_ids_and_code_fences_are_tolerated(trip, stops):
    client = FakeReasoningClient('```json\n["3", "1", "2"]\n```')

    assert _run(client, trip, stops) == Accepted([3, 1, 2])


@pytest.mark.parametrize(
    "reply",
    [
        "[]",
        "[1, 2]",
        "[1, 2, 3, 4]",
        "[1, 1, 3]",
        "[1, 2, 3, 3]",
        "[1, 2, [3]]",
        "[true, 2, 3]",
    ],
)
def test_invalid_permutations_are_rejected(trip, stops, reply, caplog):
    with caplog.at_level(logging.WARNING):
        outcome = _run(FakeReasoningClient(reply), trip, stops)

    assert isinstance(outcome, Rejected)
    assert "Discarding AI order" in caplog.text


@pytest.mark.parametrize("reply", ["not json", '{"order": [1, 2, 3]}', "3"])
def test_malformed_replies_are_unavailable(trip, stops, reply):
    assert isinstance(_run(FakeReasoningClient(reply), trip, stops), Unavailable)


def test_transport_errors_are_absorbed(trip, stops, caplog):
    client = FakeReasoningClient(error=httpx.ConnectTimeout("timed out"))

    with caplog.at_level(logging.WARNING):
        outcome = _run(client, trip, stops)

    assert isinstance(outcome, Unavailable)
    assert "timed out" in outcome.reason
    assert "AI route optimisation failed" in caplog.text


def test_missing_client_is_unavailable(trip, stops):
    assert isinstance(_run(None, trip, stops), Unavailable)


def test_validate_maps_back_to_store_ids(stops):
    assert validate_ai_order(["2", 3, " 1 "], stops) == [2, 3, 1]
    assert validate_ai_order([2, 3], stops) is None


def test_parse_rejects_non_arrays():
    with pytest.raises(ValueError):
        parse_ai_order('{"ids": []}')
