#!/usr/bin/env python3
"""Verify the AI reasoning service can order a small sample trip."""

import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from trip_router.config import settings  # noqa: E402
from trip_router.models.domain import Stop, Trip  # noqa: E402
from trip_router.services.routing.ai_client import build_reasoning_client, check_health  # noqa: E402
from trip_router.services.routing.ai_orderer import order_with_ai  # noqa: E402
from trip_router.services.routing.models import Accepted  # noqa: E402


def main():
    print("=" * 60)
    print("AI Route Ordering Connection Test")
    print("=" * 60)
    print()

    print("1. Checking AI configuration...")
    client = build_reasoning_client(settings)
    if client is None:
        print("   [ERROR] No API key configured")
        print("   Set TRIP_OPENAI_API_KEY (or OPENAI_API_KEY) in your .env file")
        return 1
    print(f"   [OK] Endpoint: {settings.openai_base_url}")
    print(f"   [OK] Model: {settings.openai_model}")
    print()

    print("2. Testing completion round trip...")
    if not check_health(client):
        print("   [ERROR] AI service is not responding")
        return 1
    print("   [OK] AI service answered")
    print()

    print("3. Ordering a sample trip...")
    trip = Trip(id=0, start_lat=-6.7924, start_lng=39.2083)  # Dar es Salaam
    stops = [
        Stop(id=1, lat=-6.8161, lng=39.2803),
        Stop(id=2, lat=-6.7730, lng=39.2230),
        Stop(id=3, lat=-6.8000, lng=39.2500),
    ]
    outcome = order_with_ai(
        client,
        trip,
        stops,
        max_tokens=settings.ai_max_tokens,
        temperature=settings.ai_temperature,
    )
    if not isinstance(outcome, Accepted):
        print(f"   [ERROR] AI order not usable: {outcome}")
        return 1
    print(f"   [OK] Proposed order: {outcome.order}")
    print()

    print("=" * 60)
    print("[SUCCESS] AI route ordering is working!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
