#!/usr/bin/env python3
"""Helper script to check and create the .env file for the trip route optimizer."""

from pathlib import Path
import sys

ENV_TEMPLATE = """# AI route ordering (optional - leave empty to always use nearest-neighbour)
TRIP_OPENAI_API_KEY=
TRIP_OPENAI_BASE_URL=https://api.openai.com/v1
TRIP_OPENAI_MODEL=gpt-3.5-turbo
TRIP_AI_TIMEOUT_SECONDS=8

# Cache lifetime for optimized orders
TRIP_OPTIMIZATION_CACHE_TTL_SECONDS=600

# Supabase (optional - trips are kept in memory when unset)
TRIP_SUPABASE_URL=
TRIP_SUPABASE_KEY=

# API Configuration
TRIP_API_PREFIX=/api
"""


def _mask(value: str) -> str:
    if len(value) > 20:
        return value[:8] + "..." + value[-4:]
    return "***"


def main() -> int:
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Trip Route Optimizer Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        print(f"❌ .env file NOT found at: {env_file}")
        env_file.write_text(ENV_TEMPLATE, encoding="utf-8")
        print(f"✅ Created template .env file at: {env_file}")
        print("⚠️  Edit .env to enable AI ordering or Supabase storage.")
        print()
    else:
        print(f"✅ Found .env file at: {env_file}")
        print()

    sys.path.insert(0, str(project_root / "src"))
    try:
        from trip_router.config import Settings
        config = Settings()
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        print("Make sure you're running this from the project root directory")
        return 1

    if config.ai_enabled:
        print(f"✅ AI ordering enabled: {config.openai_model} at {config.openai_base_url}")
        print(f"   API key: {_mask(config.openai_api_key)}")
    else:
        print("ℹ️  AI ordering disabled (no TRIP_OPENAI_API_KEY / OPENAI_API_KEY)")

    if config.supabase_url and config.supabase_key:
        print(f"✅ Supabase configured: {config.supabase_url[:30]}...")
    else:
        print("ℹ️  Supabase not configured, trips are stored in memory")

    print(f"   Cache TTL: {config.optimization_cache_ttl_seconds}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
