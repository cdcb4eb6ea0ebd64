from trip_router.config import Settings


def test_defaults_match_optimizer_contract():
    config = Settings(_env_file=None, openai_api_key=None)

    assert config.optimization_cache_ttl_seconds == 600
    assert config.ai_temperature == 0.2
    assert config.ai_max_tokens == 100
    assert config.ai_enabled is False


def test_origins_accept_comma_separated_values():
    config = Settings(_env_file=None, frontend_allowed_origins="http://a.test, http://b.test")

    assert config.frontend_allowed_origins == ("http://a.test", "http://b.test")


def test_origins_accept_json_array():
    config = Settings(_env_file=None, frontend_allowed_origins='["http://a.test"]')

    assert config.frontend_allowed_origins == ("http://a.test",)


def test_api_key_enables_ai():
    assert Settings(_env_file=None, openai_api_key="sk-test").ai_enabled is True
