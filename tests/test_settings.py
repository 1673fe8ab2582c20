"""Tests for settings loading and validation."""
import pytest
from pydantic import ValidationError

from scorecard.config import load_settings
from scorecard.config.settings import Settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.ENABLED_SOURCES == ["congress.gov", "govtrack.us", "promise-tracker"]
    assert settings.rate_limits_by_source == {
        "congress.gov": 1000,
        "govtrack.us": 1000,
        "promise-tracker": 500,
    }
    assert settings.cache_ttl_seconds == 24 * 3600
    assert settings.category_weight("economic") == pytest.approx(0.1)
    assert sum(settings.CATEGORY_WEIGHTS.values()) == pytest.approx(1.0)
    assert settings.CONFIDENCE_THRESHOLD == 0.7


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CONGRESS_GOV_API_KEY", "from-env")
    monkeypatch.setenv("CACHE_DURATION_MS", "1000")
    monkeypatch.setenv("RATE_LIMITS", '{"congress.gov": 10}')

    settings = Settings(_env_file=None)

    assert settings.api_keys_by_source["congress.gov"] == "from-env"
    assert settings.cache_ttl_seconds == 1.0
    assert settings.rate_limits_by_source == {"congress.gov": 10}


def test_partial_weights_fall_back_to_default():
    settings = load_settings(_env_file=None, CATEGORY_WEIGHTS={"healthcare": 0.4})
    assert settings.category_weight("healthcare") == 0.4
    assert settings.category_weight("education") == pytest.approx(0.1)


@pytest.mark.parametrize("overrides", [
    {"CATEGORY_WEIGHTS": {"astrology": 0.5}},
    {"CATEGORY_WEIGHTS": {"economic": 1.5}},
    {"CATEGORY_AXES": {"astrology": "progressive"}},
    {"RATE_LIMITS": {"congress.gov": 0}},
    {"CONFIDENCE_THRESHOLD": 1.2},
    {"MAX_CONCURRENT_EVALUATIONS": 0},
    {"CONFIDENCE_GROWTH_RATE": -1},
])
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)
