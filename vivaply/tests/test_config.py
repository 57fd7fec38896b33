"""Tests for environment configuration."""

import pytest

from vivaply.config import Config, ConfigurationError


def test_negative_limits_are_clamped(monkeypatch):
    """Negative limits would turn list slices into silent truncation."""
    monkeypatch.setenv("RECS_RECENT_LIMIT", "-1")
    monkeypatch.setenv("RECS_TOP_GENRES", "-3")
    monkeypatch.setenv("RECS_RESULT_LIMIT", "-20")

    config = Config.from_env()

    assert config.recs_recent_limit == 0
    assert config.recs_top_genres == 0
    assert config.recs_result_limit == 0


def test_defaults_and_invalid_numbers(monkeypatch):
    for name in ("RECS_RECENT_LIMIT", "RECS_TOP_GENRES", "RECS_RESULT_LIMIT", "RECS_LONG_TERM_WEIGHT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("RECS_RECENCY_BOOST", "lots")

    config = Config.from_env()

    assert config.recs_recent_limit == 5
    assert config.recs_top_genres == 3
    assert config.recs_result_limit == 20
    assert config.recs_long_term_weight == 0.7
    assert config.recs_recency_boost == 2.0


def test_invalid_port_raises(monkeypatch):
    monkeypatch.setenv("PORT", "eighty")

    with pytest.raises(ConfigurationError):
        Config.from_env()
