"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name, str(default))
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name, str(default))
    try:
        return float(value)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    # Server settings
    host: str
    port: int
    database_url: str
    log_level: str

    # TMDB settings
    tmdb_bearer_token: str | None
    tmdb_language: str
    tmdb_timeout: float
    tmdb_max_retries: int
    tmdb_lookup_concurrency: int

    # Recommendation settings
    recs_long_term_weight: float
    recs_recent_weight: float
    recs_completed_weight: float
    recs_watching_weight: float
    recs_recency_boost: float
    recs_recent_limit: int
    recs_top_genres: int
    recs_result_limit: int
    recs_diversity_enabled: bool

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        host = os.getenv("HOST", "0.0.0.0")
        port_str = os.getenv("PORT", "8000")
        try:
            port = int(port_str)
        except ValueError:
            raise ConfigurationError(f"PORT must be an integer, got: {port_str}")

        database_url = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./vivaply.db")
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        # TMDB settings
        tmdb_bearer_token = os.getenv("TMDB_BEARER_TOKEN") or None
        tmdb_language = os.getenv("TMDB_LANGUAGE", "en-US")
        tmdb_timeout = _env_float("TMDB_TIMEOUT", 10.0)
        tmdb_max_retries = max(1, _env_int("TMDB_MAX_RETRIES", 3))
        tmdb_lookup_concurrency = max(1, _env_int("TMDB_LOOKUP_CONCURRENCY", 5))

        # Recommendation settings
        return cls(
            host=host,
            port=port,
            database_url=database_url,
            log_level=log_level,
            tmdb_bearer_token=tmdb_bearer_token,
            tmdb_language=tmdb_language,
            tmdb_timeout=tmdb_timeout,
            tmdb_max_retries=tmdb_max_retries,
            tmdb_lookup_concurrency=tmdb_lookup_concurrency,
            recs_long_term_weight=_env_float("RECS_LONG_TERM_WEIGHT", 0.7),
            recs_recent_weight=_env_float("RECS_RECENT_WEIGHT", 0.3),
            recs_completed_weight=_env_float("RECS_COMPLETED_WEIGHT", 2.0),
            recs_watching_weight=_env_float("RECS_WATCHING_WEIGHT", 1.0),
            recs_recency_boost=_env_float("RECS_RECENCY_BOOST", 2.0),
            recs_recent_limit=max(0, _env_int("RECS_RECENT_LIMIT", 5)),
            recs_top_genres=max(0, _env_int("RECS_TOP_GENRES", 3)),
            recs_result_limit=max(0, _env_int("RECS_RESULT_LIMIT", 20)),
            recs_diversity_enabled=_env_bool("RECS_DIVERSITY_ENABLED", False),
        )


config = Config.from_env()
