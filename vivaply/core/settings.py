"""Tuning constants for genre-based recommendations."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vivaply.config import Config

LONG_TERM_WEIGHT = 0.7
RECENT_WEIGHT = 0.3
COMPLETED_WEIGHT = 2.0
WATCHING_WEIGHT = 1.0
RECENCY_BOOST = 2.0
RECENT_LIMIT = 5
TOP_GENRES = 3
RESULT_LIMIT = 20
DIVERSITY_STEP = 0.5


@dataclass(frozen=True)
class RecommendationSettings:
    """Weights and limits used by profile building, merging and ranking."""

    long_term_weight: float = LONG_TERM_WEIGHT
    recent_weight: float = RECENT_WEIGHT
    completed_weight: float = COMPLETED_WEIGHT
    watching_weight: float = WATCHING_WEIGHT
    recency_boost: float = RECENCY_BOOST
    recent_limit: int = RECENT_LIMIT
    top_genres: int = TOP_GENRES
    result_limit: int = RESULT_LIMIT
    diversity_enabled: bool = False

    @classmethod
    def from_config(cls, config: "Config") -> "RecommendationSettings":
        return cls(
            long_term_weight=config.recs_long_term_weight,
            recent_weight=config.recs_recent_weight,
            completed_weight=config.recs_completed_weight,
            watching_weight=config.recs_watching_weight,
            recency_boost=config.recs_recency_boost,
            recent_limit=config.recs_recent_limit,
            top_genres=config.recs_top_genres,
            result_limit=config.recs_result_limit,
            diversity_enabled=config.recs_diversity_enabled,
        )
