"""Core module containing the recommendation engine and domain types."""

from vivaply.core.contracts import (
    Candidate,
    GenreLookup,
    GenresFound,
    LibraryRow,
    LookupFailed,
    MediaType,
    RecommendationSet,
    ScoredCandidate,
    WatchStatus,
)
from vivaply.core.genre_profile import GenreProfiles, build_genre_profiles, normalize
from vivaply.core.merge import merge_profiles, top_genres
from vivaply.core.recommender import (
    RecommendationEngine,
    rank_candidates,
    rank_with_diversity,
    score_candidate,
)
from vivaply.core.settings import RecommendationSettings

__all__ = [
    # Contracts/Types
    "Candidate",
    "GenreLookup",
    "GenresFound",
    "LibraryRow",
    "LookupFailed",
    "MediaType",
    "RecommendationSet",
    "ScoredCandidate",
    "WatchStatus",
    "RecommendationSettings",
    # Profiles
    "GenreProfiles",
    "build_genre_profiles",
    "normalize",
    "merge_profiles",
    "top_genres",
    # Ranking
    "RecommendationEngine",
    "rank_candidates",
    "rank_with_diversity",
    "score_candidate",
]
