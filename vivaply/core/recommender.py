"""Genre-based recommendation engine for TV shows and movies."""

from vivaply.core.contracts import (
    Candidate,
    DiscoverySource,
    GenreProfile,
    GenreSource,
    LibrarySource,
    MediaType,
    RecommendationSet,
    ScoredCandidate,
)
from vivaply.core.genre_profile import build_genre_profiles
from vivaply.core.merge import merge_profiles, top_genres
from vivaply.core.settings import DIVERSITY_STEP, RESULT_LIMIT, RecommendationSettings
from vivaply.logging import get_logger
from vivaply.providers.tmdb_client import genre_ids_to_names

logger = get_logger(__name__)


def score_candidate(candidate: Candidate, merged: GenreProfile) -> float:
    """Sum of merged profile weights over the candidate's genres."""
    return sum(merged.get(genre_id, 0.0) for genre_id in candidate.genre_ids)


def exclude_tracked(candidates: list[Candidate], tracked_ids: set[int]) -> list[Candidate]:
    """Drop candidates already present in the user's library."""
    return [c for c in candidates if c.external_id not in tracked_ids]


def rank_candidates(
    candidates: list[Candidate],
    merged: GenreProfile,
    limit: int = RESULT_LIMIT,
) -> list[ScoredCandidate]:
    """Score candidates and keep the best ``limit`` of them.

    Sorting is stable, so equal scores keep discovery order.
    """
    scored = [ScoredCandidate(candidate=c, score=score_candidate(c, merged)) for c in candidates]
    scored.sort(key=lambda s: s.score, reverse=True)
    return scored[:limit]


def rank_with_diversity(
    candidates: list[Candidate],
    merged: GenreProfile,
    limit: int = RESULT_LIMIT,
    step: float = DIVERSITY_STEP,
) -> list[ScoredCandidate]:
    """Greedy ranking that damps genres already picked.

    Each candidate's score is multiplied by ``1 / (1 + step * count)`` for
    every genre it shares with earlier picks. Candidates whose damped
    score is not positive are skipped.

    Args:
        candidates: Eligible candidates
        merged: Merged genre profile
        limit: Maximum items to return
        step: Damping per already-selected item of a genre

    Returns:
        Selected candidates in pick order, carrying their undamped score
    """
    ranked = rank_candidates(candidates, merged, limit=len(candidates))
    genre_counts: dict[int, int] = {}
    selected: list[ScoredCandidate] = []

    for entry in ranked:
        if len(selected) >= limit:
            break

        penalty = 1.0
        for genre_id in entry.candidate.genre_ids:
            count = genre_counts.get(genre_id)
            if count:
                penalty *= 1.0 / (1 + count * step)

        if entry.score * penalty <= 0:
            continue

        selected.append(entry)
        for genre_id in entry.candidate.genre_ids:
            genre_counts[genre_id] = genre_counts.get(genre_id, 0) + 1

    return selected


class RecommendationEngine:
    """Builds ranked recommendations from library history and discovery."""

    def __init__(
        self,
        library: LibrarySource,
        genres: GenreSource,
        discovery: DiscoverySource,
        settings: RecommendationSettings | None = None,
    ) -> None:
        self.library = library
        self.genres = genres
        self.discovery = discovery
        self.settings = settings or RecommendationSettings()

    async def build_merged_profile(self, user_id: str, media_type: MediaType) -> GenreProfile:
        """Build and merge long-term and recent profiles for one type."""
        profiles = await build_genre_profiles(
            user_id, media_type, self.library, self.genres, self.settings
        )
        return merge_profiles(
            profiles.long_term,
            profiles.recent,
            long_term_weight=self.settings.long_term_weight,
            recent_weight=self.settings.recent_weight,
        )

    async def recommend_for_type(
        self,
        user_id: str,
        media_type: MediaType,
        language: str,
    ) -> list[ScoredCandidate]:
        """Produce the ranked list for a single media type.

        Args:
            user_id: User ID
            media_type: TV or movie
            language: Language passed to discovery

        Returns:
            Ranked candidates, empty when the user has no usable history
        """
        merged = await self.build_merged_profile(user_id, media_type)
        genres = top_genres(merged, self.settings.top_genres)

        if not genres:
            logger.info(
                "No genre history, skipping discovery",
                extra={"user_id": user_id, "media_type": media_type.value},
            )
            return []

        candidates = await self.discovery.discover_by_genres(genres, media_type, language)
        if not candidates:
            return []

        tracked_ids = await self.library.list_tracked_ids(user_id, media_type)
        eligible = exclude_tracked(candidates, tracked_ids)

        if self.settings.diversity_enabled:
            ranked = rank_with_diversity(eligible, merged, limit=self.settings.result_limit)
        else:
            ranked = rank_candidates(eligible, merged, limit=self.settings.result_limit)

        logger.info(
            f"Ranked {len(ranked)} of {len(candidates)} candidates "
            f"for genres {genre_ids_to_names(genres) or genres}",
            extra={"user_id": user_id, "media_type": media_type.value},
        )
        return ranked

    async def get_recommendations(self, user_id: str, language: str) -> RecommendationSet:
        """Ranked TV and movie recommendations for a user."""
        tv = await self.recommend_for_type(user_id, MediaType.TV, language)
        movies = await self.recommend_for_type(user_id, MediaType.MOVIE, language)
        return RecommendationSet(tv=tv, movies=movies)
