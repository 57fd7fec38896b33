"""Merging of long-term and recent genre profiles."""

from vivaply.core.contracts import GenreProfile
from vivaply.core.settings import LONG_TERM_WEIGHT, RECENT_WEIGHT, TOP_GENRES


def merge_profiles(
    long_term: GenreProfile,
    recent: GenreProfile,
    long_term_weight: float = LONG_TERM_WEIGHT,
    recent_weight: float = RECENT_WEIGHT,
) -> GenreProfile:
    """Combine two profiles as a weighted sum over the union of genres.

    The result is ordered by weight descending, ties by genre id.
    """
    genre_ids = set(long_term) | set(recent)
    merged = {
        genre_id: long_term_weight * long_term.get(genre_id, 0.0)
        + recent_weight * recent.get(genre_id, 0.0)
        for genre_id in genre_ids
    }
    return dict(sorted(merged.items(), key=lambda kv: (-kv[1], kv[0])))


def top_genres(merged: GenreProfile, n: int = TOP_GENRES) -> list[int]:
    """Highest weighted genre ids, best first."""
    ranked = sorted(merged.items(), key=lambda kv: (-kv[1], kv[0]))
    return [genre_id for genre_id, _ in ranked[:n]]
