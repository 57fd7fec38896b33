"""Genre preference profiles built from a user's watch history."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from vivaply.core.contracts import (
    GenreLookup,
    GenreProfile,
    GenreSource,
    LibraryRow,
    LibrarySource,
    LookupFailed,
    MediaType,
    WatchStatus,
    lookup_genres,
)
from vivaply.core.settings import RecommendationSettings
from vivaply.logging import get_logger

logger = get_logger(__name__)

LONG_TERM_STATUSES = frozenset({WatchStatus.WATCHING, WatchStatus.COMPLETED})


@dataclass
class GenreProfiles:
    """Normalized long-term and recent profiles for one media type."""

    long_term: GenreProfile = field(default_factory=dict)
    recent: GenreProfile = field(default_factory=dict)


def select_long_term_rows(rows: list[LibraryRow]) -> list[LibraryRow]:
    """Rows that count toward the long-term profile (watching or completed)."""
    return [row for row in rows if row.status in LONG_TERM_STATUSES]


def _sort_key(moment: datetime) -> datetime:
    # Naive timestamps come back from SQLite; compare everything as UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def select_recent_rows(rows: list[LibraryRow], limit: int) -> list[LibraryRow]:
    """Most recently interacted rows, newest first."""
    dated = [row for row in rows if row.last_interaction_at is not None]
    dated.sort(key=lambda row: _sort_key(row.last_interaction_at), reverse=True)
    return dated[:limit]


def accumulate_long_term(
    rows: list[LibraryRow],
    genres_by_id: dict[int, tuple[int, ...]],
    completed_weight: float,
    watching_weight: float,
) -> GenreProfile:
    """Sum status-weighted genre scores over long-term rows."""
    scores: GenreProfile = {}
    for row in rows:
        weight = completed_weight if row.status == WatchStatus.COMPLETED else watching_weight
        for genre_id in genres_by_id.get(row.external_id, ()):
            scores[genre_id] = scores.get(genre_id, 0.0) + weight
    return scores


def accumulate_recent(
    rows: list[LibraryRow],
    genres_by_id: dict[int, tuple[int, ...]],
    boost: float,
) -> GenreProfile:
    """Add a flat recency boost per genre of each recent row."""
    scores: GenreProfile = {}
    for row in rows:
        for genre_id in genres_by_id.get(row.external_id, ()):
            scores[genre_id] = scores.get(genre_id, 0.0) + boost
    return scores


def normalize(scores: GenreProfile) -> GenreProfile:
    """Scale scores so the largest weight is 1.0.

    An empty or all-zero map is divided by 1 and comes back unchanged.
    """
    divisor = max((value for value in scores.values() if value > 0), default=1.0)
    return {genre_id: value / divisor for genre_id, value in scores.items()}


async def resolve_genres(
    rows: list[LibraryRow],
    media_type: MediaType,
    genres: GenreSource,
) -> dict[int, tuple[int, ...]]:
    """Map each row's external id to its genres.

    Cached genres on the row win; the rest are looked up in one batch.
    Failed or missing lookups resolve to no genres.
    """
    resolved: dict[int, tuple[int, ...]] = {}
    missing: list[int] = []

    for row in rows:
        if row.external_id in resolved or row.external_id in missing:
            continue
        if row.genre_ids:
            resolved[row.external_id] = tuple(row.genre_ids)
        else:
            missing.append(row.external_id)

    if not missing:
        return resolved

    lookups: dict[int, GenreLookup] = await genres.get_genres_for_items(media_type, missing)

    for external_id in missing:
        result = lookups.get(external_id)
        if result is None or isinstance(result, LookupFailed):
            reason = result.reason if result is not None else "no result"
            logger.warning(
                f"Genre lookup failed, item skipped: {reason}",
                extra={"media_type": media_type.value, "external_id": external_id},
            )
        resolved[external_id] = lookup_genres(result)

    return resolved


async def build_genre_profiles(
    user_id: str,
    media_type: MediaType,
    library: LibrarySource,
    genres: GenreSource,
    settings: RecommendationSettings | None = None,
) -> GenreProfiles:
    """Build normalized long-term and recent genre profiles for a user.

    Args:
        user_id: User ID
        media_type: Content type whose history is used
        library: Library row source
        genres: Genre metadata source
        settings: Weights and limits (defaults when omitted)

    Returns:
        GenreProfiles with both maps normalized to a max weight of 1.0
    """
    settings = settings or RecommendationSettings()

    rows = await library.list_rows(user_id, media_type)
    long_term_rows = select_long_term_rows(rows)
    recent_rows = select_recent_rows(rows, settings.recent_limit)

    if not long_term_rows and not recent_rows:
        return GenreProfiles()

    genres_by_id = await resolve_genres(long_term_rows + recent_rows, media_type, genres)

    long_term = accumulate_long_term(
        long_term_rows,
        genres_by_id,
        completed_weight=settings.completed_weight,
        watching_weight=settings.watching_weight,
    )
    recent = accumulate_recent(recent_rows, genres_by_id, boost=settings.recency_boost)

    return GenreProfiles(long_term=normalize(long_term), recent=normalize(recent))
