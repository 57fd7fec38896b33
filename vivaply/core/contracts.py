"""Domain contracts and type definitions for recommendations."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Protocol, Union

if TYPE_CHECKING:
    from vivaply.providers.tmdb_models import TmdbContent


class MediaType(str, Enum):
    """Library content types that receive recommendations."""

    TV = "tv"
    MOVIE = "movie"


class WatchStatus(str, Enum):
    """Watch status of a library row."""

    NONE = "none"
    PLAN_TO_WATCH = "plan_to_watch"
    WATCHING = "watching"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"
    DROPPED = "dropped"


GenreProfile = dict[int, float]


@dataclass(frozen=True)
class LibraryRow:
    """A tracked title in a user's library, reduced to what scoring needs.

    ``genre_ids`` is None when the row carries no cached genres and a live
    lookup is required.
    """

    external_id: int
    status: WatchStatus
    last_interaction_at: datetime | None = None
    genre_ids: tuple[int, ...] | None = None


@dataclass(frozen=True)
class GenresFound:
    """Successful genre lookup."""

    genre_ids: tuple[int, ...]


@dataclass(frozen=True)
class LookupFailed:
    """Genre lookup that could not be completed; treated as no genres."""

    reason: str = ""


GenreLookup = Union[GenresFound, LookupFailed]


def lookup_genres(result: GenreLookup | None) -> tuple[int, ...]:
    """Collapse a lookup result to genre ids, failures yielding none."""
    if isinstance(result, GenresFound):
        return result.genre_ids
    return ()


@dataclass(frozen=True)
class Candidate:
    """Item returned by genre discovery, not yet filtered or scored."""

    external_id: int
    genre_ids: tuple[int, ...]
    content: "TmdbContent | None" = None


@dataclass(frozen=True)
class ScoredCandidate:
    """Candidate with its preference score."""

    candidate: Candidate
    score: float


@dataclass
class RecommendationSet:
    """Ranked recommendations for both media types."""

    tv: list[ScoredCandidate] = field(default_factory=list)
    movies: list[ScoredCandidate] = field(default_factory=list)

    def for_type(self, media_type: MediaType) -> list[ScoredCandidate]:
        return self.tv if media_type == MediaType.TV else self.movies


class LibrarySource(Protocol):
    """Read access to a user's tracked titles."""

    async def list_rows(self, user_id: str, media_type: MediaType) -> list[LibraryRow]:
        ...

    async def list_tracked_ids(self, user_id: str, media_type: MediaType) -> set[int]:
        ...


class GenreSource(Protocol):
    """Batch genre metadata lookup for titles."""

    async def get_genres_for_items(
        self,
        media_type: MediaType,
        external_ids: list[int],
    ) -> dict[int, GenreLookup]:
        ...


class DiscoverySource(Protocol):
    """Discover-by-genre search. Failures return an empty list."""

    async def discover_by_genres(
        self,
        genre_ids: list[int],
        media_type: MediaType,
        language: str,
    ) -> list[Candidate]:
        ...
