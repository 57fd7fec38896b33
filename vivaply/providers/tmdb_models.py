"""Pydantic models for TMDB payloads used by recommendations."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, computed_field

from vivaply.core.contracts import Candidate, MediaType
from vivaply.logging import get_logger

logger = get_logger(__name__)


class TmdbGenre(BaseModel):
    """Genre entry as returned in TMDB detail payloads."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = ""


class TmdbContent(BaseModel):
    """A movie or TV show from a TMDB list or detail endpoint.

    TMDB uses ``title``/``release_date`` for movies and
    ``name``/``first_air_date`` for TV; both are optional here.
    """

    model_config = ConfigDict(extra="ignore")

    id: int
    media_type: MediaType | None = None
    name: str | None = None
    title: str | None = None
    poster_path: str | None = None
    overview: str | None = None
    vote_average: float | None = None
    first_air_date: str | None = None
    release_date: str | None = None
    genre_ids: list[int] = Field(default_factory=list)
    genres: list[TmdbGenre] | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def display_name(self) -> str:
        return self.name or self.title or "Unknown"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def display_date(self) -> str:
        return self.release_date or self.first_air_date or ""

    def genre_id_list(self) -> list[int]:
        """Genre IDs from ``genre_ids``, falling back to ``genres``."""
        if self.genre_ids:
            return list(self.genre_ids)
        if self.genres:
            return [genre.id for genre in self.genres]
        return []

    def to_candidate(self) -> Candidate:
        return Candidate(
            external_id=self.id,
            genre_ids=tuple(self.genre_id_list()),
            content=self,
        )


def parse_content(data: dict[str, Any], media_type: MediaType) -> TmdbContent | None:
    """Validate one TMDB record, returning None when it is unusable."""
    if not isinstance(data, dict) or data.get("id") is None:
        return None
    try:
        return TmdbContent.model_validate({**data, "media_type": media_type})
    except ValidationError as e:
        logger.warning(f"Skipping malformed TMDB record id={data.get('id')}: {e.error_count()} errors")
        return None


def parse_results(payload: dict[str, Any], media_type: MediaType) -> list[TmdbContent]:
    """Parse the ``results`` array of a TMDB list response."""
    results = payload.get("results") if isinstance(payload, dict) else None
    if not isinstance(results, list):
        return []
    parsed = (parse_content(item, media_type) for item in results)
    return [content for content in parsed if content is not None]
