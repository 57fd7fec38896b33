"""External content providers."""

from vivaply.providers.tmdb_client import (
    TMDBClient,
    TMDBError,
    TMDBRateLimitError,
    genre_ids_to_names,
)
from vivaply.providers.tmdb_models import TmdbContent, TmdbGenre
from vivaply.providers.tmdb_provider import TmdbContentProvider

__all__ = [
    "TMDBClient",
    "TMDBError",
    "TMDBRateLimitError",
    "TmdbContent",
    "TmdbContentProvider",
    "TmdbGenre",
    "genre_ids_to_names",
]
