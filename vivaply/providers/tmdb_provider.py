"""TMDB-backed genre lookup and discovery for the recommendation engine."""

import asyncio

from vivaply.core.contracts import (
    Candidate,
    GenreLookup,
    GenresFound,
    LookupFailed,
    MediaType,
)
from vivaply.logging import get_logger
from vivaply.providers.tmdb_client import TMDBClient, TMDBError
from vivaply.providers.tmdb_models import parse_content, parse_results

logger = get_logger(__name__)

DEFAULT_CONCURRENCY = 5


class TmdbContentProvider:
    """Adapts TMDBClient to the engine's genre and discovery sources.

    TMDB failures never escape: lookups become ``LookupFailed`` and
    discovery returns an empty list.
    """

    def __init__(self, client: TMDBClient, concurrency: int = DEFAULT_CONCURRENCY) -> None:
        self.client = client
        self.concurrency = max(1, concurrency)

    async def get_genres(self, media_type: MediaType, external_id: int) -> GenreLookup:
        """Look up genre IDs for a single title."""
        try:
            data = await self.client.get_details(media_type.value, external_id)
        except TMDBError as e:
            return LookupFailed(reason=str(e))

        content = parse_content(data, media_type)
        if content is None:
            return LookupFailed(reason="malformed detail payload")
        return GenresFound(genre_ids=tuple(content.genre_id_list()))

    async def get_genres_for_items(
        self,
        media_type: MediaType,
        external_ids: list[int],
    ) -> dict[int, GenreLookup]:
        """Look up genres for many titles concurrently.

        Args:
            media_type: TV or movie
            external_ids: TMDB IDs to look up

        Returns:
            Mapping of every requested ID to its lookup result
        """
        semaphore = asyncio.Semaphore(self.concurrency)
        unique_ids = list(dict.fromkeys(external_ids))

        async def lookup(external_id: int) -> GenreLookup:
            async with semaphore:
                return await self.get_genres(media_type, external_id)

        results = await asyncio.gather(*(lookup(external_id) for external_id in unique_ids))
        return dict(zip(unique_ids, results))

    async def discover_by_genres(
        self,
        genre_ids: list[int],
        media_type: MediaType,
        language: str,
    ) -> list[Candidate]:
        """Fetch one page of titles matching the genres."""
        if not genre_ids:
            return []

        try:
            payload = await self.client.discover(media_type.value, genre_ids, language=language)
        except TMDBError as e:
            logger.warning(
                f"TMDB discovery failed for genres {genre_ids}: {e}",
                extra={"media_type": media_type.value},
            )
            return []

        return [content.to_candidate() for content in parse_results(payload, media_type)]
