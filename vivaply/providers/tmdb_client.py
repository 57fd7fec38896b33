"""TMDB API client with retry logic."""

import asyncio
from typing import Any, Literal

import httpx

from vivaply.logging import get_logger

logger = get_logger(__name__)

TMDB_BASE_URL = "https://api.themoviedb.org/3"
DEFAULT_TIMEOUT = 10.0
MAX_RETRIES = 3
BASE_BACKOFF = 1.0


# Combined movie + TV genre map (TMDB genre IDs -> English names)
TMDB_GENRE_MAP: dict[int, str] = {
    28: "Action",
    12: "Adventure",
    16: "Animation",
    35: "Comedy",
    80: "Crime",
    99: "Documentary",
    18: "Drama",
    10751: "Family",
    14: "Fantasy",
    36: "History",
    27: "Horror",
    10402: "Music",
    9648: "Mystery",
    10749: "Romance",
    878: "Science Fiction",
    10770: "TV Movie",
    53: "Thriller",
    10752: "War",
    37: "Western",
    # TV-specific
    10759: "Action & Adventure",
    10762: "Kids",
    10763: "News",
    10764: "Reality",
    10765: "Sci-Fi & Fantasy",
    10766: "Soap",
    10767: "Talk",
    10768: "War & Politics",
}


def genre_ids_to_names(genre_ids: list[int]) -> list[str]:
    """Convert TMDB genre IDs to human-readable names, skipping unknown IDs."""
    return [TMDB_GENRE_MAP[gid] for gid in genre_ids if gid in TMDB_GENRE_MAP]


class TMDBError(Exception):
    """Base exception for TMDB API errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TMDBRateLimitError(TMDBError):
    """Rate limit exceeded."""

    def __init__(self, retry_after: int | None = None):
        super().__init__("Rate limit exceeded", status_code=429)
        self.retry_after = retry_after


class TMDBClient:
    """Async TMDB API client with retry logic."""

    def __init__(
        self,
        bearer_token: str,
        language: str = "en-US",
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        backoff: float = BASE_BACKOFF,
    ):
        """Initialize TMDB client.

        Args:
            bearer_token: TMDB API bearer token (v4 auth)
            language: Default language for results (e.g., "en-US")
            timeout: Request timeout in seconds
            max_retries: Attempts per request before giving up
            backoff: Base delay in seconds for exponential backoff
        """
        self.bearer_token = bearer_token
        self.language = language
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.backoff = backoff
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=TMDB_BASE_URL,
                headers={
                    "Authorization": f"Bearer {self.bearer_token}",
                    "Accept": "application/json",
                },
                timeout=self.timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make an API request with retry logic.

        Args:
            method: HTTP method
            path: API path (e.g., "/discover/tv")
            params: Query parameters

        Returns:
            Parsed JSON response

        Raises:
            TMDBError: On API error after retries exhausted
        """
        client = await self._get_client()

        if params is None:
            params = {}
        params.setdefault("language", self.language)

        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            wait_time = self.backoff * (2 ** attempt)
            is_last = attempt >= self.max_retries - 1

            try:
                response = await client.request(method, path, params=params)
            except httpx.TimeoutException as e:
                logger.warning(
                    f"TMDB timeout on {path}, retry in {wait_time}s "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )
                last_error = e
                if not is_last:
                    await asyncio.sleep(wait_time)
                continue
            except httpx.RequestError as e:
                logger.warning(
                    f"TMDB request error on {path}: {e}, retry in {wait_time}s "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )
                last_error = e
                if not is_last:
                    await asyncio.sleep(wait_time)
                continue

            if response.status_code == 200:
                try:
                    data = response.json()
                except ValueError:
                    raise TMDBError("Invalid JSON response", status_code=200)
                if not isinstance(data, dict):
                    raise TMDBError(
                        f"Unexpected response type: {type(data).__name__}",
                        status_code=200,
                    )
                return data

            if response.status_code == 429:
                retry_after = response.headers.get("Retry-After")
                if retry_after and retry_after.isdigit():
                    wait_time = int(retry_after)
                logger.warning(
                    f"TMDB rate limited, retry after {wait_time}s "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )
                if is_last:
                    raise TMDBRateLimitError(
                        retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None
                    )
                await asyncio.sleep(wait_time)
                continue

            if response.status_code >= 500:
                logger.warning(
                    f"TMDB server error {response.status_code}, "
                    f"retry in {wait_time}s (attempt {attempt + 1}/{self.max_retries})"
                )
                if is_last:
                    raise TMDBError(
                        f"Server error: {response.status_code}",
                        status_code=response.status_code,
                    )
                await asyncio.sleep(wait_time)
                continue

            # Client error (4xx except 429)
            try:
                error_data = response.json() if response.content else {}
            except ValueError:
                error_data = {}
            if not isinstance(error_data, dict):
                error_data = {}
            error_msg = error_data.get("status_message", f"HTTP {response.status_code}")
            raise TMDBError(error_msg, status_code=response.status_code)

        raise TMDBError(f"Max retries exceeded: {last_error}")

    async def discover(
        self,
        media_type: Literal["movie", "tv"],
        genre_ids: list[int],
        language: str | None = None,
        page: int = 1,
    ) -> dict[str, Any]:
        """Discover movies or TV shows matching all given genres.

        Args:
            media_type: "movie" or "tv"
            genre_ids: TMDB genre IDs, sent comma-joined
            language: Result language (client default when omitted)
            page: Page number (1-based)

        Returns:
            TMDB response with results array
        """
        params: dict[str, Any] = {
            "with_genres": ",".join(str(gid) for gid in genre_ids),
            "sort_by": "popularity.desc",
            "page": page,
        }
        if language:
            params["language"] = language
        return await self._request("GET", f"/discover/{media_type}", params=params)

    async def get_movie_details(self, movie_id: int) -> dict[str, Any]:
        """Get movie details, including its ``genres`` list."""
        return await self._request("GET", f"/movie/{movie_id}")

    async def get_tv_details(self, tv_id: int) -> dict[str, Any]:
        """Get TV show details, including its ``genres`` list."""
        return await self._request("GET", f"/tv/{tv_id}")

    async def get_details(
        self,
        media_type: Literal["movie", "tv"],
        tmdb_id: int,
    ) -> dict[str, Any]:
        """Get details for a movie or TV show."""
        if media_type == "movie":
            return await self.get_movie_details(tmdb_id)
        return await self.get_tv_details(tmdb_id)
