"""Pytest configuration and shared fixtures."""

import os

# Set test environment variables before any imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_vivaply.db"
os.environ.pop("TMDB_BEARER_TOKEN", None)
os.environ["RECS_DIVERSITY_ENABLED"] = "false"

import pytest

from vivaply.core.contracts import (
    Candidate,
    GenreLookup,
    GenresFound,
    LibraryRow,
    LookupFailed,
    MediaType,
)


class FakeLibrary:
    """In-memory library source keyed by media type."""

    def __init__(self, rows: dict[MediaType, list[LibraryRow]] | None = None) -> None:
        self.rows = rows or {}
        self.tracked_calls: list[MediaType] = []

    async def list_rows(self, user_id, media_type):
        return list(self.rows.get(media_type, []))

    async def list_tracked_ids(self, user_id, media_type):
        self.tracked_calls.append(media_type)
        return {row.external_id for row in self.rows.get(media_type, [])}


class FakeGenres:
    """Genre source backed by a dict; ids listed in ``failing`` fail."""

    def __init__(self, genres: dict[int, tuple[int, ...]] | None = None, failing=()) -> None:
        self.genres = genres or {}
        self.failing = set(failing)
        self.requested: list[int] = []

    async def get_genres_for_items(self, media_type, external_ids) -> dict[int, GenreLookup]:
        self.requested.extend(external_ids)
        results: dict[int, GenreLookup] = {}
        for external_id in external_ids:
            if external_id in self.failing:
                results[external_id] = LookupFailed(reason="timeout")
            else:
                results[external_id] = GenresFound(self.genres.get(external_id, ()))
        return results


class FakeDiscovery:
    """Discovery source returning fixed candidates and recording calls."""

    def __init__(self, candidates: dict[MediaType, list[Candidate]] | None = None) -> None:
        self.candidates = candidates or {}
        self.calls: list[tuple[list[int], MediaType, str]] = []

    async def discover_by_genres(self, genre_ids, media_type, language):
        self.calls.append((list(genre_ids), media_type, language))
        return list(self.candidates.get(media_type, []))


@pytest.fixture(scope="session")
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


@pytest.fixture
def fake_library():
    return FakeLibrary


@pytest.fixture
def fake_genres():
    return FakeGenres


@pytest.fixture
def fake_discovery():
    return FakeDiscovery
