"""Tests for the TMDB client, payload models and content provider."""

import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from vivaply.core.contracts import GenresFound, LookupFailed, MediaType


def _response(status_code, payload=None, headers=None):
    response = MagicMock()
    response.status_code = status_code
    response.headers = headers or {}
    response.content = b"{}" if payload is not None else b""
    response.json.return_value = payload
    return response


# Test TMDB client retry logic

@pytest.mark.anyio
async def test_tmdb_client_retries_on_429():
    """Test that TMDB client retries on 429 rate limit."""
    from vivaply.providers.tmdb_client import TMDBClient

    client = TMDBClient(bearer_token="test_token", backoff=0)

    mock_response_429 = _response(429, headers={"Retry-After": "0"})
    mock_response_ok = _response(200, {"results": []})

    call_count = 0

    async def mock_request(*args, **kwargs):
        nonlocal call_count
        call_count += 1
        if call_count < 3:
            return mock_response_429
        return mock_response_ok

    with patch.object(client, "_get_client") as mock_get_client:
        mock_http_client = AsyncMock()
        mock_http_client.request = mock_request
        mock_get_client.return_value = mock_http_client

        # Should retry and eventually succeed
        result = await client._request("GET", "/test")
        assert result == {"results": []}
        assert call_count == 3  # 2 retries + 1 success

    await client.close()


@pytest.mark.anyio
async def test_tmdb_client_raises_after_max_retries():
    """Test that TMDB client raises after max retries on 429."""
    from vivaply.providers.tmdb_client import MAX_RETRIES, TMDBClient, TMDBRateLimitError

    client = TMDBClient(bearer_token="test_token", backoff=0)

    call_count = 0

    async def mock_request(*args, **kwargs):
        nonlocal call_count
        call_count += 1
        return _response(429, headers={"Retry-After": "0"})

    with patch.object(client, "_get_client") as mock_get_client:
        mock_http_client = AsyncMock()
        mock_http_client.request = mock_request
        mock_get_client.return_value = mock_http_client

        with pytest.raises(TMDBRateLimitError):
            await client._request("GET", "/test")

    assert call_count == MAX_RETRIES
    await client.close()


@pytest.mark.anyio
async def test_tmdb_client_retries_server_errors_and_timeouts():
    from vivaply.providers.tmdb_client import TMDBClient

    client = TMDBClient(bearer_token="test_token", max_retries=3, backoff=0)
    outcomes = [
        httpx.ReadTimeout("slow"),
        _response(503),
        _response(200, {"id": 1}),
    ]

    async def mock_request(*args, **kwargs):
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    with patch.object(client, "_get_client") as mock_get_client:
        mock_http_client = AsyncMock()
        mock_http_client.request = mock_request
        mock_get_client.return_value = mock_http_client

        assert await client._request("GET", "/movie/1") == {"id": 1}

    assert outcomes == []


@pytest.mark.anyio
async def test_tmdb_client_gives_up_on_network_errors():
    from vivaply.providers.tmdb_client import TMDBClient, TMDBError

    client = TMDBClient(bearer_token="test_token", max_retries=2, backoff=0)

    async def mock_request(*args, **kwargs):
        raise httpx.ConnectError("refused")

    with patch.object(client, "_get_client") as mock_get_client:
        mock_http_client = AsyncMock()
        mock_http_client.request = mock_request
        mock_get_client.return_value = mock_http_client

        with pytest.raises(TMDBError, match="Max retries exceeded"):
            await client._request("GET", "/tv/1")


@pytest.mark.anyio
async def test_tmdb_client_client_error_not_retried():
    """4xx responses other than 429 fail immediately."""
    from vivaply.providers.tmdb_client import TMDBClient, TMDBError

    client = TMDBClient(bearer_token="test_token", backoff=0)
    mock_http_client = AsyncMock()
    mock_http_client.request = AsyncMock(
        return_value=_response(404, {"status_message": "The resource could not be found."})
    )

    with patch.object(client, "_get_client", return_value=mock_http_client):
        with pytest.raises(TMDBError) as exc_info:
            await client.get_tv_details(999999)

    assert exc_info.value.status_code == 404
    assert "could not be found" in str(exc_info.value)
    assert mock_http_client.request.await_count == 1


@pytest.mark.anyio
async def test_discover_params():
    """Discover sends comma-joined genres sorted by popularity."""
    from vivaply.providers.tmdb_client import TMDBClient

    client = TMDBClient(bearer_token="test_token")
    mock_http_client = AsyncMock()
    mock_http_client.request = AsyncMock(return_value=_response(200, {"results": []}))

    with patch.object(client, "_get_client", return_value=mock_http_client):
        await client.discover("tv", [18, 35], language="tr-TR")

    args, kwargs = mock_http_client.request.call_args
    assert args == ("GET", "/discover/tv")
    assert kwargs["params"] == {
        "with_genres": "18,35",
        "sort_by": "popularity.desc",
        "page": 1,
        "language": "tr-TR",
    }


@pytest.mark.anyio
async def test_discover_default_language():
    from vivaply.providers.tmdb_client import TMDBClient

    client = TMDBClient(bearer_token="test_token", language="de-DE")
    mock_http_client = AsyncMock()
    mock_http_client.request = AsyncMock(return_value=_response(200, {"results": []}))

    with patch.object(client, "_get_client", return_value=mock_http_client):
        await client.discover("movie", [28])

    _, kwargs = mock_http_client.request.call_args
    assert kwargs["params"]["language"] == "de-DE"


def test_genre_ids_to_names():
    from vivaply.providers.tmdb_client import genre_ids_to_names

    assert genre_ids_to_names([18, 35, 424242]) == ["Drama", "Comedy"]


# Payload models

def test_content_genres_fallback():
    """Detail payloads carry ``genres`` instead of ``genre_ids``."""
    from vivaply.providers.tmdb_models import parse_content

    content = parse_content(
        {"id": 1396, "name": "Breaking Bad", "genres": [{"id": 18, "name": "Drama"}, {"id": 80}]},
        MediaType.TV,
    )

    assert content is not None
    assert content.genre_id_list() == [18, 80]
    assert content.media_type == MediaType.TV
    assert content.display_name == "Breaking Bad"


def test_content_display_fields():
    from vivaply.providers.tmdb_models import TmdbContent

    movie = TmdbContent(id=550, title="Fight Club", release_date="1999-10-15")
    show = TmdbContent(id=1399, name="Game of Thrones", first_air_date="2011-04-17")
    bare = TmdbContent(id=1)

    assert (movie.display_name, movie.display_date) == ("Fight Club", "1999-10-15")
    assert (show.display_name, show.display_date) == ("Game of Thrones", "2011-04-17")
    assert (bare.display_name, bare.display_date) == ("Unknown", "")


def test_parse_results_drops_unusable_records():
    from vivaply.providers.tmdb_models import parse_results

    payload = {
        "results": [
            {"id": 550, "title": "Fight Club", "genre_ids": [18]},
            {"title": "No ID Movie"},
            {"id": "not-a-number"},
            {"id": 680, "title": "Pulp Fiction", "genre_ids": [53, 80], "unknown_field": 1},
        ]
    }

    results = parse_results(payload, MediaType.MOVIE)

    assert [content.id for content in results] == [550, 680]
    assert results[1].to_candidate().genre_ids == (53, 80)
    assert parse_results({}, MediaType.MOVIE) == []


# Content provider

@pytest.mark.anyio
async def test_provider_lookup_failure_becomes_lookup_failed():
    from vivaply.providers.tmdb_client import TMDBError
    from vivaply.providers.tmdb_provider import TmdbContentProvider

    client = MagicMock()

    async def get_details(media_type, tmdb_id):
        if tmdb_id == 2:
            raise TMDBError("Server error: 502", status_code=502)
        return {"id": tmdb_id, "genres": [{"id": 18, "name": "Drama"}]}

    client.get_details = get_details
    provider = TmdbContentProvider(client)

    results = await provider.get_genres_for_items(MediaType.MOVIE, [1, 2, 3, 1])

    assert list(results) == [1, 2, 3]
    assert results[1] == GenresFound(genre_ids=(18,))
    assert isinstance(results[2], LookupFailed)
    assert "502" in results[2].reason
    assert results[3] == GenresFound(genre_ids=(18,))


@pytest.mark.anyio
async def test_provider_bounds_concurrency():
    from vivaply.providers.tmdb_provider import TmdbContentProvider

    in_flight = 0
    peak = 0

    async def get_details(media_type, tmdb_id):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return {"id": tmdb_id, "genre_ids": [35]}

    client = MagicMock()
    client.get_details = get_details
    provider = TmdbContentProvider(client, concurrency=2)

    results = await provider.get_genres_for_items(MediaType.TV, list(range(1, 8)))

    assert len(results) == 7
    assert peak <= 2


@pytest.mark.anyio
async def test_provider_discovery_maps_candidates():
    from vivaply.providers.tmdb_provider import TmdbContentProvider

    client = MagicMock()
    client.discover = AsyncMock(return_value={
        "results": [
            {"id": 1399, "name": "Game of Thrones", "genre_ids": [18, 10765]},
            {"name": "missing id"},
        ]
    })
    provider = TmdbContentProvider(client)

    candidates = await provider.discover_by_genres([18, 10765], MediaType.TV, "en-US")

    client.discover.assert_awaited_once_with("tv", [18, 10765], language="en-US")
    assert [c.external_id for c in candidates] == [1399]
    assert candidates[0].genre_ids == (18, 10765)
    assert candidates[0].content.display_name == "Game of Thrones"


@pytest.mark.anyio
async def test_provider_discovery_failure_is_empty():
    from vivaply.providers.tmdb_client import TMDBRateLimitError
    from vivaply.providers.tmdb_provider import TmdbContentProvider

    client = MagicMock()
    client.discover = AsyncMock(side_effect=TMDBRateLimitError(retry_after=5))
    provider = TmdbContentProvider(client)

    assert await provider.discover_by_genres([18], MediaType.MOVIE, "en-US") == []
    assert await provider.discover_by_genres([], MediaType.MOVIE, "en-US") == []
    assert client.discover.await_count == 1


# Malformed TMDB responses

def _mock_transport_client(handler, **kwargs):
    """TMDB client whose HTTP layer is served by ``handler``."""
    from vivaply.providers.tmdb_client import TMDB_BASE_URL, TMDBClient

    client = TMDBClient(bearer_token="test_token", backoff=0, **kwargs)
    client._client = httpx.AsyncClient(
        base_url=TMDB_BASE_URL,
        transport=httpx.MockTransport(handler),
    )
    return client


@pytest.mark.anyio
async def test_tmdb_client_non_json_body_raises_tmdb_error():
    """An HTML page served with 200 is a TMDB error, not a decode crash."""
    from vivaply.providers.tmdb_client import TMDBError

    client = _mock_transport_client(
        lambda request: httpx.Response(200, text="<html>oops</html>")
    )

    with pytest.raises(TMDBError, match="Invalid JSON response"):
        await client.get_tv_details(1)

    await client.close()


@pytest.mark.anyio
async def test_tmdb_client_non_object_body_raises_tmdb_error():
    from vivaply.providers.tmdb_client import TMDBError

    client = _mock_transport_client(lambda request: httpx.Response(200, json=[]))

    with pytest.raises(TMDBError, match="Unexpected response type"):
        await client.discover("tv", [18])

    await client.close()


@pytest.mark.anyio
async def test_tmdb_client_client_error_with_list_body():
    from vivaply.providers.tmdb_client import TMDBError

    client = _mock_transport_client(lambda request: httpx.Response(401, json=["denied"]))

    with pytest.raises(TMDBError) as exc_info:
        await client.get_movie_details(550)

    assert exc_info.value.status_code == 401
    assert str(exc_info.value) == "HTTP 401"
    await client.close()


@pytest.mark.anyio
async def test_provider_degrades_on_html_responses():
    """Lookups fail per item and discovery is empty, nothing raises."""
    from vivaply.providers.tmdb_provider import TmdbContentProvider

    client = _mock_transport_client(
        lambda request: httpx.Response(200, text="<html>oops</html>")
    )
    provider = TmdbContentProvider(client)

    lookups = await provider.get_genres_for_items(MediaType.TV, [1, 2])
    assert all(isinstance(result, LookupFailed) for result in lookups.values())
    assert list(lookups) == [1, 2]

    assert await provider.discover_by_genres([18], MediaType.TV, "en-US") == []
    await client.close()


@pytest.mark.anyio
async def test_provider_discovery_list_body_is_empty():
    from vivaply.providers.tmdb_provider import TmdbContentProvider

    client = _mock_transport_client(lambda request: httpx.Response(200, json=[]))
    provider = TmdbContentProvider(client)

    assert await provider.discover_by_genres([18, 35], MediaType.MOVIE, "en-US") == []
    await client.close()


@pytest.mark.anyio
async def test_engine_survives_broken_tmdb(fake_library):
    """A TMDB outage leaves both lists empty instead of failing the request."""
    from vivaply.core.contracts import LibraryRow, WatchStatus
    from vivaply.core.recommender import RecommendationEngine
    from vivaply.providers.tmdb_provider import TmdbContentProvider

    client = _mock_transport_client(
        lambda request: httpx.Response(200, text="<html>oops</html>")
    )
    provider = TmdbContentProvider(client)
    library = fake_library({
        MediaType.TV: [LibraryRow(external_id=1, status=WatchStatus.COMPLETED)],
        MediaType.MOVIE: [
            LibraryRow(external_id=2, status=WatchStatus.WATCHING, genre_ids=(18,))
        ],
    })
    engine = RecommendationEngine(library, provider, provider)

    result = await engine.get_recommendations("u1", "en-US")

    assert result.tv == []
    assert result.movies == []
    await client.close()


def test_null_vote_average_keeps_record():
    """TMDB sends null ratings for unrated titles; genres still count."""
    from vivaply.providers.tmdb_models import parse_content, parse_results

    results = parse_results(
        {"results": [{"id": 5, "name": "Unrated", "genre_ids": [18], "vote_average": None}]},
        MediaType.TV,
    )
    assert [content.id for content in results] == [5]
    assert results[0].vote_average is None
    assert results[0].to_candidate().genre_ids == (18,)

    detail = parse_content(
        {"id": 5, "genres": [{"id": 18, "name": "Drama"}], "vote_average": None},
        MediaType.TV,
    )
    assert detail is not None
    assert detail.genre_id_list() == [18]
