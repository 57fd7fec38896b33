"""Application entrypoint for the Vivaply recommendation API."""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

import uvicorn
from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from vivaply.config import config
from vivaply.core import MediaType, RecommendationEngine, RecommendationSettings, ScoredCandidate
from vivaply.logging import get_logger, setup_logging
from vivaply.providers import TMDBClient, TmdbContentProvider
from vivaply.storage import LibraryRepo, close_engine, create_tables, get_session

setup_logging(config.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    logger.info("Starting application")

    # Dev convenience, idempotent; migrations live in alembic/
    await create_tables()
    logger.info("Database tables ensured")

    app.state.tmdb_client = None
    if config.tmdb_bearer_token:
        app.state.tmdb_client = TMDBClient(
            bearer_token=config.tmdb_bearer_token,
            language=config.tmdb_language,
            timeout=config.tmdb_timeout,
            max_retries=config.tmdb_max_retries,
        )
    else:
        logger.warning("TMDB_BEARER_TOKEN not set, recommendations disabled")

    yield

    logger.info("Shutting down application")

    if app.state.tmdb_client is not None:
        await app.state.tmdb_client.close()
        logger.info("TMDB client closed")

    await close_engine()


app = FastAPI(
    title="Vivaply Recommendations",
    version="0.1.0",
    lifespan=lifespan,
)


async def get_current_user_id(
    x_user_id: str | None = Header(None, alias="X-User-Id"),
) -> str:
    """Resolve the calling user from the gateway-provided header.

    Raises:
        HTTPException: If the header is missing or blank
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="X-User-Id header required")
    return x_user_id.strip()


def get_tmdb_client(request: Request) -> TMDBClient:
    """Shared TMDB client created at startup.

    Raises:
        HTTPException: If TMDB is not configured
    """
    client = getattr(request.app.state, "tmdb_client", None)
    if client is None:
        raise HTTPException(
            status_code=503,
            detail="Recommendations not configured (TMDB_BEARER_TOKEN not set)",
        )
    return client


def get_recommendation_engine(
    session: AsyncSession = Depends(get_session),
    client: TMDBClient = Depends(get_tmdb_client),
) -> RecommendationEngine:
    """Wire the engine to the database library and TMDB."""
    provider = TmdbContentProvider(client, concurrency=config.tmdb_lookup_concurrency)
    return RecommendationEngine(
        library=LibraryRepo(session),
        genres=provider,
        discovery=provider,
        settings=RecommendationSettings.from_config(config),
    )


def _serialize(ranked: list[ScoredCandidate]) -> list[dict[str, Any]]:
    return [
        entry.candidate.content.model_dump(mode="json")
        if entry.candidate.content is not None
        else {"id": entry.candidate.external_id, "genre_ids": list(entry.candidate.genre_ids)}
        for entry in ranked
    ]


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"ok": True}


@app.get("/api/recommendation")
async def get_recommendations(
    language: str = Query(default=config.tmdb_language),
    user_id: str = Depends(get_current_user_id),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
) -> dict:
    """Ranked TV and movie recommendations for the calling user.

    Returns:
        ``{"tv": [...], "movies": [...]}`` in rank order
    """
    result = await engine.get_recommendations(user_id, language)
    return {
        "tv": _serialize(result.for_type(MediaType.TV)),
        "movies": _serialize(result.for_type(MediaType.MOVIE)),
    }


def main() -> None:
    """Run the API server."""
    logger.info(f"Starting FastAPI server on {config.host}:{config.port}")
    uvicorn.run(
        "vivaply.main:app",
        host=config.host,
        port=config.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
