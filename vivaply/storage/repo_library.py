"""Repository for a user's TV and movie library."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vivaply.core.contracts import LibraryRow, MediaType, WatchStatus
from vivaply.logging import get_logger
from vivaply.storage.genre_json import dump_genres, load_genre_ids
from vivaply.storage.models import UserMovie, UserShow
from vivaply.storage.repo_users import UsersRepo

logger = get_logger(__name__)

LibraryEntry = UserShow | UserMovie


def _parse_status(value: str) -> WatchStatus:
    try:
        return WatchStatus(value)
    except ValueError:
        return WatchStatus.NONE


class LibraryRepo:
    """Tracked shows and movies, exposed as recommendation history.

    Shows and movies live in separate tables; ``media_type`` picks the
    table and its id/interaction columns.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _model(media_type: MediaType) -> type[UserShow] | type[UserMovie]:
        return UserShow if media_type == MediaType.TV else UserMovie

    @staticmethod
    def _external_id_column(media_type: MediaType) -> Any:
        if media_type == MediaType.TV:
            return UserShow.tmdb_show_id
        return UserMovie.tmdb_movie_id

    @staticmethod
    def _external_id(entry: LibraryEntry) -> int:
        if isinstance(entry, UserShow):
            return entry.tmdb_show_id
        return entry.tmdb_movie_id

    @staticmethod
    def _last_interaction(entry: LibraryEntry) -> datetime | None:
        if isinstance(entry, UserShow):
            return entry.last_watched_at
        return entry.watched_at

    def _to_row(self, entry: LibraryEntry) -> LibraryRow:
        return LibraryRow(
            external_id=self._external_id(entry),
            status=_parse_status(entry.status),
            last_interaction_at=self._last_interaction(entry),
            genre_ids=load_genre_ids(entry.genres_json),
        )

    async def get_entry(
        self,
        user_id: str,
        media_type: MediaType,
        external_id: int,
    ) -> LibraryEntry | None:
        """Get a single library entry by its TMDB id."""
        model = self._model(media_type)
        stmt = select(model).where(
            model.user_id == user_id,
            self._external_id_column(media_type) == external_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_item(
        self,
        user_id: str,
        media_type: MediaType,
        external_id: int,
        title: str = "",
        status: WatchStatus = WatchStatus.PLAN_TO_WATCH,
        genres: list[dict[str, Any]] | list[int] | None = None,
        last_interaction_at: datetime | None = None,
        poster_path: str | None = None,
    ) -> LibraryEntry:
        """Add a title to the library, returning the existing entry if tracked.

        Args:
            user_id: User ID
            media_type: TV or movie
            external_id: TMDB id
            title: Display title cached on the row
            status: Initial watch status
            genres: Genres to cache (dicts with id/name, or plain IDs)
            last_interaction_at: Last watched timestamp
            poster_path: TMDB poster path

        Returns:
            The library entry
        """
        existing = await self.get_entry(user_id, media_type, external_id)
        if existing is not None:
            return existing

        await UsersRepo(self.session).get_or_create_user(user_id)

        genres_json = dump_genres(genres)
        entry: LibraryEntry
        if media_type == MediaType.TV:
            entry = UserShow(
                user_id=user_id,
                tmdb_show_id=external_id,
                show_name=title,
                poster_path=poster_path,
                status=status.value,
                genres_json=genres_json,
                started_at=datetime.now(timezone.utc),
                last_watched_at=last_interaction_at,
            )
        else:
            entry = UserMovie(
                user_id=user_id,
                tmdb_movie_id=external_id,
                title=title,
                poster_path=poster_path,
                status=status.value,
                genres_json=genres_json,
                watched_at=last_interaction_at,
            )

        self.session.add(entry)
        await self.session.commit()
        await self.session.refresh(entry)

        logger.info(
            f"Added to library with status {status.value}",
            extra={"user_id": user_id, "media_type": media_type.value, "external_id": external_id},
        )
        return entry

    async def update_status(
        self,
        user_id: str,
        media_type: MediaType,
        external_id: int,
        status: WatchStatus,
        interaction_at: datetime | None = None,
    ) -> bool:
        """Change the watch status of a tracked title.

        Args:
            user_id: User ID
            media_type: TV or movie
            external_id: TMDB id
            status: New watch status
            interaction_at: When set, also recorded as the last interaction

        Returns:
            True if updated, False if the title is not tracked
        """
        entry = await self.get_entry(user_id, media_type, external_id)
        if entry is None:
            return False

        entry.status = status.value
        if interaction_at is not None:
            if isinstance(entry, UserShow):
                entry.last_watched_at = interaction_at
            else:
                entry.watched_at = interaction_at

        await self.session.commit()
        return True

    async def list_rows(self, user_id: str, media_type: MediaType) -> list[LibraryRow]:
        """All library rows of one type as scoring history."""
        model = self._model(media_type)
        stmt = select(model).where(model.user_id == user_id)
        result = await self.session.execute(stmt)
        return [self._to_row(entry) for entry in result.scalars().all()]

    async def list_tracked_ids(self, user_id: str, media_type: MediaType) -> set[int]:
        """TMDB ids of every tracked title of one type, whatever its status."""
        model = self._model(media_type)
        stmt = select(self._external_id_column(media_type)).where(model.user_id == user_id)
        result = await self.session.execute(stmt)
        return set(result.scalars().all())
