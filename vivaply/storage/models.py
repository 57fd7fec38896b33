"""SQLAlchemy ORM models for the Vivaply media library."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vivaply.core.contracts import WatchStatus
from vivaply.storage.db import Base

WATCH_STATUS_VALUES = ", ".join(f"'{status.value}'" for status in WatchStatus)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Library owner."""

    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String, primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    last_seen_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Relationships
    shows: Mapped[list["UserShow"]] = relationship(
        "UserShow", back_populates="user", cascade="all, delete-orphan"
    )
    movies: Mapped[list["UserMovie"]] = relationship(
        "UserMovie", back_populates="user", cascade="all, delete-orphan"
    )


class UserShow(Base):
    """TV show tracked in a user's library."""

    __tablename__ = "user_shows"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    tmdb_show_id: Mapped[int] = mapped_column(Integer, nullable=False)
    show_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    poster_path: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=WatchStatus.WATCHING.value
    )
    user_rating: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    vote_average: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Cached TMDB genres as [{"id": .., "name": ..}]
    genres_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    started_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    last_watched_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    last_watched_season: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    last_watched_episode: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="shows")

    __table_args__ = (
        UniqueConstraint("user_id", "tmdb_show_id", name="uq_user_shows_user_show"),
        CheckConstraint(f"status IN ({WATCH_STATUS_VALUES})", name="ck_user_shows_status"),
        Index("ix_user_shows_user_last_watched", "user_id", "last_watched_at"),
    )


class UserMovie(Base):
    """Movie tracked in a user's library."""

    __tablename__ = "user_movies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    tmdb_movie_id: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    poster_path: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=WatchStatus.PLAN_TO_WATCH.value
    )
    user_rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    genres_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    watched_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="movies")

    __table_args__ = (
        UniqueConstraint("user_id", "tmdb_movie_id", name="uq_user_movies_user_movie"),
        CheckConstraint(f"status IN ({WATCH_STATUS_VALUES})", name="ck_user_movies_status"),
        Index("ix_user_movies_user_watched", "user_id", "watched_at"),
    )
