"""Initial schema with users and the TV/movie library.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-02-04 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

WATCH_STATUSES = "'none', 'plan_to_watch', 'watching', 'completed', 'on_hold', 'dropped'"


def upgrade() -> None:
    # Users table
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("user_id"),
    )

    # Tracked TV shows
    op.create_table(
        "user_shows",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("tmdb_show_id", sa.Integer(), nullable=False),
        sa.Column("show_name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("poster_path", sa.String(length=200), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="watching"),
        sa.Column("user_rating", sa.Float(), nullable=True),
        sa.Column("vote_average", sa.Float(), nullable=False, server_default="0"),
        sa.Column("genres_json", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(), nullable=False),
        sa.Column("last_watched_at", sa.DateTime(), nullable=True),
        sa.Column("last_watched_season", sa.Integer(), nullable=True),
        sa.Column("last_watched_episode", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.user_id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "tmdb_show_id", name="uq_user_shows_user_show"),
        sa.CheckConstraint(f"status IN ({WATCH_STATUSES})", name="ck_user_shows_status"),
    )
    op.create_index(
        "ix_user_shows_user_last_watched",
        "user_shows",
        ["user_id", "last_watched_at"],
    )

    # Tracked movies
    op.create_table(
        "user_movies",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("tmdb_movie_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("poster_path", sa.String(length=200), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="plan_to_watch"),
        sa.Column("user_rating", sa.Integer(), nullable=True),
        sa.Column("genres_json", sa.Text(), nullable=True),
        sa.Column("watched_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.user_id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "tmdb_movie_id", name="uq_user_movies_user_movie"),
        sa.CheckConstraint(f"status IN ({WATCH_STATUSES})", name="ck_user_movies_status"),
    )
    op.create_index(
        "ix_user_movies_user_watched",
        "user_movies",
        ["user_id", "watched_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_user_movies_user_watched", table_name="user_movies")
    op.drop_table("user_movies")
    op.drop_index("ix_user_shows_user_last_watched", table_name="user_shows")
    op.drop_table("user_shows")
    op.drop_table("users")
