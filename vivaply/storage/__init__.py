"""Storage module for database operations."""

from vivaply.storage.db import (
    Base,
    close_engine,
    create_tables,
    get_engine,
    get_session,
    get_session_factory,
)
from vivaply.storage.genre_json import dump_genres, load_genre_ids
from vivaply.storage.models import User, UserMovie, UserShow
from vivaply.storage.repo_library import LibraryRepo
from vivaply.storage.repo_users import UsersRepo

__all__ = [
    # Database
    "Base",
    "get_engine",
    "get_session",
    "get_session_factory",
    "create_tables",
    "close_engine",
    # Genre cache
    "dump_genres",
    "load_genre_ids",
    # Models
    "User",
    "UserShow",
    "UserMovie",
    # Repositories
    "UsersRepo",
    "LibraryRepo",
]
