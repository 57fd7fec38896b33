"""Serialization of cached TMDB genre lists stored on library rows."""

import json
from typing import Any

from vivaply.logging import get_logger

logger = get_logger(__name__)


def dump_genres(genres: list[dict[str, Any]] | list[int] | None) -> str | None:
    """Serialize genres to the ``[{"id": .., "name": ..}]`` column format.

    Plain integer IDs are stored with an empty name. Returns None for an
    empty list so the column stays NULL.

    Args:
        genres: Genre dicts or genre IDs

    Returns:
        JSON string or None
    """
    if not genres:
        return None

    entries = [
        {"id": genre, "name": ""} if isinstance(genre, int) else
        {"id": genre.get("id"), "name": genre.get("name", "")}
        for genre in genres
    ]
    try:
        return json.dumps(entries, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        logger.warning(f"Failed to serialize genres: {e}")
        return None


def load_genre_ids(text: str | None) -> tuple[int, ...] | None:
    """Parse a cached genre column into genre IDs.

    Returns None when the column is empty, unparseable or holds no
    usable IDs, meaning the genres must be looked up.
    """
    if not text or not text.strip():
        return None

    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError) as e:
        logger.warning(f"Failed to parse cached genres: {e}")
        return None

    if not isinstance(data, list):
        return None

    ids: list[int] = []
    for entry in data:
        value = entry.get("id") if isinstance(entry, dict) else entry
        if isinstance(value, int) and not isinstance(value, bool):
            ids.append(value)

    return tuple(ids) or None
