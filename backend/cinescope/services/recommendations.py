"""
recommendations.py

Personal recommendations from a user's favorite genre names: names are mapped to
TMDB genre ids and sent as a single popularity-sorted discovery query.
No local state is read or written.
"""
import logging
from typing import Any, Dict, Iterable, List

from cinescope.core.exceptions import NoPreferences
from cinescope.services.tmdb_client import TMDBClient

logger = logging.getLogger(__name__)

# TMDB movie genre ids (https://api.themoviedb.org/3/genre/movie/list)
GENRE_IDS: Dict[str, int] = {
    "Action": 28,
    "Adventure": 12,
    "Animation": 16,
    "Comedy": 35,
    "Crime": 80,
    "Documentary": 99,
    "Drama": 18,
    "Family": 10751,
    "Fantasy": 14,
    "History": 36,
    "Horror": 27,
    "Music": 10402,
    "Mystery": 9648,
    "Romance": 10749,
    "Science Fiction": 878,
    "TV Movie": 10770,
    "Thriller": 53,
    "War": 10752,
    "Western": 37,
}


def map_genre_names(genre_names: Iterable[str]) -> List[int]:
    """Map genre names to TMDB ids, keeping input order. Unknown names are dropped."""
    ids: List[int] = []
    for name in genre_names or []:
        genre_id = GENRE_IDS.get(name)
        if genre_id is None:
            logger.debug(f"Ignoring unknown genre {name!r}")
            continue
        if genre_id not in ids:
            ids.append(genre_id)
    return ids


async def recommend_for_user(genre_names: List[str], client: TMDBClient, page: int = 1) -> Dict[str, Any]:
    """Discover popular movies in the user's favorite genres.

    Raises NoPreferences when none of the names map to a known genre.
    """
    genre_ids = map_genre_names(genre_names)
    if not genre_ids:
        raise NoPreferences()

    data = await client.discover_movies(
        with_genres=",".join(str(g) for g in genre_ids),
        sort_by="popularity.desc",
        page=page,
    )
    return {**data, "based_on": list(genre_names), "genre_ids": genre_ids}
