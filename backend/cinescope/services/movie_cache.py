"""
movie_cache.py

Cache-aside mirror of TMDB movies keyed by TMDB id.

get_or_create() only calls TMDB on a miss; refresh() always does. Both write
through a single upsert whose payload is limited to descriptive columns, so
local_rating_*, watchlist_count and favorite_count are never reset by a fetch.
A failed fetch writes nothing.
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cinescope.core.exceptions import MovieFetchFailed, NotFound, UpstreamUnavailable
from cinescope.models import Movie
from cinescope.services.tmdb_client import TMDBClient
from cinescope.utils.timezone import utc_now

logger = logging.getLogger(__name__)

# Columns a fetch is allowed to write. Aggregate columns never appear here.
DESCRIPTIVE_FIELDS = (
    "title",
    "overview",
    "release_date",
    "runtime",
    "genres",
    "poster_path",
    "backdrop_path",
    "vote_average",
    "vote_count",
    "popularity",
    "adult",
    "original_language",
    "budget",
    "revenue",
    "status",
    "tagline",
    "homepage",
    "imdb_id",
    "production_companies",
    "production_countries",
    "spoken_languages",
)


def _parse_release_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        logger.debug(f"Ignoring unparseable release_date {value!r}")
        return None


def map_tmdb_movie(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Map a TMDB /movie/{id} payload onto Movie's descriptive columns."""
    genres = payload.get("genres")
    if not genres and payload.get("genre_ids"):
        # Discovery/search payloads only carry ids
        genres = [{"id": gid, "name": ""} for gid in payload["genre_ids"]]

    return {
        "title": payload.get("title") or payload.get("original_title") or "",
        "overview": payload.get("overview") or "",
        "release_date": _parse_release_date(payload.get("release_date")),
        "runtime": payload.get("runtime"),
        "genres": genres or [],
        "poster_path": payload.get("poster_path"),
        "backdrop_path": payload.get("backdrop_path"),
        "vote_average": payload.get("vote_average"),
        "vote_count": payload.get("vote_count") or 0,
        "popularity": payload.get("popularity") or 0,
        "adult": bool(payload.get("adult", False)),
        "original_language": payload.get("original_language"),
        "budget": payload.get("budget") or 0,
        "revenue": payload.get("revenue") or 0,
        "status": payload.get("status"),
        "tagline": payload.get("tagline"),
        "homepage": payload.get("homepage"),
        "imdb_id": payload.get("imdb_id"),
        "production_companies": payload.get("production_companies") or [],
        "production_countries": payload.get("production_countries") or [],
        "spoken_languages": payload.get("spoken_languages") or [],
    }


def _insert_for(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise NotImplementedError(f"Movie upsert is not implemented for dialect {dialect!r}")


class MovieCache:
    """Movie Cache Store: get-or-create and refresh against TMDB."""

    def __init__(self, db: Session, client: TMDBClient):
        self.db = db
        self.client = client

    def get(self, tmdb_id: int) -> Optional[Movie]:
        return self.db.scalars(select(Movie).where(Movie.tmdb_id == tmdb_id)).first()

    async def get_or_create(self, tmdb_id: int) -> Movie:
        """Return the mirrored movie, fetching and storing it on a miss.

        Raises NotFound / UpstreamUnavailable / ConfigurationError from the client
        unchanged; nothing is persisted in that case.
        """
        movie = self.get(tmdb_id)
        if movie is not None:
            return movie
        logger.info(f"Movie {tmdb_id} not mirrored yet, fetching from TMDB")
        return await self.refresh(tmdb_id)

    async def get_or_create_for_signal(self, tmdb_id: int) -> Movie:
        """get_or_create for signal writes: provider failures become MovieFetchFailed."""
        try:
            return await self.get_or_create(tmdb_id)
        except NotFound as e:
            raise MovieFetchFailed(f"Movie {tmdb_id} was not found at the metadata provider") from e
        except UpstreamUnavailable as e:
            raise MovieFetchFailed(f"Movie {tmdb_id} could not be loaded, try again later") from e

    async def refresh(self, tmdb_id: int) -> Movie:
        """Force a re-fetch and overwrite descriptive fields only."""
        payload = await self.client.get_movie(tmdb_id)
        return self._upsert(tmdb_id, payload)

    def _upsert(self, tmdb_id: int, payload: Dict[str, Any]) -> Movie:
        if payload.get("id") is not None and payload["id"] != tmdb_id:
            # The external id is immutable once assigned; never mirror a payload under the wrong key
            raise UpstreamUnavailable("Metadata provider returned an unexpected movie")

        values = map_tmdb_movie(payload)
        now = utc_now()
        insert = _insert_for(self.db)
        stmt = insert(Movie).values(tmdb_id=tmdb_id, created_at=now, updated_at=now, **values)
        update_set = {field: stmt.excluded[field] for field in DESCRIPTIVE_FIELDS}
        update_set["updated_at"] = stmt.excluded.updated_at
        stmt = stmt.on_conflict_do_update(index_elements=["tmdb_id"], set_=update_set)

        try:
            self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to upsert movie {tmdb_id}")
            raise

        movie = self.db.scalars(
            select(Movie).where(Movie.tmdb_id == tmdb_id).execution_options(populate_existing=True)
        ).one()
        logger.debug(f"Mirrored movie {tmdb_id} ({movie.title})")
        return movie
