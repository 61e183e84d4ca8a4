"""
watchlist.py

Watchlist signal store. Add/remove move the movie's watchlist_count by one;
watched/priority/notes changes have no aggregate effect.
"""
import logging
from typing import Any, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from cinescope.core.exceptions import AlreadyExists, NotFound
from cinescope.models import WatchlistEntry
from cinescope.services.aggregates import AggregateEngine
from cinescope.services.movie_cache import MovieCache
from cinescope.services.validation import validate_notes, validate_priority, validate_tmdb_id
from cinescope.utils.timezone import utc_now

logger = logging.getLogger(__name__)

# Marks "notes not supplied"; None clears saved notes
_UNSET = object()


class WatchlistService:
    def __init__(self, db: Session, movies: MovieCache, aggregates: AggregateEngine):
        self.db = db
        self.movies = movies
        self.aggregates = aggregates

    def get_entry(self, user_id: int, tmdb_id: int) -> WatchlistEntry:
        entry = self.db.scalars(
            select(WatchlistEntry).where(WatchlistEntry.user_id == user_id, WatchlistEntry.tmdb_id == tmdb_id)
        ).first()
        if entry is None:
            raise NotFound("Movie not found in watchlist")
        return entry

    async def add_to_watchlist(
        self,
        user_id: int,
        tmdb_id: int,
        priority: str = "medium",
        notes: Optional[str] = None,
    ) -> WatchlistEntry:
        tmdb_id = validate_tmdb_id(tmdb_id)
        priority = validate_priority(priority)
        notes = validate_notes(notes)

        movie = await self.movies.get_or_create_for_signal(tmdb_id)

        entry = WatchlistEntry(
            user_id=user_id,
            movie_id=movie.id,
            tmdb_id=tmdb_id,
            priority=priority,
            notes=notes,
        )
        self.db.add(entry)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise AlreadyExists("Movie already exists in your watchlist") from e
        logger.info(f"User {user_id} added movie {tmdb_id} to watchlist")

        self.aggregates.safely(movie.id, self.aggregates.adjust_watchlist_count, 1)
        return self.get_entry(user_id, tmdb_id)

    def remove_from_watchlist(self, user_id: int, tmdb_id: int) -> None:
        entry = self.get_entry(user_id, tmdb_id)
        movie_id = entry.movie_id
        result = self.db.execute(
            delete(WatchlistEntry).where(WatchlistEntry.id == entry.id).execution_options(synchronize_session=False)
        )
        self.db.expunge(entry)
        self.db.commit()
        if result.rowcount == 0:
            # A concurrent request removed it first and already adjusted the count
            raise NotFound("Movie not found in watchlist")
        logger.info(f"User {user_id} removed movie {tmdb_id} from watchlist")

        self.aggregates.safely(movie_id, self.aggregates.adjust_watchlist_count, -1)

    def set_watched(self, user_id: int, tmdb_id: int, watched: bool) -> WatchlistEntry:
        entry = self.get_entry(user_id, tmdb_id)
        entry.watched = bool(watched)
        entry.watched_at = utc_now() if watched else None
        self.db.commit()
        return entry

    def update_entry(
        self,
        user_id: int,
        tmdb_id: int,
        priority: Optional[str] = None,
        notes: Any = _UNSET,
    ) -> WatchlistEntry:
        if priority is not None:
            priority = validate_priority(priority)
        if notes is not _UNSET:
            notes = validate_notes(notes)

        entry = self.get_entry(user_id, tmdb_id)
        if priority is not None:
            entry.priority = priority
        if notes is not _UNSET:
            entry.notes = notes
        self.db.commit()
        return entry

    def list_for_user(self, user_id: int, watched: Optional[bool] = None) -> List[WatchlistEntry]:
        query = (
            select(WatchlistEntry)
            .options(joinedload(WatchlistEntry.movie))
            .where(WatchlistEntry.user_id == user_id)
        )
        if watched is not None:
            query = query.where(WatchlistEntry.watched == watched)
        return self.db.scalars(query.order_by(WatchlistEntry.created_at.desc(), WatchlistEntry.id.desc())).all()
