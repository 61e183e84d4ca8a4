"""
favorites.py

Favorite signal store: identity-only rows, create/delete move favorite_count.
"""
import logging
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from cinescope.core.exceptions import AlreadyExists, NotFound
from cinescope.models import Favorite
from cinescope.services.aggregates import AggregateEngine
from cinescope.services.movie_cache import MovieCache
from cinescope.services.validation import validate_tmdb_id

logger = logging.getLogger(__name__)


class FavoriteService:
    def __init__(self, db: Session, movies: MovieCache, aggregates: AggregateEngine):
        self.db = db
        self.movies = movies
        self.aggregates = aggregates

    def _get(self, user_id: int, tmdb_id: int) -> Favorite:
        favorite = self.db.scalars(
            select(Favorite).where(Favorite.user_id == user_id, Favorite.tmdb_id == tmdb_id)
        ).first()
        if favorite is None:
            raise NotFound("Movie not found in favorites")
        return favorite

    async def add_favorite(self, user_id: int, tmdb_id: int) -> Favorite:
        tmdb_id = validate_tmdb_id(tmdb_id)
        movie = await self.movies.get_or_create_for_signal(tmdb_id)

        self.db.add(Favorite(user_id=user_id, movie_id=movie.id, tmdb_id=tmdb_id))
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise AlreadyExists("Movie already exists in your favorites") from e
        logger.info(f"User {user_id} favorited movie {tmdb_id}")

        self.aggregates.safely(movie.id, self.aggregates.adjust_favorite_count, 1)
        return self._get(user_id, tmdb_id)

    def remove_favorite(self, user_id: int, tmdb_id: int) -> None:
        favorite = self._get(user_id, tmdb_id)
        movie_id = favorite.movie_id
        result = self.db.execute(
            delete(Favorite).where(Favorite.id == favorite.id).execution_options(synchronize_session=False)
        )
        self.db.expunge(favorite)
        self.db.commit()
        if result.rowcount == 0:
            raise NotFound("Movie not found in favorites")
        logger.info(f"User {user_id} unfavorited movie {tmdb_id}")

        self.aggregates.safely(movie_id, self.aggregates.adjust_favorite_count, -1)

    def list_for_user(self, user_id: int) -> List[Favorite]:
        return self.db.scalars(
            select(Favorite)
            .options(joinedload(Favorite.movie))
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        ).all()
