"""
aggregates.py

Aggregate Engine: keeps the denormalized statistics on Movie rows in step with
the signal tables.

- Rating is recomputed from the full live review set on every rating-affecting
  write (edits and deletes make an incremental running sum wrong).
- Watchlist/favorite counts only ever see add/remove, so they are applied as a
  single atomic "add delta, floor at zero" UPDATE.

Signal services call these through AggregateEngine.safely(): a failure there is
logged, the movie is queued for reconciliation, and the caller's already
committed mutation stands.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Iterable, Optional, Tuple

from sqlalchemy import case, func, select, update
from sqlalchemy.orm import Session

from cinescope.core.exceptions import NotFound
from cinescope.models import Favorite, Movie, Review, WatchlistEntry
from cinescope.services.reconcile import mark_movie_dirty

logger = logging.getLogger(__name__)

COUNTER_FIELDS = ("watchlist_count", "favorite_count")


def summarize_ratings(ratings: Iterable[float]) -> Tuple[float, int]:
    """Mean rounded half-up to one decimal, plus the count. (0.0, 0) when empty."""
    ratings = list(ratings)
    if not ratings:
        return 0.0, 0
    # str() keeps 7.3 as 7.3 rather than its binary expansion
    total = sum((Decimal(str(r)) for r in ratings), Decimal(0))
    mean = total / Decimal(len(ratings))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)), len(ratings)


class AggregateEngine:
    def __init__(self, db: Session, on_failure: Optional[Callable[[int], object]] = None):
        self.db = db
        self.on_failure = on_failure or mark_movie_dirty

    def _lock_movie(self, movie_id: int) -> None:
        # Row lock serializes concurrent recomputations of one movie (no-op on SQLite)
        found = self.db.execute(
            select(Movie.id).where(Movie.id == movie_id).with_for_update()
        ).scalar_one_or_none()
        if found is None:
            raise NotFound("Movie not found")

    def recompute_rating(self, movie_id: int) -> Tuple[float, int]:
        self._lock_movie(movie_id)
        ratings = self.db.scalars(select(Review.rating).where(Review.movie_id == movie_id)).all()
        average, count = summarize_ratings(ratings)
        self.db.execute(
            update(Movie)
            .where(Movie.id == movie_id)
            .values(local_rating_average=average, local_rating_count=count)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        logger.debug(f"Movie {movie_id} local rating -> {average} ({count} reviews)")
        return average, count

    def _adjust_counter(self, movie_id: int, field: str, delta: int) -> None:
        if field not in COUNTER_FIELDS:
            raise ValueError(f"Unknown counter {field}")
        column = getattr(Movie, field)
        result = self.db.execute(
            update(Movie)
            .where(Movie.id == movie_id)
            .values({field: case((column + delta < 0, 0), else_=column + delta)})
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise NotFound("Movie not found")
        self.db.commit()
        logger.debug(f"Movie {movie_id} {field} adjusted by {delta:+d}")

    def adjust_watchlist_count(self, movie_id: int, delta: int) -> None:
        self._adjust_counter(movie_id, "watchlist_count", delta)

    def adjust_favorite_count(self, movie_id: int, delta: int) -> None:
        self._adjust_counter(movie_id, "favorite_count", delta)

    def reconcile(self, movie_id: int) -> dict:
        """Recompute every aggregate family for one movie from its live rows."""
        self._lock_movie(movie_id)
        ratings = self.db.scalars(select(Review.rating).where(Review.movie_id == movie_id)).all()
        average, count = summarize_ratings(ratings)
        watchlist_count = self.db.scalar(
            select(func.count(WatchlistEntry.id)).where(WatchlistEntry.movie_id == movie_id)
        )
        favorite_count = self.db.scalar(
            select(func.count(Favorite.id)).where(Favorite.movie_id == movie_id)
        )
        values = {
            "local_rating_average": average,
            "local_rating_count": count,
            "watchlist_count": watchlist_count or 0,
            "favorite_count": favorite_count or 0,
        }
        self.db.execute(
            update(Movie).where(Movie.id == movie_id).values(**values).execution_options(synchronize_session=False)
        )
        self.db.commit()
        logger.info(f"Reconciled aggregates for movie {movie_id}: {values}")
        return values

    def safely(self, movie_id: int, operation: Callable, *args) -> bool:
        """Run an aggregate operation without letting its failure escape.

        Returns True on success. On failure the aggregate transaction is rolled
        back, the error is logged and the movie is queued for reconciliation.
        """
        try:
            operation(movie_id, *args)
            return True
        except Exception:
            self.db.rollback()
            logger.exception(f"Aggregate update {getattr(operation, '__name__', operation)} failed for movie {movie_id}")
            try:
                self.on_failure(movie_id)
            except Exception:
                logger.exception(f"Could not queue movie {movie_id} for reconciliation")
            return False
