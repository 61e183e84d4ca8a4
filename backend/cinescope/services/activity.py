"""
activity.py

Read-only views over one user's signals: a merged recent-activity feed and
summary stats.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session, joinedload

from cinescope.models import Favorite, Movie, Review, WatchlistEntry
from cinescope.services.aggregates import summarize_ratings
from cinescope.utils.timezone import ensure_utc

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class ActivityEvent:
    type: str  # watchlist | favorite | review
    action: str  # added_to_watchlist | watched | added_to_favorites | reviewed
    movie: Movie
    date: datetime
    data: Any


def _recent(db: Session, model, user_id: int, limit: int):
    return db.scalars(
        select(model)
        .options(joinedload(model.movie))
        .where(model.user_id == user_id)
        .order_by(model.created_at.desc(), model.id.desc())
        .limit(limit)
    ).all()


def _watchlist_event(entry: WatchlistEntry) -> ActivityEvent:
    watched = bool(entry.watched and entry.watched_at)
    return ActivityEvent(
        type="watchlist",
        action="watched" if watched else "added_to_watchlist",
        movie=entry.movie,
        date=ensure_utc(entry.watched_at if watched else entry.created_at) or _EPOCH,
        data=entry,
    )


def get_user_activity(db: Session, user_id: int, limit: int = 10) -> List[ActivityEvent]:
    """Most recent `limit` events across watchlist, favorites and reviews, newest first.

    Each store contributes at most `limit` rows. Equal timestamps keep the
    order watchlist, favorite, review (sorted() is stable under reverse=True).
    """
    if limit <= 0:
        return []

    events: List[ActivityEvent] = [_watchlist_event(e) for e in _recent(db, WatchlistEntry, user_id, limit)]
    events.extend(
        ActivityEvent(
            type="favorite",
            action="added_to_favorites",
            movie=f.movie,
            date=ensure_utc(f.created_at) or _EPOCH,
            data=f,
        )
        for f in _recent(db, Favorite, user_id, limit)
    )
    events.extend(
        ActivityEvent(
            type="review",
            action="reviewed",
            movie=r.movie,
            date=ensure_utc(r.created_at) or _EPOCH,
            data=r,
        )
        for r in _recent(db, Review, user_id, limit)
    )

    return sorted(events, key=lambda e: e.date, reverse=True)[:limit]


def get_user_stats(db: Session, user_id: int) -> Dict[str, Any]:
    total, watched = db.execute(
        select(
            func.count(WatchlistEntry.id),
            func.coalesce(func.sum(case((WatchlistEntry.watched.is_(True), 1), else_=0)), 0),
        ).where(WatchlistEntry.user_id == user_id)
    ).one()
    favorites = db.scalar(select(func.count(Favorite.id)).where(Favorite.user_id == user_id)) or 0
    ratings = db.scalars(select(Review.rating).where(Review.user_id == user_id)).all()
    average_rating, review_total = summarize_ratings(ratings)
    total_likes = db.scalar(
        select(func.coalesce(func.sum(Review.likes_count), 0)).where(Review.user_id == user_id)
    ) or 0

    return {
        "watchlist": {"total": total, "watched": int(watched), "unwatched": total - int(watched)},
        "favorites": favorites,
        "reviews": {"total": review_total, "average_rating": average_rating, "total_likes": int(total_likes)},
    }
