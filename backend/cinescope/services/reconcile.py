"""
reconcile.py

Bookkeeping for aggregate writes that failed after their signal write had
already committed. Failed movie ids go into a Redis set; the celery beat task
in cinescope.tasks drains the set and recomputes those movies from live rows.
"""
import logging
from typing import List

from redis.exceptions import RedisError

from cinescope.core.redis_client import get_redis_sync

logger = logging.getLogger(__name__)

DIRTY_MOVIES_KEY = "aggregates:dirty_movies"


def mark_movie_dirty(movie_id: int) -> bool:
    """Queue a movie for reconciliation. Never raises; returns False if Redis is down."""
    try:
        get_redis_sync().sadd(DIRTY_MOVIES_KEY, movie_id)
        logger.info(f"Movie {movie_id} queued for aggregate reconciliation")
        return True
    except RedisError as e:
        logger.error(f"Could not queue movie {movie_id} for reconciliation: {e}")
        return False


def pop_dirty_movies(limit: int) -> List[int]:
    """Atomically take up to `limit` movie ids off the dirty set."""
    members = get_redis_sync().spop(DIRTY_MOVIES_KEY, limit) or []
    return sorted(int(m) for m in members)
