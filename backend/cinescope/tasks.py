"""
tasks.py

Celery tasks that repair denormalized movie statistics after an aggregate
write failed in the request path.
"""
import logging
from typing import Dict, Optional

from cinescope.core.celery_app import celery_app
from cinescope.core.config import settings
from cinescope.core.database import SessionLocal
from cinescope.core.exceptions import NotFound
from cinescope.services.aggregates import AggregateEngine
from cinescope.services.reconcile import mark_movie_dirty, pop_dirty_movies

logger = logging.getLogger(__name__)


@celery_app.task(name="cinescope.tasks.reconcile_movie_aggregates")
def reconcile_movie_aggregates(movie_id: int) -> Dict:
    """Recompute rating, watchlist and favorite aggregates for one movie."""
    db = SessionLocal()
    try:
        return AggregateEngine(db).reconcile(movie_id)
    finally:
        db.close()


@celery_app.task(name="cinescope.tasks.reconcile_dirty_aggregates")
def reconcile_dirty_aggregates(batch_size: Optional[int] = None) -> Dict:
    """Drain a batch of dirty movie ids and reconcile each one.

    Movies that fail again are put back on the dirty set for the next run.
    """
    movie_ids = pop_dirty_movies(batch_size or settings.reconcile_batch_size)
    if not movie_ids:
        return {"processed": 0, "failed": 0}

    logger.info(f"Reconciling aggregates for {len(movie_ids)} movies")
    processed = 0
    failed = 0
    db = SessionLocal()
    try:
        engine = AggregateEngine(db)
        for movie_id in movie_ids:
            try:
                engine.reconcile(movie_id)
                processed += 1
            except NotFound:
                logger.warning(f"Dirty movie {movie_id} no longer exists, dropping it")
            except Exception as e:
                db.rollback()
                failed += 1
                logger.error(f"Reconciliation failed for movie {movie_id}: {e}")
                mark_movie_dirty(movie_id)
    finally:
        db.close()

    return {"processed": processed, "failed": failed}
