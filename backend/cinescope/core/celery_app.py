from celery import Celery
from cinescope.core.config import settings

celery_app = Celery(
    "cinescope",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["cinescope.tasks"]
)

celery_app.conf.update(
    result_expires=3600,
    task_acks_late=True,
    worker_prefetch_multiplier=1,

    # Connection settings
    broker_connection_retry_on_startup=True,
    broker_pool_limit=10,

    timezone="UTC",

    task_routes={
        'cinescope.tasks.reconcile_dirty_aggregates': {'queue': 'maintenance'},
        'cinescope.tasks.reconcile_movie_aggregates': {'queue': 'maintenance'},
    },

    # Scheduled tasks
    beat_schedule={
        "reconcile-dirty-aggregates": {
            "task": "cinescope.tasks.reconcile_dirty_aggregates",
            "schedule": settings.reconcile_interval_seconds,
        },
    },
)
