import os
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = f"postgresql+psycopg2://{os.getenv('POSTGRES_USER', 'cinescope')}:{os.getenv('POSTGRES_PASSWORD', 'cinescope')}@db:5432/{os.getenv('POSTGRES_DB', 'cinescope')}"
    redis_url: str = os.getenv("REDIS_URL", "redis://redis:6379/0")

    # TMDB (the only upstream the core talks to)
    tmdb_api_key: str = os.getenv("TMDB_API_KEY", "")
    tmdb_base_url: str = os.getenv("TMDB_BASE_URL", "https://api.themoviedb.org/3")
    tmdb_timeout_seconds: float = float(os.getenv("TMDB_TIMEOUT_SECONDS", "10"))

    # Activity feed
    activity_default_limit: int = int(os.getenv("ACTIVITY_DEFAULT_LIMIT", "10"))
    activity_max_limit: int = int(os.getenv("ACTIVITY_MAX_LIMIT", "100"))

    # Aggregate reconciliation (celery beat)
    reconcile_interval_seconds: int = int(os.getenv("RECONCILE_INTERVAL_SECONDS", "300"))
    reconcile_batch_size: int = int(os.getenv("RECONCILE_BATCH_SIZE", "200"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
