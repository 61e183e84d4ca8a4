from sqlalchemy.orm import sessionmaker
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
import logging

from cinescope.core.config import settings

logger = logging.getLogger(__name__)


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # Single shared connection so an in-memory database survives across sessions
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    # pool_size: base connections (default 5 -> 20)
    # max_overflow: additional connections allowed (default 10 -> 30)
    # pool_recycle: recycle connections after N seconds to prevent stale connections
    # pool_pre_ping: verify connections before using them
    return {
        "pool_size": 20,
        "max_overflow": 30,
        "pool_timeout": 30,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
    }


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db(bind=None):
    """Create all tables. Unique constraints on the signal tables are part of the schema."""
    from cinescope.models import Base
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database schema ensured")
