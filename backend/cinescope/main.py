from fastapi import FastAPI, HTTPException
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
import logging

import cinescope.utils.logger  # noqa: F401
from cinescope.core.database import init_db, SessionLocal
from cinescope.core.exceptions import register_exception_handlers, ConfigurationError
from cinescope.services.tmdb_client import get_tmdb_client
from cinescope.api import movies, reviews, watchlist, favorites, users

logger = logging.getLogger(__name__)

app = FastAPI(title="CineScope API", version="1.0.0")

app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(movies.router, prefix="/api/movies", tags=["Movies"])
app.include_router(reviews.router, prefix="/api/reviews", tags=["Reviews"])
app.include_router(watchlist.router, prefix="/api/watchlist", tags=["Watchlist"])
app.include_router(favorites.router, prefix="/api/favorites", tags=["Favorites"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])


@app.on_event("startup")
async def startup_event():
    # A missing TMDB key is fatal: nothing can be mirrored without it
    try:
        app.state.tmdb = get_tmdb_client()
    except ConfigurationError as e:
        logger.error(f"Startup aborted: {e.message}")
        raise
    init_db()


@app.get("/")
def root():
    return {"status": "CineScope API Running"}


@app.get("/health")
def health_check():
    """Simple health check endpoint for load balancers/monitoring"""
    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()

        from cinescope.utils.timezone import format_iso_utc, utc_now
        return {"status": "healthy", "timestamp": format_iso_utc(utc_now())}
    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Service unhealthy: {str(e)}")
