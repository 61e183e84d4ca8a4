"""
deps.py

FastAPI dependencies shared by the routers: caller identity, the metadata
client and per-request services.
"""
from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from cinescope.core.database import get_db
from cinescope.core.exceptions import ValidationError
from cinescope.services.aggregates import AggregateEngine
from cinescope.services.favorites import FavoriteService
from cinescope.services.movie_cache import MovieCache
from cinescope.services.reviews import ReviewService
from cinescope.services.tmdb_client import TMDBClient, get_tmdb_client
from cinescope.services.watchlist import WatchlistService


def get_current_user_id(x_user_id: str = Header(None)) -> int:
    """Caller identity as forwarded by the auth layer in front of the API."""
    try:
        user_id = int(x_user_id)
    except (TypeError, ValueError):
        raise ValidationError("X-User-Id header must be a positive integer", field="X-User-Id")
    if user_id <= 0:
        raise ValidationError("X-User-Id header must be a positive integer", field="X-User-Id")
    return user_id


def get_tmdb(request: Request) -> TMDBClient:
    client = getattr(request.app.state, "tmdb", None)
    if client is None:
        client = get_tmdb_client()
        request.app.state.tmdb = client
    return client


def get_movie_cache(db: Session = Depends(get_db), tmdb: TMDBClient = Depends(get_tmdb)) -> MovieCache:
    return MovieCache(db, tmdb)


def get_aggregates(db: Session = Depends(get_db)) -> AggregateEngine:
    return AggregateEngine(db)


def get_review_service(
    db: Session = Depends(get_db),
    movies: MovieCache = Depends(get_movie_cache),
    aggregates: AggregateEngine = Depends(get_aggregates),
) -> ReviewService:
    return ReviewService(db, movies, aggregates)


def get_watchlist_service(
    db: Session = Depends(get_db),
    movies: MovieCache = Depends(get_movie_cache),
    aggregates: AggregateEngine = Depends(get_aggregates),
) -> WatchlistService:
    return WatchlistService(db, movies, aggregates)


def get_favorite_service(
    db: Session = Depends(get_db),
    movies: MovieCache = Depends(get_movie_cache),
    aggregates: AggregateEngine = Depends(get_aggregates),
) -> FavoriteService:
    return FavoriteService(db, movies, aggregates)
