"""
Pytest fixtures and configuration for CineScope tests
"""
import os

# Settings are read at import time; point them at throwaway backends first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TMDB_API_KEY"] = "test-key"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cinescope.core.database import init_db
from cinescope.core.exceptions import NotFound
from cinescope.services.aggregates import AggregateEngine
from cinescope.services.favorites import FavoriteService
from cinescope.services.movie_cache import MovieCache
from cinescope.services.reviews import ReviewService
from cinescope.services.watchlist import WatchlistService


def tmdb_payload(tmdb_id, title, **extra):
    payload = {
        "id": tmdb_id,
        "title": title,
        "overview": f"{title} overview",
        "release_date": "1999-03-31",
        "runtime": 136,
        "genres": [{"id": 28, "name": "Action"}, {"id": 878, "name": "Science Fiction"}],
        "poster_path": f"/{tmdb_id}.jpg",
        "vote_average": 8.2,
        "vote_count": 25000,
        "popularity": 80.5,
        "original_language": "en",
        "budget": 63000000,
        "revenue": 463517383,
        "status": "Released",
        "imdb_id": "tt0133093",
    }
    payload.update(extra)
    return payload


class FakeTMDB:
    """Stands in for TMDBClient; records every call."""

    def __init__(self, movies=None, error=None):
        self.movies = dict(movies or {})
        self.error = error
        self.calls = []
        self.discover_calls = []

    async def get_movie(self, tmdb_id):
        self.calls.append(tmdb_id)
        if self.error is not None:
            raise self.error
        if tmdb_id not in self.movies:
            raise NotFound("Movie not found")
        return dict(self.movies[tmdb_id])

    async def discover_movies(self, with_genres=None, sort_by="popularity.desc", page=1):
        self.discover_calls.append({"with_genres": with_genres, "sort_by": sort_by, "page": page})
        if self.error is not None:
            raise self.error
        return {"page": page, "results": [{"id": 603, "title": "The Matrix"}], "total_pages": 1, "total_results": 1}


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def fake_tmdb():
    return FakeTMDB({
        603: tmdb_payload(603, "The Matrix"),
        550: tmdb_payload(550, "Fight Club", imdb_id="tt0137523"),
        27205: tmdb_payload(27205, "Inception", imdb_id="tt1375666"),
    })


@pytest.fixture
def dirty_movies():
    """Movie ids handed to the aggregate failure hook."""
    return []


@pytest.fixture
def aggregates(db, dirty_movies):
    return AggregateEngine(db, on_failure=dirty_movies.append)


@pytest.fixture
def movie_cache(db, fake_tmdb):
    return MovieCache(db, fake_tmdb)


@pytest.fixture
def review_service(db, movie_cache, aggregates):
    return ReviewService(db, movie_cache, aggregates)


@pytest.fixture
def watchlist_service(db, movie_cache, aggregates):
    return WatchlistService(db, movie_cache, aggregates)


@pytest.fixture
def favorite_service(db, movie_cache, aggregates):
    return FavoriteService(db, movie_cache, aggregates)
