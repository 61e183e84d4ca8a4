"""
movies.py

Movie lookup (cache-aside over TMDB), forced refresh and genre-based
recommendations.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from cinescope.api.deps import get_movie_cache, get_tmdb
from cinescope.schemas import MovieSchema, dump
from cinescope.services.movie_cache import MovieCache
from cinescope.services.recommendations import recommend_for_user
from cinescope.services.tmdb_client import TMDBClient

router = APIRouter()


@router.get("/recommendations")
async def get_recommendations(
    genres: Optional[str] = Query(None, description="Comma separated genre names, e.g. Action,Comedy"),
    page: int = Query(1, ge=1),
    tmdb: TMDBClient = Depends(get_tmdb),
):
    """Popular movies in the given genres."""
    names = [g.strip() for g in (genres or "").split(",") if g.strip()]
    data = await recommend_for_user(names, tmdb, page=page)
    return {"success": True, "data": data}


@router.get("/{tmdb_id}")
async def get_movie(tmdb_id: int, movies: MovieCache = Depends(get_movie_cache)):
    movie = await movies.get_or_create(tmdb_id)
    return {"success": True, "data": dump(MovieSchema, movie)}


@router.post("/{tmdb_id}/refresh")
async def refresh_movie(tmdb_id: int, movies: MovieCache = Depends(get_movie_cache)):
    """Re-fetch descriptive metadata; local aggregates are left as they are."""
    movie = await movies.refresh(tmdb_id)
    return {"success": True, "data": dump(MovieSchema, movie)}
