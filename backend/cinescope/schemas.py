"""
schemas.py

Pydantic schemas for request payloads and for serializing Movie and signal rows.
"""
from pydantic import BaseModel, ConfigDict
from typing import Optional, List, Dict, Any
import datetime


class LocalRatingSchema(BaseModel):
    average: float = 0
    count: int = 0


class MovieSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tmdb_id: int
    title: str
    overview: Optional[str] = None
    release_date: Optional[datetime.date] = None
    runtime: Optional[int] = None
    genres: Optional[List[Dict[str, Any]]] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    popularity: Optional[float] = None
    adult: Optional[bool] = None
    original_language: Optional[str] = None
    budget: Optional[int] = None
    revenue: Optional[int] = None
    status: Optional[str] = None
    tagline: Optional[str] = None
    homepage: Optional[str] = None
    imdb_id: Optional[str] = None
    production_companies: Optional[List[Dict[str, Any]]] = None
    production_countries: Optional[List[Dict[str, Any]]] = None
    spoken_languages: Optional[List[Dict[str, Any]]] = None
    local_rating: LocalRatingSchema
    watchlist_count: int = 0
    favorite_count: int = 0


class ReviewLikeSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    created_at: Optional[datetime.datetime] = None


class ReviewSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    tmdb_id: int
    rating: float
    title: str
    content: str
    spoilers: bool
    likes: List[ReviewLikeSchema] = []
    likes_count: int
    is_edited: bool
    edited_at: Optional[datetime.datetime] = None
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None
    movie: Optional[MovieSchema] = None


class WatchlistEntrySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    tmdb_id: int
    watched: bool
    watched_at: Optional[datetime.datetime] = None
    priority: str
    notes: Optional[str] = None
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None
    movie: Optional[MovieSchema] = None


class FavoriteSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    tmdb_id: int
    created_at: Optional[datetime.datetime] = None
    movie: Optional[MovieSchema] = None


class ActivityEventSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: str
    action: str
    date: datetime.datetime
    movie: Optional[MovieSchema] = None


# Payloads
class ReviewCreate(BaseModel):
    tmdb_id: int
    rating: float
    title: str
    content: str
    spoilers: bool = False


class ReviewUpdate(BaseModel):
    rating: Optional[float] = None
    title: Optional[str] = None
    content: Optional[str] = None
    spoilers: Optional[bool] = None


class WatchlistAdd(BaseModel):
    tmdb_id: int
    priority: str = "medium"
    notes: Optional[str] = None


class WatchlistUpdate(BaseModel):
    priority: Optional[str] = None
    notes: Optional[str] = None


class WatchedUpdate(BaseModel):
    watched: bool = True


class FavoriteAdd(BaseModel):
    tmdb_id: int


def dump(schema, obj) -> Any:
    """Serialize an ORM row (or list of rows) through `schema` to JSON-ready data."""
    if isinstance(obj, (list, tuple)):
        return [schema.model_validate(o).model_dump(mode="json") for o in obj]
    return schema.model_validate(obj).model_dump(mode="json")
