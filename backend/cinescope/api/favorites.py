"""
favorites.py

The caller's favorites: add, remove and list.
"""
from fastapi import APIRouter, Depends

from cinescope.api.deps import get_current_user_id, get_favorite_service
from cinescope.schemas import FavoriteAdd, FavoriteSchema, dump
from cinescope.services.favorites import FavoriteService

router = APIRouter()


@router.get("")
def list_favorites(
    user_id: int = Depends(get_current_user_id),
    favorites: FavoriteService = Depends(get_favorite_service),
):
    return {"success": True, "data": dump(FavoriteSchema, favorites.list_for_user(user_id))}


@router.post("", status_code=201)
async def add_favorite(
    payload: FavoriteAdd,
    user_id: int = Depends(get_current_user_id),
    favorites: FavoriteService = Depends(get_favorite_service),
):
    favorite = await favorites.add_favorite(user_id, payload.tmdb_id)
    return {"success": True, "data": dump(FavoriteSchema, favorite)}


@router.delete("/{tmdb_id}")
def remove_favorite(
    tmdb_id: int,
    user_id: int = Depends(get_current_user_id),
    favorites: FavoriteService = Depends(get_favorite_service),
):
    favorites.remove_favorite(user_id, tmdb_id)
    return {"success": True, "message": "Movie removed from favorites"}
