"""
watchlist.py

The caller's watchlist: add, remove, mark watched and edit priority/notes.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from cinescope.api.deps import get_current_user_id, get_watchlist_service
from cinescope.schemas import WatchedUpdate, WatchlistAdd, WatchlistEntrySchema, WatchlistUpdate, dump
from cinescope.services.watchlist import WatchlistService

router = APIRouter()


@router.get("")
def list_watchlist(
    watched: Optional[bool] = Query(None),
    user_id: int = Depends(get_current_user_id),
    watchlist: WatchlistService = Depends(get_watchlist_service),
):
    entries = watchlist.list_for_user(user_id, watched=watched)
    return {"success": True, "data": dump(WatchlistEntrySchema, entries)}


@router.post("", status_code=201)
async def add_to_watchlist(
    payload: WatchlistAdd,
    user_id: int = Depends(get_current_user_id),
    watchlist: WatchlistService = Depends(get_watchlist_service),
):
    entry = await watchlist.add_to_watchlist(user_id, payload.tmdb_id, priority=payload.priority, notes=payload.notes)
    return {"success": True, "data": dump(WatchlistEntrySchema, entry)}


@router.delete("/{tmdb_id}")
def remove_from_watchlist(
    tmdb_id: int,
    user_id: int = Depends(get_current_user_id),
    watchlist: WatchlistService = Depends(get_watchlist_service),
):
    watchlist.remove_from_watchlist(user_id, tmdb_id)
    return {"success": True, "message": "Movie removed from watchlist"}


@router.patch("/{tmdb_id}")
def update_watchlist_entry(
    tmdb_id: int,
    payload: WatchlistUpdate,
    user_id: int = Depends(get_current_user_id),
    watchlist: WatchlistService = Depends(get_watchlist_service),
):
    entry = watchlist.update_entry(user_id, tmdb_id, **payload.model_dump(exclude_unset=True))
    return {"success": True, "data": dump(WatchlistEntrySchema, entry)}


@router.patch("/{tmdb_id}/watched")
def set_watched(
    tmdb_id: int,
    payload: WatchedUpdate,
    user_id: int = Depends(get_current_user_id),
    watchlist: WatchlistService = Depends(get_watchlist_service),
):
    entry = watchlist.set_watched(user_id, tmdb_id, payload.watched)
    return {"success": True, "data": dump(WatchlistEntrySchema, entry)}
