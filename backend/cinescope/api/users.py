"""
users.py

Per-user read views: recent activity feed and summary stats.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from cinescope.core.config import settings
from cinescope.core.database import get_db
from cinescope.schemas import ActivityEventSchema, dump
from cinescope.services.activity import get_user_activity, get_user_stats

router = APIRouter()


@router.get("/{user_id}/activity")
def user_activity(
    user_id: int,
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    limit = min(limit or settings.activity_default_limit, settings.activity_max_limit)
    events = get_user_activity(db, user_id, limit=limit)
    return {"success": True, "data": dump(ActivityEventSchema, events)}


@router.get("/{user_id}/stats")
def user_stats(user_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": get_user_stats(db, user_id)}
