"""
reviews.py

Review endpoints: listing, create/update/delete by the owner, and likes.
"""
from fastapi import APIRouter, Depends, Query

from cinescope.api.deps import get_current_user_id, get_review_service
from cinescope.schemas import ReviewCreate, ReviewSchema, ReviewUpdate, dump
from cinescope.services.reviews import ReviewService

router = APIRouter()


@router.get("/movie/{tmdb_id}")
def list_movie_reviews(
    tmdb_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    reviews: ReviewService = Depends(get_review_service),
):
    items = reviews.list_for_movie(tmdb_id, limit=limit, offset=offset)
    return {"success": True, "data": dump(ReviewSchema, items)}


@router.get("/user/{user_id}")
def list_user_reviews(
    user_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    reviews: ReviewService = Depends(get_review_service),
):
    items = reviews.list_for_user(user_id, limit=limit, offset=offset)
    return {"success": True, "data": dump(ReviewSchema, items)}


@router.get("/{review_id}")
def get_review(review_id: int, reviews: ReviewService = Depends(get_review_service)):
    return {"success": True, "data": dump(ReviewSchema, reviews.get_review(review_id))}


@router.post("", status_code=201)
async def create_review(
    payload: ReviewCreate,
    user_id: int = Depends(get_current_user_id),
    reviews: ReviewService = Depends(get_review_service),
):
    review = await reviews.create_review(
        user_id,
        payload.tmdb_id,
        payload.rating,
        payload.title,
        payload.content,
        spoilers=payload.spoilers,
    )
    return {"success": True, "data": dump(ReviewSchema, review)}


@router.put("/{review_id}")
def update_review(
    review_id: int,
    payload: ReviewUpdate,
    user_id: int = Depends(get_current_user_id),
    reviews: ReviewService = Depends(get_review_service),
):
    review = reviews.update_review(user_id, review_id, payload.model_dump(exclude_none=True))
    return {"success": True, "data": dump(ReviewSchema, review)}


@router.delete("/{review_id}")
def delete_review(
    review_id: int,
    user_id: int = Depends(get_current_user_id),
    reviews: ReviewService = Depends(get_review_service),
):
    reviews.delete_review(user_id, review_id)
    return {"success": True, "message": "Review deleted"}


@router.post("/{review_id}/like")
def like_review(
    review_id: int,
    user_id: int = Depends(get_current_user_id),
    reviews: ReviewService = Depends(get_review_service),
):
    likes_count = reviews.toggle_like(user_id, review_id, like=True)
    return {"success": True, "data": {"likes_count": likes_count, "liked": True}}


@router.delete("/{review_id}/like")
def unlike_review(
    review_id: int,
    user_id: int = Depends(get_current_user_id),
    reviews: ReviewService = Depends(get_review_service),
):
    likes_count = reviews.toggle_like(user_id, review_id, like=False)
    return {"success": True, "data": {"likes_count": likes_count, "liked": False}}
