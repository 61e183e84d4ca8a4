"""
reviews.py

Review signal store: one review per (user, movie), owner-only edits/deletes,
and a per-review like set whose size is mirrored into likes_count.

Every create, rating edit and delete recomputes the movie's local rating
before returning.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from cinescope.core.exceptions import AlreadyExists, AlreadyLiked, Forbidden, NotFound
from cinescope.models import Review, ReviewLike
from cinescope.services.aggregates import AggregateEngine
from cinescope.services.movie_cache import MovieCache
from cinescope.services.validation import (
    validate_rating,
    validate_review_content,
    validate_review_fields,
    validate_review_title,
    validate_tmdb_id,
)
from cinescope.utils.timezone import utc_now

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(self, db: Session, movies: MovieCache, aggregates: AggregateEngine):
        self.db = db
        self.movies = movies
        self.aggregates = aggregates

    def get_review(self, review_id: int) -> Review:
        review = self.db.get(Review, review_id)
        if review is None:
            raise NotFound("Review not found")
        return review

    def _get_owned(self, user_id: int, review_id: int, action: str) -> Review:
        review = self.get_review(review_id)
        if review.user_id != user_id:
            raise Forbidden(f"Not authorized to {action} this review")
        return review

    async def create_review(
        self,
        user_id: int,
        tmdb_id: int,
        rating: int,
        title: str,
        content: str,
        spoilers: bool = False,
    ) -> Review:
        tmdb_id = validate_tmdb_id(tmdb_id)
        rating = validate_rating(rating)
        title = validate_review_title(title)
        content = validate_review_content(content)

        movie = await self.movies.get_or_create_for_signal(tmdb_id)

        review = Review(
            user_id=user_id,
            movie_id=movie.id,
            tmdb_id=tmdb_id,
            rating=rating,
            title=title,
            content=content,
            spoilers=bool(spoilers),
        )
        self.db.add(review)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise AlreadyExists("You have already reviewed this movie") from e
        review_id = review.id
        logger.info(f"User {user_id} reviewed movie {tmdb_id} ({rating}/10)")

        self.aggregates.safely(movie.id, self.aggregates.recompute_rating)
        return self.get_review(review_id)

    def update_review(self, user_id: int, review_id: int, fields: Dict[str, Any]) -> Review:
        cleaned = validate_review_fields(fields)
        review = self._get_owned(user_id, review_id, "update")

        for key, value in cleaned.items():
            setattr(review, key, value)
        review.is_edited = True
        review.edited_at = utc_now()
        movie_id = review.movie_id
        self.db.commit()

        if "rating" in cleaned:
            self.aggregates.safely(movie_id, self.aggregates.recompute_rating)
        return self.get_review(review_id)

    def delete_review(self, user_id: int, review_id: int) -> None:
        review = self._get_owned(user_id, review_id, "delete")
        movie_id = review.movie_id
        self.db.delete(review)
        self.db.commit()
        logger.info(f"User {user_id} deleted review {review_id}")

        self.aggregates.safely(movie_id, self.aggregates.recompute_rating)

    def toggle_like(self, user_id: int, review_id: int, like: bool) -> int:
        """Add or remove user_id from the review's likes and return the new likes_count.

        Liking twice raises AlreadyLiked; unliking an absent like is a no-op.
        """
        self.get_review(review_id)

        if like:
            self.db.add(ReviewLike(review_id=review_id, user_id=user_id))
            try:
                self.db.flush()
            except IntegrityError as e:
                self.db.rollback()
                # The review may have been deleted since get_review (foreign key failure)
                if self.db.scalar(select(Review.id).where(Review.id == review_id)) is None:
                    raise NotFound("Review not found") from e
                raise AlreadyLiked() from e
        else:
            self.db.execute(
                delete(ReviewLike)
                .where(ReviewLike.review_id == review_id, ReviewLike.user_id == user_id)
                .execution_options(synchronize_session=False)
            )

        like_count = select(func.count(ReviewLike.id)).where(ReviewLike.review_id == review_id).scalar_subquery()
        self.db.execute(
            update(Review)
            .where(Review.id == review_id)
            .values(likes_count=like_count)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return self.db.scalar(select(Review.likes_count).where(Review.id == review_id))

    def list_for_movie(self, tmdb_id: int, limit: int = 20, offset: int = 0) -> List[Review]:
        return self.db.scalars(
            select(Review)
            .where(Review.tmdb_id == tmdb_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .limit(limit)
            .offset(offset)
        ).all()

    def list_for_user(self, user_id: int, limit: int = 20, offset: int = 0) -> List[Review]:
        return self.db.scalars(
            select(Review)
            .options(joinedload(Review.movie))
            .where(Review.user_id == user_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .limit(limit)
            .offset(offset)
        ).all()
