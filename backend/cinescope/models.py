"""
models.py

SQLAlchemy models for the local movie mirror and the per-user signal tables
(reviews + likes, watchlist entries, favorites).

Every signal table carries a (user_id, tmdb_id) unique constraint; the database
is the source of truth for duplicate detection.
"""
from sqlalchemy import Column, Integer, BigInteger, String, Boolean, ForeignKey, DateTime, Date, Float, Text, JSON, UniqueConstraint, CheckConstraint, Index
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import relationship
from cinescope.utils.timezone import utc_now

Base = declarative_base()

WATCHLIST_PRIORITIES = ("low", "medium", "high")


class Movie(Base):
    """Local mirror of a TMDB title.

    Descriptive columns are overwritten on every fetch; the aggregate columns
    at the bottom are owned locally and only written by the aggregate engine.
    """
    __tablename__ = "movies"

    id = Column(Integer, primary_key=True)
    tmdb_id = Column(Integer, nullable=False, unique=True, index=True)
    title = Column(String, nullable=False)
    overview = Column(Text)
    release_date = Column(Date, nullable=True, index=True)
    runtime = Column(Integer, nullable=True)
    genres = Column(JSON)  # [{"id": 28, "name": "Action"}, ...]
    poster_path = Column(String, nullable=True)
    backdrop_path = Column(String, nullable=True)
    vote_average = Column(Float, index=True)
    vote_count = Column(Integer, default=0)
    popularity = Column(Float, default=0, index=True)
    adult = Column(Boolean, default=False)
    original_language = Column(String, nullable=True)
    budget = Column(BigInteger, default=0)  # BigInteger for blockbuster budgets >2B
    revenue = Column(BigInteger, default=0)
    status = Column(String, nullable=True)
    tagline = Column(String, nullable=True)
    homepage = Column(String, nullable=True)
    imdb_id = Column(String, nullable=True, index=True)
    production_companies = Column(JSON)
    production_countries = Column(JSON)
    spoken_languages = Column(JSON)

    # Local statistics (never part of the provider payload)
    local_rating_average = Column(Float, nullable=False, default=0, server_default="0")
    local_rating_count = Column(Integer, nullable=False, default=0, server_default="0")
    watchlist_count = Column(Integer, nullable=False, default=0, server_default="0")
    favorite_count = Column(Integer, nullable=False, default=0, server_default="0")

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    __table_args__ = (
        CheckConstraint("watchlist_count >= 0", name="ck_movies_watchlist_count_nonneg"),
        CheckConstraint("favorite_count >= 0", name="ck_movies_favorite_count_nonneg"),
        CheckConstraint("local_rating_count >= 0", name="ck_movies_rating_count_nonneg"),
    )

    @property
    def local_rating(self):
        return {"average": self.local_rating_average or 0, "count": self.local_rating_count or 0}


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    movie_id = Column(Integer, ForeignKey("movies.id"), nullable=False)
    tmdb_id = Column(Integer, nullable=False, index=True)
    rating = Column(Float, nullable=False)
    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    spoilers = Column(Boolean, nullable=False, default=False)
    likes_count = Column(Integer, nullable=False, default=0, server_default="0")
    is_edited = Column(Boolean, nullable=False, default=False)
    edited_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    movie = relationship("Movie")
    likes = relationship(
        "ReviewLike",
        back_populates="review",
        order_by="ReviewLike.id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("user_id", "tmdb_id", name="uq_reviews_user_tmdb"),
        CheckConstraint("rating >= 1 AND rating <= 10", name="ck_reviews_rating_range"),
        Index("ix_reviews_movie_created", "movie_id", "created_at"),
        Index("ix_reviews_user_created", "user_id", "created_at"),
    )


class ReviewLike(Base):
    """One user's like on one review. Insertion order is the id order."""
    __tablename__ = "review_likes"

    id = Column(Integer, primary_key=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now)

    review = relationship("Review", back_populates="likes")

    __table_args__ = (
        UniqueConstraint("review_id", "user_id", name="uq_review_likes_review_user"),
    )


class WatchlistEntry(Base):
    __tablename__ = "watchlist_entries"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    movie_id = Column(Integer, ForeignKey("movies.id"), nullable=False)
    tmdb_id = Column(Integer, nullable=False)
    watched = Column(Boolean, nullable=False, default=False)
    watched_at = Column(DateTime(timezone=True), nullable=True)
    priority = Column(String(10), nullable=False, default="medium")
    notes = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    movie = relationship("Movie")

    __table_args__ = (
        UniqueConstraint("user_id", "tmdb_id", name="uq_watchlist_user_tmdb"),
        CheckConstraint("priority IN ('low', 'medium', 'high')", name="ck_watchlist_priority"),
        Index("ix_watchlist_user_watched", "user_id", "watched"),
        Index("ix_watchlist_user_created", "user_id", "created_at"),
    )


class Favorite(Base):
    __tablename__ = "favorites"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    movie_id = Column(Integer, ForeignKey("movies.id"), nullable=False)
    tmdb_id = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now)

    movie = relationship("Movie")

    __table_args__ = (
        UniqueConstraint("user_id", "tmdb_id", name="uq_favorites_user_tmdb"),
        Index("ix_favorites_user_created", "user_id", "created_at"),
    )
