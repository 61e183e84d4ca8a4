from datetime import datetime, timedelta, timezone

import pytest

from cinescope.models import Favorite, Movie, Review, WatchlistEntry
from cinescope.services.activity import get_user_activity, get_user_stats

BASE = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def movies(db):
    rows = [Movie(tmdb_id=tmdb_id, title=title) for tmdb_id, title in ((603, "The Matrix"), (550, "Fight Club"), (27205, "Inception"))]
    db.add_all(rows)
    db.commit()
    return {m.tmdb_id: m for m in rows}


def at(minutes):
    return BASE + timedelta(minutes=minutes)


def test_feed_is_merged_newest_first(db, movies):
    matrix, fight_club, inception = movies[603], movies[550], movies[27205]
    db.add_all([
        WatchlistEntry(user_id=1, movie_id=matrix.id, tmdb_id=603, created_at=at(0)),
        WatchlistEntry(user_id=1, movie_id=fight_club.id, tmdb_id=550, created_at=at(1), watched=True, watched_at=at(30)),
        Favorite(user_id=1, movie_id=inception.id, tmdb_id=27205, created_at=at(10)),
        Review(user_id=1, movie_id=matrix.id, tmdb_id=603, rating=9, title="t", content="c", created_at=at(20)),
        # another user's activity never shows up
        Favorite(user_id=2, movie_id=matrix.id, tmdb_id=603, created_at=at(40)),
    ])
    db.commit()

    events = get_user_activity(db, 1, limit=10)

    assert [(e.type, e.action, e.movie.tmdb_id) for e in events] == [
        ("watchlist", "watched", 550),
        ("review", "reviewed", 603),
        ("favorite", "added_to_favorites", 27205),
        ("watchlist", "added_to_watchlist", 603),
    ]
    assert events[0].date == at(30)


def test_feed_is_truncated_to_limit(db, movies):
    for minute, movie in enumerate(movies.values()):
        db.add(Favorite(user_id=1, movie_id=movie.id, tmdb_id=movie.tmdb_id, created_at=at(minute)))
    db.commit()

    events = get_user_activity(db, 1, limit=2)
    assert [e.movie.tmdb_id for e in events] == [27205, 550]
    assert get_user_activity(db, 1, limit=0) == []


def test_equal_timestamps_keep_store_order(db, movies):
    matrix = movies[603]
    db.add_all([
        Review(user_id=1, movie_id=matrix.id, tmdb_id=603, rating=7, title="t", content="c", created_at=at(5)),
        Favorite(user_id=1, movie_id=matrix.id, tmdb_id=603, created_at=at(5)),
        WatchlistEntry(user_id=1, movie_id=matrix.id, tmdb_id=603, created_at=at(5)),
    ])
    db.commit()

    assert [e.type for e in get_user_activity(db, 1)] == ["watchlist", "favorite", "review"]


def test_user_without_activity(db):
    assert get_user_activity(db, 99) == []


def test_stats(db, movies):
    matrix, fight_club, inception = movies[603], movies[550], movies[27205]
    db.add_all([
        WatchlistEntry(user_id=1, movie_id=matrix.id, tmdb_id=603, watched=True, watched_at=at(1)),
        WatchlistEntry(user_id=1, movie_id=fight_club.id, tmdb_id=550),
        WatchlistEntry(user_id=1, movie_id=inception.id, tmdb_id=27205),
        Favorite(user_id=1, movie_id=matrix.id, tmdb_id=603),
        Review(user_id=1, movie_id=matrix.id, tmdb_id=603, rating=9, title="t", content="c", likes_count=3),
        Review(user_id=1, movie_id=fight_club.id, tmdb_id=550, rating=6, title="t", content="c", likes_count=1),
    ])
    db.commit()

    assert get_user_stats(db, 1) == {
        "watchlist": {"total": 3, "watched": 1, "unwatched": 2},
        "favorites": 1,
        "reviews": {"total": 2, "average_rating": 7.5, "total_likes": 4},
    }
    assert get_user_stats(db, 2)["reviews"] == {"total": 0, "average_rating": 0.0, "total_likes": 0}
