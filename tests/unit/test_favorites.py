import pytest
from sqlalchemy import delete, select
from sqlalchemy.orm import sessionmaker

from cinescope.core.exceptions import AlreadyExists, NotFound
from cinescope.models import Favorite, Movie


def favorite_count(db, tmdb_id):
    return db.scalar(select(Movie.favorite_count).where(Movie.tmdb_id == tmdb_id))


async def test_favorites_move_the_count(db, favorite_service):
    await favorite_service.add_favorite(1, 603)
    await favorite_service.add_favorite(2, 603)
    assert favorite_count(db, 603) == 2

    favorite_service.remove_favorite(2, 603)
    assert favorite_count(db, 603) == 1


async def test_duplicate_favorite(db, favorite_service):
    await favorite_service.add_favorite(1, 603)
    with pytest.raises(AlreadyExists):
        await favorite_service.add_favorite(1, 603)
    assert favorite_count(db, 603) == 1


async def test_remove_missing_favorite(db, favorite_service):
    with pytest.raises(NotFound):
        favorite_service.remove_favorite(1, 603)


async def test_list_for_user(favorite_service):
    await favorite_service.add_favorite(1, 603)
    await favorite_service.add_favorite(1, 550)
    await favorite_service.add_favorite(2, 27205)

    favorites = favorite_service.list_for_user(1)
    assert {f.movie.title for f in favorites} == {"The Matrix", "Fight Club"}


async def test_favorite_removed_by_another_request_is_not_counted_twice(db, engine, favorite_service, dirty_movies):
    await favorite_service.add_favorite(1, 603)
    original_get = favorite_service._get

    def get_then_lose_race(user_id, tmdb_id):
        found = original_get(user_id, tmdb_id)
        other = sessionmaker(bind=engine)()
        other.execute(delete(Favorite).where(Favorite.id == found.id))
        other.commit()
        other.close()
        return found

    favorite_service._get = get_then_lose_race

    with pytest.raises(NotFound):
        favorite_service.remove_favorite(1, 603)

    assert favorite_count(db, 603) == 1
    assert dirty_movies == []
