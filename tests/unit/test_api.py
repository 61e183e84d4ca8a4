import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from cinescope.api.deps import get_tmdb
from cinescope.core.database import get_db
from cinescope.core.exceptions import UpstreamUnavailable
from cinescope.main import app
from conftest import FakeTMDB

ALICE = {"X-User-Id": "1"}
BOB = {"X-User-Id": "2"}


@pytest.fixture
def client(engine, fake_tmdb):
    TestSession = sessionmaker(autoflush=False, bind=engine)

    def override_get_db():
        session = TestSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_tmdb] = lambda: fake_tmdb
    yield TestClient(app)
    app.dependency_overrides.clear()


def review_body(**overrides):
    body = {"tmdb_id": 603, "rating": 8, "title": "Great", "content": "Loved it"}
    body.update(overrides)
    return body


def test_get_movie(client, fake_tmdb):
    resp = client.get("/api/movies/603")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["title"] == "The Matrix"
    assert data["local_rating"] == {"average": 0, "count": 0}

    client.get("/api/movies/603")
    assert fake_tmdb.calls == [603]


def test_unknown_movie_is_404(client):
    resp = client.get("/api/movies/999999999")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "code": "NOT_FOUND", "message": "Movie not found"}


def test_refresh_movie(client, fake_tmdb):
    client.get("/api/movies/603")
    resp = client.post("/api/movies/603/refresh")
    assert resp.status_code == 200
    assert fake_tmdb.calls == [603, 603]


def test_recommendations(client, fake_tmdb):
    resp = client.get("/api/movies/recommendations", params={"genres": "Action,Not-A-Genre,Comedy"})
    assert resp.status_code == 200
    assert resp.json()["data"]["genre_ids"] == [28, 35]
    assert fake_tmdb.calls == []


def test_recommendations_without_known_genres(client):
    resp = client.get("/api/movies/recommendations", params={"genres": "Not-A-Genre"})
    assert resp.status_code == 400
    assert resp.json()["code"] == "NO_PREFERENCES"


def test_upstream_outage_is_503(engine):
    outage = FakeTMDB(error=UpstreamUnavailable())
    app.dependency_overrides[get_db] = lambda: sessionmaker(bind=engine)()
    app.dependency_overrides[get_tmdb] = lambda: outage
    try:
        resp = TestClient(app).get("/api/movies/603")
    finally:
        app.dependency_overrides.clear()
    assert resp.status_code == 503
    assert resp.json()["code"] == "UPSTREAM_UNAVAILABLE"


def test_review_lifecycle(client):
    resp = client.post("/api/reviews", json=review_body(), headers=ALICE)
    assert resp.status_code == 201
    review = resp.json()["data"]
    assert review["movie"]["local_rating"] == {"average": 8.0, "count": 1}

    assert client.post("/api/reviews", json=review_body(rating=2), headers=ALICE).status_code == 409

    resp = client.put(f"/api/reviews/{review['id']}", json={"title": "Mine now"}, headers=BOB)
    assert resp.status_code == 403
    assert resp.json()["code"] == "FORBIDDEN"

    resp = client.put(f"/api/reviews/{review['id']}", json={"rating": 10}, headers=ALICE)
    assert resp.status_code == 200
    assert resp.json()["data"]["is_edited"] is True

    assert client.get("/api/movies/603").json()["data"]["local_rating"] == {"average": 10.0, "count": 1}

    assert client.delete(f"/api/reviews/{review['id']}", headers=ALICE).status_code == 200
    assert client.get(f"/api/reviews/{review['id']}").status_code == 404


def test_review_validation(client):
    resp = client.post("/api/reviews", json=review_body(rating=11), headers=ALICE)
    assert resp.status_code == 400
    assert resp.json()["field"] == "rating"


def test_mutations_require_user_header(client):
    resp = client.post("/api/reviews", json=review_body())
    assert resp.status_code == 400
    assert resp.json()["code"] == "VALIDATION_ERROR"


def test_likes(client):
    review_id = client.post("/api/reviews", json=review_body(), headers=ALICE).json()["data"]["id"]

    resp = client.post(f"/api/reviews/{review_id}/like", headers=BOB)
    assert resp.json()["data"] == {"likes_count": 1, "liked": True}

    resp = client.post(f"/api/reviews/{review_id}/like", headers=BOB)
    assert resp.status_code == 409
    assert resp.json()["code"] == "ALREADY_LIKED"

    resp = client.delete(f"/api/reviews/{review_id}/like", headers=BOB)
    assert resp.json()["data"]["likes_count"] == 0

    listed = client.get("/api/reviews/movie/603").json()["data"]
    assert [r["id"] for r in listed] == [review_id]


def test_watchlist_routes(client):
    resp = client.post("/api/watchlist", json={"tmdb_id": 550, "priority": "high"}, headers=ALICE)
    assert resp.status_code == 201
    assert resp.json()["data"]["movie"]["watchlist_count"] == 1

    assert client.post("/api/watchlist", json={"tmdb_id": 550}, headers=ALICE).status_code == 409

    resp = client.patch("/api/watchlist/550/watched", json={"watched": True}, headers=ALICE)
    assert resp.json()["data"]["watched"] is True

    resp = client.patch("/api/watchlist/550", json={"notes": "With friends"}, headers=ALICE)
    assert resp.json()["data"]["notes"] == "With friends"

    assert len(client.get("/api/watchlist", params={"watched": True}, headers=ALICE).json()["data"]) == 1

    assert client.delete("/api/watchlist/550", headers=ALICE).status_code == 200
    assert client.delete("/api/watchlist/550", headers=ALICE).status_code == 404
    assert client.get("/api/movies/550").json()["data"]["watchlist_count"] == 0


def test_favorite_for_unknown_movie_is_502(client):
    resp = client.post("/api/favorites", json={"tmdb_id": 999999999}, headers=ALICE)
    assert resp.status_code == 502
    assert resp.json()["code"] == "MOVIE_FETCH_FAILED"


def test_favorites_routes(client):
    assert client.post("/api/favorites", json={"tmdb_id": 27205}, headers=ALICE).status_code == 201
    assert [f["tmdb_id"] for f in client.get("/api/favorites", headers=ALICE).json()["data"]] == [27205]
    assert client.delete("/api/favorites/27205", headers=ALICE).status_code == 200
    assert client.get("/api/favorites", headers=ALICE).json()["data"] == []


def test_user_activity_and_stats(client):
    client.post("/api/watchlist", json={"tmdb_id": 603}, headers=ALICE)
    client.post("/api/favorites", json={"tmdb_id": 550}, headers=ALICE)
    client.post("/api/reviews", json=review_body(tmdb_id=27205, rating=9), headers=ALICE)

    events = client.get("/api/users/1/activity").json()["data"]
    assert {e["action"] for e in events} == {"added_to_watchlist", "added_to_favorites", "reviewed"}
    assert len(client.get("/api/users/1/activity", params={"limit": 2}).json()["data"]) == 2

    stats = client.get("/api/users/1/stats").json()["data"]
    assert stats["watchlist"]["total"] == 1
    assert stats["favorites"] == 1
    assert stats["reviews"]["average_rating"] == 9.0


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_fractional_rating_over_http(client):
    client.post("/api/reviews", json=review_body(rating=7.5), headers=ALICE)
    client.post("/api/reviews", json=review_body(rating=8), headers=BOB)

    assert client.get("/api/movies/603").json()["data"]["local_rating"] == {"average": 7.8, "count": 2}


def test_patch_watchlist_clears_notes_only_when_sent(client):
    client.post("/api/watchlist", json={"tmdb_id": 603, "notes": "Rewatch"}, headers=ALICE)

    resp = client.patch("/api/watchlist/603", json={"priority": "high"}, headers=ALICE)
    assert resp.json()["data"]["notes"] == "Rewatch"

    resp = client.patch("/api/watchlist/603", json={"notes": None}, headers=ALICE)
    assert resp.json()["data"]["notes"] is None
    assert resp.json()["data"]["priority"] == "high"
