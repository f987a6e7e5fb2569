import datetime as dt

from sqlalchemy import select

from conftest import auth, register
from motoclub.models import Story
from motoclub.policies.social import purge_expired_stories


def test_story_lifecycle(client):
    token, _ = register(client, "story@example.com", name="Teller")
    res = client.post("/api/stories", json={"media_url": "https://img/s.jpg", "caption": "hi"}, headers=auth(token))
    assert res.status_code == 201
    story = res.json()["story"]
    assert story["author_name"] == "Teller"

    listed = client.get("/api/stories", headers=auth(token)).json()["stories"]
    assert [s["id"] for s in listed] == [story["id"]]

    assert client.delete(f"/api/stories/{story['id']}", headers=auth(token)).status_code == 200
    assert client.get("/api/stories", headers=auth(token)).json()["stories"] == []


def test_story_requires_media(client):
    token, _ = register(client, "story@example.com")
    assert client.post("/api/stories", json={}, headers=auth(token)).status_code == 400


def test_expired_stories_are_hidden_and_purged(client, session_factory):
    token, _ = register(client, "story@example.com")
    story = client.post("/api/stories", json={"media_url": "https://img/s.jpg"}, headers=auth(token)).json()["story"]

    with session_factory() as db:
        row = db.get(Story, story["id"])
        row.expires_at = dt.datetime.now(dt.timezone.utc) - dt.timedelta(minutes=1)
        db.commit()

    assert client.get("/api/stories", headers=auth(token)).json()["stories"] == []

    with session_factory() as db:
        assert purge_expired_stories(db) == 1
        db.commit()
        assert db.execute(select(Story)).scalars().all() == []


def test_only_author_can_delete_story(client):
    token, _ = register(client, "story@example.com")
    other, _ = register(client, "other@example.com")
    story = client.post("/api/stories", json={"media_url": "https://img/s.jpg"}, headers=auth(token)).json()["story"]
    assert client.delete(f"/api/stories/{story['id']}", headers=auth(other)).status_code == 404


def test_follow_unfollow_and_lists(client):
    a, user_a = register(client, "a@example.com", name="A")
    _, user_b = register(client, "b@example.com", name="B")

    assert client.post(f"/api/users/{user_b['id']}/follow", headers=auth(a)).json() == {"following": True}
    # Following twice keeps a single edge.
    client.post(f"/api/users/{user_b['id']}/follow", headers=auth(a))

    followers = client.get(f"/api/users/{user_b['id']}/followers", headers=auth(a)).json()["users"]
    assert [u["id"] for u in followers] == [user_a["id"]]
    following = client.get(f"/api/users/{user_a['id']}/following", headers=auth(a)).json()["users"]
    assert [u["id"] for u in following] == [user_b["id"]]

    assert client.delete(f"/api/users/{user_b['id']}/follow", headers=auth(a)).json() == {"following": False}
    assert client.get(f"/api/users/{user_b['id']}/followers", headers=auth(a)).json()["users"] == []


def test_cannot_follow_self_or_missing_user(client):
    token, user = register(client, "a@example.com")
    assert client.post(f"/api/users/{user['id']}/follow", headers=auth(token)).status_code == 400
    assert client.post("/api/users/999/follow", headers=auth(token)).status_code == 404


def test_feed_contains_own_and_followed_posts_only(client):
    a, _ = register(client, "a@example.com")
    b, user_b = register(client, "b@example.com")
    c, _ = register(client, "c@example.com")
    client.post("/api/posts", json={"content": "from a"}, headers=auth(a))
    client.post("/api/posts", json={"content": "from b"}, headers=auth(b))
    client.post("/api/posts", json={"content": "from c"}, headers=auth(c))
    client.post(f"/api/users/{user_b['id']}/follow", headers=auth(a))

    feed = client.get("/api/posts/feed", headers=auth(a)).json()["posts"]
    assert [p["content"] for p in feed] == ["from b", "from a"]
