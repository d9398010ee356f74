from datetime import timedelta

from fitfeed.models import Comment, Like, Post, QuarterlyStatistics, WorkoutLog
from fitfeed.services.periods import utcnow


def _create(client, headers, **overrides):
    body = {
        "title": "Leg day",
        "content": "squats",
        "body_part": ["legs", "back"],
        "duration": 40,
        "is_public": True,
    }
    body.update(overrides)
    return client.post("/api/posts", json=body, headers=headers)


def test_register_login_me(client):
    resp = client.post(
        "/api/auth/register",
        json={"email": "Kim@Example.com", "nickname": "kim", "password": "secret123"},
    )
    assert resp.status_code == 201
    assert resp.get_json()["user"]["email"] == "kim@example.com"

    resp = client.post("/api/auth/login", json={"identifier": "kim", "password": "secret123"})
    assert resp.status_code == 200
    token = resp.get_json()["token"]

    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.get_json()["user"]["nickname"] == "kim"

    bad = client.post("/api/auth/login", json={"identifier": "kim", "password": "nope"})
    assert bad.status_code == 401


def test_register_rejects_bad_input(client, make_user):
    make_user(nickname="taken")

    cases = [
        ({"email": "a@example.com", "password": "secret123"}, "email, nickname and password are required"),
        ({"email": "not-an-email", "nickname": "a", "password": "secret123"}, "email is not valid"),
        ({"email": "a@example.com", "nickname": "a", "password": "123"}, "password must be at least 6 characters"),
        ({"email": "taken@example.com", "nickname": "b", "password": "secret123"}, "email already in use"),
        ({"email": "c@example.com", "nickname": "taken", "password": "secret123"}, "nickname already in use"),
    ]
    for body, message in cases:
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 400
        assert resp.get_json() == {"message": message}


def test_login_errors_use_message_body(client, make_user, auth_headers, session):
    user = make_user(nickname="lee")

    missing = client.post("/api/auth/login", json={"identifier": "lee"})
    assert missing.status_code == 400
    assert missing.get_json() == {"message": "identifier and password are required"}

    wrong = client.post("/api/auth/login", json={"identifier": "lee", "password": "wrong-pass"})
    assert wrong.status_code == 401
    assert wrong.get_json() == {"message": "invalid credentials"}

    headers = auth_headers(user)
    session.delete(user)
    session.commit()
    gone = client.get("/api/auth/me", headers=headers)
    assert gone.status_code == 404
    assert gone.get_json() == {"message": "user not found"}


def test_create_post_updates_statistics_and_ranking(client, make_user, make_group, auth_headers, session):
    user = make_user()
    make_group(user, make_user())
    headers = auth_headers(user)

    resp = _create(client, headers)
    assert resp.status_code == 201
    data = resp.get_json()
    assert data["statistics"]["current_streak"] == 1
    assert data["statistics"]["body_part"] == {"legs": 1, "back": 1}
    assert data["ranking"]["score"] == 50.0

    logs = session.query(WorkoutLog).filter_by(post_id=data["post"]["id"]).all()
    assert sorted((log.body_part, log.duration) for log in logs) == [("back", 20), ("legs", 20)]

    again = _create(client, headers, body_part=["legs"], duration=45)
    assert again.status_code == 201
    assert again.get_json()["statistics"]["current_streak"] == 1
    assert again.get_json()["statistics"]["body_part"] == {"legs": 2, "back": 1}
    assert again.get_json()["ranking"] is None


def test_create_post_without_group_is_rejected(client, make_user, auth_headers, session):
    user = make_user()

    resp = _create(client, auth_headers(user))

    assert resp.status_code == 403
    assert "group" in resp.get_json()["message"]
    assert session.query(Post).count() == 0
    assert session.query(QuarterlyStatistics).count() == 0


def test_create_post_validates_body(client, make_user, make_group, auth_headers):
    user = make_user()
    make_group(user)
    headers = auth_headers(user)

    assert _create(client, headers, body_part=[]).status_code == 400
    assert _create(client, headers, body_part=["wings"]).status_code == 400
    assert _create(client, headers, duration=-5).status_code == 400
    assert _create(client, headers, title="  ").status_code == 400
    assert client.post("/api/posts", json={"title": "x"}).status_code == 401


def test_private_post_visibility(client, make_user, make_group, auth_headers):
    author = make_user()
    mate = make_user()
    stranger = make_user()
    make_group(author, mate)

    post_id = _create(client, auth_headers(author), is_public=False).get_json()["post"]["id"]

    assert client.get(f"/api/posts/{post_id}", headers=auth_headers(author)).status_code == 200
    assert client.get(f"/api/posts/{post_id}", headers=auth_headers(mate)).status_code == 200
    assert client.get(f"/api/posts/{post_id}", headers=auth_headers(stranger)).status_code == 404
    assert client.get(f"/api/posts/{post_id}").status_code == 404

    detail = client.get(f"/api/posts/{post_id}", headers=auth_headers(author)).get_json()["post"]
    assert detail["is_mine"] is True
    assert detail["duration"] == 40
    assert sorted(detail["body_part"]) == ["back", "legs"]


def test_update_replaces_workout_logs(client, make_user, make_group, auth_headers, session):
    user = make_user()
    other = make_user()
    make_group(user)
    post_id = _create(client, auth_headers(user)).get_json()["post"]["id"]

    forbidden = client.patch(f"/api/posts/{post_id}", json={"title": "mine"}, headers=auth_headers(other))
    assert forbidden.status_code == 403

    resp = client.patch(
        f"/api/posts/{post_id}",
        json={"title": "Chest day", "body_part": ["chest"], "duration": 30},
        headers=auth_headers(user),
    )
    assert resp.status_code == 200
    post = resp.get_json()["post"]
    assert post["title"] == "Chest day"
    assert post["body_part"] == ["chest"]
    assert post["duration"] == 30
    assert session.query(WorkoutLog).filter_by(post_id=post_id).count() == 1


def test_delete_cascades(client, make_user, make_group, auth_headers, session):
    user = make_user()
    make_group(user)
    headers = auth_headers(user)
    post_id = _create(client, headers).get_json()["post"]["id"]
    client.post("/api/comments", json={"post_id": post_id, "content": "nice"}, headers=headers)
    client.post(f"/api/posts/{post_id}/like", headers=headers)

    resp = client.delete(f"/api/posts/{post_id}", headers=headers)

    assert resp.status_code == 200
    assert session.query(Post).count() == 0
    assert session.query(WorkoutLog).count() == 0
    assert session.query(Comment).count() == 0
    assert session.query(Like).count() == 0
    assert client.delete(f"/api/posts/{post_id}", headers=headers).status_code == 404


def test_comments_crud(client, make_user, make_group, auth_headers):
    user = make_user()
    other = make_user()
    make_group(user)
    post_id = _create(client, auth_headers(user)).get_json()["post"]["id"]

    created = client.post(
        "/api/comments", json={"post_id": post_id, "content": "great"}, headers=auth_headers(other)
    )
    assert created.status_code == 201
    comment_id = created.get_json()["comment"]["id"]

    listing = client.get(f"/api/comments/post/{post_id}", headers=auth_headers(other)).get_json()
    assert listing["meta"]["total_items"] == 1
    assert listing["data"][0]["is_mine"] is True

    assert client.patch(
        f"/api/comments/{comment_id}", json={"content": "x"}, headers=auth_headers(user)
    ).status_code == 403
    updated = client.patch(
        f"/api/comments/{comment_id}", json={"content": "even better"}, headers=auth_headers(other)
    )
    assert updated.get_json()["comment"]["content"] == "even better"

    detail = client.get(f"/api/posts/{post_id}").get_json()["post"]
    assert detail["comment_count"] == 1

    assert client.delete(f"/api/comments/{comment_id}", headers=auth_headers(other)).status_code == 200
    assert client.get(f"/api/comments/{comment_id}").status_code == 404
    assert client.post(
        "/api/comments", json={"post_id": 9999, "content": "hi"}, headers=auth_headers(other)
    ).status_code == 404


def test_post_detail_lists_comments_oldest_first(client, make_user, make_group, auth_headers):
    author = make_user()
    reader = make_user()
    make_group(author)
    post_id = _create(client, auth_headers(author)).get_json()["post"]["id"]

    for user, text in ((reader, "first"), (author, "second"), (reader, "third")):
        client.post(
            "/api/comments", json={"post_id": post_id, "content": text}, headers=auth_headers(user)
        )

    detail = client.get(f"/api/posts/{post_id}", headers=auth_headers(reader)).get_json()["post"]
    assert [c["content"] for c in detail["comments"]] == ["first", "second", "third"]
    assert [c["is_mine"] for c in detail["comments"]] == [True, False, True]
    assert detail["comment_count"] == 3


def test_like_toggle(client, make_user, make_group, auth_headers):
    user = make_user()
    make_group(user)
    headers = auth_headers(user)
    post_id = _create(client, headers).get_json()["post"]["id"]

    assert client.post(f"/api/posts/{post_id}/like", headers=headers).get_json() == {
        "liked": True,
        "like_count": 1,
    }
    assert client.get(f"/api/posts/{post_id}", headers=headers).get_json()["post"]["user_liked"] is True
    assert client.post(f"/api/posts/{post_id}/like", headers=headers).get_json() == {
        "liked": False,
        "like_count": 0,
    }


def test_popular_feed_ranks_by_engagement(client, session, make_user, add_post):
    author = make_user()
    fans = [make_user() for _ in range(5)]
    now = utcnow()

    fresh = add_post(author, created_at=now, title="fresh")
    older = add_post(author, created_at=now - timedelta(days=8), title="older")
    stale = add_post(author, created_at=now - timedelta(days=40), title="stale")
    hidden = add_post(author, created_at=now, is_public=False, title="hidden")

    for fan in fans[:2]:
        session.add(Like(post_id=fresh.id, user_uuid=fan.user_uuid))
    for fan in fans:
        session.add(Like(post_id=older.id, user_uuid=fan.user_uuid))
        session.add(Comment(post_id=older.id, user_uuid=fan.user_uuid, content="!"))
    for fan in fans:
        session.add(Like(post_id=stale.id, user_uuid=fan.user_uuid))
    session.add(Like(post_id=hidden.id, user_uuid=fans[0].user_uuid))
    session.commit()

    resp = client.get("/api/posts/popular?limit=10")
    assert resp.status_code == 200
    data = resp.get_json()
    assert [p["title"] for p in data["data"]] == ["older", "fresh"]
    assert data["data"][0]["like_count"] == 5
    assert data["data"][0]["comment_count"] == 5
    assert "popularity_score" not in data["data"][0]
    assert data["meta"]["total_items"] == 2


def test_popular_feed_includes_group_private_posts(client, make_user, make_group, add_post, auth_headers, session):
    author = make_user()
    mate = make_user()
    make_group(author, mate)
    add_post(author, is_public=False, title="members only")
    session.commit()

    anonymous = client.get("/api/posts/popular").get_json()
    assert anonymous["data"] == []

    member_view = client.get("/api/posts/popular", headers=auth_headers(mate)).get_json()
    assert [p["title"] for p in member_view["data"]] == ["members only"]


def test_group_posts_and_my_posts(client, make_user, make_group, auth_headers):
    author = make_user()
    outsider = make_user()
    group = make_group(author)
    headers = auth_headers(author)

    _create(client, headers, title="public one")
    _create(client, headers, title="private one", is_public=False)

    mine = client.get("/api/posts?limit=1", headers=headers).get_json()
    assert mine["meta"] == {
        "total_items": 2,
        "items_per_page": 1,
        "total_pages": 2,
        "current_page": 1,
    }

    member_view = client.get(f"/api/posts/group/{group.id}", headers=headers).get_json()
    assert member_view["meta"]["total_items"] == 2

    outsider_view = client.get(
        f"/api/posts/group/{group.id}", headers=auth_headers(outsider)
    ).get_json()
    assert [p["title"] for p in outsider_view["data"]] == ["public one"]

    by_name = client.get(f"/api/posts/user/{author.nickname}").get_json()
    assert by_name["meta"]["total_items"] == 1
    assert client.get("/api/posts/user/nobody").status_code == 404
    assert client.get("/api/posts/group/9999").status_code == 404
