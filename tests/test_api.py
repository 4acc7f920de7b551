"""
HTTP-level tests: error kinds map to status codes and the session travels
in the Authorization header.
"""

import re

import pytest
from fastapi.testclient import TestClient

from postroom.core import deps
from postroom.core.config import Settings
from postroom.core.database import get_db
from postroom.core.deps import get_identity_verifier, get_mail_transport, get_session_issuer
from postroom.main import app
from postroom.models import Follow

from .conftest import TEST_PASSWORD, verifier_returning


@pytest.fixture
def client(db_session, mail, sessions):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mail_transport] = lambda: mail
    app.dependency_overrides[get_session_issuer] = lambda: sessions
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def frontend_origin(monkeypatch):
    """Allow http://frontend.test as a CORS origin for the duration of a test."""
    monkeypatch.setattr(
        deps,
        "settings",
        Settings(
            SECRET_KEY="test-secret-key",
            CORS_ORIGINS=["http://frontend.test"],
            FRONTEND_URL="http://localhost:3000",
            _env_file=None,
        ),
    )


def auth_header(sessions, user):
    return {"Authorization": f"Bearer {sessions.issue_session(user.id)}"}


class TestAuthRoutes:
    def test_register_returns_session_header(self, client, mail, sessions, frontend_origin):
        response = client.post(
            "/api/register",
            json={"email": "alice@example.com", "password": "Str0ng!pass"},
            headers={"Origin": "http://frontend.test"},
        )

        assert response.status_code == 201
        assert response.json()["email"] == "alice@example.com"
        scheme, token = response.headers["Authorization"].split(" ")
        assert scheme == "Bearer"
        assert sessions.verify_session(token) == response.json()["id"]
        assert re.search(r"http://frontend.test/activate/[0-9a-f]{64}", mail.sent[0]["body"])

    def test_register_duplicate_is_conflict(self, client, make_user):
        make_user("alice@example.com")

        response = client.post("/api/register", json={"email": "alice@example.com", "password": "Str0ng!pass"})

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    def test_register_weak_password(self, client):
        response = client.post("/api/register", json={"email": "alice@example.com", "password": "weak"})

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_register_mail_failure(self, client, mail):
        mail.fail = True

        response = client.post("/api/register", json={"email": "alice@example.com", "password": "Str0ng!pass"})

        assert response.status_code == 502
        assert response.json()["error"] == "notification_delivery_failed"

    def test_login(self, client, make_user, sessions):
        user = make_user("bob@example.com")

        response = client.post("/api/login", json={"email": "bob@example.com", "password": TEST_PASSWORD})

        assert response.status_code == 200
        token = response.headers["Authorization"].split(" ")[1]
        assert sessions.verify_session(token) == user.id

    def test_login_wrong_password(self, client, make_user):
        make_user("bob@example.com")

        response = client.post("/api/login", json={"email": "bob@example.com", "password": "Wr0ng!pass"})

        assert response.status_code == 401
        assert response.json()["error"] == "invalid_credentials"
        assert "Authorization" not in response.headers

    def test_activate_unknown_token(self, client):
        response = client.post("/api/activate/nope")

        assert response.status_code == 404
        assert response.json()["error"] == "token_not_found"

    def test_oauth_unsupported_provider(self, client):
        response = client.post("/api/register/oauth", json={"token": "t", "provider": "myspace"})

        assert response.status_code == 400
        assert response.json()["error"] == "unsupported_provider"

    def test_oauth_creates_then_logs_in(self, client, sessions, test_settings):
        seen = []
        verifier = verifier_returning(test_settings, payload={"email": "gina@example.com"}, seen=seen)
        app.dependency_overrides[get_identity_verifier] = lambda: verifier

        first = client.post("/api/register/oauth", json={"token": "oauth-token", "provider": "google"})
        second = client.post("/api/register/oauth", json={"token": "oauth-token", "provider": "google"})

        assert first.status_code == 201
        assert second.status_code == 200
        assert first.json()["id"] == second.json()["id"]
        scheme, token = first.headers["Authorization"].split(" ")
        assert scheme == "Bearer"
        assert sessions.verify_session(token) == first.json()["id"]
        assert second.headers["Authorization"].startswith("Bearer ")
        assert [request.url.params["access_token"] for request in seen] == ["oauth-token", "oauth-token"]

    def test_register_password_over_72_bytes(self, client):
        response = client.post(
            "/api/register", json={"email": "alice@example.com", "password": "Str0ng!" + "a" * 70}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_reset_link_ignores_foreign_origin(self, client, mail, make_user, frontend_origin):
        make_user("bob@example.com")

        response = client.post(
            "/api/user/reset-password",
            json={"email": "bob@example.com"},
            headers={"Origin": "https://attacker.example"},
        )

        assert response.status_code == 200
        assert re.search(r"http://localhost:3000/reset-password/[0-9a-f]{64}", mail.sent[0]["body"])
        assert "attacker.example" not in mail.sent[0]["body"]


class TestProtectedRoutes:
    def test_me_requires_token(self, client):
        response = client.get("/api/me")

        assert response.status_code == 401

    def test_me_rejects_bad_token(self, client):
        response = client.get("/api/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401
        assert response.json()["error"] == "session_invalid"

    def test_me(self, client, make_user, sessions):
        user = make_user("bob@example.com", username="bob")

        response = client.get("/api/me", headers=auth_header(sessions, user))

        assert response.status_code == 200
        assert response.json()["username"] == "bob"

    def test_follow_self_is_forbidden(self, client, make_user, sessions):
        user = make_user("bob@example.com", username="bob")

        response = client.post("/api/follow/bob", headers=auth_header(sessions, user))

        assert response.status_code == 403

    def test_publish_notifies_followers(self, client, make_user, sessions, db_session):
        author = make_user("bob@example.com", username="bob")
        fans = [make_user(f"fan{i}@example.com", username=f"fan{i}") for i in range(3)]
        for fan in fans:
            assert client.post("/api/follow/bob", headers=auth_header(sessions, fan)).status_code == 200
        assert client.post("/api/follow/bob", headers=auth_header(sessions, fans[0])).status_code == 409

        created = client.post(
            "/api/blog", json={"title": "Hello", "content": "World"}, headers=auth_header(sessions, author)
        )
        assert created.status_code == 201
        blog_id = created.json()["id"]

        forbidden = client.patch(f"/api/blog/{blog_id}", headers=auth_header(sessions, fans[0]))
        assert forbidden.status_code == 403

        published = client.patch(f"/api/blog/{blog_id}", headers=auth_header(sessions, author))
        assert published.status_code == 200
        assert published.json()["draft"] is False

        for fan in fans:
            listed = client.get("/api/notification", headers=auth_header(sessions, fan)).json()
            assert [(n["blog_id"], n["seen"]) for n in listed] == [(blog_id, False)]

        seen = client.patch("/api/notification", headers=auth_header(sessions, fans[0]))
        assert seen.json() == {"updated": 1}
        assert db_session.query(Follow).count() == 3

    def test_publish_missing_blog(self, client, make_user, sessions):
        user = make_user("bob@example.com")

        response = client.patch("/api/blog/999", headers=auth_header(sessions, user))

        assert response.status_code == 404


class TestReaderRoutes:
    @pytest.fixture
    def author(self, make_user):
        return make_user("bob@example.com", username="bob")

    @pytest.fixture
    def reader(self, make_user):
        return make_user("alice@example.com", username="alice")

    @pytest.fixture
    def published(self, client, sessions, author):
        created = client.post(
            "/api/blog", json={"title": "Hello", "content": "World"}, headers=auth_header(sessions, author)
        ).json()
        client.patch(f"/api/blog/{created['id']}", headers=auth_header(sessions, author))
        return created["id"]

    def test_anonymous_read(self, client, sessions, author, published):
        draft = client.post(
            "/api/blog", json={"title": "Later", "content": "Soon"}, headers=auth_header(sessions, author)
        ).json()

        response = client.get(f"/api/blog/{published}")

        assert response.status_code == 200
        assert response.json()["author"]["username"] == "bob"
        assert response.json()["starred"] is False
        assert client.get(f"/api/blog/{draft['id']}").status_code == 404
        assert client.get(f"/api/blog/{draft['id']}", headers=auth_header(sessions, author)).status_code == 200
        assert [b["id"] for b in client.get("/api/blog/draft", headers=auth_header(sessions, author)).json()] == [
            draft["id"]
        ]

    def test_delete_blog(self, client, sessions, author, reader, published):
        assert client.delete(f"/api/blog/{published}", headers=auth_header(sessions, reader)).status_code == 403
        assert client.delete(f"/api/blog/{published}", headers=auth_header(sessions, author)).status_code == 200
        assert client.get(f"/api/blog/{published}").status_code == 404

    def test_comments(self, client, sessions, author, reader, published):
        created = client.post(
            f"/api/blog/{published}/comment", json={"content": "Nice"}, headers=auth_header(sessions, reader)
        )
        assert created.status_code == 201
        comment_id = created.json()["id"]

        listed = client.get(f"/api/blog/{published}/comment").json()
        assert [(c["content"], c["author"]["username"]) for c in listed] == [("Nice", "alice")]

        edited = client.put(
            f"/api/blog/comment/{comment_id}", json={"content": "Hijacked"}, headers=auth_header(sessions, author)
        )
        assert edited.status_code == 403
        deleted = client.delete(f"/api/blog/comment/{comment_id}", headers=auth_header(sessions, author))
        assert deleted.status_code == 200
        assert client.get(f"/api/blog/{published}/comment").json() == []

    def test_star_and_saved_list(self, client, sessions, reader, published):
        headers = auth_header(sessions, reader)

        assert client.post(f"/api/blog/star/{published}", headers=headers).status_code == 200
        assert client.post(f"/api/blog/star/{published}", headers=headers).status_code == 409
        assert client.post(f"/api/list/blog/{published}", headers=headers).status_code == 200

        saved = client.get("/api/list", headers=headers).json()
        assert [(b["id"], b["saved"], b["starred"], b["star_count"]) for b in saved] == [(published, True, True, 1)]

        assert client.delete(f"/api/list/blog/{published}", headers=headers).status_code == 200
        assert client.delete(f"/api/list/blog/{published}", headers=headers).status_code == 404
        assert client.get("/api/list", headers=headers).json() == []

    def test_search(self, client, sessions, reader, published):
        headers = auth_header(sessions, reader)

        found = client.get("/api/search", params={"query": "hello"}, headers=headers)
        assert [b["id"] for b in found.json()] == [published]
        assert client.get("/api/search", params={"query": ""}, headers=headers).status_code == 400

        recent = client.get("/api/search/recent", headers=headers).json()
        assert [s["content"] for s in recent] == ["hello"]
        assert client.delete(f"/api/search/{recent[0]['id']}", headers=headers).status_code == 200
        assert client.get("/api/search/recent", headers=headers).json() == []

    def test_notifications_carry_blog_summary(self, client, sessions, author, reader):
        client.post("/api/follow/bob", headers=auth_header(sessions, reader))
        created = client.post(
            "/api/blog", json={"title": "Fresh post", "content": "Body"}, headers=auth_header(sessions, author)
        ).json()
        client.patch(f"/api/blog/{created['id']}", headers=auth_header(sessions, author))

        listed = client.get("/api/notification", headers=auth_header(sessions, reader)).json()

        assert listed[0]["blog"]["title"] == "Fresh post"
        assert listed[0]["blog"]["author"]["username"] == "bob"

    def test_profile(self, client, sessions, author, reader, published):
        client.post("/api/follow/bob", headers=auth_header(sessions, reader))

        profile = client.get("/api/user/bob", headers=auth_header(sessions, reader)).json()

        assert profile["follower_count"] == 1
        assert profile["following"] is True
        assert [b["id"] for b in profile["blogs"]] == [published]
        assert client.get("/api/user/nobody", headers=auth_header(sessions, reader)).status_code == 404
