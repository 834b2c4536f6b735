from datetime import datetime, timedelta, timezone

from ryo.core.config import settings
from ryo.core.security import session_codec
from ryo.modules.auth.schemas.auth import SessionClaims
from ryo.modules.posts.services.post import PostRepository

from _helpers import API


def _set_cookie(client, token):
    client.cookies.set(settings.SESSION_COOKIE_NAME, token)


def test_required_gate_without_cookie(client):
    response = client.get(f"{API}/profile")
    assert response.status_code == 401
    assert response.json() == {"Error": "authorization cookie is missing", "code": "authentication_error"}


def test_required_gate_with_valid_cookie(login, user):
    response = login(user).get(f"{API}/profile")
    assert response.status_code == 200
    assert response.json()["id"] == user.id


def test_required_gate_rejects_expired_cookie(client, user):
    stamped = session_codec.stamp(
        SessionClaims(sub=user.sub, id=user.id),
        now=datetime.now(timezone.utc) - timedelta(hours=10),
    )
    _set_cookie(client, session_codec.issue(stamped))

    response = client.get(f"{API}/profile")

    assert response.status_code == 401
    assert response.json()["Error"] == "token invalid"


def test_required_gate_rejects_forged_cookie(client, user):
    _set_cookie(client, session_codec.issue(SessionClaims(sub=user.sub, id=user.id)) + "x")
    assert client.get(f"{API}/profile").status_code == 401


def test_required_gate_rejects_unknown_subject(client, db):
    _set_cookie(client, session_codec.issue(SessionClaims(sub="ghost", id="ghost-id")))
    response = client.get(f"{API}/profile")
    assert response.status_code == 401
    assert response.json()["Error"] == "token invalid"


def test_optional_gate_ignores_bad_cookie(client, db, user):
    post = PostRepository(db).create_post(user.id, "hello")
    _set_cookie(client, "garbage")

    response = client.get(f"{API}/posts/{post.id}")

    assert response.status_code == 200
    assert response.json()["isLikedByMe"] is False


def test_optional_gate_without_cookie(client, db, user):
    PostRepository(db).create_post(user.id, "hello")
    response = client.get(f"{API}/posts")
    assert response.status_code == 200
    assert len(response.json()["posts"]) == 1


def test_admin_gate_rejects_regular_user(login, user):
    response = login(user).post(f"{API}/posts", json={"body": "hi"})
    assert response.status_code == 403
    assert response.json() == {"Error": "admin access required", "code": "authorization_error"}


def test_admin_gate_requires_session_first(client):
    response = client.post(f"{API}/posts", json={"body": "hi"})
    assert response.status_code == 401


def test_preflight_is_answered_without_session(client):
    response = client.options(
        f"{API}/profile",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_cors_headers_on_simple_request(client):
    response = client.get("/health", headers={"Origin": "http://localhost:5173"})
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
