"""
Auth API: register/login contract, token cookie gate and error bodies.
"""
from __future__ import annotations

from datetime import timedelta

import config
from conftest import PASSWORD
from core.security import create_access_token


def _register(client, username, role, fields, password=PASSWORD):
    body = {"username": username, "password": password, "role": role, **fields}
    return client.post("/api/auth/register", json=body)


def test_register_teacher_is_pending(client, teacher_fields):
    r = _register(client, "t1", "teacher", teacher_fields)
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["is_active"] is False
    assert "password" not in r.text


def test_register_duplicate_username_is_400(client, parent_fields, teacher_fields):
    assert _register(client, "p1", "parent", parent_fields).status_code == 200
    r = _register(client, "p1", "teacher", teacher_fields)
    assert r.status_code == 400
    assert r.json() == {"kind": "DuplicateUsername", "message": "Username 'p1' already exists"}


def test_register_missing_required_field_is_400(client, teacher_fields):
    fields = dict(teacher_fields)
    fields.pop("birthday")
    r = _register(client, "t1", "teacher", fields)
    assert r.status_code == 400
    assert r.json()["kind"] == "ValidationError"
    assert "birthday" in r.json()["message"]


def test_register_missing_role_is_400(client):
    r = client.post("/api/auth/register", json={"username": "x", "password": "y"})
    assert r.status_code == 400
    assert r.json()["kind"] == "ValidationError"


def test_login_returns_token_and_sets_cookie(client, parent_fields):
    _register(client, "p1", "parent", parent_fields)
    r = client.post("/api/auth/login", json={"username": "p1", "password": PASSWORD})

    assert r.status_code == 200
    body = r.json()
    assert body["user"]["username"] == "p1"
    assert body["user"]["role"] == "parent"
    assert "password_hash" not in body["user"]
    assert r.cookies.get(config.TOKEN_COOKIE_NAME) == body["token"]


def test_login_failures_do_not_reveal_username_existence(client, parent_fields):
    _register(client, "p1", "parent", parent_fields)
    unknown = client.post("/api/auth/login", json={"username": "nobody", "password": PASSWORD})
    wrong = client.post("/api/auth/login", json={"username": "p1", "password": "nope"})

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json() == {
        "kind": "InvalidCredentials",
        "message": "Invalid credentials",
    }


def test_login_pending_account_is_403(client, teacher_fields):
    _register(client, "t1", "teacher", teacher_fields)
    r = client.post("/api/auth/login", json={"username": "t1", "password": PASSWORD})
    assert r.status_code == 403
    assert r.json()["kind"] == "PendingApproval"


def test_me_requires_token(client):
    r = client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json()["kind"] == "Unauthorized"


def test_me_returns_account_and_profile(client, login, parent_fields):
    _register(client, "p1", "parent", parent_fields)
    login("p1")

    r = client.get("/api/auth/me")

    assert r.status_code == 200
    body = r.json()
    assert body["username"] == "p1"
    assert body["profile"]["role"] == "parent"
    assert body["profile"]["phone"] == "555-0202"


def test_expired_cookie_is_rejected(client, user_manager, parent_fields):
    user = user_manager.register("p1", "parent", parent_fields, PASSWORD)
    client.cookies.set(
        config.TOKEN_COOKIE_NAME,
        create_access_token(user, expires_delta=timedelta(minutes=-1)),
    )
    r = client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json()["kind"] == "TokenExpired"


def test_token_outlives_account_deletion(client, user_manager):
    # Stateless gate: a token stays usable until it expires
    user = user_manager.register("a1", "admin", {"name": "Ada"}, PASSWORD)
    token = create_access_token(user)
    user_manager.delete_user(user.user_id)

    client.cookies.set(config.TOKEN_COOKIE_NAME, token)
    r = client.get("/api/admin/approvals")
    assert r.status_code == 200


def test_change_password(client, login, parent_fields):
    _register(client, "p1", "parent", parent_fields)
    login("p1")

    bad = client.patch(
        "/api/auth/password",
        json={"current_password": "nope", "new_password": "fresh-pass"},
    )
    assert bad.status_code == 401

    ok = client.patch(
        "/api/auth/password",
        json={"current_password": PASSWORD, "new_password": "fresh-pass"},
    )
    assert ok.status_code == 200
    login("p1", "fresh-pass")


def test_logout_clears_cookie(client, login, parent_fields):
    _register(client, "p1", "parent", parent_fields)
    login("p1")
    r = client.post("/api/auth/logout")
    assert r.status_code == 200
    assert config.TOKEN_COOKIE_NAME in r.headers.get("set-cookie", "")


def test_create_admin_by_super_admin(client, login, super_admin):
    login("root")
    r = client.post(
        "/api/auth/admin/create",
        json={"username": "a2", "password": PASSWORD, "name": "Second"},
    )
    assert r.status_code == 201
    # the new admin is active right away but cannot create admins itself
    login("a2")
    r2 = client.post(
        "/api/auth/admin/create",
        json={"username": "a3", "password": PASSWORD, "name": "Third"},
    )
    assert r2.status_code == 403
    assert r2.json()["kind"] == "Forbidden"


def test_create_admin_requires_admin_role(client, login, parent_fields):
    _register(client, "p1", "parent", parent_fields)
    login("p1")
    r = client.post(
        "/api/auth/admin/create",
        json={"username": "a2", "password": PASSWORD, "name": "Second"},
    )
    assert r.status_code == 403


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}
