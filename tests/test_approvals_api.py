"""
Approvals API: admin gate, pending listing, approve and reject.
"""
from __future__ import annotations

import pytest

from conftest import PASSWORD


def _register(client, username, role, fields):
    body = {"username": username, "password": PASSWORD, "role": role, **fields}
    r = client.post("/api/auth/register", json=body)
    assert r.status_code == 200, r.text
    return r.json()["user_id"]


@pytest.mark.parametrize(
    "method,path",
    [
        ("get", "/api/admin/approvals"),
        ("patch", "/api/admin/approvals/some-id/approve"),
        ("delete", "/api/admin/approvals/some-id/reject"),
    ],
)
def test_approval_routes_require_token(client, method, path):
    r = getattr(client, method)(path)
    assert r.status_code == 401
    assert r.json()["kind"] == "Unauthorized"


def test_approval_routes_forbidden_for_non_admin(client, login, parent_fields):
    _register(client, "p1", "parent", parent_fields)
    login("p1")
    r = client.get("/api/admin/approvals")
    assert r.status_code == 403
    assert r.json() == {"kind": "Forbidden", "message": "Forbidden"}


def test_list_pending_enriched(client, login, super_admin, teacher_fields):
    teacher_id = _register(client, "t1", "teacher", teacher_fields)
    login("root")

    r = client.get("/api/admin/approvals")

    assert r.status_code == 200
    (entry,) = r.json()
    assert entry["user_id"] == teacher_id
    assert entry["username"] == "t1"
    assert entry["role"] == "teacher"
    assert entry["name"] == "Ana"
    assert entry["surname"] == "Lee"
    assert entry["phone"] == "555-0101"
    assert "create_at" in entry


def test_approve_and_reject_unknown_id_is_404(client, login, super_admin):
    login("root")
    r1 = client.patch("/api/admin/approvals/nope/approve")
    r2 = client.delete("/api/admin/approvals/nope/reject")
    assert r1.status_code == r2.status_code == 404
    assert r1.json()["kind"] == r2.json()["kind"] == "NotFound"


def test_approve_twice_succeeds(client, login, super_admin, teacher_fields):
    teacher_id = _register(client, "t1", "teacher", teacher_fields)
    login("root")

    assert client.patch(f"/api/admin/approvals/{teacher_id}/approve").status_code == 200
    assert client.patch(f"/api/admin/approvals/{teacher_id}/approve").status_code == 200
    assert client.get("/api/admin/approvals").json() == []


def test_reject_removes_pending_account(client, login, super_admin, teacher_fields):
    teacher_id = _register(client, "t1", "teacher", teacher_fields)
    login("root")

    r = client.delete(f"/api/admin/approvals/{teacher_id}/reject")

    assert r.status_code == 200
    assert client.get("/api/admin/approvals").json() == []
    assert client.get(f"/api/admin/users/{teacher_id}").status_code == 404
