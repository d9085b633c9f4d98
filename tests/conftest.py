"""
Pytest configuration for backend tests.

Every test gets its own SQLite database file under ``tmp_path``. Bcrypt
rounds are lowered so password hashing stays fast.
"""
import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import config  # noqa: E402
from app import create_app  # noqa: E402
from core.database import Database  # noqa: E402
from utils.approval_manager import ApprovalManager  # noqa: E402
from utils.user_manager import UserManager  # noqa: E402

PASSWORD = "s3cret-pass"


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path}/school_portal_test.db")
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def session(database):
    s = database.session()
    yield s
    s.close()


@pytest.fixture
def user_manager(session) -> UserManager:
    return UserManager(session)


@pytest.fixture
def approval_manager(session) -> ApprovalManager:
    return ApprovalManager(session)


@pytest.fixture
def client(database):
    with TestClient(create_app(database)) as c:
        yield c


@pytest.fixture
def teacher_fields() -> dict:
    return {
        "name": "Ana",
        "surname": "Lee",
        "email": "ana.lee@example.com",
        "phone": "555-0101",
        "address": "1 Main St",
        "sex": "FEMALE",
        "birthday": "1985-04-12",
    }


@pytest.fixture
def parent_fields() -> dict:
    return {
        "name": "Paul",
        "surname": "Novak",
        "phone": "555-0202",
        "address": "2 Oak Ave",
    }


@pytest.fixture
def make_student_fields():
    def _make(parent_id: str) -> dict:
        return {
            "name": "Sam",
            "surname": "Novak",
            "address": "2 Oak Ave",
            "sex": "MALE",
            "birthday": "2012-09-01",
            "parent_id": parent_id,
            "class_id": 3,
            "grade_id": 5,
        }

    return _make


@pytest.fixture
def super_admin(user_manager):
    return user_manager.bootstrap_admin("root", PASSWORD, "Root Admin")


@pytest.fixture
def login(client):
    """Log in through the API; the token cookie stays on the client."""

    def _login(username: str, password: str = PASSWORD):
        r = client.post("/api/auth/login", json={"username": username, "password": password})
        assert r.status_code == 200, r.text
        client.cookies.clear()
        client.cookies.set(config.TOKEN_COOKIE_NAME, r.json()["token"])
        return r.json()

    return _login
