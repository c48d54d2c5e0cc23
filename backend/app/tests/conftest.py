"""
Shared fixtures: an in-memory database per test and an API client bound to it.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.core.context import SessionContext
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models.user import User
from app.services.projection_cache import PROJECTION_CACHE

TODAY = date.today()
YESTERDAY = TODAY - timedelta(days=1)
TOMORROW = TODAY + timedelta(days=1)


@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory SQLite database for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    """Database session for calling services directly."""
    db = session_factory()
    yield db
    db.close()


@pytest.fixture(autouse=True)
def clear_projection_cache():
    PROJECTION_CACHE.clear()
    yield
    PROJECTION_CACHE.clear()


@pytest.fixture(scope="function")
def client(session_factory):
    """Create a test client with dependency override."""
    def get_test_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = get_test_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _signup_and_login(client, username, home_platoon=None):
    payload = {
        "username": username,
        "email": f"{username}@example.com",
        "password": "testpassword123"
    }
    if home_platoon:
        payload["home_platoon"] = home_platoon
    response = client.post("/api/auth/signup", json=payload)
    assert response.status_code == 201
    response = client.post(
        "/api/auth/login",
        json={"username": username, "password": "testpassword123"}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture(scope="function")
def auth_headers(client):
    """Bearer headers for a signed-in user on A platoon."""
    return _signup_and_login(client, "alice", home_platoon="A")


@pytest.fixture(scope="function")
def other_headers(client):
    """Bearer headers for a second, unrelated user."""
    return _signup_and_login(client, "bob")


@pytest.fixture(scope="function")
def ctx(db_session):
    """Session context for a user created straight in the database."""
    user = User(username="carol", email="carol@example.com", hashed_password="not-a-real-hash")
    db_session.add(user)
    db_session.commit()
    return SessionContext(user_id=user.id, username=user.username)


@pytest.fixture
def create_standby(client, auth_headers):
    """Post a standby through the API and return the response body."""
    def _create(headers=None, **fields):
        payload = {
            "person_name": "john smith",
            "shift_date": YESTERDAY.isoformat(),
            "shift_type": "Day",
            "worked_for_me": False,
        }
        payload.update(fields)
        response = client.post("/api/standbys", json=payload, headers=headers or auth_headers)
        assert response.status_code == 201, response.text
        return response.json()
    return _create
