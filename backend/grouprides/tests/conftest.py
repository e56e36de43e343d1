"""
Shared fixtures. Tests run against a throwaway SQLite file database.
"""
import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="grouprides-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient
import grouprides.models  # noqa: F401
from grouprides.db.base import Base
from grouprides.db.session import engine, SessionLocal
from grouprides.main import app
from grouprides.services.storage import DatabaseStorage


@pytest.fixture(autouse=True)
def reset_database():
    """Give every test empty tables."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage(db):
    return DatabaseStorage(db)


@pytest.fixture
def organizer(storage):
    """A user created directly through storage (no real password)."""
    return storage.create_user(
        {"username": "organizer", "email": "organizer@example.com", "first_name": "Olive", "last_name": "Rider"},
        hashed_password="not-a-bcrypt-hash"
    )


@pytest.fixture
def make_ride(storage, organizer):
    """Create rides through storage with sensible defaults."""
    def _make_ride(**overrides):
        data = {
            "title": "Morning Ride",
            "date": "2024-06-01",
            "start_time": "08:00",
            "start_location": "Park",
            "difficulty": "easy",
        }
        data.update(overrides)
        return storage.create_ride(data, organizer.id, organizer.display_name)
    return _make_ride


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """Register a user over HTTP; returns (user_json, auth_headers)."""
    def _register(username: str, password: str = "testpassword123", **profile):
        payload = {
            "username": username,
            "email": f"{username}@example.com",
            "password": password,
        }
        payload.update(profile)
        response = client.post("/api/auth/register", json=payload)
        assert response.status_code == 201, response.text
        body = response.json()
        return body["user"], {"Authorization": f"Bearer {body['accessToken']}"}
    return _register


@pytest.fixture
def ride_payload():
    def _ride_payload(**overrides):
        payload = {
            "title": "Morning Ride",
            "description": "Easy spin around the lake",
            "date": "2024-06-01",
            "startTime": "08:00",
            "startLocation": "Park",
            "difficulty": "easy",
        }
        payload.update(overrides)
        return payload
    return _ride_payload
