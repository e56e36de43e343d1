"""
Tests for authentication endpoints.
"""
from datetime import datetime, timedelta
from grouprides.models.auth_session import AuthSession
from grouprides.models.user import User


def test_register(client):
    """Registration creates the user and returns a working session token."""
    response = client.post(
        "/api/auth/register",
        json={
            "username": "testuser",
            "email": "test@example.com",
            "password": "testpassword123",
            "firstName": "Test",
            "experienceLevel": "intermediate"
        }
    )
    assert response.status_code == 201
    body = response.json()
    assert body["tokenType"] == "bearer"
    assert body["user"]["username"] == "testuser"
    assert body["user"]["experienceLevel"] == "intermediate"
    assert body["user"]["isActive"] is True
    assert "password" not in body["user"]
    assert "hashedPassword" not in body["user"]

    me = client.get("/api/auth/user", headers={"Authorization": f"Bearer {body['accessToken']}"})
    assert me.status_code == 200
    assert me.json()["id"] == body["user"]["id"]


def test_register_duplicate_username(client, register, db):
    register("testuser")

    response = client.post(
        "/api/auth/register",
        json={"username": "testuser", "email": "other@example.com", "password": "testpassword123"}
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Username already exists"
    assert db.query(User).filter(User.username == "testuser").count() == 1


def test_register_validates_payload(client):
    response = client.post(
        "/api/auth/register",
        json={"username": "x", "email": "not-an-email", "password": "short"}
    )
    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert {"username", "email", "password"} <= fields


def test_password_is_stored_hashed(register, db):
    user, _ = register("hashme", password="supersecret123")

    stored = db.get(User, user["id"])
    assert stored.hashed_password != "supersecret123"
    assert stored.hashed_password.startswith("$2")


def test_login(client, register):
    """Test user login."""
    register("testuser2")

    response = client.post(
        "/api/auth/login",
        json={"username": "testuser2", "password": "testpassword123"}
    )
    assert response.status_code == 200
    body = response.json()
    assert "accessToken" in body
    assert body["user"]["username"] == "testuser2"


def test_login_invalid_credentials(client):
    """Test login with invalid credentials."""
    response = client.post(
        "/api/auth/login",
        json={"username": "nonexistent", "password": "wrongpassword"}
    )
    assert response.status_code == 401


def test_login_wrong_password(client, register):
    register("testuser3")

    response = client.post(
        "/api/auth/login",
        json={"username": "testuser3", "password": "not-the-password"}
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Incorrect username or password"


def test_login_inactive_user(client, register, db):
    user, _ = register("sleepy")
    db.get(User, user["id"]).is_active = False
    db.commit()

    response = client.post(
        "/api/auth/login",
        json={"username": "sleepy", "password": "testpassword123"}
    )
    assert response.status_code == 403


def test_current_user_requires_session(client):
    assert client.get("/api/auth/user").status_code == 401
    response = client.get("/api/auth/user", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_logout_destroys_session(client, register):
    _, headers = register("leaving")

    response = client.post("/api/auth/logout", headers=headers)
    assert response.status_code == 200

    assert client.get("/api/auth/user", headers=headers).status_code == 401
    assert client.post("/api/auth/logout", headers=headers).status_code == 401


def test_logout_only_ends_one_session(client, register):
    _, first_headers = register("multi")
    login = client.post("/api/auth/login", json={"username": "multi", "password": "testpassword123"})
    second_headers = {"Authorization": f"Bearer {login.json()['accessToken']}"}

    client.post("/api/auth/logout", headers=first_headers)

    assert client.get("/api/auth/user", headers=second_headers).status_code == 200


def test_expired_session_is_rejected(client, register, db):
    user, headers = register("expiring")
    session = db.query(AuthSession).filter(AuthSession.user_id == user["id"]).one()
    session.expires_at = datetime.utcnow() - timedelta(minutes=1)
    db.commit()

    assert client.get("/api/auth/user", headers=headers).status_code == 401


def test_login_purges_expired_sessions(client, register, db):
    user, _ = register("tidy")
    session = db.query(AuthSession).filter(AuthSession.user_id == user["id"]).one()
    session.expires_at = datetime.utcnow() - timedelta(minutes=1)
    db.commit()

    client.post("/api/auth/login", json={"username": "tidy", "password": "testpassword123"})

    db.expire_all()
    sessions = db.query(AuthSession).filter(AuthSession.user_id == user["id"]).all()
    assert len(sessions) == 1
    assert sessions[0].expires_at > datetime.utcnow()
