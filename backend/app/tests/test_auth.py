"""
Tests for authentication and session handling.
"""
from app.core.security import create_access_token


def test_signup(client):
    """Test user signup."""
    response = client.post(
        "/api/auth/signup",
        json={
            "username": "testuser",
            "email": "test@example.com",
            "password": "testpassword123",
            "home_platoon": "C"
        }
    )
    assert response.status_code == 201
    data = response.json()
    assert data["username"] == "testuser"
    assert data["home_platoon"] == "C"


def test_signup_duplicate_username(client):
    """Test that usernames are unique."""
    payload = {"username": "testuser", "email": "test@example.com", "password": "testpassword123"}
    assert client.post("/api/auth/signup", json=payload).status_code == 201

    payload["email"] = "other@example.com"
    response = client.post("/api/auth/signup", json=payload)
    assert response.status_code == 400


def test_login(client):
    """Test user login."""
    # First signup
    client.post(
        "/api/auth/signup",
        json={
            "username": "testuser2",
            "email": "test2@example.com",
            "password": "testpassword123"
        }
    )

    # Then login
    response = client.post(
        "/api/auth/login",
        json={
            "username": "testuser2",
            "password": "testpassword123"
        }
    )
    assert response.status_code == 200
    assert "access_token" in response.json()


def test_login_invalid_credentials(client):
    """Test login with invalid credentials."""
    response = client.post(
        "/api/auth/login",
        json={
            "username": "nonexistent",
            "password": "wrongpassword"
        }
    )
    assert response.status_code == 401


def test_me_requires_session(client):
    response = client.get("/api/users/me")
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthenticated"


def test_update_home_platoon(client, auth_headers):
    response = client.patch("/api/users/me", json={"home_platoon": " D "}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["home_platoon"] == "D"


def test_reads_without_session_are_empty(client, create_standby):
    """Reads without a token see an empty record set rather than an error."""
    create_standby()

    response = client.get("/api/standbys")
    assert response.status_code == 200
    assert response.json() == []

    response = client.get("/api/views/dashboard")
    assert response.status_code == 200
    assert response.json()["counters"] == {"owed_to_me": 0, "i_owe": 0}


def test_writes_without_session_are_rejected(client):
    response = client.post(
        "/api/standbys",
        json={"person_name": "John", "shift_date": "2024-01-15", "shift_type": "Day"}
    )
    assert response.status_code == 401


def test_invalid_token_counts_as_no_session(client, create_standby):
    create_standby()
    headers = {"Authorization": "Bearer not-a-token"}

    assert client.get("/api/standbys", headers=headers).json() == []
    response = client.post(
        "/api/standbys",
        json={"person_name": "John", "shift_date": "2024-01-15", "shift_type": "Day"},
        headers=headers
    )
    assert response.status_code == 401


def test_token_for_unknown_user_is_rejected(client):
    headers = {"Authorization": f"Bearer {create_access_token(999, 'ghost')}"}
    assert client.get("/api/users/me", headers=headers).status_code == 401


def test_records_are_private(client, create_standby, other_headers):
    """Another user's records are invisible and cannot be fetched by id."""
    standby = create_standby()

    assert client.get("/api/standbys", headers=other_headers).json() == []
    response = client.get(f"/api/standbys/{standby['id']}", headers=other_headers)
    assert response.status_code == 404
