"""Authentication and session API tests."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch

from jose import jwt

from src.config import get_settings
from src.exceptions import UpstreamError
from src.models.user import User


settings = get_settings()

TEST_PASSWORD = "testpass123"


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_signup(client, db):
    """Test user signup returns the user view and sets the session cookie."""
    response = client.post(
        "/api/auth/signup",
        json={"email": "newuser@example.com", "password": "password123", "name": "New User"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "newuser@example.com"
    assert data["name"] == "New User"
    assert data["profilePic"] == ""
    assert data["aboutMe"] == ""
    assert "password" not in data
    assert "passwordHash" not in data
    assert "password_hash" not in data

    set_cookie = response.headers["set-cookie"].lower()
    assert "jwt=" in set_cookie
    assert "httponly" in set_cookie
    assert "max-age=604800" in set_cookie

    user = db.query(User).filter(User.email == "newuser@example.com").one()
    assert user.password_hash != "password123"
    assert user.password_hash.startswith("$2b$10$")


def test_signup_missing_fields(client):
    """Test signup with a missing field fails."""
    for body in (
        {"email": "a@example.com", "password": "password123"},
        {"name": "A", "password": "password123"},
        {"name": "A", "email": "a@example.com"},
        {"name": "   ", "email": "a@example.com", "password": "password123"},
    ):
        response = client.post("/api/auth/signup", json=body)
        assert response.status_code == 400
        assert response.json()["detail"] == "All fields are required"


def test_signup_short_password(client):
    """Test signup with a password under 6 characters fails."""
    response = client.post(
        "/api/auth/signup",
        json={"email": "short@example.com", "password": "12345", "name": "Short"},
    )
    assert response.status_code == 400
    assert "at least 6 characters" in response.json()["detail"]


def test_signup_invalid_email(client):
    """Test signup with a malformed email is rejected as a bad request."""
    response = client.post(
        "/api/auth/signup",
        json={"email": "not-an-email", "password": "password123", "name": "Bad"},
    )
    assert response.status_code == 400


def test_signup_duplicate_email(client, auth_headers):
    """Test signup with duplicate email fails."""
    response = client.post(
        "/api/auth/signup",
        json={"email": auth_headers.email, "password": "password123", "name": "Duplicate"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already exists"


def test_login(client, auth_headers):
    """Test user login."""
    response = client.post(
        "/api/auth/login", json={"email": auth_headers.email, "password": TEST_PASSWORD}
    )
    assert response.status_code == 200
    assert response.json()["id"] == auth_headers.user_id
    assert "passwordHash" not in response.json()
    assert "jwt" in response.cookies


def test_login_failures_are_indistinguishable(client, auth_headers):
    """Test wrong password and unknown email give identical responses."""
    wrong_password = client.post(
        "/api/auth/login", json={"email": auth_headers.email, "password": "wrongpass"}
    )
    unknown_email = client.post(
        "/api/auth/login", json={"email": "nobody@example.com", "password": "wrongpass"}
    )
    assert wrong_password.status_code == 400
    assert unknown_email.status_code == wrong_password.status_code
    assert unknown_email.content == wrong_password.content
    assert wrong_password.json() == {"detail": "Invalid credentials"}


def test_login_with_mixed_case_domain(client):
    """Test a user can log in with the exact address they signed up with."""
    signup = client.post(
        "/api/auth/signup",
        json={"email": "Mixed@EXAMPLE.com", "password": "password123", "name": "Mixed"},
    )
    assert signup.status_code == 201
    assert signup.json()["email"] == "Mixed@example.com"
    client.cookies.clear()

    for email in ("Mixed@EXAMPLE.com", "Mixed@example.com", " Mixed@Example.COM "):
        response = client.post(
            "/api/auth/login", json={"email": email, "password": "password123"}
        )
        assert response.status_code == 200, email
        assert response.json()["id"] == signup.json()["id"]


def test_signup_duplicate_email_differing_in_domain_case(client, auth_headers):
    """Test the duplicate check compares normalized addresses."""
    local, domain = auth_headers.email.split("@")
    response = client.post(
        "/api/auth/signup",
        json={"email": f"{local}@{domain.upper()}", "password": "password123", "name": "Dup"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already exists"


def test_login_with_malformed_email(client, auth_headers):
    """Test a malformed login email fails like any unknown address."""
    response = client.post(
        "/api/auth/login", json={"email": "not-an-email", "password": TEST_PASSWORD}
    )
    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid credentials"}


def test_signup_rejects_special_use_domain(client):
    """Test addresses on reserved domains such as .local are rejected."""
    response = client.post(
        "/api/auth/signup",
        json={"email": "me@host.local", "password": "password123", "name": "Local"},
    )
    assert response.status_code == 400
    assert "special-use or reserved" in response.json()["detail"]


def test_check_with_cookie(client):
    """Test the session cookie set at signup authenticates later requests."""
    client.post(
        "/api/auth/signup",
        json={"email": "cookie@example.com", "password": "password123", "name": "Cookie"},
    )
    response = client.get("/api/auth/check")
    assert response.status_code == 200
    assert response.json()["email"] == "cookie@example.com"


def test_check_with_header(client, auth_headers):
    """Test getting current user info with a bearer header."""
    response = client.get("/api/auth/check", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == auth_headers.email


def test_check_without_token(client):
    """Test protected route without a token."""
    response = client.get("/api/auth/check")
    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized - No Token Provided"


def test_check_with_invalid_token(client):
    """Test protected route with a tampered token."""
    response = client.get("/api/auth/check", headers={"Authorization": "Bearer not.a.token"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized - Invalid Token"


def test_check_with_expired_token(client, auth_headers):
    """Test protected route with an expired token."""
    expired = jwt.encode(
        {"sub": str(auth_headers.user_id), "exp": datetime.now(UTC) - timedelta(minutes=1)},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    response = client.get("/api/auth/check", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized - Invalid Token"


def test_check_with_token_for_wrong_secret(client, auth_headers):
    """Test a token signed with another key is rejected."""
    forged = jwt.encode(
        {"sub": str(auth_headers.user_id), "exp": datetime.now(UTC) + timedelta(days=1)},
        "some-other-secret",
        algorithm=settings.jwt_algorithm,
    )
    response = client.get("/api/auth/check", headers={"Authorization": f"Bearer {forged}"})
    assert response.status_code == 401


def test_check_with_token_without_subject(client):
    """Test a validly signed token without a user id is rejected."""
    token = jwt.encode(
        {"exp": datetime.now(UTC) + timedelta(days=1)},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    response = client.get("/api/auth/check", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized - Invalid Token"


def test_check_for_deleted_user(client, db, make_user, headers_for):
    """Test a valid token for a user that no longer exists."""
    user = make_user("gone@example.com")
    headers = headers_for(user)
    db.delete(user)
    db.commit()

    response = client.get("/api/auth/check", headers=headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


def test_logout_expires_cookie(client):
    """Test logout replaces the session cookie with an expired one."""
    client.post(
        "/api/auth/signup",
        json={"email": "bye@example.com", "password": "password123", "name": "Bye"},
    )
    response = client.post("/api/auth/logout")
    assert response.status_code == 200
    assert response.json() == {"message": "Logged out successfully"}
    assert "max-age=0" in response.headers["set-cookie"].lower()

    response = client.get("/api/auth/check")
    assert response.status_code == 401


def test_logout_without_session(client):
    """Test logout works without being logged in."""
    response = client.post("/api/auth/logout")
    assert response.status_code == 200


def test_update_profile_name_and_bio(client, auth_headers):
    """Test updating name and bio."""
    response = client.put(
        "/api/auth/update-profile",
        headers=auth_headers,
        json={"name": "  Renamed  ", "aboutMe": "Hello there"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Renamed"
    assert data["aboutMe"] == "Hello there"


def test_update_profile_clears_bio(client, auth_headers):
    """Test an empty bio clears it while leaving the name alone."""
    client.put("/api/auth/update-profile", headers=auth_headers, json={"aboutMe": "Bio"})
    response = client.put("/api/auth/update-profile", headers=auth_headers, json={"aboutMe": ""})
    assert response.status_code == 200
    assert response.json()["aboutMe"] == ""
    assert response.json()["name"] == "Test User"


def test_update_profile_rejects_blank_name(client, auth_headers):
    """Test the name cannot be cleared."""
    response = client.put("/api/auth/update-profile", headers=auth_headers, json={"name": " "})
    assert response.status_code == 400
    assert response.json()["detail"] == "Name cannot be empty"


def test_update_profile_requires_a_field(client, auth_headers):
    """Test an empty update is rejected."""
    response = client.put("/api/auth/update-profile", headers=auth_headers, json={})
    assert response.status_code == 400
    assert response.json()["detail"] == "No profile fields provided"


def test_update_profile_picture(client, auth_headers):
    """Test a new profile picture is uploaded and its URL stored."""
    with patch(
        "src.services.assets.AssetService.upload_image",
        new=AsyncMock(return_value="https://res.cloudinary.com/demo/image/upload/me.png"),
    ) as mock_upload:
        response = client.put(
            "/api/auth/update-profile",
            headers=auth_headers,
            json={"profilePic": "data:image/png;base64,iVBORw0KGgo="},
        )

    assert response.status_code == 200
    assert response.json()["profilePic"] == "https://res.cloudinary.com/demo/image/upload/me.png"
    mock_upload.assert_awaited_once_with("data:image/png;base64,iVBORw0KGgo=")


def test_update_profile_picture_upload_failure(client, auth_headers, db):
    """Test a failed upload leaves the profile unchanged and hides the detail."""
    with patch(
        "src.services.assets.AssetService.upload_image",
        new=AsyncMock(side_effect=UpstreamError("Image upload failed: 401 Unauthorized")),
    ):
        response = client.put(
            "/api/auth/update-profile",
            headers=auth_headers,
            json={"name": "Changed", "profilePic": "data:image/png;base64,AAAA"},
        )

    assert response.status_code == 500
    assert response.json() == {"detail": "Image upload failed"}
    user = db.query(User).filter(User.id == auth_headers.user_id).one()
    db.refresh(user)
    assert user.name == "Test User"
    assert user.profile_pic == ""


def test_update_profile_requires_session(client):
    """Test update-profile is protected."""
    response = client.put("/api/auth/update-profile", json={"name": "X"})
    assert response.status_code == 401
