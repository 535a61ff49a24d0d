"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.database import Base, get_db
from src.main import app
from src.models.user import User
from src.services.auth import create_access_token, get_password_hash


class AuthHeaders(dict):
    """Dict subclass that also stores the user's id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/chat_app", "/chat_app_test")
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "testpass123"
# Hashing is slow on purpose, so fixtures share one hash
_TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    from src import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Factory that stores a user directly and returns it."""

    def _make_user(email: str, name: str = "Test User") -> User:
        user = User(email=email, name=name, password_hash=_TEST_PASSWORD_HASH)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def headers_for():
    """Build bearer auth headers for a stored user."""

    def _headers_for(user: User) -> AuthHeaders:
        token = create_access_token(user.id)
        return AuthHeaders(
            {"Authorization": f"Bearer {token}"}, user_id=user.id, email=user.email
        )

    return _headers_for


@pytest.fixture
def auth_headers(client):
    """Sign up a user through the API and return auth headers with user info."""
    response = client.post(
        "/api/auth/signup",
        json={"email": "test@example.com", "password": TEST_PASSWORD, "name": "Test User"},
    )
    assert response.status_code == 201
    data = response.json()
    token = response.cookies["jwt"]
    # Later requests pick their identity from headers, not the cookie jar
    client.cookies.clear()

    return AuthHeaders(
        {"Authorization": f"Bearer {token}"}, user_id=data["id"], email=data["email"]
    )


@pytest.fixture
def alice(make_user):
    return make_user("alice@example.com", "Alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob@example.com", "Bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol@example.com", "Carol")


@pytest.fixture
def dave(make_user):
    return make_user("dave@example.com", "Dave")
