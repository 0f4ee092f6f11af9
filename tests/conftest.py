"""
Pytest fixtures. Each test gets its own SQLite file and a fresh app, keep-alive off.
"""

import pytest
from fastapi.testclient import TestClient

from cryptoapp.application import create_app
from cryptoapp.core.config import Settings
from cryptoapp.core.database import Database

TEST_PASSWORD = "secret1"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'cryptoapp_test.db'}",
        SECRET_KEY="test-secret-key",
        KEEPALIVE_ENABLED=False,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """TestClient as a context manager so the lifespan creates the tables."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def database(settings):
    db = Database(settings.database_url)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def db(database):
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def register(client):
    """Register a user through the API, return the JSON body."""

    def _register(username, email=None, password=TEST_PASSWORD):
        email = email or f"{username}@example.com"
        response = client.post(
            "/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _register


def auth_headers(token):
    return {"x-auth-token": token}
