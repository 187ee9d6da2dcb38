"""Pytest fixtures for the barsocial API tests.

MongoDB is replaced by mongomock and the team service is left unconfigured,
so no external service is contacted.
"""

import os

# Set test environment BEFORE importing application modules
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("INIT_DB", "false")
os.environ.setdefault("MAX_REQUESTS_PER_MINUTE", "100000")
os.environ["TEAMS_API_URL"] = ""

import mongomock
import pytest
from fastapi.testclient import TestClient
from jose import jwt

from barsocial.db import connection
from barsocial.db import bars as bars_db
from barsocial.db import users as users_db
from barsocial.teams import team_service
from barsocial.main import app


@pytest.fixture(autouse=True)
def db():
    """Fresh in-memory database for every test."""
    database = mongomock.MongoClient().barsocial_test
    connection.set_database(database)
    yield database
    connection.set_database(None)


@pytest.fixture(autouse=True)
def reset_team_service():
    team_service._team_service = None
    yield
    team_service._team_service = None


@pytest.fixture
def client():
    return TestClient(app)


def make_token(user_id: str) -> str:
    return jwt.encode({"id": user_id}, os.environ["JWT_SECRET"], algorithm="HS256")


def auth_header(user_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def make_user():
    """Insert a user directly through the data access layer."""
    counter = {"n": 0}

    def _make_user(username: str = None):
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        return users_db.create_user(username, f"{username}@x.com", "hash")

    return _make_user


@pytest.fixture
def make_bar():
    counter = {"n": 0}

    def _make_bar(name: str = None, latitude: float = 40.0, longitude: float = -73.0):
        counter["n"] += 1
        name = name or f"Bar {counter['n']}"
        return bars_db.create_bar(name, f"place-{counter['n']}", latitude, longitude)

    return _make_bar


@pytest.fixture
def auth():
    """Build an Authorization header for the given user id."""
    return auth_header
