"""Shared fixtures.

Every test gets its own in-memory SQLite database. API tests run the real app
(lifespan included) with the session factory dependency pointed at that
database.
"""

import os

# before any family_list import: settings are read at import time
os.environ.setdefault("FAMILYLIST_DATABASE_URL", "sqlite://")
os.environ.setdefault("FAMILYLIST_BCRYPT_ROUNDS", "4")
os.environ.setdefault("FAMILYLIST_HEARTBEAT_SECONDS", "3600")
os.environ.setdefault("FAMILYLIST_STATIC_DIR", "no-static-dir-in-tests")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from family_list.api.deps import get_session_factory
from family_list.db.base import Base
from family_list.main import app
from family_list.services.user_service import create_user


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(name: str | None = None, email: str | None = None, password: str = "secret-pass"):
        counter["n"] += 1
        name = name or f"User {counter['n']}"
        email = email or f"user{counter['n']}@example.com"
        return create_user(db, name=name, email=email, password=password)

    return _make


@pytest.fixture
def client(session_factory):
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def signup(client):
    """Sign a user up through the API and return ``(user_json, headers)``."""

    def _signup(name: str, email: str, password: str = "secret-pass"):
        res = client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})
        assert res.status_code == 201, res.text
        user = res.json()
        return user, {"X-User-Id": user["id"]}

    return _signup
