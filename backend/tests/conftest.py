#!/usr/bin/env python
"""
pytest configuration file

This file contains shared fixtures for all tests. Every test gets its own
in-memory SQLite database; nothing touches a real server.
"""

import os

# Must be set before planet.settings is imported anywhere
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("DEBUG", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from planet.db.database import create_db_engine, get_db
from planet.db.models import Base, Planet, User
from planet.main import app
from planet.repositories import planet_repository, user_repository
from planet.services.auth_service import create_access_token


@pytest.fixture
def db_engine():
    """Create an in-memory SQLite database with all tables."""
    engine = create_db_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Session factory bound to the test database."""
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory) -> Session:
    """A database session for direct service and repository calls."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db_session: Session):
    """Factory creating a committed user."""

    def _make_user(username: str) -> User:
        user = user_repository.create_user(db_session, username=username, email=f"{username}@example.com")
        db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_planet(db_session: Session):
    """Factory creating a committed planet for a user."""

    def _make_planet(user: User, slug: str | None = None) -> Planet:
        planet = planet_repository.create_planet(
            db_session,
            user_id=user.id,
            name=f"{user.username}'s Planet",
            slug=slug or user.username,
        )
        db_session.commit()
        return planet

    return _make_planet


@pytest.fixture
def user(make_user) -> User:
    """Default test user."""
    return make_user("alice")


@pytest.fixture
def planet(make_planet, user) -> Planet:
    """Default test user's planet (empty tree)."""
    return make_planet(user)


@pytest.fixture
def client(session_factory):
    """TestClient whose requests use the test database."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Factory for bearer headers identifying a user."""

    def _auth_headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}

    return _auth_headers
