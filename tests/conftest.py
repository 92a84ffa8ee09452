"""Test configuration and fixtures for the Library Lending service.

Every test gets:
1. Isolated configuration - no LIBRARY_LENDING_* variables leak in, and the
   config singleton is reset around each test
2. A throwaway SQLite database under pytest's tmp_path
3. Cheap password hashing, so auth tests stay fast

Seed fixtures build a small catalog through the repositories, the same way
the API and MCP handlers do.
"""

import os
from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from library_lending.api import create_app
from library_lending.config import get_config, reset_config
from library_lending.database import (
    AuthorCreateSchema,
    AuthorRepository,
    BookCreateSchema,
    BookRepository,
    DatabaseManager,
    UserCreateSchema,
    UserRepository,
    set_db_manager,
)
from library_lending.models import Author, Book, User

# === Configuration Fixtures ===


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Start every test from a clean environment and a fresh config singleton."""
    for key in list(os.environ):
        if key.startswith("LIBRARY_LENDING_"):
            monkeypatch.delenv(key)

    monkeypatch.setenv("LIBRARY_LENDING_DATABASE_PATH", str(tmp_path / "config_default.db"))
    monkeypatch.setenv("LIBRARY_LENDING_PASSWORD_HASH_ITERATIONS", "1000")
    monkeypatch.setenv("LIBRARY_LENDING_SECRET_KEY", "test-secret-key")
    reset_config()

    yield

    reset_config()


# === Test Database Fixtures ===


@pytest.fixture
def test_database_url(tmp_path: Path) -> str:
    """Provide a SQLAlchemy database URL for testing."""
    return f"sqlite:///{tmp_path / 'test_library.db'}"


@pytest.fixture
def db_manager(test_database_url: str) -> Generator[DatabaseManager, None, None]:
    """A database manager over a freshly created schema."""
    manager = DatabaseManager(test_database_url)
    manager.init_database()

    yield manager

    manager.close()


@pytest.fixture
def test_db_session(db_manager: DatabaseManager) -> Generator[Session, None, None]:
    """Provide a SQLAlchemy session for repository tests."""
    session = db_manager.create_session()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def global_db_manager(db_manager: DatabaseManager) -> Generator[DatabaseManager, None, None]:
    """Install the test database as the process-wide one used by MCP handlers."""
    set_db_manager(db_manager)

    yield db_manager

    set_db_manager(None)


# === Seed Data Fixtures ===


@pytest.fixture
def author(test_db_session: Session) -> Author:
    return AuthorRepository(test_db_session).create(
        AuthorCreateSchema(name="Ursula K. Le Guin", bio="Author of Earthsea")
    )


@pytest.fixture
def book(test_db_session: Session, author: Author) -> Book:
    return BookRepository(test_db_session).create(
        BookCreateSchema(title="A Wizard of Earthsea", published_year=1968, author_id=author.id)
    )


@pytest.fixture
def books(test_db_session: Session, author: Author) -> list[Book]:
    """Three books by the same author."""
    repo = BookRepository(test_db_session)
    return [
        repo.create(BookCreateSchema(title=title, author_id=author.id))
        for title in ("The Dispossessed", "The Lathe of Heaven", "The Word for World Is Forest")
    ]


@pytest.fixture
def user(test_db_session: Session) -> User:
    return UserRepository(test_db_session).create(
        UserCreateSchema(email="reader@example.com", name="Reader One", password="secret123")
    )


@pytest.fixture
def other_user(test_db_session: Session) -> User:
    return UserRepository(test_db_session).create(
        UserCreateSchema(email="second@example.com", name="Reader Two", password="secret456")
    )


# === API Fixtures ===


@pytest.fixture
def api_client(db_manager: DatabaseManager) -> Generator[TestClient, None, None]:
    """A TestClient over an app wired to the test database."""
    app = create_app(get_config(), db_manager)

    with TestClient(app) as client:
        yield client


@pytest.fixture
def auth_headers(api_client: TestClient) -> dict[str, str]:
    """Register a fresh user through the API and return its bearer header."""
    response = api_client.post(
        "/api/auth/register",
        json={"email": "librarian@example.com", "name": "Librarian", "password": "letmein1"},
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}
