"""
Database session management for the Library Lending service.

The store handle is a ``DatabaseManager`` that owns the engine and the session
factory. It is created once per process and handed to whoever needs sessions:
the FastAPI app factory receives it explicitly, and the MCP handlers resolve it
through ``get_db_manager()``. Repositories never open sessions themselves; they
are constructed with one.

Sessions are short-lived: one per API request or MCP tool call.
"""

import logging
from collections.abc import Callable, Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar

from sqlalchemy import create_engine, event, make_url, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import get_config
from .errors import RepositoryException
from .schema import Base

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DatabaseManager:
    """
    Manages database connections and sessions.

    This class provides:
    - Lazily created engine and session factory
    - Foreign key enforcement for SQLite
    - Transactional session scopes
    - Schema creation for development and tests
    """

    def __init__(self, database_url: str | None = None):
        """
        Initialize the database manager.

        Args:
            database_url: SQLAlchemy database URL. If None, uses the configured one.
        """
        if database_url is None:
            config = get_config()
            database_url = config.get_database_url()

            if not config.database_url:
                db_path = config.database_path
                if not db_path.is_absolute():
                    db_path = Path.cwd() / db_path
                db_path.parent.mkdir(exist_ok=True, parents=True)
                logger.info("Using SQLite database at: %s", db_path)

        self.database_url = database_url
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def is_in_memory(self) -> bool:
        """True for an in-memory SQLite URL (``sqlite://`` or ``sqlite:///:memory:``)."""
        url = make_url(self.database_url)
        return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")

    @property
    def engine(self) -> Engine:
        """
        Get or create the database engine.

        SQLite engines enable foreign keys on connect. An in-memory database
        shares a single connection (StaticPool) so it survives across sessions;
        a file database gets a connection per session so concurrent requests
        keep separate transactions.
        """
        if self._engine is None:
            if self.database_url.startswith("sqlite"):
                engine_kwargs: dict[str, Any] = {
                    "connect_args": {"check_same_thread": False},
                    "echo": False,
                }
                if self.is_in_memory:
                    engine_kwargs["poolclass"] = StaticPool
                self._engine = create_engine(self.database_url, **engine_kwargs)

                @event.listens_for(self._engine, "connect")
                def set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ARG001
                    cursor = dbapi_connection.cursor()
                    cursor.execute("PRAGMA foreign_keys=ON")
                    cursor.close()
            else:
                self._engine = create_engine(
                    self.database_url,
                    pool_size=10,
                    max_overflow=20,
                    pool_pre_ping=True,  # Verify connections before use
                    echo=False,
                )

            logger.info("Database engine created: %s", self._engine.url)

        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                autocommit=False,
                autoflush=False,
                expire_on_commit=False,  # Keep objects usable after commit
            )
        return self._session_factory

    def create_session(self) -> Session:
        """Create a new database session. Callers are responsible for closing it."""
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope for database operations.

        ```python
        with db_manager.session_scope() as session:
            record = BorrowRepository(session).borrow_book(user_id, book_id)
        # Session is committed, or rolled back if the block raised
        ```
        """
        session = self.create_session()
        try:
            yield session
            session.commit()
            logger.debug("Database transaction committed successfully")
        except Exception:
            logger.debug("Rolling back database transaction")
            session.rollback()
            raise
        finally:
            session.close()

    def init_database(self, drop_existing: bool = False) -> None:
        """
        Initialize the database schema.

        Args:
            drop_existing: If True, drop all tables before creating
        """
        engine = self.engine

        if drop_existing:
            logger.warning("Dropping all existing tables...")
            Base.metadata.drop_all(bind=engine)

        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database initialization complete")

    def verify_connection(self) -> bool:
        """Return True if a trivial query succeeds against the store."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            logger.exception("Database connection failed")
            return False

    def close(self) -> None:
        """Dispose of the engine and forget the session factory."""
        if self._engine:
            self._engine.dispose()
            logger.info("Database engine disposed")
        self._engine = None
        self._session_factory = None


_db_manager: DatabaseManager | None = None


def get_db_manager(database_url: str | None = None) -> DatabaseManager:
    """
    Get the process-wide database manager.

    Args:
        database_url: Database URL (only used on first call)
    """
    global _db_manager  # noqa: PLW0603

    if _db_manager is None:
        _db_manager = DatabaseManager(database_url)

    return _db_manager


def set_db_manager(manager: DatabaseManager | None) -> None:
    """Replace the process-wide database manager (used by entry points and tests)."""
    global _db_manager  # noqa: PLW0603
    _db_manager = manager


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Convenience context manager over the process-wide database manager."""
    with get_db_manager().session_scope() as session:
        yield session


def safe_commit(session: Session, operation: str) -> None:
    """
    Commit a session, rolling back on failure.

    Integrity errors are re-raised untouched so callers can map them to a
    conflict or duplicate; any other database error becomes a
    RepositoryException.

    Args:
        session: The database session
        operation: Description of the operation (for error messages)
    """
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Commit failed for '%s'", operation)
        raise RepositoryException(f"Database operation '{operation}' failed: {e!s}") from e


def safe_query(session: Session, query_func: Callable[[Session], T], error_msg: str) -> T:
    """
    Execute a query, wrapping database errors.

    Args:
        session: The database session
        query_func: Function that performs the query
        error_msg: Error message used when the query fails

    Raises:
        RepositoryException: If the query fails
    """
    try:
        return query_func(session)
    except SQLAlchemyError as e:
        logger.exception("Query failed")
        raise RepositoryException(f"{error_msg}: Database query failed") from e
