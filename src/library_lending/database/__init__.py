"""
Database package for the Library Lending service.

This package provides:
- SQLAlchemy schema definitions (schema.py)
- Session management and connection handling (session.py)
- One repository per entity plus the borrow lifecycle repository
- The exception hierarchy the API and MCP layers translate into errors
"""

from .author_repository import AuthorCreateSchema, AuthorRepository, AuthorUpdateSchema
from .book_repository import BookCreateSchema, BookListFilter, BookRepository, BookUpdateSchema
from .borrow_repository import BorrowRepository
from .errors import ConflictError, DuplicateError, NotFoundError, RepositoryException
from .repository import BaseRepository
from .schema import Author, Base, Book, BorrowRecord, User
from .session import (
    DatabaseManager,
    get_db_manager,
    safe_commit,
    safe_query,
    session_scope,
    set_db_manager,
)
from .user_repository import UserCreateSchema, UserRepository

__all__ = [
    "Author",
    "AuthorCreateSchema",
    "AuthorRepository",
    "AuthorUpdateSchema",
    "Base",
    "BaseRepository",
    "Book",
    "BookCreateSchema",
    "BookListFilter",
    "BookRepository",
    "BookUpdateSchema",
    "BorrowRecord",
    "BorrowRepository",
    "ConflictError",
    "DatabaseManager",
    "DuplicateError",
    "NotFoundError",
    "RepositoryException",
    "User",
    "UserCreateSchema",
    "UserRepository",
    "get_db_manager",
    "safe_commit",
    "safe_query",
    "session_scope",
    "set_db_manager",
]
