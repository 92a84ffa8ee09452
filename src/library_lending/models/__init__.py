"""
Library Lending models.

Pydantic models returned by the repositories and serialized by the REST API
and the MCP server:
- User: library members (never includes the password hash)
- Author and Book: the catalog
- BorrowRecord and its views: the lending ledger
"""

from .author import Author
from .base import LibraryModel
from .book import Book, BookWithAuthor
from .circulation import BookWithStatus, BorrowRecord, BorrowRecordWithBook
from .user import User

__all__ = [
    "Author",
    "Book",
    "BookWithAuthor",
    "BookWithStatus",
    "BorrowRecord",
    "BorrowRecordWithBook",
    "LibraryModel",
    "User",
]
