"""Book Resources - Catalog and Loan Status

Read-only views of the catalog annotated with borrow state.

Resources:
- library://books/list - Every book with its author and open borrow record
- library://books/borrowed - Books that are currently out
- library://books/available - Books that can be borrowed now
"""

import logging
from typing import Any

from fastmcp.exceptions import ResourceError
from pydantic import BaseModel, Field

from ..database.book_repository import BookListFilter, BookRepository
from ..database.session import session_scope
from ..models.circulation import BookWithStatus

logger = logging.getLogger(__name__)


class BookListResponse(BaseModel):
    """Response schema for the catalog resources."""

    books: list[BookWithStatus] = Field(..., description="Books matching the view")
    total: int = Field(..., description="Number of books in the view")


def _list_books(is_borrowed: bool | None, view: str) -> dict[str, Any]:
    try:
        logger.debug("MCP Resource Request - books/%s", view)

        with session_scope() as session:
            books = BookRepository(session).list_books(BookListFilter(is_borrowed=is_borrowed))

        return BookListResponse(books=books, total=len(books)).model_dump(mode="json")

    except Exception as e:
        logger.exception("Error in books/%s resource", view)
        raise ResourceError(f"Failed to retrieve book list: {e!s}") from e


async def list_books_handler() -> dict[str, Any]:
    """Returns the whole catalog, newest first."""
    return _list_books(None, "list")


async def list_borrowed_books_handler() -> dict[str, Any]:
    """Returns books with an open borrow record."""
    return _list_books(True, "borrowed")


async def list_available_books_handler() -> dict[str, Any]:
    """Returns books with no open borrow record."""
    return _list_books(False, "available")


book_resources: list[dict[str, Any]] = [
    {
        "uri": "library://books/list",
        "name": "Book Catalog",
        "description": (
            "Browse the library's catalog. Each book includes its author and, "
            "when it is out, the open borrow record."
        ),
        "mime_type": "application/json",
        "handler": list_books_handler,
    },
    {
        "uri": "library://books/borrowed",
        "name": "Borrowed Books",
        "description": "Books that are currently on loan",
        "mime_type": "application/json",
        "handler": list_borrowed_books_handler,
    },
    {
        "uri": "library://books/available",
        "name": "Available Books",
        "description": "Books that are not on loan and can be borrowed",
        "mime_type": "application/json",
        "handler": list_available_books_handler,
    },
]
