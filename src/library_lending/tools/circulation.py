"""
Circulation tools for the Library Lending MCP server.

Two tools change lending state:
1. borrow_book: open a borrow record for a book that is not currently out
2. return_book: close an open borrow record

Both return the structured tool result MCP clients expect: a ``content`` list
with a human-readable message, plus ``data`` carrying the record on success
or ``isError`` on failure. Domain errors (missing user, book or record, and
conflicts) are reported as tool errors rather than raised, so the model can
read the message and adapt.
"""

import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ..database.borrow_repository import BorrowRepository
from ..database.errors import NotFoundError, RepositoryException
from ..database.session import session_scope
from ..models.circulation import BorrowRecord
from ..observability.decorators import trace_tool

logger = logging.getLogger(__name__)


def _error_result(message: str) -> dict[str, Any]:
    return {
        "isError": True,
        "content": [{"type": "text", "text": message}],
    }


def _record_data(record: BorrowRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "user_id": record.user_id,
        "book_id": record.book_id,
        "borrowed_at": record.borrowed_at.isoformat(),
        "returned_at": record.returned_at.isoformat() if record.returned_at else None,
    }


# =============================================================================
# BORROW TOOL
# =============================================================================


class BorrowBookInput(BaseModel):
    """Input schema for the borrow_book tool."""

    user_id: str = Field(
        ...,
        min_length=1,
        description="Identifier of the user borrowing the book",
    )

    book_id: str = Field(
        ...,
        min_length=1,
        description="Identifier of the book to borrow",
    )


@trace_tool("borrow_book")
async def borrow_book_handler(user_id: str, book_id: str) -> dict[str, Any]:
    """
    Handler for the borrow_book tool.

    The book must exist and have no open borrow record; the user must exist.
    The checks run in that order, so a missing book is reported before a
    conflict and a conflict before a missing user.
    """
    try:
        params = BorrowBookInput(user_id=user_id, book_id=book_id)
    except ValidationError as e:
        logger.warning("Invalid borrow parameters: %s", e)
        return _error_result(f"Invalid borrow parameters: {e}")

    try:
        with session_scope() as session:
            record = BorrowRepository(session).borrow_book(params.user_id, params.book_id)
    except NotFoundError as e:
        logger.info("Borrow failed - entity not found: %s", e)
        return _error_result(str(e))
    except RepositoryException as e:
        logger.info("Borrow failed - %s", e)
        return _error_result(str(e))
    except Exception as e:
        logger.exception("Unexpected error in borrow_book tool")
        return _error_result(f"An unexpected error occurred: {e!s}")

    return {
        "content": [
            {
                "type": "text",
                "text": (
                    f"Book '{record.book_id}' borrowed by user '{record.user_id}'. "
                    f"Borrow record: {record.id}"
                ),
            }
        ],
        "data": {"borrow_record": _record_data(record)},
    }


# =============================================================================
# RETURN TOOL
# =============================================================================


class ReturnBookInput(BaseModel):
    """Input schema for the return_book tool."""

    record_id: str = Field(
        ...,
        min_length=1,
        description="Identifier of the open borrow record to close",
    )


@trace_tool("return_book")
async def return_book_handler(record_id: str) -> dict[str, Any]:
    """Handler for the return_book tool. A record can only be returned once."""
    try:
        params = ReturnBookInput(record_id=record_id)
    except ValidationError as e:
        logger.warning("Invalid return parameters: %s", e)
        return _error_result(f"Invalid return parameters: {e}")

    try:
        with session_scope() as session:
            record = BorrowRepository(session).return_book(params.record_id)
    except NotFoundError as e:
        logger.info("Return failed - record not found: %s", e)
        return _error_result(str(e))
    except RepositoryException as e:
        logger.info("Return failed - %s", e)
        return _error_result(str(e))
    except Exception as e:
        logger.exception("Unexpected error in return_book tool")
        return _error_result(f"An unexpected error occurred: {e!s}")

    return {
        "content": [
            {
                "type": "text",
                "text": f"Book '{record.book_id}' returned. Borrow record {record.id} is closed.",
            }
        ],
        "data": {"borrow_record": _record_data(record)},
    }


# =============================================================================
# TOOL DEFINITIONS
# =============================================================================

borrow_book = {
    "name": "borrow_book",
    "description": (
        "Borrow a book for a user. Fails if the book or user does not exist, "
        "or if the book is already out on another borrow record."
    ),
    "inputSchema": BorrowBookInput.model_json_schema(),
    "handler": borrow_book_handler,
}

return_book = {
    "name": "return_book",
    "description": (
        "Return a borrowed book by closing its borrow record. "
        "Fails if the record does not exist or was already returned."
    ),
    "inputSchema": ReturnBookInput.model_json_schema(),
    "handler": return_book_handler,
}
