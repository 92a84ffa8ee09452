"""User Resources - Borrowing History

Resources:
- library://users/{user_id}/borrowed - A user's borrow records, newest first,
  each with the borrowed book and its author. Open and closed records are
  both included; ``open_count`` says how many are still out.

An unknown user id yields an empty history rather than an error.
"""

import logging
from typing import Any

from fastmcp.exceptions import ResourceError
from pydantic import BaseModel, Field

from ..database.borrow_repository import BorrowRepository
from ..database.session import session_scope
from ..models.circulation import BorrowRecordWithBook

logger = logging.getLogger(__name__)


class UserBorrowedResponse(BaseModel):
    """Response schema for a user's borrowing history."""

    user_id: str = Field(..., description="User the history belongs to")
    records: list[BorrowRecordWithBook] = Field(..., description="Borrow records, newest first")
    total: int = Field(..., description="Number of records")
    open_count: int = Field(..., description="Number of records not yet returned")


async def get_user_borrowed_handler(user_id: str) -> dict[str, Any]:
    """Returns every borrow record for ``user_id``."""
    if not user_id:
        raise ResourceError("User ID is required")

    try:
        logger.debug("MCP Resource Request - users/%s/borrowed", user_id)

        with session_scope() as session:
            records = BorrowRepository(session).list_borrowed_for_user(user_id)

        response = UserBorrowedResponse(
            user_id=user_id,
            records=records,
            total=len(records),
            open_count=sum(1 for r in records if r.is_open),
        )
        return response.model_dump(mode="json")

    except Exception as e:
        logger.exception("Error in users/{user_id}/borrowed resource")
        raise ResourceError(f"Failed to retrieve borrowing history: {e!s}") from e


user_resources: list[dict[str, Any]] = [
    {
        "uri_template": "library://users/{user_id}/borrowed",
        "name": "User Borrowing History",
        "description": (
            "All borrow records for a user, newest first, with the borrowed book and its author"
        ),
        "mime_type": "application/json",
        "handler": get_user_borrowed_handler,
    },
]
