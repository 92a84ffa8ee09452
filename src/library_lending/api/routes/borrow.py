"""Borrow and return routes.

NotFoundError and ConflictError raised by the repository are turned into 404
and 409 responses by the application's exception handlers.
"""

from fastapi import APIRouter, Depends, status
from pydantic import Field
from sqlalchemy.orm import Session

from ...database.borrow_repository import BorrowRepository
from ...models.base import LibraryModel
from ...models.circulation import BorrowRecord
from ..dependencies import get_current_user, get_db

router = APIRouter(prefix="/borrow", tags=["borrow"], dependencies=[Depends(get_current_user)])


class BorrowRequest(LibraryModel):
    """Body of a borrow request."""

    user_id: str = Field(..., min_length=1)
    book_id: str = Field(..., min_length=1)


@router.post("", response_model=BorrowRecord, status_code=status.HTTP_201_CREATED)
def borrow_book(body: BorrowRequest, session: Session = Depends(get_db)) -> BorrowRecord:
    return BorrowRepository(session).borrow_book(body.user_id, body.book_id)


@router.post("/{record_id}/return", response_model=BorrowRecord)
def return_book(record_id: str, session: Session = Depends(get_db)) -> BorrowRecord:
    return BorrowRepository(session).return_book(record_id)
