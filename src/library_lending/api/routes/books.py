"""Book catalog routes, including the borrow-annotated listing."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from ...database.book_repository import (
    BookCreateSchema,
    BookListFilter,
    BookRepository,
    BookUpdateSchema,
)
from ...models.book import Book
from ...models.circulation import BookWithStatus
from ..dependencies import get_current_user, get_db

router = APIRouter(prefix="/books", tags=["books"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")


def _parse_flag(raw: str | None) -> bool | None:
    # Anything other than the literal strings leaves the filter off
    if raw == "true":
        return True
    if raw == "false":
        return False
    return None


@router.get("", response_model=list[BookWithStatus])
def list_books(
    author_id: str | None = Query(None, alias="authorId"),
    is_borrowed: str | None = Query(None, alias="isBorrowed"),
    session: Session = Depends(get_db),
) -> list[BookWithStatus]:
    """Catalog books with author and open borrow record, newest first."""
    filters = BookListFilter(author_id=author_id, is_borrowed=_parse_flag(is_borrowed))
    return BookRepository(session).list_books(filters)


@router.post(
    "",
    response_model=Book,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_current_user)],
)
def create_book(body: BookCreateSchema, session: Session = Depends(get_db)) -> Book:
    return BookRepository(session).create(body)


@router.get("/{book_id}", response_model=BookWithStatus)
def get_book(book_id: str, session: Session = Depends(get_db)) -> BookWithStatus:
    book = BookRepository(session).get_with_status(book_id)
    if book is None:
        raise _not_found()
    return book


@router.patch("/{book_id}", response_model=Book, dependencies=[Depends(get_current_user)])
def update_book(book_id: str, body: BookUpdateSchema, session: Session = Depends(get_db)) -> Book:
    book = BookRepository(session).update(book_id, body)
    if book is None:
        raise _not_found()
    return book


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(get_current_user)],
)
def delete_book(book_id: str, session: Session = Depends(get_db)) -> Response:
    if not BookRepository(session).delete(book_id):
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
