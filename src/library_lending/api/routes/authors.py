"""Author catalog routes."""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from ...database.author_repository import (
    AuthorCreateSchema,
    AuthorRepository,
    AuthorUpdateSchema,
)
from ...models.author import Author
from ..dependencies import get_current_user, get_db

router = APIRouter(prefix="/authors", tags=["authors"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Author not found")


@router.get("", response_model=list[Author])
def list_authors(session: Session = Depends(get_db)) -> list[Author]:
    return AuthorRepository(session).get_all()


@router.post(
    "",
    response_model=Author,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_current_user)],
)
def create_author(body: AuthorCreateSchema, session: Session = Depends(get_db)) -> Author:
    return AuthorRepository(session).create(body)


@router.get("/{author_id}", response_model=Author)
def get_author(author_id: str, session: Session = Depends(get_db)) -> Author:
    author = AuthorRepository(session).get_by_id(author_id)
    if author is None:
        raise _not_found()
    return author


@router.patch("/{author_id}", response_model=Author, dependencies=[Depends(get_current_user)])
def update_author(
    author_id: str, body: AuthorUpdateSchema, session: Session = Depends(get_db)
) -> Author:
    author = AuthorRepository(session).update(author_id, body)
    if author is None:
        raise _not_found()
    return author


@router.delete(
    "/{author_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(get_current_user)],
)
def delete_author(author_id: str, session: Session = Depends(get_db)) -> Response:
    if not AuthorRepository(session).delete(author_id):
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
