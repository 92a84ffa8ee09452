"""
Author repository implementation for the Library Lending service.

Plain CRUD over the authors table. The only rule is that an author who still
has books in the catalog cannot be deleted.
"""

from pydantic import Field, field_validator
from sqlalchemy import func, select

from ..models.author import Author as AuthorModel
from ..models.base import LibraryModel
from .errors import ConflictError
from .repository import BaseRepository
from .schema import Author as AuthorDB
from .schema import Book as BookDB
from .session import safe_query


class AuthorCreateSchema(LibraryModel):
    """Schema for creating a new author."""

    name: str = Field(..., min_length=1, max_length=200)
    bio: str | None = None


class AuthorUpdateSchema(LibraryModel):
    """Schema for updating an author - all fields optional."""

    name: str | None = Field(None, min_length=1, max_length=200)
    bio: str | None = None

    @field_validator("name")
    @classmethod
    def reject_null_name(cls, v: str | None) -> str:
        """Name may be omitted from an update but never cleared."""
        if v is None:
            raise ValueError("name cannot be null")
        return v


class AuthorRepository(
    BaseRepository[AuthorDB, AuthorCreateSchema, AuthorUpdateSchema, AuthorModel]
):
    """Repository for author data access."""

    @property
    def model_class(self):
        return AuthorDB

    @property
    def response_schema(self):
        return AuthorModel

    def count_books(self, author_id: str) -> int:
        """Number of catalog books written by the author."""
        query = select(func.count()).select_from(BookDB).where(BookDB.author_id == author_id)
        return (
            safe_query(self.session, lambda s: s.execute(query).scalar(), "Failed to count books")
            or 0
        )

    def _check_can_delete(self, db_obj: AuthorDB) -> None:
        book_count = self.count_books(db_obj.id)
        if book_count:
            raise ConflictError(
                f"Author {db_obj.id} still has {book_count} book(s) in the catalog"
            )
