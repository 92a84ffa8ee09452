"""
Book repository implementation for the Library Lending service.

Besides plain catalog CRUD this repository owns the catalog listing, which
annotates every book with its author and its open borrow record (if any).
The borrowed flag is computed from the ledger at read time and is never
written to the books table.
"""

from pydantic import Field, field_validator
from sqlalchemy import and_, select
from sqlalchemy.orm import joinedload

from ..models.author import Author as AuthorModel
from ..models.base import LibraryModel
from ..models.book import Book as BookModel
from ..models.circulation import BookWithStatus, BorrowRecord
from .errors import ConflictError, NotFoundError
from .repository import BaseRepository
from .schema import Author as AuthorDB
from .schema import Book as BookDB
from .schema import BorrowRecord as BorrowDB
from .session import safe_query


class BookCreateSchema(LibraryModel):
    """Schema for creating a new book."""

    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    published_year: int | None = Field(None, ge=0)
    author_id: str


class BookUpdateSchema(LibraryModel):
    """Schema for updating a book - all fields optional."""

    title: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = None
    published_year: int | None = Field(None, ge=0)
    author_id: str | None = None

    @field_validator("title", "author_id")
    @classmethod
    def reject_null(cls, v: str | None) -> str:
        """Required columns may be omitted from an update but never cleared."""
        if v is None:
            raise ValueError("field cannot be null")
        return v


class BookListFilter(LibraryModel):
    """
    Filters for the catalog listing.

    ``is_borrowed`` is tri-state: True keeps books with an open borrow record,
    False keeps books without one, None applies no restriction.
    """

    author_id: str | None = None
    is_borrowed: bool | None = None


class BookRepository(BaseRepository[BookDB, BookCreateSchema, BookUpdateSchema, BookModel]):
    """Repository for book data access and the borrow-annotated catalog view."""

    @property
    def model_class(self):
        return BookDB

    @property
    def response_schema(self):
        return BookModel

    def create(self, data: BookCreateSchema) -> BookModel:
        """
        Create a book for an existing author.

        Raises:
            NotFoundError: If the author does not exist
        """
        self._require_author(data.author_id)
        return super().create(data)

    def update(self, id: str, data: BookUpdateSchema) -> BookModel | None:
        """
        Update a book. A new author_id must reference an existing author.

        Raises:
            NotFoundError: If the new author does not exist
        """
        if "author_id" in data.model_fields_set:
            self._require_author(data.author_id)
        return super().update(id, data)

    def list_books(self, filters: BookListFilter | None = None) -> list[BookWithStatus]:
        """
        List catalog books with their author and borrow state, newest first.

        Args:
            filters: Optional author and borrowed-state restrictions

        Returns:
            Books annotated with their open borrow record, if any
        """
        filters = filters or BookListFilter()

        query = select(BookDB).options(joinedload(BookDB.author))

        if filters.author_id is not None:
            query = query.where(BookDB.author_id == filters.author_id)

        if filters.is_borrowed is not None:
            open_record_exists = (
                select(BorrowDB.id)
                .where(and_(BorrowDB.book_id == BookDB.id, BorrowDB.returned_at.is_(None)))
                .exists()
            )
            query = query.where(open_record_exists if filters.is_borrowed else ~open_record_exists)

        query = query.order_by(BookDB.created_at.desc(), BookDB.title.asc())

        books = safe_query(
            self.session,
            lambda s: s.execute(query).unique().scalars().all(),
            "Failed to list books",
        )

        open_records = self._open_records_by_book([book.id for book in books])
        return [self._to_status_model(book, open_records.get(book.id)) for book in books]

    def get_with_status(self, book_id: str) -> BookWithStatus | None:
        """Get one book with its author and open borrow record, or None."""
        query = select(BookDB).where(BookDB.id == book_id).options(joinedload(BookDB.author))
        book = safe_query(
            self.session,
            lambda s: s.execute(query).unique().scalar_one_or_none(),
            "Failed to get book",
        )
        if book is None:
            return None

        open_records = self._open_records_by_book([book.id])
        return self._to_status_model(book, open_records.get(book.id))

    def _check_can_delete(self, db_obj: BookDB) -> None:
        records = safe_query(
            self.session,
            lambda s: s.execute(select(BorrowDB).where(BorrowDB.book_id == db_obj.id))
            .scalars()
            .all(),
            "Failed to check borrow records",
        )
        if any(record.returned_at is None for record in records):
            raise ConflictError(f"Book {db_obj.id} is currently borrowed and cannot be deleted")
        if records:
            raise ConflictError(f"Book {db_obj.id} has lending history and cannot be deleted")

    def _require_author(self, author_id: str | None) -> None:
        query = select(AuthorDB.id).where(AuthorDB.id == author_id)
        found = safe_query(
            self.session,
            lambda s: s.execute(query).scalar_one_or_none(),
            "Failed to look up author",
        )
        if found is None:
            raise NotFoundError(f"Author {author_id} not found")

    def _open_records_by_book(self, book_ids: list[str]) -> dict[str, BorrowDB]:
        """Map book id to its open borrow record for the given books."""
        if not book_ids:
            return {}

        query = select(BorrowDB).where(
            and_(BorrowDB.book_id.in_(book_ids), BorrowDB.returned_at.is_(None))
        )
        records = safe_query(
            self.session,
            lambda s: s.execute(query).scalars().all(),
            "Failed to load open borrow records",
        )
        return {record.book_id: record for record in records}

    def _to_status_model(self, book: BookDB, open_record: BorrowDB | None) -> BookWithStatus:
        """Convert a book and its open record into the catalog view."""
        return BookWithStatus(
            id=book.id,
            title=book.title,
            description=book.description,
            published_year=book.published_year,
            author_id=book.author_id,
            created_at=book.created_at,
            updated_at=book.updated_at,
            author=AuthorModel.model_validate(book.author),
            borrow_records=[BorrowRecord.model_validate(open_record)] if open_record else [],
        )
