"""
Circulation models for the Library Lending service.

These models represent the lending ledger and the views built on it:
- BorrowRecord: one loan of one book to one user
- BorrowRecordWithBook: a loan with its book and author, for a user's history
- BookWithStatus: a catalog book annotated with its current borrow state

A borrow record has exactly two states. It is open while ``returned_at`` is
unset and closed once it is set; a closed record never reopens.
"""

from datetime import datetime

from pydantic import Field, computed_field

from .base import LibraryModel
from .book import BookWithAuthor


class BorrowRecord(LibraryModel):
    """A single lending event from the ledger."""

    id: str = Field(..., description="Unique identifier for the borrow record")

    user_id: str = Field(..., description="User who borrowed the book")

    book_id: str = Field(..., description="Book that was borrowed")

    borrowed_at: datetime = Field(
        default_factory=datetime.now,
        description="When the book was borrowed",
    )

    returned_at: datetime | None = Field(
        None,
        description="When the book was returned; unset while the loan is open",
    )

    @property
    def is_open(self) -> bool:
        """Check if the book is still out on this record."""
        return self.returned_at is None


class BorrowRecordWithBook(BorrowRecord):
    """Borrow record with the borrowed book and its author embedded."""

    book: BookWithAuthor


class BookWithStatus(BookWithAuthor):
    """
    Catalog book annotated with whether it is currently on loan.

    ``borrow_records`` holds the open records for the book (at most one), so
    a client can find the record id it needs to return the book.
    """

    borrow_records: list[BorrowRecord] = Field(
        default_factory=list,
        description="Open borrow records for this book; empty when it is available",
    )

    @property
    def active_borrow(self) -> BorrowRecord | None:
        """The open borrow record, if the book is on loan."""
        return self.borrow_records[0] if self.borrow_records else None

    @computed_field(alias="isBorrowed")  # type: ignore[prop-decorator]
    @property
    def is_borrowed(self) -> bool:
        """Derived from the ledger; never stored."""
        return len(self.borrow_records) > 0
