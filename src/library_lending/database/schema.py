"""
SQLAlchemy database schema for the Library Lending service.

Four tables back the whole system:
1. users - library members who borrow books
2. authors - catalog authors
3. books - catalog items, each written by one author
4. borrow_records - the append-only lending ledger

A book's borrow state is never stored on the book itself. It is derived from
the existence of a borrow record with no ``returned_at``.

All timestamps come from the application clock (local naive ``datetime.now``)
so creation and lending times are directly comparable.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def generate_id() -> str:
    """Generate a new primary key value."""
    return str(uuid4())


class User(Base):
    """
    Users table - library members.

    Users are created once (registration or admin creation) and are not
    edited afterwards. The password column only ever holds a salted hash.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), nullable=False, unique=True)
    name = Column(String(200), nullable=False)
    password_hash = Column(String(255), nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.now)

    # Relationships
    borrow_records = relationship("BorrowRecord", back_populates="user")

    __table_args__ = (Index("idx_user_email", "email"),)


class Author(Base):
    """Authors table - stores information about book authors."""

    __tablename__ = "authors"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(200), nullable=False, index=True)
    bio = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    # Relationships
    books = relationship("Book", back_populates="author")


class Book(Base):
    """
    Books table - the library catalog.

    ``is_borrowed`` is computed from ``borrow_records`` on read so the stored
    catalog never disagrees with the ledger.
    """

    __tablename__ = "books"

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String(500), nullable=False, index=True)
    description = Column(Text, nullable=True)
    published_year = Column(Integer, nullable=True)
    author_id = Column(String(36), ForeignKey("authors.id"), nullable=False)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    # Relationships
    author = relationship("Author", back_populates="books")
    borrow_records = relationship("BorrowRecord", back_populates="book")

    __table_args__ = (
        Index("idx_book_author", "author_id"),
        CheckConstraint(
            "published_year IS NULL OR published_year >= 0",
            name="check_published_year_non_negative",
        ),
    )

    @property
    def open_records(self) -> list["BorrowRecord"]:
        """Borrow records on this book that have not been returned."""
        return [record for record in self.borrow_records if record.returned_at is None]

    @property
    def is_borrowed(self) -> bool:
        """Check if the book is currently on loan."""
        return bool(self.open_records)


class BorrowRecord(Base):
    """
    Borrow records table - the lending ledger.

    A record is created by a successful borrow, gets ``returned_at`` set exactly
    once by a successful return, and is never deleted.
    """

    __tablename__ = "borrow_records"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    book_id = Column(String(36), ForeignKey("books.id"), nullable=False)
    borrowed_at = Column(DateTime, nullable=False, default=datetime.now)
    returned_at = Column(DateTime, nullable=True)

    # Relationships
    user = relationship("User", back_populates="borrow_records")
    book = relationship("Book", back_populates="borrow_records")

    __table_args__ = (
        Index("idx_borrow_user", "user_id"),
        Index("idx_borrow_book", "book_id"),
        Index("idx_borrow_borrowed_at", "borrowed_at"),
        # At most one open record per book, enforced by the store itself
        Index(
            "uq_borrow_records_open_book",
            "book_id",
            unique=True,
            sqlite_where=text("returned_at IS NULL"),
            postgresql_where=text("returned_at IS NULL"),
        ),
    )

    @property
    def is_open(self) -> bool:
        """Check if the book is still out on this record."""
        return self.returned_at is None
