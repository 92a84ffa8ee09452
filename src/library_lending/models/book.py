"""
Book model for the Library Lending service.

``Book`` is the plain catalog entry. ``BookWithAuthor`` embeds the author and
is what borrow records carry. The catalog listing adds the borrow state on top
(see ``models.circulation.BookWithStatus``).
"""

from datetime import datetime

from pydantic import Field

from .author import Author
from .base import LibraryModel


class Book(LibraryModel):
    """A catalog entry. Each book has exactly one author."""

    id: str = Field(..., description="Unique identifier for the book")

    title: str = Field(
        ...,
        description="The title of the book",
        min_length=1,
        max_length=500,
        examples=["The Dispossessed", "Things Fall Apart"],
    )

    description: str | None = Field(
        None,
        description="Free-form description or blurb",
    )

    published_year: int | None = Field(
        None,
        description="Year the book was first published",
        ge=0,
        examples=[1974, 1958],
    )

    author_id: str = Field(..., description="Identifier of the book's author")

    created_at: datetime = Field(
        default_factory=datetime.now,
        description="Timestamp when the book was added to the catalog",
    )

    updated_at: datetime = Field(
        default_factory=datetime.now,
        description="Timestamp when the book was last updated",
    )


class BookWithAuthor(Book):
    """Book with its author embedded."""

    author: Author
