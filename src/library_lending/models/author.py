"""
Author model for the Library Lending service.

Authors are exposed through the REST API under ``/authors`` and embedded in
every book returned by the catalog and borrowing views.
"""

from datetime import datetime

from pydantic import Field

from .base import LibraryModel


class Author(LibraryModel):
    """Represents an author in the library catalog."""

    id: str = Field(..., description="Unique identifier for the author")

    name: str = Field(
        ...,
        description="Full name of the author",
        min_length=1,
        max_length=200,
        examples=["Ursula K. Le Guin", "Chinua Achebe"],
    )

    bio: str | None = Field(
        None,
        description="Short biography of the author",
        max_length=5000,
    )

    created_at: datetime = Field(
        default_factory=datetime.now,
        description="Timestamp when the author was added",
    )

    updated_at: datetime = Field(
        default_factory=datetime.now,
        description="Timestamp when the author was last updated",
    )
