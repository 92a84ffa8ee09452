"""
User model for the Library Lending service.

The public user representation deliberately has no password field: the stored
hash stays inside the database layer and the auth service.
"""

from datetime import datetime

from pydantic import Field

from .base import LibraryModel


class User(LibraryModel):
    """A registered library member."""

    id: str = Field(..., description="Unique identifier for the user")

    email: str = Field(
        ...,
        description="Login email, unique across users",
        examples=["ada@example.com"],
    )

    name: str = Field(
        ...,
        description="Display name",
        min_length=1,
        max_length=200,
        examples=["Ada Lovelace"],
    )

    created_at: datetime = Field(
        default_factory=datetime.now,
        description="Timestamp when the user was registered",
    )
