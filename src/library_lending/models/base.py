"""Shared configuration for the service's Pydantic models.

Field names are snake_case in Python and camelCase on the wire, which is
what the dashboard client sends and expects (``publishedYear``,
``borrowedAt``, ``accessToken``). Either spelling is accepted on input.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class LibraryModel(BaseModel):
    """Base model with camelCase aliases and ORM attribute loading."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
