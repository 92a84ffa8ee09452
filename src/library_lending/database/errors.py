"""Exceptions raised by the data access layer.

The API and MCP layers translate these into status codes and error results:
- NotFoundError: a referenced entity does not exist
- ConflictError: an operation would break a lending rule
- DuplicateError: a unique field is already taken
"""


class RepositoryException(Exception):
    """Base exception for repository operations."""


class NotFoundError(RepositoryException):
    """Raised when an entity is not found."""


class ConflictError(RepositoryException):
    """Raised when an operation conflicts with the current ledger state."""


class DuplicateError(RepositoryException):
    """Raised when attempting to create a duplicate entity."""
