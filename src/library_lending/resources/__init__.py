"""MCP resources for the Library Lending server.

Resources are the read-only views (``library://...`` URIs); anything that
changes lending state is a tool instead.
"""

from .books import book_resources
from .users import user_resources

all_resources = book_resources + user_resources

__all__ = [
    "all_resources",
    "book_resources",
    "user_resources",
]
