"""
MCP tools for the Library Lending server.

Tools are the actions with side effects; the read-only views live in the
resources package.
"""

from .circulation import borrow_book, return_book

all_tools = [
    borrow_book,
    return_book,
]

__all__ = [
    "all_tools",
    "borrow_book",
    "return_book",
]
