"""
Library Lending Service Package.

This package implements a small library lending service: a catalog of
authors and books, registered users, and a borrow/return ledger that never
lets one book be out on two loans at once.

Key Components:
- models: Pydantic models for data validation and serialization
- database: SQLAlchemy schema, session management and repositories
- config: Configuration management with Pydantic v2
- auth/security: Password hashing and bearer tokens
- api: FastAPI REST surface
- resources/tools: MCP surface over the same repositories
"""

__version__ = "0.1.0"

from . import database

__all__ = [
    "__version__",
    "database",
]
