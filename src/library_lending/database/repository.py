"""
Repository pattern implementation for the Library Lending service.

Repositories are the only code that talks to SQLAlchemy. Each one is built
around an explicit ``Session`` handed in by the caller, and returns Pydantic
models so the REST API and the MCP server never see ORM objects.

The base repository provides the plain CRUD every catalog entity needs;
specialized repositories add their own queries and rules.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import asc, desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .errors import (
    ConflictError,
    DuplicateError,
    NotFoundError,
    RepositoryException,
)
from .schema import Base
from .session import safe_commit, safe_query

# Type variables for generic repository
ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)
ResponseSchemaType = TypeVar("ResponseSchemaType", bound=BaseModel)

__all__ = [
    "BaseRepository",
    "ConflictError",
    "DuplicateError",
    "NotFoundError",
    "RepositoryException",
]


class BaseRepository(
    ABC, Generic[ModelType, CreateSchemaType, UpdateSchemaType, ResponseSchemaType]
):
    """
    Abstract base repository providing common CRUD operations.

    All reads go through safe_query and all writes through safe_commit so
    database failures surface as RepositoryException.
    """

    def __init__(self, session: Session):
        """Initialize repository with database session."""
        self.session = session

    @property
    @abstractmethod
    def model_class(self) -> type[ModelType]:
        """Return the SQLAlchemy model class."""

    @property
    @abstractmethod
    def response_schema(self) -> type[ResponseSchemaType]:
        """Return the Pydantic response schema."""

    @property
    def entity_name(self) -> str:
        """Human readable entity name used in error messages."""
        return self.model_class.__name__

    def _to_response_model(self, db_obj: ModelType) -> ResponseSchemaType:
        """Convert database model to Pydantic response model."""
        return self.response_schema.model_validate(db_obj, from_attributes=True)

    def _get_db_object(self, id: UUID | str) -> ModelType | None:
        """Load the ORM object for an id, or None."""
        query = select(self.model_class).where(self.model_class.id == str(id))
        return safe_query(
            self.session,
            lambda s: s.execute(query).scalar_one_or_none(),
            f"Failed to get {self.entity_name} by ID",
        )

    def _require_db_object(self, id: UUID | str) -> ModelType:
        """Load the ORM object for an id or raise NotFoundError."""
        db_obj = self._get_db_object(id)
        if db_obj is None:
            raise NotFoundError(f"{self.entity_name} {id} not found")
        return db_obj

    def get_by_id(self, id: UUID | str) -> ResponseSchemaType | None:
        """
        Get entity by ID.

        Returns:
            Pydantic model or None if not found
        """
        db_obj = self._get_db_object(id)
        if db_obj is None:
            return None
        return self._to_response_model(db_obj)

    def get_all(
        self,
        order_by: str | None = "created_at",
        order_desc: bool = True,
    ) -> list[ResponseSchemaType]:
        """
        Get all entities, newest first by default.

        Args:
            order_by: Field name to order by
            order_desc: Whether to order descending
        """
        query = select(self.model_class)

        if order_by and hasattr(self.model_class, order_by):
            order_field = getattr(self.model_class, order_by)
            query = query.order_by(desc(order_field) if order_desc else asc(order_field))

        results = safe_query(
            self.session,
            lambda s: s.execute(query).scalars().all(),
            f"Failed to list {self.entity_name}",
        )
        return [self._to_response_model(item) for item in results]

    def create(self, data: CreateSchemaType) -> ResponseSchemaType:
        """
        Create new entity.

        Raises:
            DuplicateError: If a unique field is already taken
            RepositoryException: On other database errors
        """
        db_obj = self.model_class(**data.model_dump())
        self.session.add(db_obj)
        try:
            safe_commit(self.session, f"create {self.entity_name}")
        except IntegrityError as e:
            raise DuplicateError(f"{self.entity_name} already exists: {e.orig!s}") from e
        self.session.refresh(db_obj)
        return self._to_response_model(db_obj)

    def update(self, id: UUID | str, data: UpdateSchemaType) -> ResponseSchemaType | None:
        """
        Update existing entity with the fields that were explicitly set.

        Returns:
            Updated entity or None if not found
        """
        db_obj = self._get_db_object(id)
        if db_obj is None:
            return None

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(db_obj, field, value)

        try:
            safe_commit(self.session, f"update {self.entity_name}")
        except IntegrityError as e:
            raise ConflictError(f"Update of {self.entity_name} {id} rejected: {e.orig!s}") from e
        self.session.refresh(db_obj)
        return self._to_response_model(db_obj)

    def delete(self, id: UUID | str) -> bool:
        """
        Delete entity by ID.

        Returns:
            True if deleted, False if not found
        """
        db_obj = self._get_db_object(id)
        if db_obj is None:
            return False

        self._check_can_delete(db_obj)

        self.session.delete(db_obj)
        try:
            safe_commit(self.session, f"delete {self.entity_name}")
        except IntegrityError as e:
            raise ConflictError(
                f"{self.entity_name} {id} is still referenced and cannot be deleted"
            ) from e
        return True

    def _check_can_delete(self, db_obj: ModelType) -> None:
        """Hook for subclasses to refuse a delete with ConflictError."""

    def exists(self, id: UUID | str) -> bool:
        """Check if entity exists by ID."""
        query = (
            select(func.count()).select_from(self.model_class).where(self.model_class.id == str(id))
        )
        count = safe_query(
            self.session, lambda s: s.execute(query).scalar(), "Failed to check existence"
        )
        return bool(count)
