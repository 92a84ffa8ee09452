"""
User repository implementation for the Library Lending service.

Users are created once and never edited. Creation hashes the password before
it reaches the session, and no read ever returns the hash except the login
lookup used by the auth service.
"""

from pydantic import Field, field_validator
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from ..models.base import LibraryModel
from ..models.user import User as UserModel
from ..security import hash_password
from .errors import ConflictError, DuplicateError
from .repository import BaseRepository
from .schema import BorrowRecord as BorrowDB
from .schema import User as UserDB
from .session import safe_commit, safe_query

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserCreateSchema(LibraryModel):
    """Schema for registering or creating a user."""

    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    name: str = Field(..., min_length=1, max_length=200)
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Emails are matched case-insensitively."""
        return v.strip().lower()


class UserRepository(BaseRepository[UserDB, UserCreateSchema, LibraryModel, UserModel]):
    """Repository for user data access."""

    @property
    def model_class(self):
        return UserDB

    @property
    def response_schema(self):
        return UserModel

    def create(self, data: UserCreateSchema) -> UserModel:
        """
        Create a user with a hashed password.

        Raises:
            DuplicateError: If the email is already registered
        """
        if self._find_by_email(data.email) is not None:
            raise DuplicateError(f"A user with email {data.email} already exists")

        db_user = UserDB(
            email=data.email,
            name=data.name,
            password_hash=hash_password(data.password),
        )
        self.session.add(db_user)
        try:
            safe_commit(self.session, "create user")
        except IntegrityError as e:
            raise DuplicateError(f"A user with email {data.email} already exists") from e
        self.session.refresh(db_user)
        return self._to_response_model(db_user)

    def get_login_record(self, email: str) -> tuple[UserModel, str] | None:
        """Return the user and stored password hash for an email, or None."""
        db_user = self._find_by_email(email)
        if db_user is None:
            return None
        return self._to_response_model(db_user), db_user.password_hash

    def _find_by_email(self, email: str) -> UserDB | None:
        query = select(UserDB).where(UserDB.email == email.strip().lower())
        return safe_query(
            self.session,
            lambda s: s.execute(query).scalar_one_or_none(),
            "Failed to look up user by email",
        )

    def _check_can_delete(self, db_obj: UserDB) -> None:
        query = select(func.count()).select_from(BorrowDB).where(BorrowDB.user_id == db_obj.id)
        record_count = (
            safe_query(
                self.session, lambda s: s.execute(query).scalar(), "Failed to count borrow records"
            )
            or 0
        )
        if record_count:
            raise ConflictError(f"User {db_obj.id} has borrow records and cannot be deleted")
