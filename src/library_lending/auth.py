"""
Authentication for the Library Lending service.

The auth service turns an email and password into a bearer token, and a
bearer token back into the user it was issued for. Everything behind it (the
borrow core and the catalog repositories) trusts the identity it resolves.
"""

import logging

from pydantic import Field
from sqlalchemy.orm import Session

from .database.user_repository import UserCreateSchema, UserRepository
from .models.base import LibraryModel
from .models.user import User
from .security import TokenError, decode_token, issue_token, verify_password

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Raised when credentials or a bearer token cannot be accepted."""


class LoginRequest(LibraryModel):
    """Credentials submitted to log in."""

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class AuthResult(LibraryModel):
    """A user together with a freshly issued bearer token."""

    user: User
    access_token: str


class AuthService:
    """Registration, login and token resolution over the users table."""

    def __init__(self, session: Session):
        self.users = UserRepository(session)

    def register(self, data: UserCreateSchema) -> AuthResult:
        """
        Create a user and log them in.

        Raises:
            DuplicateError: If the email is already registered
        """
        user = self.users.create(data)
        logger.info("Registered user %s", user.id)
        return AuthResult(user=user, access_token=issue_token(user.id))

    def login(self, credentials: LoginRequest) -> AuthResult:
        """
        Exchange credentials for a bearer token.

        Unknown emails and wrong passwords produce the same error so callers
        cannot discover which emails are registered.

        Raises:
            AuthenticationError: If the credentials are not valid
        """
        found = self.users.get_login_record(credentials.email)
        if found is None:
            logger.info("Login rejected: unknown email")
            raise AuthenticationError("Invalid credentials")

        user, password_hash = found
        if not verify_password(credentials.password, password_hash):
            logger.info("Login rejected for user %s: wrong password", user.id)
            raise AuthenticationError("Invalid credentials")

        return AuthResult(user=user, access_token=issue_token(user.id))

    def authenticate_token(self, token: str) -> User:
        """
        Resolve a bearer token to its user.

        Raises:
            AuthenticationError: If the token is invalid, expired, or its user
                no longer exists
        """
        try:
            user_id = decode_token(token)
        except TokenError as e:
            raise AuthenticationError(str(e)) from e

        user = self.users.get_by_id(user_id)
        if user is None:
            raise AuthenticationError("Token user no longer exists")
        return user
