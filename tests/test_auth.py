"""Tests for password hashing, bearer tokens and the auth service."""

from datetime import timedelta

import pytest

from library_lending.auth import AuthenticationError, AuthService, LoginRequest
from library_lending.database import DuplicateError, UserCreateSchema
from library_lending.security import (
    TokenError,
    decode_token,
    hash_password,
    issue_token,
    verify_password,
)


class TestPasswordHashing:
    """Test the stored password format."""

    def test_hash_format(self):
        stored = hash_password("correct horse", iterations=1000)
        scheme, iterations, salt, digest = stored.split("$")

        assert scheme == "pbkdf2_sha256"
        assert iterations == "1000"
        assert len(salt) == 32
        assert len(digest) == 64

    def test_hash_uses_configured_iterations(self):
        assert hash_password("pw").split("$")[1] == "1000"

    def test_salts_differ(self):
        assert hash_password("same") != hash_password("same")

    def test_verify(self):
        stored = hash_password("correct horse")

        assert verify_password("correct horse", stored) is True
        assert verify_password("wrong horse", stored) is False

    @pytest.mark.parametrize(
        "stored",
        ["", "plain-text", "md5$1$salt$abc", "pbkdf2_sha256$notanumber$salt$abc"],
    )
    def test_verify_rejects_unknown_formats(self, stored):
        assert verify_password("anything", stored) is False


class TestTokens:
    """Test bearer token issue and validation."""

    def test_round_trip(self):
        token = issue_token("user-123")

        assert decode_token(token) == "user-123"

    def test_user_id_may_contain_dots(self):
        assert decode_token(issue_token("a.b.c")) == "a.b.c"

    def test_tampered_token_rejected(self):
        user_id, expiry, signature = issue_token("user-123").rsplit(".", 2)

        with pytest.raises(TokenError, match="signature"):
            decode_token(f"user-456.{expiry}.{signature}")

    def test_token_signed_with_other_key_rejected(self):
        token = issue_token("user-123", secret_key="another-secret-key")

        with pytest.raises(TokenError):
            decode_token(token)

    def test_expired_token_rejected(self):
        token = issue_token("user-123", ttl=timedelta(seconds=-5))

        with pytest.raises(TokenError, match="expired"):
            decode_token(token)

    @pytest.mark.parametrize("token", ["", "garbage", "a.b", "user.notanumber.sig"])
    def test_malformed_token_rejected(self, token):
        with pytest.raises(TokenError):
            decode_token(token)


class TestAuthService:
    """Test registration, login and token resolution."""

    def test_register_issues_token(self, test_db_session):
        service = AuthService(test_db_session)

        result = service.register(
            UserCreateSchema(email="new@example.com", name="New", password="secret123")
        )

        assert result.user.email == "new@example.com"
        assert decode_token(result.access_token) == result.user.id

    def test_register_duplicate_email(self, test_db_session, user):
        with pytest.raises(DuplicateError):
            AuthService(test_db_session).register(
                UserCreateSchema(email=user.email, name="Again", password="secret123")
            )

    def test_login(self, test_db_session, user):
        result = AuthService(test_db_session).login(
            LoginRequest(email="reader@example.com", password="secret123")
        )

        assert result.user.id == user.id
        assert AuthService(test_db_session).authenticate_token(result.access_token) == user

    def test_login_wrong_password_and_unknown_email_look_the_same(self, test_db_session, user):
        service = AuthService(test_db_session)

        with pytest.raises(AuthenticationError) as wrong_password:
            service.login(LoginRequest(email=user.email, password="not-it"))
        with pytest.raises(AuthenticationError) as unknown_email:
            service.login(LoginRequest(email="ghost@example.com", password="secret123"))

        assert str(wrong_password.value) == str(unknown_email.value) == "Invalid credentials"

    def test_authenticate_bad_token(self, test_db_session):
        with pytest.raises(AuthenticationError):
            AuthService(test_db_session).authenticate_token("garbage")

    def test_authenticate_token_for_deleted_user(self, test_db_session):
        token = issue_token("no-such-user")

        with pytest.raises(AuthenticationError, match="no longer exists"):
            AuthService(test_db_session).authenticate_token(token)
