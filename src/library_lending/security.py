"""
Credential primitives for the Library Lending service.

Passwords are stored as salted, iterated PBKDF2-HMAC-SHA256 hashes in the
form ``pbkdf2_sha256$<iterations>$<salt>$<hash>``. Bearer tokens are
``<user_id>.<expiry>.<signature>`` where the signature is an HMAC-SHA256 of
``<user_id>.<expiry>`` under the configured secret key.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import UTC, datetime, timedelta

from .config import get_config

logger = logging.getLogger(__name__)

PASSWORD_SCHEME = "pbkdf2_sha256"


class TokenError(Exception):
    """Raised when a bearer token is malformed, tampered with or expired."""


def hash_password(password: str, iterations: int | None = None) -> str:
    """Hash a password with a fresh random salt."""
    iterations = iterations or get_config().password_hash_iterations
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return f"{PASSWORD_SCHEME}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, stored_hash: str) -> bool:
    """Check a password against a stored hash in constant time."""
    try:
        scheme, iterations, salt, expected = stored_hash.split("$")
        rounds = int(iterations)
    except ValueError:
        logger.warning("Stored password hash has an unrecognized format")
        return False

    if scheme != PASSWORD_SCHEME:
        logger.warning("Unsupported password hash scheme: %s", scheme)
        return False

    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), rounds)
    return hmac.compare_digest(digest.hex(), expected)


def _sign(payload: str, secret_key: str) -> str:
    return hmac.new(secret_key.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def issue_token(user_id: str, ttl: timedelta | None = None, secret_key: str | None = None) -> str:
    """Issue a signed bearer token for a user."""
    config = get_config()
    ttl = ttl or timedelta(minutes=config.token_ttl_minutes)
    secret_key = secret_key or config.secret_key

    expiry = int((datetime.now(UTC) + ttl).timestamp())
    payload = f"{user_id}.{expiry}"
    return f"{payload}.{_sign(payload, secret_key)}"


def decode_token(token: str, secret_key: str | None = None) -> str:
    """
    Validate a bearer token and return the user id it was issued for.

    Raises:
        TokenError: If the token is malformed, the signature does not match,
            or the token has expired
    """
    secret_key = secret_key or get_config().secret_key

    try:
        user_id, expiry, signature = token.rsplit(".", 2)
        expires_at = int(expiry)
    except ValueError as e:
        raise TokenError("Malformed token") from e

    if not user_id or not hmac.compare_digest(_sign(f"{user_id}.{expiry}", secret_key), signature):
        raise TokenError("Invalid token signature")

    if expires_at < int(datetime.now(UTC).timestamp()):
        raise TokenError("Token has expired")

    return user_id
