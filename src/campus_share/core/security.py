"""Password hashing and bearer token primitives."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from campus_share.core.errors import InvalidTokenError, TokenExpiredError
from campus_share.core.settings import settings

BCRYPT_ROUNDS = 10


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash of ``password``."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(user_id: int | str, extra_claims: dict[str, Any] | None = None) -> str:
    """Create JWT access token for user authentication."""
    to_encode: dict[str, Any] = {"sub": str(user_id)}
    if extra_claims:
        to_encode.update(extra_claims)
    now = datetime.now(UTC)
    to_encode["iat"] = now
    to_encode["exp"] = now + timedelta(minutes=settings.access_token_expire_minutes)
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str) -> int:
    """Verify a bearer token and return the user id it was issued for.

    Raises:
        TokenExpiredError: If the token's ``exp`` claim is in the past.
        InvalidTokenError: If the token is malformed, badly signed or has no
            usable subject.
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except ExpiredSignatureError as err:
        raise TokenExpiredError() from err
    except JWTError as err:
        raise InvalidTokenError() from err

    subject = payload.get("sub")
    if subject is None:
        raise InvalidTokenError()
    try:
        return int(subject)
    except (TypeError, ValueError) as err:
        raise InvalidTokenError() from err
