"""
Security utilities: JWT access tokens.

After login, the user receives a signed JWT whose "userId" claim carries
their user id. The token is signed with SECRET_KEY using HS256 and expires
after ACCESS_TOKEN_EXPIRE_MINUTES. The server keeps no session state.

For local demos ALLOW_DUMMY_TOKENS lets "dummy-token-<userId>" stand in for
a JWT (see resolve_user_id). It is off by default.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.config import settings

DUMMY_TOKEN_PREFIX = "dummy-token-"


def create_access_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    """
    Create a signed JWT access token for a user.

    Args:
        user_id: The "usr-..." id to embed as the "userId" claim.
        expires_delta: Optional custom lifetime. Defaults to
                       ACCESS_TOKEN_EXPIRE_MINUTES from settings.

    Returns:
        An encoded JWT string.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "userId": user_id,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a JWT access token.

    Raises:
        JWTError: If the token is expired, tampered with, or invalid.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def resolve_user_id(token: str) -> str | None:
    """Return the user id a bearer token speaks for, or None if it is invalid."""
    if settings.ALLOW_DUMMY_TOKENS and token.startswith(DUMMY_TOKEN_PREFIX):
        return token[len(DUMMY_TOKEN_PREFIX):] or None

    try:
        payload = decode_access_token(token)
    except JWTError:
        return None

    user_id = payload.get("userId")
    if not isinstance(user_id, str):
        return None
    return user_id
