"""Password hashing and member tokens.

Tokens are signed JWTs carrying the member's id as `sub` and a `type` claim,
so an access token is never accepted where a refresh token is expected and
the other way round.
"""

import enum
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from arena.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenType(enum.StrEnum):
    ACCESS = "access"
    REFRESH = "refresh"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """False for accounts that have no password set."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def _issue(user_id: int | str, token_type: TokenType, lifetime: timedelta) -> str:
    now = datetime.now(UTC)
    payload = {"sub": str(user_id), "type": token_type.value, "iat": now, "exp": now + lifetime}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: int | str) -> str:
    return _issue(user_id, TokenType.ACCESS, timedelta(minutes=settings.access_token_expire_minutes))


def create_refresh_token(user_id: int | str) -> str:
    return _issue(user_id, TokenType.REFRESH, timedelta(days=settings.refresh_token_expire_days))


def user_id_from_token(token: str, expected: TokenType) -> int:
    """Validate a token of the expected type and return the member id it was issued for.

    Raises JWTError on a bad signature, expiry, the wrong token type or a
    subject that is not a member id.
    """
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    if payload.get("type") != expected.value:
        raise JWTError(f"Token type must be {expected.value}")
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise JWTError("Token subject is not a member id") from None
