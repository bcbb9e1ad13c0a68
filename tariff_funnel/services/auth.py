"""Password hashing and access tokens."""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import bcrypt
import jwt

from tariff_funnel.config import get_settings
from tariff_funnel.errors import InvalidCredentialsError


def hash_password(password: str) -> str:
    settings = get_settings()
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, hashed: str | None) -> bool:
    """Accounts created without a password never match."""
    if not hashed:
        return False
    return bcrypt.checkpw(password.encode(), hashed.encode())


def create_access_token(customer_id: UUID, email: str, expires_delta: timedelta | None = None) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    payload = {
        "sub": str(customer_id),
        "email": email,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> UUID:
    """Return the customer id carried by a valid token."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
        return UUID(payload["sub"])
    except jwt.ExpiredSignatureError:
        raise InvalidCredentialsError("Token abgelaufen", code="TOKEN_EXPIRED")
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise InvalidCredentialsError("Ungültiges Token", code="TOKEN_INVALID")
