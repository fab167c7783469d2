"""Bearer tokens that identify office staff and requesters by email."""

from datetime import datetime, timedelta, timezone

import jwt

from backend.core import config
from backend.models.user import User

REQUIRED_CLAIMS = ["sub", "exp", "iat"]


def create_access_token(email: str, expires_minutes: int | None = None, **claims) -> str:
    issued_at = datetime.now(timezone.utc)
    lifetime = timedelta(minutes=expires_minutes or config.JWT_EXPIRES_MINUTES)
    claims.update({"sub": email.strip().lower(), "iat": issued_at, "exp": issued_at + lifetime})
    return jwt.encode(claims, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def create_user_token(user: User, expires_minutes: int | None = None) -> str:
    # The role claim is informational; authorization always reads the stored role.
    return create_access_token(user.email, expires_minutes, role=(user.role or "user").lower())


def decode_access_token(token: str) -> dict:
    return jwt.decode(
        token,
        config.JWT_SECRET_KEY,
        algorithms=[config.JWT_ALGORITHM],
        options={"require": REQUIRED_CLAIMS},
    )
