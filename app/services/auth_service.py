"""Authentication service: access tokens and user records."""

from __future__ import annotations

import hmac
from datetime import datetime, timedelta, timezone

import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models import User

ALGORITHM = "HS256"
ADMIN_SUBJECT = "admin"


def create_access_token(
    user_id: str,
    username: str,
    role: str = "user",
    secret: str | None = None,
    expire_hours: int | None = None,
) -> str:
    """Create a JWT access token carrying the role claim."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "username": username,
        "role": role,
        "type": "access",
        "exp": now + timedelta(hours=expire_hours or settings.access_token_hours),
        "iat": now,
    }
    return jwt.encode(payload, secret or settings.secret_key, algorithm=ALGORITHM)


def decode_token(token: str, secret: str | None = None) -> dict:
    """Decode and validate a JWT token. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, secret or settings.secret_key, algorithms=[ALGORITHM])


def check_admin_secret(password: str) -> bool:
    """Constant-time comparison against the configured admin secret."""
    if not settings.admin_secret:
        return False
    return hmac.compare_digest(password.encode(), settings.admin_secret.encode())


async def get_or_create_user(db: AsyncSession, user_id: str, username: str, role: str) -> User:
    """Fetch the user for a token subject, creating or re-syncing the row."""
    user = await db.get(User, user_id)
    if user is None:
        user = User(id=user_id, username=username or user_id, role=role)
        db.add(user)
        await db.commit()
        await db.refresh(user)
    elif user.role != role:
        user.role = role
        await db.commit()
    return user
