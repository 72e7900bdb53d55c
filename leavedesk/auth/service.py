"""Auth service — credential hashing, JWT issue/decode, login."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.exceptions import ValidationException
from leavedesk.config import settings
from leavedesk.users.models import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ── Credential hashing ──────────────────────────────────────────────

def hash_credential(raw: str) -> str:
    return pwd_context.hash(raw)


def verify_credential(raw: str, hashed: str) -> bool:
    return pwd_context.verify(raw, hashed)


# ── JWT helpers ─────────────────────────────────────────────────────

def create_access_token(user: User) -> tuple[str, int]:
    """Return (encoded_jwt, expires_in_seconds)."""
    expires_in = settings.JWT_EXPIRY_HOURS * 3600
    payload = {
        "sub": str(user.id),
        "role": user.role.value,
        "type": "access",
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS),
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, expires_in


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify a token; raises jose errors on failure."""
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


# ── Login ───────────────────────────────────────────────────────────

async def authenticate(db: AsyncSession, email: str, uid: str) -> User:
    """Verify the (email, uid) pair and stamp ``last_login``.

    Users registered by a SuperUser have no stored credential; their first
    successful login stores the hashed uid, later logins must match it.
    """
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalars().first()
    if user is None:
        raise ValidationException({"credentials": ["Invalid credentials."]})

    if user.password_hash is None:
        user.password_hash = hash_credential(uid)
        logger.info("Stored first-login credential for user %s", user.id)
    elif not verify_credential(uid, user.password_hash):
        raise ValidationException({"credentials": ["Invalid credentials."]})

    user.last_login = datetime.now(timezone.utc)
    await db.flush()
    return user


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalars().first()
