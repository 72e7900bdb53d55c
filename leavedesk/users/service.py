"""User service layer — atomic registration and user administration."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.constants import UserRole
from leavedesk.common.exceptions import (
    ConflictError,
    NotFoundException,
    TransientStoreError,
    ValidationException,
)
from leavedesk.users.models import User
from leavedesk.users.schemas import UserRegister, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    """Async user operations: registration, lookup, role/supervisor changes."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
        """Return a user by id, or raise 404."""
        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalars().first()
        if user is None:
            raise NotFoundException("User", str(user_id))
        return user

    @staticmethod
    async def _save(db: AsyncSession, user: User, operation: str) -> User:
        user.updated_at = datetime.now(timezone.utc)
        try:
            await db.flush()
        except IntegrityError as exc:
            if "email" in str(exc.orig).lower():
                raise ConflictError("email", user.email) from exc
            raise TransientStoreError(operation) from exc
        except SQLAlchemyError as exc:
            logger.exception("Failed to %s user %s", operation, user.id)
            raise TransientStoreError(operation) from exc
        return user

    @staticmethod
    async def _email_taken(db: AsyncSession, email: str) -> bool:
        result = await db.execute(
            select(func.count()).select_from(User).where(User.email == email)
        )
        return result.scalar_one() > 0

    # ─────────────────────────────────────────────────────────────────
    # Registration
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def register_user(db: AsyncSession, data: UserRegister) -> User:
        """Create a user unless the email is already taken.

        The existence check and the insert run inside one savepoint; the
        unique index on ``users.email`` turns a concurrent duplicate insert
        into an ``IntegrityError``, which rolls the savepoint back so no
        partial record survives either way.
        """
        try:
            async with db.begin_nested():
                if await UserService._email_taken(db, data.email):
                    raise ConflictError("email", data.email)

                if data.supervisor is not None:
                    await UserService.get_user(db, data.supervisor)

                now = datetime.now(timezone.utc)
                user = User(
                    name=data.name,
                    email=data.email,
                    role=data.role,
                    photo_url=data.photo_url,
                    supervisor_id=data.supervisor,
                    organization=data.organization,
                    gender=data.gender,
                    created_at=now,
                    updated_at=now,
                )
                db.add(user)
                await db.flush()
        except IntegrityError as exc:
            logger.warning("Concurrent registration for %s lost the race", data.email)
            raise ConflictError("email", data.email) from exc
        except SQLAlchemyError as exc:
            logger.exception("Registration of %s failed", data.email)
            raise TransientStoreError("register user") from exc

        logger.info("Registered user %s with role %s", user.id, user.role.value)
        return user

    # ─────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_users(db: AsyncSession) -> Sequence[User]:
        result = await db.execute(select(User).order_by(User.created_at, User.id))
        return result.scalars().all()

    @staticmethod
    async def search_by_name(db: AsyncSession, fragment: str) -> Sequence[User]:
        """Case-insensitive substring match on the user's name."""
        result = await db.execute(
            select(User)
            .where(User.name.icontains(fragment, autoescape=True))
            .order_by(User.name)
        )
        return result.scalars().all()

    # ─────────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def update_role(db: AsyncSession, user_id: uuid.UUID, role: UserRole) -> User:
        user = await UserService.get_user(db, user_id)
        user.role = role
        logger.info("User %s role set to %s", user_id, role.value)
        return await UserService._save(db, user, "update role")

    @staticmethod
    async def assign_supervisor(
        db: AsyncSession,
        user_id: uuid.UUID,
        supervisor_id: uuid.UUID,
    ) -> User:
        """Point a user at a supervisor. No cycle check is made."""
        user = await UserService.get_user(db, user_id)
        await UserService.get_user(db, supervisor_id)
        user.supervisor_id = supervisor_id
        return await UserService._save(db, user, "assign supervisor")

    @staticmethod
    async def update_organization(
        db: AsyncSession,
        user_id: uuid.UUID,
        organization: str,
    ) -> User:
        user = await UserService.get_user(db, user_id)
        user.organization = organization
        return await UserService._save(db, user, "update organization")

    @staticmethod
    async def update_user(db: AsyncSession, user_id: uuid.UUID, data: UserUpdate) -> User:
        user = await UserService.get_user(db, user_id)
        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(user, field, value)
        return await UserService._save(db, user, "update user")

    @staticmethod
    async def delete_user(db: AsyncSession, user_id: uuid.UUID) -> None:
        user = await UserService.get_user(db, user_id)
        await db.delete(user)
        try:
            await db.flush()
        except IntegrityError as exc:
            raise ValidationException(
                {"user_id": ["User still owns leave requests and cannot be deleted."]}
            ) from exc
        except SQLAlchemyError as exc:
            logger.exception("Failed to delete user %s", user_id)
            raise TransientStoreError("delete user") from exc
        logger.info("Deleted user %s", user_id)
