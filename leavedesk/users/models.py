"""User ORM model."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leavedesk.common.constants import GenderType, UserRole
from leavedesk.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def enum_values(enum_cls) -> list[str]:
    """Persist enum *values* (e.g. "SuperUser") rather than member names."""
    return [member.value for member in enum_cls]


class User(Base):
    """Application user. ``role`` gates authorization only."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    email: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    # Empty until the first successful login stores the hashed credential
    password_hash: Mapped[Optional[str]] = mapped_column(sa.String(255))
    role: Mapped[UserRole] = mapped_column(
        sa.Enum(
            UserRole,
            name="user_role",
            native_enum=False,
            values_callable=enum_values,
            length=20,
        ),
        nullable=False,
        default=UserRole.normal,
    )
    photo_url: Mapped[Optional[str]] = mapped_column(sa.Text)
    # Weak reference: supervisor chains are not checked for cycles
    supervisor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        sa.Uuid(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="SET NULL"),
        index=True,
    )
    organization: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    gender: Mapped[GenderType] = mapped_column(
        sa.Enum(
            GenderType,
            name="gender_type",
            native_enum=False,
            values_callable=enum_values,
            length=10,
        ),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow,
    )
    last_login: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True), default=_utcnow,
    )

    # ── Relationships ───────────────────────────────────────────────
    supervisor: Mapped[Optional[User]] = relationship(
        remote_side=[id], foreign_keys=[supervisor_id],
    )

    def __repr__(self) -> str:
        return f"<User {self.email!r} ({self.role.value})>"
