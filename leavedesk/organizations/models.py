"""Organization ORM model with embedded leave type definitions."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.orm import Mapped, mapped_column

from leavedesk.database import Base


def _new_organization_id() -> str:
    return uuid.uuid4().hex


class Organization(Base):
    """An organization and its ordered leave type allowances.

    ``leave_types`` holds value objects of the shape
    ``{"leave_type_id", "leave_type_name", "number_of_days_allowed"}``;
    they are only ever addressed through their parent organization.
    """

    __tablename__ = "organizations"

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    organization_id: Mapped[str] = mapped_column(
        sa.String(100), unique=True, nullable=False, default=_new_organization_id,
    )
    leave_types: Mapped[list[dict]] = mapped_column(
        MutableList.as_mutable(sa.JSON().with_variant(JSONB(), "postgresql")),
        nullable=False,
        default=list,
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )

    def leave_type_names(self) -> list[str]:
        return [lt["leave_type_name"] for lt in self.leave_types or []]

    def __repr__(self) -> str:
        return f"<Organization {self.organization_id!r}>"
