"""Leave ORM model: LeaveRequest."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leavedesk.common.constants import LeaveStatus
from leavedesk.database import Base
from leavedesk.users.models import User, enum_values


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LeaveRequest(Base):
    __tablename__ = "leave_requests"
    __table_args__ = (
        sa.Index("ix_leave_requests_status", "status"),
        sa.Index("ix_leave_requests_dates", "start_date", "end_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(as_uuid=True), sa.ForeignKey("users.id"), nullable=False, index=True,
    )
    start_date: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    # Free text matched against the organization's leave type names
    leave_type: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    status: Mapped[LeaveStatus] = mapped_column(
        sa.Enum(
            LeaveStatus,
            name="leave_status",
            native_enum=False,
            values_callable=enum_values,
            length=10,
        ),
        nullable=False,
        default=LeaveStatus.pending,
    )
    reason: Mapped[Optional[str]] = mapped_column(sa.Text)
    date_of_request: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_utcnow,
    )

    # Populated only while Approved
    approved_date: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    approved_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        sa.Uuid(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"),
    )

    # Populated only while Rejected
    rejected_date: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    rejected_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        sa.Uuid(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"),
    )
    rejected_reason: Mapped[Optional[str]] = mapped_column(sa.Text)

    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow,
    )

    # Relationships
    user: Mapped[User] = relationship(foreign_keys=[user_id])
    approver: Mapped[Optional[User]] = relationship(foreign_keys=[approved_by])
    rejecter: Mapped[Optional[User]] = relationship(foreign_keys=[rejected_by])

    def __repr__(self) -> str:
        return f"<LeaveRequest {self.id} {self.leave_type} {self.status.value}>"
