"""Leave Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Request  → request bodies (write)
  - *Out / *Row         → response bodies (read)
  - *Brief              → compact embedded representations
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from leavedesk.common.constants import LeaveStatus, UserRole


def _as_utc(value: datetime) -> datetime:
    """Naive timestamps are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ═════════════════════════════════════════════════════════════════════
# Embedded / shared
# ═════════════════════════════════════════════════════════════════════


class UserBrief(BaseModel):
    """Identity of an approving / rejecting user embedded in reports."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    role: UserRole
    photo_url: Optional[str] = None
    organization: str


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Create / Update
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestCreate(BaseModel):
    """Payload for submitting a leave request."""

    user_id: Optional[uuid.UUID] = Field(
        None, description="Requester; defaults to the authenticated user",
    )
    start_date: datetime = Field(..., description="Leave start")
    end_date: datetime = Field(..., description="Leave end")
    leave_type: str = Field(..., min_length=1, max_length=100)
    reason: Optional[str] = Field(None, max_length=1000)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalise_timezone(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @model_validator(mode="after")
    def validate_dates(self) -> "LeaveRequestCreate":
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date.")
        return self


class LeaveStatusUpdate(BaseModel):
    """Direct status overwrite."""

    status: LeaveStatus


class LeaveApproveRequest(BaseModel):
    """Payload for approving a leave request."""

    approved_by: Optional[uuid.UUID] = Field(
        None, description="Approver; defaults to the authenticated user",
    )


class LeaveRejectRequest(BaseModel):
    """Payload for rejecting a leave request."""

    rejected_by: Optional[uuid.UUID] = Field(
        None, description="Rejecter; defaults to the authenticated user",
    )
    rejected_reason: Optional[str] = Field(None, max_length=1000)


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Response
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestOut(BaseModel):
    """Full leave request response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    start_date: datetime
    end_date: datetime
    leave_type: str
    status: LeaveStatus
    reason: Optional[str] = None
    date_of_request: datetime
    approved_date: Optional[datetime] = None
    approved_by: Optional[uuid.UUID] = None
    rejected_date: Optional[datetime] = None
    rejected_by: Optional[uuid.UUID] = None
    rejected_reason: Optional[str] = None


class UserLeaveOut(BaseModel):
    """A user's own leave request with its elapsed day count instead of dates."""

    id: uuid.UUID
    leave_type: str
    status: LeaveStatus
    reason: Optional[str] = None
    date_of_request: datetime
    approved_date: Optional[datetime] = None
    approved_by: Optional[uuid.UUID] = None
    rejected_date: Optional[datetime] = None
    rejected_by: Optional[uuid.UUID] = None
    rejected_reason: Optional[str] = None
    no_of_days: int


# ═════════════════════════════════════════════════════════════════════
# Balance
# ═════════════════════════════════════════════════════════════════════


class RemainingBalanceOut(BaseModel):
    leave_type_name: str
    remaining_days: int


# ═════════════════════════════════════════════════════════════════════
# Reports
# ═════════════════════════════════════════════════════════════════════


class PendingLeaveRow(BaseModel):
    """Pending request of a direct report, with a rounded day count."""

    id: uuid.UUID
    leave_start_date: str
    leave_type: str
    reason: Optional[str] = None
    date_of_request: str
    user_id: uuid.UUID
    user_name: str
    user_role: UserRole
    user_photo_url: Optional[str] = None
    organization: str
    no_of_days: int


class EvaluatedLeaveRow(BaseModel):
    """Approved or rejected request; only the block matching ``status`` is set."""

    id: uuid.UUID
    leave_start_date: str
    leave_type: str
    reason: Optional[str] = None
    date_of_request: str
    status: LeaveStatus
    user_id: uuid.UUID
    user_name: str
    user_role: UserRole
    user_photo_url: Optional[str] = None
    organization: str
    no_of_days: float

    approved_date: Optional[str] = None
    approved_by: Optional[UserBrief] = None

    rejected_date: Optional[str] = None
    rejected_by: Optional[UserBrief] = None
    rejected_reason: Optional[str] = None


class DateRangeLeaveRow(BaseModel):
    """Request overlapping a queried interval, with requester identity."""

    id: uuid.UUID
    user_id: uuid.UUID
    start_date: datetime
    end_date: datetime
    leave_type: str
    status: LeaveStatus
    reason: Optional[str] = None
    date_of_request: datetime
    approved_date: Optional[datetime] = None
    rejected_date: Optional[datetime] = None
    user_name: str
    user_email: str
    user_role: UserRole
    user_photo_url: Optional[str] = None
    user_organization: str
