"""Leave router — submit, evaluate, balances and supervisor reports.

All endpoints require authentication. Evaluation and report endpoints are
limited to Supervisors and SuperUsers.
"""


import uuid
from datetime import date, datetime, timezone
from typing import Optional, Union

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import get_current_user, require_role
from leavedesk.common.constants import REVIEWER_ROLES
from leavedesk.database import get_db
from leavedesk.leave.balance import remaining_balance
from leavedesk.leave.reports import LeaveReportService
from leavedesk.leave.schemas import (
    DateRangeLeaveRow,
    EvaluatedLeaveRow,
    LeaveApproveRequest,
    LeaveRejectRequest,
    LeaveRequestCreate,
    LeaveRequestOut,
    LeaveStatusUpdate,
    PendingLeaveRow,
    RemainingBalanceOut,
    UserLeaveOut,
)
from leavedesk.leave.service import LeaveService
from leavedesk.users.models import User

router = APIRouter(prefix="", tags=["leave"])

_reviewer = require_role(*REVIEWER_ROLES)


def _as_day(value: Union[datetime, date]) -> date:
    """Calendar day of a query bound; timestamps are read in UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=LeaveRequestOut, status_code=201)
async def create_leave(
    body: LeaveRequestCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Submit a leave request. It starts out Pending."""
    return await LeaveService.create_leave(db, user.id, body)


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=list[LeaveRequestOut])
async def list_leaves(
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.list_leaves(db)


# ── GET /user/{user_id} ─────────────────────────────────────────────

@router.get("/user/{user_id}", response_model=list[UserLeaveOut])
async def leaves_for_user(
    user_id: uuid.UUID,
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.leaves_for_user(db, user_id)


# ── GET /remaining/{user_id} ────────────────────────────────────────

@router.get("/remaining/{user_id}", response_model=list[RemainingBalanceOut])
async def get_remaining_balance(
    user_id: uuid.UUID,
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Remaining days per leave type of the user's organization."""
    return await remaining_balance(db, user_id)


# ── GET /pending/supervisor/{supervisor_id} ─────────────────────────

@router.get("/pending/supervisor/{supervisor_id}", response_model=list[PendingLeaveRow])
async def pending_for_supervisor(
    supervisor_id: uuid.UUID,
    _: User = Depends(_reviewer),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveReportService.pending_for_supervisor(db, supervisor_id)


# ── GET /history/supervisor/{supervisor_id} ─────────────────────────

@router.get("/history/supervisor/{supervisor_id}", response_model=list[EvaluatedLeaveRow])
async def history_for_supervisor(
    supervisor_id: uuid.UUID,
    _: User = Depends(_reviewer),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveReportService.history_for_supervisor(db, supervisor_id)


# ── GET /date-range ─────────────────────────────────────────────────

@router.get("/date-range", response_model=list[DateRangeLeaveRow])
async def leaves_in_date_range(
    start_date: Union[datetime, date] = Query(..., description="First day of the range"),
    end_date: Union[datetime, date] = Query(..., description="Last day of the range"),
    _: User = Depends(_reviewer),
    db: AsyncSession = Depends(get_db),
):
    """Requests of any status overlapping the given range."""
    return await LeaveReportService.in_date_range(db, _as_day(start_date), _as_day(end_date))


# ── PUT /{leave_id} ─────────────────────────────────────────────────

@router.put("/{leave_id}", response_model=LeaveRequestOut)
async def set_status(
    leave_id: uuid.UUID,
    body: LeaveStatusUpdate,
    _: User = Depends(_reviewer),
    db: AsyncSession = Depends(get_db),
):
    """Overwrite the status label only; evaluation metadata is kept as is."""
    return await LeaveService.set_status(db, leave_id, body.status)


# ── PATCH /approve/{leave_id} ───────────────────────────────────────

@router.patch("/approve/{leave_id}", response_model=LeaveRequestOut)
async def approve_leave(
    leave_id: uuid.UUID,
    body: Optional[LeaveApproveRequest] = Body(None),
    user: User = Depends(_reviewer),
    db: AsyncSession = Depends(get_db),
):
    body = body or LeaveApproveRequest()
    return await LeaveService.approve(db, leave_id, body.approved_by or user.id)


# ── PATCH /reject/{leave_id} ────────────────────────────────────────

@router.patch("/reject/{leave_id}", response_model=LeaveRequestOut)
async def reject_leave(
    leave_id: uuid.UUID,
    body: Optional[LeaveRejectRequest] = Body(None),
    user: User = Depends(_reviewer),
    db: AsyncSession = Depends(get_db),
):
    body = body or LeaveRejectRequest()
    return await LeaveService.reject(
        db, leave_id, body.rejected_by or user.id, body.rejected_reason,
    )


# ── PATCH /update/approved/{leave_id} ───────────────────────────────

@router.patch("/update/approved/{leave_id}", response_model=LeaveRequestOut)
async def reverse_rejection(
    leave_id: uuid.UUID,
    body: Optional[LeaveApproveRequest] = Body(None),
    user: User = Depends(_reviewer),
    db: AsyncSession = Depends(get_db),
):
    """Approve a previously rejected request."""
    body = body or LeaveApproveRequest()
    return await LeaveService.reverse_rejection(db, leave_id, body.approved_by or user.id)


# ── PATCH /update/rejected/{leave_id} ───────────────────────────────

@router.patch("/update/rejected/{leave_id}", response_model=LeaveRequestOut)
async def reverse_approval(
    leave_id: uuid.UUID,
    body: Optional[LeaveRejectRequest] = Body(None),
    user: User = Depends(_reviewer),
    db: AsyncSession = Depends(get_db),
):
    """Reject a previously approved request."""
    body = body or LeaveRejectRequest()
    return await LeaveService.reverse_approval(
        db, leave_id, body.rejected_by or user.id, body.rejected_reason,
    )
