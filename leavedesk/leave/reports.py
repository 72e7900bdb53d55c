"""Leave reports — supervisor-scoped and date-range views over leave requests.

Each report joins leave requests with their requester (and, for the history
view, with the approving or rejecting user). Filtering and joins run in SQL;
the day counts are derived from the loaded rows:

  - pending view: ``round(elapsed days)``
  - history view: unrounded elapsed days
  - balance engine: floor of elapsed days (see ``leave.balance``)

The three counts are separate and not interchangeable.
Rows are returned in request order (``date_of_request`` then ``id``).
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from leavedesk.common.constants import DATE_FORMAT, LeaveStatus, UserRole
from leavedesk.common.exceptions import ValidationException
from leavedesk.leave.models import LeaveRequest
from leavedesk.leave.schemas import (
    DateRangeLeaveRow,
    EvaluatedLeaveRow,
    PendingLeaveRow,
    UserBrief,
)
from leavedesk.users.models import User

_ONE_DAY = timedelta(days=1)


def _fractional_days(start: datetime, end: datetime) -> float:
    return (end - start) / _ONE_DAY


def _rounded_days(start: datetime, end: datetime) -> int:
    # Half-to-even
    return round(_fractional_days(start, end))


def _fmt(value: Optional[datetime]) -> Optional[str]:
    return value.strftime(DATE_FORMAT) if value is not None else None


def _requester_join() -> tuple[Select, type[User]]:
    requester = aliased(User, name="requester")
    query = (
        select(LeaveRequest, requester)
        .join(requester, LeaveRequest.user_id == requester.id)
        .order_by(LeaveRequest.date_of_request, LeaveRequest.id)
    )
    return query, requester


class LeaveReportService:
    """Read-only aggregation queries used by supervisors and auditors."""

    # ─────────────────────────────────────────────────────────────────
    # Pending by supervisor
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def pending_for_supervisor(
        db: AsyncSession,
        supervisor_id: uuid.UUID,
    ) -> list[PendingLeaveRow]:
        """Pending requests of the supervisor's direct reports.

        When *supervisor_id* belongs to a SuperUser the scoping is dropped and
        every Pending request in the system is returned.
        """
        role_result = await db.execute(
            select(User.role).where(User.id == supervisor_id)
        )
        is_super_user = role_result.scalar() == UserRole.super_user

        query, requester = _requester_join()
        query = query.where(LeaveRequest.status == LeaveStatus.pending)
        if not is_super_user:
            query = query.where(requester.supervisor_id == supervisor_id)

        result = await db.execute(query)
        return [
            PendingLeaveRow(
                id=leave.id,
                leave_start_date=_fmt(leave.start_date),
                leave_type=leave.leave_type,
                reason=leave.reason,
                date_of_request=_fmt(leave.date_of_request),
                user_id=user.id,
                user_name=user.name,
                user_role=user.role,
                user_photo_url=user.photo_url,
                organization=user.organization,
                no_of_days=_rounded_days(leave.start_date, leave.end_date),
            )
            for leave, user in result.all()
        ]

    # ─────────────────────────────────────────────────────────────────
    # Evaluated history by supervisor
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def history_for_supervisor(
        db: AsyncSession,
        supervisor_id: uuid.UUID,
    ) -> list[EvaluatedLeaveRow]:
        """Approved and Rejected requests of the supervisor's direct reports."""

        approver = aliased(User, name="approver")
        rejecter = aliased(User, name="rejecter")

        query, requester = _requester_join()
        query = (
            query.add_columns(approver, rejecter)
            .outerjoin(approver, LeaveRequest.approved_by == approver.id)
            .outerjoin(rejecter, LeaveRequest.rejected_by == rejecter.id)
            .where(
                LeaveRequest.status.in_([LeaveStatus.approved, LeaveStatus.rejected]),
                requester.supervisor_id == supervisor_id,
            )
        )

        result = await db.execute(query)
        rows: list[EvaluatedLeaveRow] = []
        for leave, user, approved_by, rejected_by in result.all():
            row = EvaluatedLeaveRow(
                id=leave.id,
                leave_start_date=_fmt(leave.start_date),
                leave_type=leave.leave_type,
                reason=leave.reason,
                date_of_request=_fmt(leave.date_of_request),
                status=leave.status,
                user_id=user.id,
                user_name=user.name,
                user_role=user.role,
                user_photo_url=user.photo_url,
                organization=user.organization,
                no_of_days=_fractional_days(leave.start_date, leave.end_date),
            )
            if leave.status == LeaveStatus.approved:
                row.approved_date = _fmt(leave.approved_date)
                if approved_by is not None:
                    row.approved_by = UserBrief.model_validate(approved_by)
            else:
                row.rejected_date = _fmt(leave.rejected_date)
                row.rejected_reason = leave.rejected_reason
                if rejected_by is not None:
                    row.rejected_by = UserBrief.model_validate(rejected_by)
            rows.append(row)
        return rows

    # ─────────────────────────────────────────────────────────────────
    # Date range
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def in_date_range(
        db: AsyncSession,
        start_date: date,
        end_date: date,
    ) -> list[DateRangeLeaveRow]:
        """Every request overlapping ``[start_date, end_date]``, any status.

        Both bounds are taken at 00:00 UTC, so a request overlaps when it
        starts no later than midnight of the end day and ends no earlier than
        midnight of the start day. A request starting later on the end day
        (say 09:00) is therefore not included.
        """
        if start_date > end_date:
            raise ValidationException(
                {"start_date": ["start_date must be on or before end_date."]}
            )

        range_start = datetime.combine(start_date, time.min, tzinfo=timezone.utc)
        range_end = datetime.combine(end_date, time.min, tzinfo=timezone.utc)

        query, requester = _requester_join()
        query = query.where(
            LeaveRequest.start_date <= range_end,
            LeaveRequest.end_date >= range_start,
        )

        result = await db.execute(query)
        return [
            DateRangeLeaveRow(
                id=leave.id,
                user_id=leave.user_id,
                start_date=leave.start_date,
                end_date=leave.end_date,
                leave_type=leave.leave_type,
                status=leave.status,
                reason=leave.reason,
                date_of_request=leave.date_of_request,
                approved_date=leave.approved_date,
                rejected_date=leave.rejected_date,
                user_name=user.name,
                user_email=user.email,
                user_role=user.role,
                user_photo_url=user.photo_url,
                user_organization=user.organization,
            )
            for leave, user in result.all()
        ]
