"""Leave service layer — request lifecycle.

State machine over ``LeaveRequest.status``:

    Pending ──approve──▶ Approved ◀──approve── Rejected
    Pending ──reject───▶ Rejected ◀──reject─── Approved

``approve`` and ``reject`` keep the approval and rejection metadata mutually
exclusive by clearing the opposite block. ``set_status`` only relabels the
request and leaves both blocks as they are. Writes are last-write-wins; no
check is made that the acting user supervises the requester.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.constants import LeaveStatus
from leavedesk.common.exceptions import (
    NotFoundException,
    TransientStoreError,
    ValidationException,
)
from leavedesk.leave.balance import duration_days
from leavedesk.leave.models import LeaveRequest
from leavedesk.leave.schemas import LeaveRequestCreate, UserLeaveOut
from leavedesk.users.models import User

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# LeaveService
# ═════════════════════════════════════════════════════════════════════


class LeaveService:
    """Async leave operations: create, approve/reject, reversals, listings."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _get_request(db: AsyncSession, leave_id: uuid.UUID) -> LeaveRequest:
        result = await db.execute(
            select(LeaveRequest).where(LeaveRequest.id == leave_id)
        )
        leave_req = result.scalars().first()
        if leave_req is None:
            raise NotFoundException("LeaveRequest", str(leave_id))
        return leave_req

    @staticmethod
    async def _ensure_user(db: AsyncSession, user_id: uuid.UUID) -> None:
        result = await db.execute(select(User.id).where(User.id == user_id))
        if result.scalar() is None:
            raise NotFoundException("User", str(user_id))

    @staticmethod
    async def _persist(db: AsyncSession, leave_req: LeaveRequest, operation: str) -> LeaveRequest:
        try:
            await db.flush()
        except SQLAlchemyError as exc:
            logger.exception("Failed to %s leave request %s", operation, leave_req.id)
            raise TransientStoreError(f"{operation} leave request") from exc
        return leave_req

    @staticmethod
    def _require_status(
        leave_req: LeaveRequest,
        allowed: tuple[LeaveStatus, ...],
        action: str,
    ) -> None:
        if leave_req.status not in allowed:
            raise ValidationException(
                {"status": [
                    f"Cannot {action} a leave request that is {leave_req.status.value}."
                ]}
            )

    # ─────────────────────────────────────────────────────────────────
    # Create
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def create_leave(
        db: AsyncSession,
        requester_id: uuid.UUID,
        data: LeaveRequestCreate,
    ) -> LeaveRequest:
        """Submit a Pending request for ``data.user_id`` (default: requester)."""

        user_id = data.user_id or requester_id
        await LeaveService._ensure_user(db, user_id)

        now = datetime.now(timezone.utc)
        leave_req = LeaveRequest(
            user_id=user_id,
            start_date=data.start_date,
            end_date=data.end_date,
            leave_type=data.leave_type,
            status=LeaveStatus.pending,
            reason=data.reason,
            date_of_request=now,
            updated_at=now,
        )
        db.add(leave_req)
        await LeaveService._persist(db, leave_req, "create")

        logger.info(
            "Leave request %s created for user %s (%s)",
            leave_req.id, user_id, data.leave_type,
        )
        return leave_req

    # ─────────────────────────────────────────────────────────────────
    # Approve / Reject
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def approve(
        db: AsyncSession,
        leave_id: uuid.UUID,
        approver_id: uuid.UUID,
    ) -> LeaveRequest:
        """Pending|Rejected → Approved; clears any rejection metadata."""

        leave_req = await LeaveService._get_request(db, leave_id)
        LeaveService._require_status(
            leave_req, (LeaveStatus.pending, LeaveStatus.rejected), "approve",
        )
        await LeaveService._ensure_user(db, approver_id)

        now = datetime.now(timezone.utc)
        old_status = leave_req.status
        leave_req.status = LeaveStatus.approved
        leave_req.approved_date = now
        leave_req.approved_by = approver_id
        leave_req.rejected_date = None
        leave_req.rejected_by = None
        leave_req.rejected_reason = None
        leave_req.updated_at = now

        await LeaveService._persist(db, leave_req, "approve")
        logger.info(
            "Leave request %s approved by %s (was %s)",
            leave_id, approver_id, old_status.value,
        )
        return leave_req

    @staticmethod
    async def reject(
        db: AsyncSession,
        leave_id: uuid.UUID,
        rejecter_id: uuid.UUID,
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        """Pending|Approved → Rejected; clears any approval metadata."""

        leave_req = await LeaveService._get_request(db, leave_id)
        LeaveService._require_status(
            leave_req, (LeaveStatus.pending, LeaveStatus.approved), "reject",
        )
        await LeaveService._ensure_user(db, rejecter_id)

        now = datetime.now(timezone.utc)
        old_status = leave_req.status
        leave_req.status = LeaveStatus.rejected
        leave_req.rejected_date = now
        leave_req.rejected_by = rejecter_id
        leave_req.rejected_reason = reason
        leave_req.approved_date = None
        leave_req.approved_by = None
        leave_req.updated_at = now

        await LeaveService._persist(db, leave_req, "reject")
        logger.info(
            "Leave request %s rejected by %s (was %s)",
            leave_id, rejecter_id, old_status.value,
        )
        return leave_req

    # ─────────────────────────────────────────────────────────────────
    # Reversals of an earlier evaluation
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def reverse_rejection(
        db: AsyncSession,
        leave_id: uuid.UUID,
        approver_id: uuid.UUID,
    ) -> LeaveRequest:
        """Turn a Rejected request into an Approved one."""
        leave_req = await LeaveService._get_request(db, leave_id)
        LeaveService._require_status(leave_req, (LeaveStatus.rejected,), "re-approve")
        return await LeaveService.approve(db, leave_id, approver_id)

    @staticmethod
    async def reverse_approval(
        db: AsyncSession,
        leave_id: uuid.UUID,
        rejecter_id: uuid.UUID,
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        """Turn an Approved request into a Rejected one."""
        leave_req = await LeaveService._get_request(db, leave_id)
        LeaveService._require_status(leave_req, (LeaveStatus.approved,), "re-reject")
        return await LeaveService.reject(db, leave_id, rejecter_id, reason)

    # ─────────────────────────────────────────────────────────────────
    # Direct status overwrite
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def set_status(
        db: AsyncSession,
        leave_id: uuid.UUID,
        status: LeaveStatus,
    ) -> LeaveRequest:
        """Relabel the request. Approval/rejection metadata is left untouched."""

        leave_req = await LeaveService._get_request(db, leave_id)
        old_status = leave_req.status
        leave_req.status = status
        leave_req.updated_at = datetime.now(timezone.utc)

        await LeaveService._persist(db, leave_req, "update")
        logger.info(
            "Leave request %s status overwritten %s -> %s",
            leave_id, old_status.value, status.value,
        )
        return leave_req

    # ─────────────────────────────────────────────────────────────────
    # Listings
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_leaves(db: AsyncSession) -> Sequence[LeaveRequest]:
        result = await db.execute(
            select(LeaveRequest).order_by(LeaveRequest.date_of_request, LeaveRequest.id)
        )
        return result.scalars().all()

    @staticmethod
    async def leaves_for_user(db: AsyncSession, user_id: uuid.UUID) -> list[UserLeaveOut]:
        """A user's requests with ``no_of_days`` in place of the raw dates."""

        result = await db.execute(
            select(LeaveRequest)
            .where(LeaveRequest.user_id == user_id)
            .order_by(LeaveRequest.date_of_request, LeaveRequest.id)
        )
        return [
            UserLeaveOut(
                id=leave.id,
                leave_type=leave.leave_type,
                status=leave.status,
                reason=leave.reason,
                date_of_request=leave.date_of_request,
                approved_date=leave.approved_date,
                approved_by=leave.approved_by,
                rejected_date=leave.rejected_date,
                rejected_by=leave.rejected_by,
                rejected_reason=leave.rejected_reason,
                no_of_days=duration_days(leave.start_date, leave.end_date),
            )
            for leave in result.scalars().all()
        ]
