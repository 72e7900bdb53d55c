"""Leave balance engine — remaining allowance per leave type.

Only Approved requests count against an allowance. The day count of a
request is the whole number of elapsed days between its start and end
(``floor((end - start) / 1 day)``), so a request that starts and ends on the
same day uses 0 days. This is not the calendar-inclusive count.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.constants import LeaveStatus
from leavedesk.common.exceptions import NotFoundException
from leavedesk.leave.models import LeaveRequest
from leavedesk.leave.schemas import RemainingBalanceOut
from leavedesk.organizations.models import Organization
from leavedesk.users.models import User

_ONE_DAY = timedelta(days=1)


def duration_days(start: datetime, end: datetime) -> int:
    """Whole elapsed days between *start* and *end*, rounded down."""
    return (end - start) // _ONE_DAY


def compute_remaining(
    leave_types: Sequence[dict],
    approved: Iterable[LeaveRequest],
) -> list[RemainingBalanceOut]:
    """Pure balance computation over already-filtered Approved requests.

    Leave type names match case-sensitively. The result follows the
    organization's definition order and may go negative.
    """
    used: dict[str, int] = defaultdict(int)
    for leave in approved:
        used[leave.leave_type] += duration_days(leave.start_date, leave.end_date)

    return [
        RemainingBalanceOut(
            leave_type_name=lt["leave_type_name"],
            remaining_days=lt["number_of_days_allowed"] - used[lt["leave_type_name"]],
        )
        for lt in leave_types
    ]


async def remaining_balance(
    db: AsyncSession,
    user_id: uuid.UUID,
) -> list[RemainingBalanceOut]:
    """Remaining days for each leave type of the user's organization."""

    user_result = await db.execute(
        select(User.organization).where(User.id == user_id)
    )
    organization_id = user_result.scalar()
    if organization_id is None:
        raise NotFoundException("User", str(user_id))

    org_result = await db.execute(
        select(Organization.leave_types).where(
            Organization.organization_id == organization_id,
        )
    )
    leave_types = org_result.scalar()
    if leave_types is None:
        raise NotFoundException("Organization", organization_id)
    if not leave_types:
        return []

    approved_result = await db.execute(
        select(LeaveRequest).where(
            LeaveRequest.user_id == user_id,
            LeaveRequest.status == LeaveStatus.approved,
        )
    )
    return compute_remaining(leave_types, approved_result.scalars().all())
