"""Organization service — organizations and their embedded leave types."""

from __future__ import annotations

import logging
import uuid
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.exceptions import (
    ConflictError,
    NotFoundException,
    TransientStoreError,
    ValidationException,
)
from leavedesk.organizations.models import Organization
from leavedesk.organizations.schemas import LeaveTypeIn, OrganizationCreate

logger = logging.getLogger(__name__)


def _leave_type_value(lt: LeaveTypeIn) -> dict:
    return {
        "leave_type_id": lt.leave_type_id or uuid.uuid4().hex,
        "leave_type_name": lt.leave_type_name,
        "number_of_days_allowed": lt.number_of_days_allowed,
    }


class OrganizationService:

    @staticmethod
    async def get_by_organization_id(db: AsyncSession, organization_id: str) -> Organization:
        result = await db.execute(
            select(Organization).where(Organization.organization_id == organization_id)
        )
        org = result.scalars().first()
        if org is None:
            raise NotFoundException("Organization", organization_id)
        return org

    @staticmethod
    async def list_organizations(db: AsyncSession) -> Sequence[Organization]:
        result = await db.execute(
            select(Organization).order_by(Organization.created_at, Organization.id)
        )
        return result.scalars().all()

    @staticmethod
    async def create_organizations(
        db: AsyncSession,
        payload: list[OrganizationCreate],
    ) -> list[Organization]:
        """Create every organization in *payload* or none of them."""
        seen: set[str] = set()
        for item in payload:
            if item.organization_id is None:
                continue
            if item.organization_id in seen:
                raise ConflictError("organization_id", item.organization_id)
            seen.add(item.organization_id)

        created: list[Organization] = []
        try:
            async with db.begin_nested():
                for item in payload:
                    org = Organization(
                        leave_types=[_leave_type_value(lt) for lt in item.leave_types],
                    )
                    if item.organization_id is not None:
                        org.organization_id = item.organization_id
                    db.add(org)
                    created.append(org)
                await db.flush()
        except IntegrityError as exc:
            raise ConflictError(
                "organization_id", ", ".join(sorted(seen)) or "<generated>",
            ) from exc
        except SQLAlchemyError as exc:
            logger.exception("Failed to save organizations")
            raise TransientStoreError("create organizations") from exc

        logger.info("Created %d organization(s)", len(created))
        return created

    @staticmethod
    async def leave_type_names(db: AsyncSession, organization_id: str) -> list[str]:
        org = await OrganizationService.get_by_organization_id(db, organization_id)
        return org.leave_type_names()

    @staticmethod
    async def add_leave_type(
        db: AsyncSession,
        organization_id: str,
        leave_type: LeaveTypeIn,
    ) -> Organization:
        """Append a leave type; names stay unique per organization."""
        org = await OrganizationService.get_by_organization_id(db, organization_id)
        if leave_type.leave_type_name in org.leave_type_names():
            raise ValidationException(
                {"leave_type_name": [
                    f"'{leave_type.leave_type_name}' already exists in {organization_id}."
                ]}
            )
        org.leave_types.append(_leave_type_value(leave_type))
        try:
            await db.flush()
        except SQLAlchemyError as exc:
            logger.exception("Failed to add leave type to %s", organization_id)
            raise TransientStoreError("add leave type") from exc
        return org

    @staticmethod
    async def delete_organization(db: AsyncSession, organization_id: str) -> None:
        org = await OrganizationService.get_by_organization_id(db, organization_id)
        await db.delete(org)
        try:
            await db.flush()
        except SQLAlchemyError as exc:
            logger.exception("Failed to delete organization %s", organization_id)
            raise TransientStoreError("delete organization") from exc
        logger.info("Deleted organization %s", organization_id)
