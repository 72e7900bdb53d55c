"""Organizations router — organizations and their leave type allowances."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import get_current_user, require_role
from leavedesk.common.constants import UserRole
from leavedesk.database import get_db
from leavedesk.organizations.schemas import LeaveTypeIn, OrganizationCreate, OrganizationOut
from leavedesk.organizations.service import OrganizationService
from leavedesk.users.models import User

router = APIRouter(prefix="", tags=["organizations"])

_super_user = require_role(UserRole.super_user)


@router.post("", response_model=list[OrganizationOut], status_code=201)
async def create_organizations(
    body: list[OrganizationCreate],
    _: User = Depends(_super_user),
    db: AsyncSession = Depends(get_db),
):
    """Bulk-create organizations from a list payload."""
    return await OrganizationService.create_organizations(db, body)


@router.get("", response_model=list[OrganizationOut])
async def list_organizations(
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await OrganizationService.list_organizations(db)


@router.get("/{organization_id}/leave-types", response_model=list[str])
async def get_leave_type_names(
    organization_id: str,
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Names of the organization's leave types, in definition order."""
    return await OrganizationService.leave_type_names(db, organization_id)


@router.put("/{organization_id}/leave-types", response_model=OrganizationOut)
async def add_leave_type(
    organization_id: str,
    body: LeaveTypeIn,
    _: User = Depends(_super_user),
    db: AsyncSession = Depends(get_db),
):
    return await OrganizationService.add_leave_type(db, organization_id, body)


@router.delete("/{organization_id}")
async def delete_organization(
    organization_id: str,
    _: User = Depends(_super_user),
    db: AsyncSession = Depends(get_db),
):
    await OrganizationService.delete_organization(db, organization_id)
    return {"msg": "Organization removed"}
