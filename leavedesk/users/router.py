"""Users router — registration and user administration.

Registration and every administrative mutation require a SuperUser.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import get_current_user, require_role
from leavedesk.common.constants import UserRole
from leavedesk.database import get_db
from leavedesk.users.models import User
from leavedesk.users.schemas import (
    OrganizationUpdate,
    RegisterResponse,
    RoleUpdate,
    SupervisorUpdate,
    UserOut,
    UserRegister,
    UserUpdate,
)
from leavedesk.users.service import UserService

router = APIRouter(prefix="", tags=["users"])

_super_user = require_role(UserRole.super_user)


# ── POST /register ──────────────────────────────────────────────────

@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register_user(
    body: UserRegister,
    _: User = Depends(_super_user),
    db: AsyncSession = Depends(get_db),
):
    """Register a user. Fails without side effects if the email exists."""
    user = await UserService.register_user(db, body)
    return RegisterResponse(user=UserOut.model_validate(user))


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=list[UserOut])
async def list_users(
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await UserService.list_users(db)


# ── GET /search/{name} ──────────────────────────────────────────────

@router.get("/search/{name}", response_model=list[UserOut])
async def search_users(
    name: str,
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Find users whose name contains *name* (case-insensitive)."""
    return await UserService.search_by_name(db, name)


# ── GET /{id} ───────────────────────────────────────────────────────

@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: uuid.UUID,
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await UserService.get_user(db, user_id)


# ── PUT /{id}/role ──────────────────────────────────────────────────

@router.put("/{user_id}/role", response_model=UserOut)
async def update_role(
    user_id: uuid.UUID,
    body: RoleUpdate,
    _: User = Depends(_super_user),
    db: AsyncSession = Depends(get_db),
):
    return await UserService.update_role(db, user_id, body.role)


# ── PUT /{id}/supervisor ────────────────────────────────────────────

@router.put("/{user_id}/supervisor", response_model=UserOut)
async def assign_supervisor(
    user_id: uuid.UUID,
    body: SupervisorUpdate,
    _: User = Depends(_super_user),
    db: AsyncSession = Depends(get_db),
):
    return await UserService.assign_supervisor(db, user_id, body.supervisor_id)


# ── PUT /{id}/organization ──────────────────────────────────────────

@router.put("/{user_id}/organization", response_model=UserOut)
async def update_organization(
    user_id: uuid.UUID,
    body: OrganizationUpdate,
    _: User = Depends(_super_user),
    db: AsyncSession = Depends(get_db),
):
    return await UserService.update_organization(db, user_id, body.organization)


# ── PATCH /{id} ─────────────────────────────────────────────────────

@router.patch("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: uuid.UUID,
    body: UserUpdate,
    _: User = Depends(_super_user),
    db: AsyncSession = Depends(get_db),
):
    return await UserService.update_user(db, user_id, body)


# ── DELETE /{id} ────────────────────────────────────────────────────

@router.delete("/{user_id}")
async def delete_user(
    user_id: uuid.UUID,
    _: User = Depends(_super_user),
    db: AsyncSession = Depends(get_db),
):
    await UserService.delete_user(db, user_id)
    return {"msg": "User removed"}
