"""User Pydantic v2 schemas — request / response validation."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from leavedesk.common.constants import GenderType, UserRole


# ── Requests ────────────────────────────────────────────────────────

class UserRegister(BaseModel):
    """Payload for registering a user (performed by a SuperUser)."""

    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    role: UserRole = UserRole.normal
    supervisor: Optional[uuid.UUID] = Field(
        None, description="Id of the user's supervisor, if any",
    )
    organization: str = Field(..., min_length=1, max_length=100)
    gender: GenderType
    photo_url: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    uid: str = Field(..., min_length=1, description="Identity-provider uid used as credential")


class RoleUpdate(BaseModel):
    role: UserRole


class SupervisorUpdate(BaseModel):
    supervisor_id: uuid.UUID


class OrganizationUpdate(BaseModel):
    organization: str = Field(..., min_length=1, max_length=100)


class UserUpdate(BaseModel):
    """Partial profile update; omitted fields are left untouched."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    photo_url: Optional[str] = None
    organization: Optional[str] = Field(None, min_length=1, max_length=100)
    gender: Optional[GenderType] = None


# ── Responses ───────────────────────────────────────────────────────

class UserOut(BaseModel):
    """User profile without credentials."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    role: UserRole
    photo_url: Optional[str] = None
    supervisor_id: Optional[uuid.UUID] = None
    organization: str
    gender: GenderType
    created_at: datetime
    updated_at: datetime
    last_login: Optional[datetime] = None


class RegisterResponse(BaseModel):
    msg: str = "User created successfully"
    user: UserOut


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserOut
