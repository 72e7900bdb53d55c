"""Organization Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LeaveTypeIn(BaseModel):
    """A leave category and its yearly allowance."""

    leave_type_id: Optional[str] = Field(None, max_length=100)
    leave_type_name: str = Field(..., min_length=1, max_length=100)
    number_of_days_allowed: int = Field(..., ge=0)


class LeaveTypeOut(BaseModel):
    leave_type_id: Optional[str] = None
    leave_type_name: str
    number_of_days_allowed: int


class OrganizationCreate(BaseModel):
    organization_id: Optional[str] = Field(None, min_length=1, max_length=100)
    leave_types: list[LeaveTypeIn] = Field(default_factory=list)

    @field_validator("leave_types")
    @classmethod
    def unique_leave_type_names(cls, v: list[LeaveTypeIn]) -> list[LeaveTypeIn]:
        names = [lt.leave_type_name for lt in v]
        if len(names) != len(set(names)):
            raise ValueError("leave_type_name values must be unique within an organization.")
        return v


class OrganizationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    organization_id: str
    leave_types: list[LeaveTypeOut]
