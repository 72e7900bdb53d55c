"""Enums and constants shared across LeaveDesk modules."""

from __future__ import annotations

import enum


# ── Users / Roles ───────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    normal = "Normal"
    supervisor = "Supervisor"
    super_user = "SuperUser"


class GenderType(str, enum.Enum):
    male = "Male"
    female = "Female"
    other = "Other"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"


# Roles allowed to evaluate leave requests and read supervisor reports
REVIEWER_ROLES: tuple[UserRole, ...] = (UserRole.supervisor, UserRole.super_user)

# ── Misc constants ──────────────────────────────────────────────────

DATE_FORMAT = "%Y-%m-%d"
