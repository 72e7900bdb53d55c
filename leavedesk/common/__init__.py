"""Common module — shared utilities for LeaveDesk."""

from leavedesk.common.constants import (
    DATE_FORMAT,
    REVIEWER_ROLES,
    GenderType,
    LeaveStatus,
    UserRole,
)
from leavedesk.common.exceptions import (
    AppException,
    ConflictError,
    ForbiddenException,
    NotFoundException,
    TransientStoreError,
    ValidationException,
    register_exception_handlers,
)

__all__ = [
    # Constants / Enums
    "GenderType",
    "LeaveStatus",
    "UserRole",
    "REVIEWER_ROLES",
    "DATE_FORMAT",
    # Exceptions
    "AppException",
    "ConflictError",
    "ForbiddenException",
    "NotFoundException",
    "TransientStoreError",
    "ValidationException",
    "register_exception_handlers",
]
