# backend/swimdesk/core/enums.py
"""
Core enums for the SwimDesk platform.

String-valued so they store as plain text columns and serialize
directly into JSON responses.
"""

from enum import Enum


class RoleName(str, Enum):
    """Roles issued by the user-management service."""

    ADMIN = "admin"
    INSTRUCTOR = "instructor"
    CLIENT = "client"


STAFF_ROLES = (RoleName.ADMIN, RoleName.INSTRUCTOR)


class EnrollmentStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


class CatchUpApprovalStatus(str, Enum):
    """
    Approval state of a single cancellation event.

    NONE: catch-up was not offered for this cancellation.
    PENDING: waiting for a business decision.
    APPROVED / REJECTED: terminal.
    """

    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RecurrenceFrequency(str, Enum):
    WEEKLY = "weekly"
