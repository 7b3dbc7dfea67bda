"""Enrollment request and response schemas."""

from typing import List, Optional

from pydantic import Field

from ..core.enums import EnrollmentStatus
from ._strict_base import ORMResponseModel, StrictRequestModel, UTCDateTime


class EnrollmentAction(StrictRequestModel):
    """
    Body for enroll/cancel.

    Clients act for themselves and leave ``client_id`` empty; staff must
    name the client they act for.
    """

    client_id: Optional[str] = Field(None, min_length=1, max_length=26)


class EnrollmentResponse(ORMResponseModel):
    id: str
    session_id: str
    client_id: str
    status: EnrollmentStatus
    is_catch_up: bool
    enrolled_at: UTCDateTime
    cancelled_at: Optional[UTCDateTime] = None


class RosterResponse(ORMResponseModel):
    session_id: str
    capacity: int
    active_count: int
    enrollments: List[EnrollmentResponse]
