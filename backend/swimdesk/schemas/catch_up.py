# backend/swimdesk/schemas/catch_up.py
"""
Catch-up workflow schemas: requests (cancellation events), decisions,
slots, bookings and policy.
"""

from typing import List, Optional

from ..core.enums import CatchUpApprovalStatus
from ._strict_base import ORMResponseModel, StrictRequestModel, UTCDateTime
from .enrollment import EnrollmentResponse
from .session import SessionResponse


class CancellationEventResponse(ORMResponseModel):
    id: str
    enrollment_id: str
    session_id: str
    client_id: str
    class_title: str
    session_starts_at: UTCDateTime
    cancelled_at: UTCDateTime
    catch_up_status: CatchUpApprovalStatus
    decided_at: Optional[UTCDateTime] = None
    decided_by_id: Optional[str] = None


class CancellationResponse(ORMResponseModel):
    """Result of cancelling an enrollment."""

    enrollment: EnrollmentResponse
    cancellation_event: CancellationEventResponse
    cancellation_count: int
    has_cancelled_before: bool
    catch_up_credits: int


class CatchUpRequestListResponse(ORMResponseModel):
    requests: List[CancellationEventResponse]
    total: int


class CatchUpDecisionResponse(ORMResponseModel):
    event: CancellationEventResponse
    client_credit_balance: int


class BulkCatchUpDecisionResponse(ORMResponseModel):
    client_id: str
    status: CatchUpApprovalStatus
    transitioned_event_ids: List[str]
    skipped_event_ids: List[str]
    client_credit_balance: int


class PendingClientResponse(ORMResponseModel):
    client_id: str
    pending_count: int
    cancellation_count: int
    oldest_cancelled_at: UTCDateTime


class PendingClientListResponse(ORMResponseModel):
    clients: List[PendingClientResponse]
    total: int


class CatchUpSlotResponse(ORMResponseModel):
    session: SessionResponse
    freed_seats: int
    available_seats: int
    last_cancelled_at: UTCDateTime
    reason: str


class CatchUpSlotListResponse(ORMResponseModel):
    slots: List[CatchUpSlotResponse]
    total: int


class CatchUpBookingResponse(ORMResponseModel):
    enrollment: EnrollmentResponse
    remaining_credits: int


class CatchUpPolicyUpdate(StrictRequestModel):
    catch_up_enabled: bool
    auto_approve: bool = False


class CatchUpPolicyResponse(ORMResponseModel):
    business_id: str
    catch_up_enabled: bool
    auto_approve: bool
    is_default: bool


class PreApprovalUpdate(StrictRequestModel):
    pre_approved: bool


class ClientProfileResponse(ORMResponseModel):
    client_id: str
    cancellation_count: int
    has_cancelled_before: bool
    catch_up_pre_approved: bool
