"""Client dashboard schema."""

from typing import List

from ..core.enums import CatchUpApprovalStatus
from ._strict_base import ORMResponseModel
from .catch_up import CancellationEventResponse, CatchUpSlotResponse
from .enrollment import EnrollmentResponse


class ClientDashboardResponse(ORMResponseModel):
    client_id: str
    cancellation_count: int
    has_cancelled_before: bool
    catch_up_pre_approved: bool
    catch_up_approval_status: CatchUpApprovalStatus
    catch_up_credits: int
    upcoming_enrollments: List[EnrollmentResponse]
    open_catch_up_slots: List[CatchUpSlotResponse]
    recent_cancellations: List[CancellationEventResponse]
