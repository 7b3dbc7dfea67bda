# backend/swimdesk/services/catch_up_booking_service.py
"""
Catch-Up Booking for SwimDesk

Lets an eligible client spend one credit on an open catch-up slot. The
checks run in a fixed order so the client gets the most specific reason:

1. the session exists and is an open catch-up slot for this client,
2. the client has cancelled before,
3. the client is not rejected-only (rejected events and none approved),
4. the client holds at least one credit.

The credit decrement and the enrollment are written in one transaction;
a failure in either leaves both untouched.
"""

from dataclasses import dataclass
import logging
from typing import Optional

from ..core.enums import CatchUpApprovalStatus
from ..core.exceptions import (
    CatchUpNotEligibleException,
    NotCatchUpSlotException,
    SessionNotFoundException,
)
from ..models.enrollment import Enrollment
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .credit_ledger_service import CreditLedgerService
from .enrollment_service import EnrollmentService
from .notification_service import NotificationService
from .session_registry_service import SessionRegistryService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatchUpBookingResult:
    enrollment: Enrollment
    remaining_credits: int


class CatchUpBookingService(BaseService):
    def __init__(
        self,
        db,
        session_registry: Optional[SessionRegistryService] = None,
        enrollment_service: Optional[EnrollmentService] = None,
        credit_service: Optional[CreditLedgerService] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        super().__init__(db)
        self.session_registry = session_registry or SessionRegistryService(db)
        self.enrollment_service = enrollment_service or EnrollmentService(db)
        self.credit_service = credit_service or CreditLedgerService(db)
        self.notification_service = notification_service or NotificationService(db)
        self.session_repository = RepositoryFactory.create_session_repository(db)
        self.profile_repository = RepositoryFactory.create_client_profile_repository(db)
        self.event_repository = RepositoryFactory.create_cancellation_event_repository(db)

    @BaseService.measure_operation("book_catch_up")
    def book_catch_up(self, session_id: str, client_id: str, *, business_id: str) -> CatchUpBookingResult:
        """
        Spend one catch-up credit on a seat in ``session_id``.

        Raises:
            SessionNotFoundException: Unknown session
            NotCatchUpSlotException: Session has no seat freed by someone else's cancellation
            CatchUpNotEligibleException: Client never cancelled, or only has rejected requests
            InsufficientCreditException: No credit left
            CapacityExceededException / DuplicateEnrollmentException: Seat taken meanwhile
        """
        with self.transaction():
            session = self.session_repository.get_for_business(session_id, business_id, for_update=True)
            if session is None:
                raise SessionNotFoundException(session_id)
            if self.session_registry.get_open_slot(session, client_id) is None:
                logger.warning(
                    "Catch-up booking refused, not a catch-up slot",
                    extra={"session_id": session_id, "client_id": client_id, "code": "NOT_CATCH_UP_SLOT"},
                )
                raise NotCatchUpSlotException(session_id)

            self._check_eligibility(client_id, business_id)

            remaining = self.credit_service.consume(client_id, business_id, use_transaction=False)
            enrollment = self.enrollment_service.enroll(
                session_id,
                client_id,
                business_id=business_id,
                is_catch_up=True,
                use_transaction=False,
            )
            self.notification_service.catch_up_booked(enrollment, session)

        prometheus_metrics.record_catch_up_transition("booked")
        self.logger.info(
            "Catch-up session booked",
            extra={
                "session_id": session_id,
                "client_id": client_id,
                "enrollment_id": enrollment.id,
                "remaining_credits": remaining,
            },
        )
        return CatchUpBookingResult(enrollment=enrollment, remaining_credits=remaining)

    def _check_eligibility(self, client_id: str, business_id: str) -> None:
        """Eligibility is judged on the client's history with the session's business only."""
        profile = self.profile_repository.get_by_client(client_id, business_id)
        if profile is None or not profile.has_cancelled_before:
            logger.warning(
                "Catch-up booking refused, no prior cancellation",
                extra={"client_id": client_id, "code": "CATCH_UP_NOT_ELIGIBLE"},
            )
            raise CatchUpNotEligibleException(client_id, "no_prior_cancellation")

        counts = self.event_repository.status_counts_for_client(client_id, business_id)
        if counts[CatchUpApprovalStatus.REJECTED] > 0 and counts[CatchUpApprovalStatus.APPROVED] == 0:
            logger.warning(
                "Catch-up booking refused, requests rejected",
                extra={"client_id": client_id, "code": "CATCH_UP_NOT_ELIGIBLE"},
            )
            raise CatchUpNotEligibleException(client_id, "catch_up_rejected")
