# backend/swimdesk/services/cancellation_service.py
"""
Cancellation Recorder for SwimDesk

Wraps enrollment cancellation with the catch-up bookkeeping. Everything
below runs as one transaction: if the enrollment cannot be cancelled
nothing is recorded, and if any later step fails the enrollment stays
active.

1. Cancel the enrollment.
2. Increment the client's cancellation count and latch has_cancelled_before.
3. Create the CancellationEvent, pending unless policy says otherwise.
4. Credit immediately when the event starts out approved.
5. Queue the business notification.
"""

from dataclasses import dataclass
import logging
from typing import Optional

from ..core.enums import CatchUpApprovalStatus
from ..models.cancellation_event import CancellationEvent
from ..models.client_profile import ClientCatchUpProfile
from ..models.enrollment import Enrollment
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..utils.time_utils import utc_now
from .base import BaseService
from .catch_up_policy_service import CatchUpPolicyService
from .credit_ledger_service import CreditLedgerService
from .enrollment_service import EnrollmentService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CancellationResult:
    enrollment: Enrollment
    event: CancellationEvent
    profile: ClientCatchUpProfile
    credit_balance: int


class CancellationService(BaseService):
    def __init__(
        self,
        db,
        enrollment_service: Optional[EnrollmentService] = None,
        credit_service: Optional[CreditLedgerService] = None,
        policy_service: Optional[CatchUpPolicyService] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        super().__init__(db)
        self.enrollment_service = enrollment_service or EnrollmentService(db)
        self.credit_service = credit_service or CreditLedgerService(db)
        self.policy_service = policy_service or CatchUpPolicyService(db)
        self.notification_service = notification_service or NotificationService(db)
        self.event_repository = RepositoryFactory.create_cancellation_event_repository(db)
        self.profile_repository = RepositoryFactory.create_client_profile_repository(db)
        self.session_repository = RepositoryFactory.create_session_repository(db)

    @BaseService.measure_operation("record_cancellation")
    def record_cancellation(
        self,
        session_id: str,
        client_id: str,
        *,
        business_id: str,
        cancelled_by_id: Optional[str] = None,
    ) -> CancellationResult:
        """
        Cancel a client's enrollment and record the catch-up bookkeeping.

        Args:
            session_id: Session being cancelled
            client_id: Client whose seat is released
            business_id: Business the caller acts for
            cancelled_by_id: Staff member cancelling on the client's behalf, if any

        Raises:
            EnrollmentNotFoundException: No active enrollment; nothing is recorded
        """
        with self.transaction():
            enrollment = self.enrollment_service.cancel(
                session_id,
                client_id,
                business_id=business_id,
                cancelled_by_id=cancelled_by_id,
                use_transaction=False,
            )
            now = utc_now()
            profile = self.profile_repository.record_cancellation(client_id, enrollment.business_id, now)

            policy = self.policy_service.get_policy(enrollment.business_id)
            status = policy.initial_status(profile.catch_up_pre_approved)
            session = self.session_repository.get_by_id(session_id)

            event = self.event_repository.create(
                enrollment_id=enrollment.id,
                session_id=session_id,
                client_id=client_id,
                business_id=enrollment.business_id,
                class_title=session.class_title,
                session_starts_at=session.starts_at,
                cancelled_at=now,
                cancelled_by_id=cancelled_by_id or client_id,
                catch_up_status=status.value,
                decided_at=now if status == CatchUpApprovalStatus.APPROVED else None,
            )

            if status == CatchUpApprovalStatus.APPROVED:
                balance = self.credit_service.credit(
                    client_id, enrollment.business_id, use_transaction=False
                )
                self.notification_service.catch_up_decided(event)
            else:
                balance = self.credit_service.get_balance(client_id, enrollment.business_id)
                if status == CatchUpApprovalStatus.PENDING:
                    self.notification_service.catch_up_requested(event)

        transition = {
            CatchUpApprovalStatus.PENDING: "requested",
            CatchUpApprovalStatus.APPROVED: "auto_approved",
        }.get(status)
        if transition:
            prometheus_metrics.record_catch_up_transition(transition)
        self.logger.info(
            "Cancellation recorded",
            extra={
                "event_id": event.id,
                "session_id": session_id,
                "client_id": client_id,
                "catch_up_status": status.value,
                "cancellation_count": profile.cancellation_count,
            },
        )
        return CancellationResult(
            enrollment=enrollment,
            event=event,
            profile=profile,
            credit_balance=balance,
        )
