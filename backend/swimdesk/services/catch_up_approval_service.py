# backend/swimdesk/services/catch_up_approval_service.py
"""
Catch-Up Approval Workflow for SwimDesk

One state machine per cancellation event:

    none
    pending -> approved   (grants one credit)
    pending -> rejected   (no ledger effect)

``approved`` and ``rejected`` are terminal. Every decision is a
compare-and-set on ``status = 'pending'``: a second approval of the same
event, concurrent or not, matches no row and surfaces as
InvalidTransitionException, so an event can never credit twice.

The per-client operations are thin loops over the per-event transition.
"""

from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import List, Optional

from ..core.enums import CatchUpApprovalStatus
from ..core.exceptions import CancellationEventNotFoundException, InvalidTransitionException
from ..models.cancellation_event import CancellationEvent
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..utils.time_utils import utc_now
from .base import BaseService
from .credit_ledger_service import CreditLedgerService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

_ACTION_NAMES = {
    CatchUpApprovalStatus.APPROVED: "approved",
    CatchUpApprovalStatus.REJECTED: "rejected",
}


@dataclass(frozen=True)
class DecisionResult:
    event: CancellationEvent
    credit_balance: int


@dataclass
class BulkDecisionResult:
    client_id: str
    status: CatchUpApprovalStatus
    transitioned_event_ids: List[str] = field(default_factory=list)
    skipped_event_ids: List[str] = field(default_factory=list)
    credit_balance: int = 0


@dataclass(frozen=True)
class PendingClient:
    client_id: str
    pending_count: int
    cancellation_count: int
    oldest_cancelled_at: datetime


def aggregate_status(counts: dict) -> CatchUpApprovalStatus:
    """
    Collapse a client's per-event statuses into one headline status.

    approved wins over pending, pending over rejected, rejected over none.
    """
    for status in (
        CatchUpApprovalStatus.APPROVED,
        CatchUpApprovalStatus.PENDING,
        CatchUpApprovalStatus.REJECTED,
    ):
        if counts.get(status, 0) > 0:
            return status
    return CatchUpApprovalStatus.NONE


class CatchUpApprovalService(BaseService):
    def __init__(
        self,
        db,
        credit_service: Optional[CreditLedgerService] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        super().__init__(db)
        self.credit_service = credit_service or CreditLedgerService(db)
        self.notification_service = notification_service or NotificationService(db)
        self.event_repository = RepositoryFactory.create_cancellation_event_repository(db)
        self.profile_repository = RepositoryFactory.create_client_profile_repository(db)

    # Per-event transitions

    @BaseService.measure_operation("approve_catch_up")
    def approve_catch_up(
        self, event_id: str, *, business_id: str, decided_by_id: Optional[str] = None
    ) -> DecisionResult:
        """
        pending -> approved, crediting the event's client with one catch-up credit.

        Raises:
            CancellationEventNotFoundException: Unknown event or another business's event
            InvalidTransitionException: Event is not pending
        """
        return self._decide(event_id, business_id, CatchUpApprovalStatus.APPROVED, decided_by_id)

    @BaseService.measure_operation("reject_catch_up")
    def reject_catch_up(
        self, event_id: str, *, business_id: str, decided_by_id: Optional[str] = None
    ) -> DecisionResult:
        """pending -> rejected. Never touches the credit ledger."""
        return self._decide(event_id, business_id, CatchUpApprovalStatus.REJECTED, decided_by_id)

    def _decide(
        self,
        event_id: str,
        business_id: str,
        target: CatchUpApprovalStatus,
        decided_by_id: Optional[str],
    ) -> DecisionResult:
        with self.transaction():
            event = self.event_repository.get_for_business(event_id, business_id)
            if event is None:
                raise CancellationEventNotFoundException(event_id)
            balance = self._transition(event, target, decided_by_id, utc_now())
            if balance is None:
                self.event_repository.refresh(event)
                self.logger.warning(
                    "Catch-up decision refused",
                    extra={
                        "event_id": event_id,
                        "current_status": event.catch_up_status,
                        "attempted": target.value,
                        "code": "INVALID_TRANSITION",
                    },
                )
                raise InvalidTransitionException(event_id, event.catch_up_status, _ACTION_NAMES[target])

        prometheus_metrics.record_catch_up_transition(target.value)
        self.logger.info(
            f"Catch-up request {target.value}",
            extra={"event_id": event_id, "client_id": event.client_id, "decided_by_id": decided_by_id},
        )
        return DecisionResult(event=event, credit_balance=balance)

    def _transition(
        self,
        event: CancellationEvent,
        target: CatchUpApprovalStatus,
        decided_by_id: Optional[str],
        decided_at: datetime,
    ) -> Optional[int]:
        """
        Apply one compare-and-set transition inside the open transaction.

        Returns:
            The client's credit balance after the transition, or None when
            the event was no longer pending.
        """
        moved = self.event_repository.transition_status(
            event.id,
            from_status=CatchUpApprovalStatus.PENDING,
            to_status=target,
            decided_at=decided_at,
            decided_by_id=decided_by_id,
        )
        if not moved:
            return None
        self.event_repository.refresh(event)
        if target == CatchUpApprovalStatus.APPROVED:
            balance = self.credit_service.credit(event.client_id, event.business_id, use_transaction=False)
        else:
            balance = self.credit_service.get_balance(event.client_id, event.business_id)
        self.notification_service.catch_up_decided(event)
        return balance

    # Legacy per-client operations

    @BaseService.measure_operation("approve_catch_up_for_client")
    def approve_catch_up_for_client(
        self, client_id: str, *, business_id: str, decided_by_id: Optional[str] = None
    ) -> BulkDecisionResult:
        """Approve every currently pending event of a client."""
        return self._decide_for_client(client_id, business_id, CatchUpApprovalStatus.APPROVED, decided_by_id)

    @BaseService.measure_operation("reject_catch_up_for_client")
    def reject_catch_up_for_client(
        self, client_id: str, *, business_id: str, decided_by_id: Optional[str] = None
    ) -> BulkDecisionResult:
        """Reject every currently pending event of a client."""
        return self._decide_for_client(client_id, business_id, CatchUpApprovalStatus.REJECTED, decided_by_id)

    def _decide_for_client(
        self,
        client_id: str,
        business_id: str,
        target: CatchUpApprovalStatus,
        decided_by_id: Optional[str],
    ) -> BulkDecisionResult:
        result = BulkDecisionResult(client_id=client_id, status=target)
        with self.transaction():
            now = utc_now()
            for event_id in self.event_repository.list_pending_ids_for_client(client_id, business_id):
                event = self.event_repository.get_by_id(event_id)
                balance = self._transition(event, target, decided_by_id, now) if event else None
                if balance is None:
                    # Resolved by a concurrent request since the listing
                    result.skipped_event_ids.append(event_id)
                else:
                    result.transitioned_event_ids.append(event_id)
            result.credit_balance = self.credit_service.get_balance(client_id, business_id)

        prometheus_metrics.record_catch_up_transition(target.value, len(result.transitioned_event_ids))
        self.logger.info(
            f"Catch-up requests {target.value} for client",
            extra={
                "client_id": client_id,
                "transitioned": len(result.transitioned_event_ids),
                "skipped": len(result.skipped_event_ids),
            },
        )
        return result

    # Reads

    def list_catch_up_requests(
        self, business_id: str, status: Optional[CatchUpApprovalStatus] = None
    ) -> List[CancellationEvent]:
        """All of a business's cancellation events, newest first."""
        statuses = [status] if status is not None else None
        return self.event_repository.list_for_business(business_id, statuses=statuses)

    def list_pending_catch_up_requests(self, business_id: str) -> List[CancellationEvent]:
        return self.list_catch_up_requests(business_id, CatchUpApprovalStatus.PENDING)

    def list_clients_pending_approval(self, business_id: str) -> List[PendingClient]:
        clients: List[PendingClient] = []
        for summary in self.event_repository.pending_clients(business_id):
            profile = self.profile_repository.get_by_client(summary.client_id, business_id)
            clients.append(
                PendingClient(
                    client_id=summary.client_id,
                    pending_count=summary.pending_count,
                    cancellation_count=profile.cancellation_count if profile else 0,
                    oldest_cancelled_at=summary.oldest_cancelled_at,
                )
            )
        return clients

    def get_client_status(self, client_id: str, business_id: str) -> CatchUpApprovalStatus:
        return aggregate_status(self.event_repository.status_counts_for_client(client_id, business_id))
