# backend/swimdesk/services/notification_service.py
"""
Catch-up notifications.

Every method writes an outbox row inside the caller's transaction; the
NotificationDispatcher delivers them after commit. Each message has a
deterministic idempotency key so retried requests never queue it twice.
"""

import logging
from typing import Any, Dict

from ..core.constants import (
    EVENT_CATCH_UP_APPROVED,
    EVENT_CATCH_UP_BOOKED,
    EVENT_CATCH_UP_REJECTED,
    EVENT_CATCH_UP_REQUESTED,
)
from ..core.enums import CatchUpApprovalStatus
from ..models.cancellation_event import CancellationEvent
from ..models.class_session import ClassSession
from ..models.enrollment import Enrollment
from ..models.event_outbox import EventOutbox
from ..repositories.factory import RepositoryFactory
from ..utils.time_utils import ensure_utc
from .base import BaseService

logger = logging.getLogger(__name__)


def _event_payload(event: CancellationEvent) -> Dict[str, Any]:
    starts_at = ensure_utc(event.session_starts_at)
    cancelled_at = ensure_utc(event.cancelled_at)
    return {
        "cancellation_event_id": event.id,
        "client_id": event.client_id,
        "business_id": event.business_id,
        "session_id": event.session_id,
        "class_title": event.class_title,
        "session_starts_at": starts_at.isoformat() if starts_at else None,
        "cancelled_at": cancelled_at.isoformat() if cancelled_at else None,
        "catch_up_status": event.catch_up_status,
    }


class NotificationService(BaseService):
    def __init__(self, db):
        super().__init__(db)
        self.outbox_repository = RepositoryFactory.create_event_outbox_repository(db)

    def catch_up_requested(self, event: CancellationEvent) -> EventOutbox:
        """Tell the business a cancellation is waiting for a catch-up decision."""
        return self._enqueue(EVENT_CATCH_UP_REQUESTED, event.id, event.business_id, _event_payload(event))

    def catch_up_decided(self, event: CancellationEvent) -> EventOutbox:
        """Tell the client how their catch-up request was resolved."""
        event_type = (
            EVENT_CATCH_UP_APPROVED
            if event.catch_up_status == CatchUpApprovalStatus.APPROVED.value
            else EVENT_CATCH_UP_REJECTED
        )
        return self._enqueue(event_type, event.id, event.client_id, _event_payload(event))

    def catch_up_booked(self, enrollment: Enrollment, session: ClassSession) -> EventOutbox:
        """Tell the business a catch-up seat was taken."""
        starts_at = ensure_utc(session.starts_at)
        payload = {
            "enrollment_id": enrollment.id,
            "client_id": enrollment.client_id,
            "business_id": session.business_id,
            "session_id": session.id,
            "class_title": session.class_title,
            "session_starts_at": starts_at.isoformat() if starts_at else None,
        }
        return self._enqueue(EVENT_CATCH_UP_BOOKED, enrollment.id, session.business_id, payload)

    def _enqueue(
        self, event_type: str, aggregate_id: str, recipient_id: str, payload: Dict[str, Any]
    ) -> EventOutbox:
        row = self.outbox_repository.enqueue(
            event_type=event_type,
            aggregate_id=aggregate_id,
            recipient_id=recipient_id,
            payload=payload,
            idempotency_key=f"{event_type}:{aggregate_id}",
        )
        logger.debug(
            "Queued notification",
            extra={"event_type": event_type, "aggregate_id": aggregate_id, "recipient_id": recipient_id},
        )
        return row
