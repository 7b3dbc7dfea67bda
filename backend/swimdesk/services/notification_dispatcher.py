# backend/swimdesk/services/notification_dispatcher.py
"""
Synchronous outbox dispatcher.

Delivers due outbox rows one at a time, committing each outcome on its
own so one bad message never holds back the rest. Failed deliveries are
rescheduled with linear backoff (``attempt * notification_backoff_seconds``)
and marked FAILED once ``notification_max_attempts`` is reached.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import List, Optional

from ..core.config import settings
from ..models.event_outbox import EventOutbox
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .notification_provider import NotificationProvider, NotificationProviderTemporaryError

logger = logging.getLogger(__name__)


def next_backoff(attempt_number: int) -> int:
    """Delay in seconds before retry number ``attempt_number`` (1-indexed)."""
    return max(attempt_number, 1) * settings.notification_backoff_seconds


@dataclass
class DispatchSummary:
    sent: List[str] = field(default_factory=list)
    retried: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class NotificationDispatcher(BaseService):
    def __init__(self, db, provider: Optional[NotificationProvider] = None):
        super().__init__(db)
        self.provider = provider or NotificationProvider()
        self.outbox_repository = RepositoryFactory.create_event_outbox_repository(db)

    @BaseService.measure_operation("dispatch_pending")
    def dispatch_pending(self, limit: Optional[int] = None, now: Optional[datetime] = None) -> DispatchSummary:
        summary = DispatchSummary()
        with self.transaction():
            pending = self.outbox_repository.fetch_pending(limit=limit or settings.notification_batch_size, now=now)
            pending_ids = [row.id for row in pending]

        for event_id in pending_ids:
            with self.transaction():
                event = self.db.get(EventOutbox, event_id)
                if event is None:
                    continue
                self._deliver(event, summary)

        if pending_ids:
            logger.info(
                "Outbox dispatch pass: %s sent, %s retried, %s failed",
                len(summary.sent),
                len(summary.retried),
                len(summary.failed),
            )
        return summary

    def _deliver(self, event: EventOutbox, summary: DispatchSummary) -> None:
        attempt_number = event.attempt_count + 1
        try:
            self.provider.send(
                event_type=event.event_type,
                recipient_id=event.recipient_id,
                payload=event.payload,
                idempotency_key=event.idempotency_key,
            )
        except (NotificationProviderTemporaryError, ValueError) as exc:
            terminal = attempt_number >= settings.notification_max_attempts
            backoff = next_backoff(attempt_number)
            self.outbox_repository.mark_failed(
                event.id,
                attempt_count=attempt_number,
                backoff_seconds=backoff,
                error=str(exc),
                terminal=terminal,
            )
            if terminal:
                prometheus_metrics.record_notification_outcome(event.event_type, "failed")
                logger.error("Outbox event %s failed after %s attempts", event.id, attempt_number)
                summary.failed.append(event.id)
            else:
                prometheus_metrics.record_notification_outcome(event.event_type, "retried")
                logger.warning(
                    "Retrying outbox event %s attempt=%s backoff=%ss", event.id, attempt_number, backoff
                )
                summary.retried.append(event.id)
            return

        self.outbox_repository.mark_sent(event.id, attempt_number)
        prometheus_metrics.record_notification_outcome(event.event_type, "sent")
        summary.sent.append(event.id)
