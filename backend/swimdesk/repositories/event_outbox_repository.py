# backend/swimdesk/repositories/event_outbox_repository.py
"""
Notification outbox repository.

Rows are enqueued by the services that change catch-up state, inside
their transaction. The dispatcher reads due rows and writes back the
outcome of each delivery attempt.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..core.ulid_helper import generate_ulid
from ..database.session_utils import POSTGRESQL
from ..models.event_outbox import EventOutbox, EventOutboxStatus
from ..utils.time_utils import utc_now
from .base_repository import BaseRepository

MAX_ERROR_LENGTH = 1000


class EventOutboxRepository(BaseRepository[EventOutbox]):
    def __init__(self, db: Session):
        super().__init__(db, EventOutbox)

    def enqueue(
        self,
        event_type: str,
        aggregate_id: str,
        recipient_id: str,
        payload: Optional[Dict[str, Any]] = None,
        idempotency_key: Optional[str] = None,
    ) -> EventOutbox:
        """
        Queue a message once per idempotency key.

        A second enqueue with the same key is a no-op and returns the row
        that was queued first.
        """
        key = idempotency_key or f"{event_type}:{aggregate_id}:{recipient_id}"
        self._insert_ignore(
            {
                "id": generate_ulid(),
                "event_type": event_type,
                "aggregate_id": aggregate_id,
                "recipient_id": recipient_id,
                "payload": payload or {},
                "idempotency_key": key,
                "status": EventOutboxStatus.PENDING.value,
                "attempt_count": 0,
                "next_attempt_at": utc_now(),
            },
            ["idempotency_key"],
        )
        row = self.find_one_by(idempotency_key=key)
        if row is None:
            raise RepositoryException(f"Outbox row for {key} missing after enqueue")
        return row

    def fetch_pending(self, limit: int = 100, now: Optional[datetime] = None) -> List[EventOutbox]:
        """Pending rows whose next attempt is due, earliest first."""
        query = (
            self.db.query(EventOutbox)
            .filter(
                EventOutbox.status == EventOutboxStatus.PENDING.value,
                EventOutbox.next_attempt_at <= (now or utc_now()),
            )
            .order_by(EventOutbox.next_attempt_at.asc(), EventOutbox.id.asc())
            .limit(limit)
        )
        # Parallel dispatchers each take a disjoint batch
        if self.dialect_name == POSTGRESQL:
            query = query.with_for_update(skip_locked=True)
        return self._execute_query(query)

    def list_for_recipient(self, recipient_id: str) -> List[EventOutbox]:
        query = (
            self.db.query(EventOutbox)
            .filter(EventOutbox.recipient_id == recipient_id)
            .order_by(EventOutbox.created_at.asc(), EventOutbox.id.asc())
        )
        return self._execute_query(query)

    def mark_sent(self, event_id: str, attempt_count: int) -> None:
        self._record_attempt(
            event_id,
            status=EventOutboxStatus.SENT,
            attempt_count=attempt_count,
            next_attempt_at=utc_now(),
            last_error=None,
        )

    def mark_failed(
        self,
        event_id: str,
        *,
        attempt_count: int,
        backoff_seconds: int,
        error: Optional[str] = None,
        terminal: bool = False,
    ) -> None:
        """Record a failed attempt; a terminal failure parks the row as FAILED."""
        now = utc_now()
        if terminal:
            status, retry_at = EventOutboxStatus.FAILED, now
        else:
            status, retry_at = EventOutboxStatus.PENDING, now + timedelta(seconds=max(backoff_seconds, 1))
        self._record_attempt(
            event_id,
            status=status,
            attempt_count=attempt_count,
            next_attempt_at=retry_at,
            last_error=error[:MAX_ERROR_LENGTH] if error else None,
        )

    def _record_attempt(self, event_id: str, *, status: EventOutboxStatus, **values: Any) -> None:
        try:
            self.db.query(EventOutbox).filter(EventOutbox.id == event_id).update(
                {**values, "status": status.value, "updated_at": utc_now()},
                synchronize_session="fetch",
            )
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating outbox event {event_id}: {str(e)}")
            raise RepositoryException(f"Failed to update outbox event: {str(e)}")
