# backend/swimdesk/models/event_outbox.py
"""
Notification outbox persistence model.

Catch-up notifications are written here in the same transaction as the
state change that caused them, then delivered by the dispatcher. A crash
after commit therefore never loses a notification, and a rollback never
sends one.
"""

from enum import Enum

from sqlalchemy import Column, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from sqlalchemy.types import JSON
import ulid

from swimdesk.database import Base
from swimdesk.utils.time_utils import utc_now


class EventOutboxStatus(str, Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"  # attempts exhausted or permanent provider error


class EventOutbox(Base):
    """One queued message with its delivery bookkeeping."""

    __tablename__ = "event_outbox"
    __table_args__ = (UniqueConstraint("idempotency_key", name="uq_event_outbox_idempotency_key"),)

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    event_type = Column(String(100), nullable=False, index=True)
    # Cancellation event or enrollment the message is about
    aggregate_id = Column(String(64), nullable=False, index=True)
    # Business or client the message is addressed to
    recipient_id = Column(String(26), nullable=False, index=True)
    idempotency_key = Column(String(255), nullable=False)
    payload = Column(JSONB(astext_type=Text()).with_variant(JSON(), "sqlite"), nullable=False, default=dict)

    status = Column(String(20), nullable=False, index=True, default=EventOutboxStatus.PENDING.value)
    attempt_count = Column(Integer, nullable=False, default=0)
    next_attempt_at = Column(DateTime(timezone=True), nullable=True, index=True, default=utc_now)
    last_error = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<EventOutbox {self.id} {self.event_type} {self.status} attempts={self.attempt_count}>"
