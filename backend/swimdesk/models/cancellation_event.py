# backend/swimdesk/models/cancellation_event.py
"""
Cancellation event: the audit and policy record created when an enrollment
is cancelled.

Each event carries its own catch-up approval status, so a business decides
per cancelled lesson rather than per client. The class title and start time
are snapshotted so the request still reads correctly if the session is
edited later.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.enums import CatchUpApprovalStatus
from ..database import Base

_STATUS_VALUES = ", ".join(f"'{status.value}'" for status in CatchUpApprovalStatus)


class CancellationEvent(Base):
    __tablename__ = "cancellation_events"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    enrollment_id = Column(String(26), ForeignKey("enrollments.id"), nullable=False, unique=True)
    session_id = Column(String(26), ForeignKey("class_sessions.id"), nullable=False, index=True)
    client_id = Column(String(26), nullable=False, index=True)
    business_id = Column(String(26), nullable=False, index=True)

    # Snapshot of the cancelled lesson
    class_title = Column(String(200), nullable=False)
    session_starts_at = Column(DateTime(timezone=True), nullable=False)

    cancelled_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    cancelled_by_id = Column(String(26), nullable=True)

    catch_up_status = Column(
        String(20),
        nullable=False,
        default=CatchUpApprovalStatus.PENDING.value,
        index=True,
    )
    decided_at = Column(DateTime(timezone=True), nullable=True)
    decided_by_id = Column(String(26), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    enrollment = relationship("Enrollment", back_populates="cancellation_event")
    session = relationship("ClassSession")

    __table_args__ = (
        CheckConstraint(
            f"catch_up_status IN ({_STATUS_VALUES})",
            name="ck_cancellation_events_status",
        ),
        Index("ix_cancellation_events_business_status", "business_id", "catch_up_status"),
        Index("ix_cancellation_events_client_status", "client_id", "catch_up_status"),
    )

    @property
    def status(self) -> CatchUpApprovalStatus:
        return CatchUpApprovalStatus(self.catch_up_status)

    def __repr__(self) -> str:
        return (
            f"<CancellationEvent {self.id}: client={self.client_id} session={self.session_id} "
            f"status={self.catch_up_status}>"
        )
