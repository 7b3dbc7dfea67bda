# backend/swimdesk/models/enrollment.py
"""
Enrollment model: a client's seat in a class session.

Enrollments are never physically removed. Cancelling flips the status to
``cancelled`` so the row remains available for audit and for deriving
cancellation history. At most one *active* enrollment may exist per
(session, client) pair, enforced by a partial unique index.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.enums import EnrollmentStatus
from ..database import Base


class Enrollment(Base):
    __tablename__ = "enrollments"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    session_id = Column(String(26), ForeignKey("class_sessions.id"), nullable=False, index=True)
    client_id = Column(String(26), nullable=False, index=True)
    business_id = Column(String(26), nullable=False, index=True)

    status = Column(String(20), nullable=False, default=EnrollmentStatus.ACTIVE.value, index=True)
    # True when the seat was paid for with a catch-up credit
    is_catch_up = Column(Boolean, nullable=False, default=False)

    enrolled_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    enrolled_by_id = Column(String(26), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by_id = Column(String(26), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    session = relationship("ClassSession", back_populates="enrollments")
    cancellation_event = relationship(
        "CancellationEvent", back_populates="enrollment", uselist=False
    )

    __table_args__ = (
        Index(
            "uq_enrollments_active_session_client",
            "session_id",
            "client_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.status == EnrollmentStatus.ACTIVE.value

    def __repr__(self) -> str:
        return (
            f"<Enrollment {self.id}: session={self.session_id} client={self.client_id} "
            f"status={self.status} catch_up={self.is_catch_up}>"
        )
