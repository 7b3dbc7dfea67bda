# backend/swimdesk/repositories/enrollment_repository.py
"""
Enrollment Repository for SwimDesk

Enrollments are only ever created or cancelled. Cancellation is a
conditional UPDATE on ``status = 'active'`` so two concurrent cancels
of the same seat cannot both succeed.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.enums import EnrollmentStatus
from ..core.exceptions import RepositoryException
from ..models.class_session import ClassSession
from ..models.enrollment import Enrollment
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class EnrollmentRepository(BaseRepository[Enrollment]):
    """Repository for session enrollments."""

    def __init__(self, db: Session):
        super().__init__(db, Enrollment)

    def get_active(
        self, session_id: str, client_id: str, for_update: bool = False
    ) -> Optional[Enrollment]:
        """The client's active enrollment in a session, if any."""
        try:
            query = self.db.query(Enrollment).filter(
                Enrollment.session_id == session_id,
                Enrollment.client_id == client_id,
                Enrollment.status == EnrollmentStatus.ACTIVE.value,
            )
            if for_update:
                query = self._lock(query)
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error getting active enrollment for client {client_id} in session {session_id}: {str(e)}"
            )
            raise RepositoryException(f"Failed to get enrollment: {str(e)}")

    def list_active_for_session(self, session_id: str) -> List[Enrollment]:
        query = (
            self.db.query(Enrollment)
            .filter(
                Enrollment.session_id == session_id,
                Enrollment.status == EnrollmentStatus.ACTIVE.value,
            )
            .order_by(Enrollment.enrolled_at, Enrollment.id)
        )
        return self._execute_query(query)

    def client_has_history(self, client_id: str, business_id: str) -> bool:
        """True once the client has enrolled at ``business_id``, whatever the enrollment's status."""
        query = self.db.query(Enrollment.id).filter(
            Enrollment.client_id == client_id,
            Enrollment.business_id == business_id,
        )
        return bool(self._execute_scalar(self.db.query(query.exists())))

    def list_upcoming_for_client(self, client_id: str, business_id: str, now: datetime) -> List[Enrollment]:
        """Active enrollments at ``business_id`` in sessions that have not started yet, soonest first."""
        query = (
            self.db.query(Enrollment)
            .join(ClassSession, ClassSession.id == Enrollment.session_id)
            .options(joinedload(Enrollment.session))
            .filter(
                Enrollment.client_id == client_id,
                Enrollment.business_id == business_id,
                Enrollment.status == EnrollmentStatus.ACTIVE.value,
                ClassSession.starts_at > now,
            )
            .order_by(ClassSession.starts_at, Enrollment.id)
        )
        return self._execute_query(query)

    def mark_cancelled(
        self, enrollment_id: str, cancelled_at: datetime, cancelled_by_id: Optional[str]
    ) -> bool:
        """
        Flip an active enrollment to cancelled.

        Returns False when the enrollment was no longer active, meaning a
        concurrent request already cancelled it.
        """
        try:
            result = self.db.execute(
                update(Enrollment)
                .where(
                    Enrollment.id == enrollment_id,
                    Enrollment.status == EnrollmentStatus.ACTIVE.value,
                )
                .values(
                    status=EnrollmentStatus.CANCELLED.value,
                    cancelled_at=cancelled_at,
                    cancelled_by_id=cancelled_by_id,
                )
                .execution_options(synchronize_session="fetch")
            )
            self.db.flush()
            return bool(result.rowcount)
        except SQLAlchemyError as e:
            self.logger.error(f"Error cancelling enrollment {enrollment_id}: {str(e)}")
            raise RepositoryException(f"Failed to cancel enrollment: {str(e)}")
