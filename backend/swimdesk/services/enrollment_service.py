# backend/swimdesk/services/enrollment_service.py
"""
Enrollment Service for SwimDesk

The only component that changes roster membership. Capacity checks lock
the session row first so concurrent enrollments cannot both take the
last seat; the partial unique index on active enrollments backs up the
duplicate check.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from ..core.exceptions import (
    CapacityExceededException,
    DuplicateEnrollmentException,
    EnrollmentNotFoundException,
    SessionInactiveException,
    SessionNotFoundException,
)
from ..models.enrollment import Enrollment
from ..repositories.factory import RepositoryFactory
from ..utils.time_utils import utc_now
from .base import BaseService

logger = logging.getLogger(__name__)


class EnrollmentService(BaseService):
    def __init__(self, db):
        super().__init__(db)
        self.session_repository = RepositoryFactory.create_session_repository(db)
        self.enrollment_repository = RepositoryFactory.create_enrollment_repository(db)

    @BaseService.measure_operation("enroll")
    def enroll(
        self,
        session_id: str,
        client_id: str,
        *,
        business_id: str,
        enrolled_by_id: Optional[str] = None,
        is_catch_up: bool = False,
        use_transaction: bool = True,
    ) -> Enrollment:
        """
        Add a client to a session roster.

        Args:
            session_id: Session to join
            client_id: Client taking the seat
            business_id: Business the caller acts for; other businesses' sessions read as missing
            enrolled_by_id: Staff member acting on the client's behalf, if any
            is_catch_up: Seat is paid for with a catch-up credit
            use_transaction: False when the caller owns the transaction

        Raises:
            SessionNotFoundException, SessionInactiveException,
            DuplicateEnrollmentException, CapacityExceededException
        """
        with self.optional_transaction(use_transaction):
            session = self.session_repository.get_for_business(session_id, business_id, for_update=True)
            if session is None:
                raise SessionNotFoundException(session_id)
            if not session.is_active:
                raise SessionInactiveException(session_id)
            if session.has_started(utc_now()):
                raise SessionInactiveException(session_id, reason="started")

            if self.enrollment_repository.get_active(session_id, client_id) is not None:
                raise DuplicateEnrollmentException(session_id, client_id)

            active_count = self.session_repository.count_active_enrollments(session_id)
            if active_count >= session.capacity:
                logger.warning(
                    "Enrollment rejected, session full",
                    extra={"session_id": session_id, "client_id": client_id, "capacity": session.capacity},
                )
                raise CapacityExceededException(session_id, session.capacity)

            try:
                enrollment = self.enrollment_repository.create(
                    session_id=session_id,
                    client_id=client_id,
                    business_id=session.business_id,
                    is_catch_up=is_catch_up,
                    enrolled_at=utc_now(),
                    enrolled_by_id=enrolled_by_id or client_id,
                )
            except IntegrityError as exc:
                # A concurrent request inserted the same active pair
                raise DuplicateEnrollmentException(session_id, client_id) from exc

        self.logger.info(
            "Client enrolled",
            extra={
                "session_id": session_id,
                "client_id": client_id,
                "enrollment_id": enrollment.id,
                "is_catch_up": is_catch_up,
            },
        )
        return enrollment

    @BaseService.measure_operation("cancel_enrollment")
    def cancel(
        self,
        session_id: str,
        client_id: str,
        *,
        business_id: str,
        cancelled_by_id: Optional[str] = None,
        use_transaction: bool = True,
    ) -> Enrollment:
        """
        Flip the client's active enrollment to cancelled and return it.

        Catch-up bookkeeping is the caller's job.

        Raises:
            EnrollmentNotFoundException: No active enrollment for the pair,
                including when a concurrent request cancelled it first
        """
        with self.optional_transaction(use_transaction):
            enrollment = self.enrollment_repository.get_active(session_id, client_id, for_update=True)
            if enrollment is None or enrollment.business_id != business_id:
                raise EnrollmentNotFoundException(session_id, client_id)

            cancelled = self.enrollment_repository.mark_cancelled(
                enrollment.id, cancelled_at=utc_now(), cancelled_by_id=cancelled_by_id or client_id
            )
            if not cancelled:
                raise EnrollmentNotFoundException(session_id, client_id)
            self.enrollment_repository.refresh(enrollment)

        self.logger.info(
            "Enrollment cancelled",
            extra={"session_id": session_id, "client_id": client_id, "enrollment_id": enrollment.id},
        )
        return enrollment
