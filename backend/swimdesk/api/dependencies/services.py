"""
Service layer dependencies for dependency injection.

Each provider builds a service bound to the request's database session.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.cancellation_service import CancellationService
from ...services.catch_up_approval_service import CatchUpApprovalService
from ...services.catch_up_booking_service import CatchUpBookingService
from ...services.catch_up_policy_service import CatchUpPolicyService
from ...services.dashboard_service import DashboardService
from ...services.enrollment_service import EnrollmentService
from ...services.notification_dispatcher import NotificationDispatcher
from ...services.session_registry_service import SessionRegistryService
from .database import get_db


def get_session_registry_service(db: Session = Depends(get_db)) -> SessionRegistryService:
    return SessionRegistryService(db)


def get_enrollment_service(db: Session = Depends(get_db)) -> EnrollmentService:
    return EnrollmentService(db)


def get_cancellation_service(db: Session = Depends(get_db)) -> CancellationService:
    return CancellationService(db)


def get_catch_up_approval_service(db: Session = Depends(get_db)) -> CatchUpApprovalService:
    return CatchUpApprovalService(db)


def get_catch_up_booking_service(db: Session = Depends(get_db)) -> CatchUpBookingService:
    return CatchUpBookingService(db)


def get_catch_up_policy_service(db: Session = Depends(get_db)) -> CatchUpPolicyService:
    return CatchUpPolicyService(db)


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    return DashboardService(db)


def get_notification_dispatcher(db: Session = Depends(get_db)) -> NotificationDispatcher:
    return NotificationDispatcher(db)
