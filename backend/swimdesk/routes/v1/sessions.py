# backend/swimdesk/routes/v1/sessions.py
"""
Session routes - API v1

Versioned session endpoints under /api/v1/sessions.
All business logic delegated to the session, enrollment and cancellation services.

Endpoints:
    POST / - Create a session or weekly series (staff)
    GET / - List the caller's business sessions
    GET /{session_id} - Session details
    POST /{session_id}/deactivate - Soft-deactivate a session (staff)
    GET /{session_id}/roster - Active enrollments (staff)
    POST /{session_id}/enroll - Enroll a client
    POST /{session_id}/cancel - Cancel an enrollment and record catch-up bookkeeping
"""

from datetime import datetime
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Path, Query, status

from ...api.dependencies.auth import get_current_principal, require_staff
from ...api.dependencies.services import (
    get_cancellation_service,
    get_enrollment_service,
    get_session_registry_service,
)
from ...core.exceptions import DomainException
from ...principal import UserPrincipal
from ...schemas.catch_up import CancellationEventResponse, CancellationResponse
from ...schemas.enrollment import EnrollmentAction, EnrollmentResponse, RosterResponse
from ...schemas.session import SessionCreate, SessionListResponse, SessionResponse
from ...services.cancellation_service import CancellationService
from ...services.enrollment_service import EnrollmentService
from ...services.session_registry_service import SessionRegistryService
from ._helpers import ULID_PATH_PATTERN, handle_domain_exception, resolve_acting_client

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["sessions-v1"])

SessionIdPath = Path(..., description="Session ULID", pattern=ULID_PATH_PATTERN)


@router.post("", response_model=SessionListResponse, status_code=status.HTTP_201_CREATED)
def create_session(
    payload: SessionCreate = Body(...),
    principal: UserPrincipal = Depends(require_staff),
    registry: SessionRegistryService = Depends(get_session_registry_service),
) -> SessionListResponse:
    """Create a session; a recurrence expands into one session per week."""
    try:
        sessions = registry.create_session(principal.business_id, payload, created_by_id=principal.user_id)
        return SessionListResponse(
            sessions=[SessionResponse.model_validate(session) for session in sessions],
            total=len(sessions),
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=SessionListResponse)
def list_sessions(
    include_inactive: bool = Query(False),
    from_date: Optional[datetime] = Query(None, description="Only sessions starting at or after this time"),
    instructor_id: Optional[str] = Query(None),
    principal: UserPrincipal = Depends(get_current_principal),
    registry: SessionRegistryService = Depends(get_session_registry_service),
) -> SessionListResponse:
    sessions = registry.list_sessions(
        principal.business_id,
        include_inactive=include_inactive and principal.is_staff,
        from_date=from_date,
        instructor_id=instructor_id,
    )
    return SessionListResponse(
        sessions=[SessionResponse.model_validate(session) for session in sessions],
        total=len(sessions),
    )


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(
    session_id: str = SessionIdPath,
    principal: UserPrincipal = Depends(get_current_principal),
    registry: SessionRegistryService = Depends(get_session_registry_service),
) -> SessionResponse:
    try:
        return SessionResponse.model_validate(registry.get_session(session_id, principal.business_id))
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{session_id}/deactivate", response_model=SessionResponse)
def deactivate_session(
    session_id: str = SessionIdPath,
    principal: UserPrincipal = Depends(require_staff),
    registry: SessionRegistryService = Depends(get_session_registry_service),
) -> SessionResponse:
    try:
        return SessionResponse.model_validate(registry.deactivate_session(session_id, principal.business_id))
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{session_id}/roster", response_model=RosterResponse)
def get_roster(
    session_id: str = SessionIdPath,
    principal: UserPrincipal = Depends(require_staff),
    registry: SessionRegistryService = Depends(get_session_registry_service),
) -> RosterResponse:
    try:
        session = registry.get_session(session_id, principal.business_id)
        enrollments = registry.get_roster(session_id, principal.business_id)
        return RosterResponse(
            session_id=session.id,
            capacity=session.capacity,
            active_count=len(enrollments),
            enrollments=[EnrollmentResponse.model_validate(enrollment) for enrollment in enrollments],
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{session_id}/enroll", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
def enroll(
    session_id: str = SessionIdPath,
    payload: Optional[EnrollmentAction] = Body(None),
    principal: UserPrincipal = Depends(get_current_principal),
    enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentResponse:
    """Enroll the calling client, or the named client when called by staff."""
    try:
        client_id = resolve_acting_client(principal, payload.client_id if payload else None)
        enrollment = enrollment_service.enroll(
            session_id,
            client_id,
            business_id=principal.business_id,
            enrolled_by_id=principal.user_id,
        )
        return EnrollmentResponse.model_validate(enrollment)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{session_id}/cancel", response_model=CancellationResponse)
def cancel_enrollment(
    session_id: str = SessionIdPath,
    payload: Optional[EnrollmentAction] = Body(None),
    principal: UserPrincipal = Depends(get_current_principal),
    cancellation_service: CancellationService = Depends(get_cancellation_service),
) -> CancellationResponse:
    """Cancel an enrollment; the cancellation is recorded for catch-up."""
    try:
        client_id = resolve_acting_client(principal, payload.client_id if payload else None)
        result = cancellation_service.record_cancellation(
            session_id,
            client_id,
            business_id=principal.business_id,
            cancelled_by_id=principal.user_id,
        )
        return CancellationResponse(
            enrollment=EnrollmentResponse.model_validate(result.enrollment),
            cancellation_event=CancellationEventResponse.model_validate(result.event),
            cancellation_count=result.profile.cancellation_count,
            has_cancelled_before=result.profile.has_cancelled_before,
            catch_up_credits=result.credit_balance,
        )
    except DomainException as e:
        handle_domain_exception(e)
