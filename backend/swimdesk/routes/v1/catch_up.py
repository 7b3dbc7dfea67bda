# backend/swimdesk/routes/v1/catch_up.py
"""
Catch-up routes - API v1

Versioned catch-up endpoints under /api/v1/catch-up.

Endpoints:
    GET /slots - Open catch-up slots for the calling client
    POST /slots/{session_id}/book - Spend a credit on a catch-up slot (client)
    GET /requests - Cancellation events for the business, optional ?status= (staff)
    GET /requests/pending - Pending cancellation events (staff)
    POST /requests/{event_id}/approve - Approve one request (staff)
    POST /requests/{event_id}/reject - Reject one request (staff)
    GET /clients/pending - Clients with pending requests (staff)
    POST /clients/{client_id}/approve - Approve all of a client's pending requests (staff)
    POST /clients/{client_id}/reject - Reject all of a client's pending requests (staff)
    PUT /clients/{client_id}/pre-approval - Set a client's pre-approval (admin)
    GET /policy - Business catch-up policy (staff)
    PUT /policy - Update business catch-up policy (admin)
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query

from ...api.dependencies.auth import require_admin, require_client, require_staff
from ...api.dependencies.services import (
    get_catch_up_approval_service,
    get_catch_up_booking_service,
    get_catch_up_policy_service,
    get_session_registry_service,
)
from ...core.enums import CatchUpApprovalStatus
from ...core.exceptions import DomainException
from ...models.cancellation_event import CancellationEvent
from ...principal import UserPrincipal
from ...schemas.catch_up import (
    BulkCatchUpDecisionResponse,
    CancellationEventResponse,
    CatchUpBookingResponse,
    CatchUpDecisionResponse,
    CatchUpPolicyResponse,
    CatchUpPolicyUpdate,
    CatchUpRequestListResponse,
    CatchUpSlotListResponse,
    CatchUpSlotResponse,
    ClientProfileResponse,
    PendingClientListResponse,
    PendingClientResponse,
    PreApprovalUpdate,
)
from ...schemas.enrollment import EnrollmentResponse
from ...services.catch_up_approval_service import BulkDecisionResult, CatchUpApprovalService, DecisionResult
from ...services.catch_up_booking_service import CatchUpBookingService
from ...services.catch_up_policy_service import CatchUpPolicyService
from ...services.session_registry_service import SessionRegistryService
from ._helpers import ULID_PATH_PATTERN, handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["catch-up-v1"])

EventIdPath = Path(..., description="Cancellation event ULID", pattern=ULID_PATH_PATTERN)
ClientIdPath = Path(..., min_length=1, max_length=26)


def _request_list(events: List[CancellationEvent]) -> CatchUpRequestListResponse:
    return CatchUpRequestListResponse(
        requests=[CancellationEventResponse.model_validate(event) for event in events],
        total=len(events),
    )


def _decision(result: DecisionResult) -> CatchUpDecisionResponse:
    return CatchUpDecisionResponse(
        event=CancellationEventResponse.model_validate(result.event),
        client_credit_balance=result.credit_balance,
    )


def _bulk_decision(result: BulkDecisionResult) -> BulkCatchUpDecisionResponse:
    return BulkCatchUpDecisionResponse(
        client_id=result.client_id,
        status=result.status,
        transitioned_event_ids=result.transitioned_event_ids,
        skipped_event_ids=result.skipped_event_ids,
        client_credit_balance=result.credit_balance,
    )


# Client side


@router.get("/slots", response_model=CatchUpSlotListResponse)
def list_open_slots(
    principal: UserPrincipal = Depends(require_client),
    registry: SessionRegistryService = Depends(get_session_registry_service),
) -> CatchUpSlotListResponse:
    slots = registry.list_open_catch_up_slots(principal.business_id, client_id=principal.user_id)
    return CatchUpSlotListResponse(
        slots=[CatchUpSlotResponse.model_validate(slot) for slot in slots],
        total=len(slots),
    )


@router.post("/slots/{session_id}/book", response_model=CatchUpBookingResponse, status_code=201)
def book_catch_up(
    session_id: str = Path(..., description="Session ULID", pattern=ULID_PATH_PATTERN),
    principal: UserPrincipal = Depends(require_client),
    booking_service: CatchUpBookingService = Depends(get_catch_up_booking_service),
) -> CatchUpBookingResponse:
    """Book a catch-up session with one credit."""
    try:
        result = booking_service.book_catch_up(
            session_id, principal.user_id, business_id=principal.business_id
        )
        return CatchUpBookingResponse(
            enrollment=EnrollmentResponse.model_validate(result.enrollment),
            remaining_credits=result.remaining_credits,
        )
    except DomainException as e:
        handle_domain_exception(e)


# Business side, per event


@router.get("/requests", response_model=CatchUpRequestListResponse)
def list_requests(
    status: Optional[CatchUpApprovalStatus] = Query(None),
    principal: UserPrincipal = Depends(require_staff),
    approval_service: CatchUpApprovalService = Depends(get_catch_up_approval_service),
) -> CatchUpRequestListResponse:
    return _request_list(approval_service.list_catch_up_requests(principal.business_id, status))


@router.get("/requests/pending", response_model=CatchUpRequestListResponse)
def list_pending_requests(
    principal: UserPrincipal = Depends(require_staff),
    approval_service: CatchUpApprovalService = Depends(get_catch_up_approval_service),
) -> CatchUpRequestListResponse:
    return _request_list(approval_service.list_pending_catch_up_requests(principal.business_id))


@router.post("/requests/{event_id}/approve", response_model=CatchUpDecisionResponse)
def approve_request(
    event_id: str = EventIdPath,
    principal: UserPrincipal = Depends(require_staff),
    approval_service: CatchUpApprovalService = Depends(get_catch_up_approval_service),
) -> CatchUpDecisionResponse:
    try:
        return _decision(
            approval_service.approve_catch_up(
                event_id, business_id=principal.business_id, decided_by_id=principal.user_id
            )
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/requests/{event_id}/reject", response_model=CatchUpDecisionResponse)
def reject_request(
    event_id: str = EventIdPath,
    principal: UserPrincipal = Depends(require_staff),
    approval_service: CatchUpApprovalService = Depends(get_catch_up_approval_service),
) -> CatchUpDecisionResponse:
    try:
        return _decision(
            approval_service.reject_catch_up(
                event_id, business_id=principal.business_id, decided_by_id=principal.user_id
            )
        )
    except DomainException as e:
        handle_domain_exception(e)


# Business side, per client


@router.get("/clients/pending", response_model=PendingClientListResponse)
def list_pending_clients(
    principal: UserPrincipal = Depends(require_staff),
    approval_service: CatchUpApprovalService = Depends(get_catch_up_approval_service),
) -> PendingClientListResponse:
    clients = approval_service.list_clients_pending_approval(principal.business_id)
    return PendingClientListResponse(
        clients=[PendingClientResponse.model_validate(client) for client in clients],
        total=len(clients),
    )


@router.post("/clients/{client_id}/approve", response_model=BulkCatchUpDecisionResponse)
def approve_client(
    client_id: str = ClientIdPath,
    principal: UserPrincipal = Depends(require_staff),
    approval_service: CatchUpApprovalService = Depends(get_catch_up_approval_service),
) -> BulkCatchUpDecisionResponse:
    try:
        return _bulk_decision(
            approval_service.approve_catch_up_for_client(
                client_id, business_id=principal.business_id, decided_by_id=principal.user_id
            )
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/clients/{client_id}/reject", response_model=BulkCatchUpDecisionResponse)
def reject_client(
    client_id: str = ClientIdPath,
    principal: UserPrincipal = Depends(require_staff),
    approval_service: CatchUpApprovalService = Depends(get_catch_up_approval_service),
) -> BulkCatchUpDecisionResponse:
    try:
        return _bulk_decision(
            approval_service.reject_catch_up_for_client(
                client_id, business_id=principal.business_id, decided_by_id=principal.user_id
            )
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/clients/{client_id}/pre-approval", response_model=ClientProfileResponse)
def set_pre_approval(
    client_id: str = ClientIdPath,
    payload: PreApprovalUpdate = Body(...),
    principal: UserPrincipal = Depends(require_admin),
    policy_service: CatchUpPolicyService = Depends(get_catch_up_policy_service),
) -> ClientProfileResponse:
    try:
        profile = policy_service.set_client_pre_approval(client_id, principal.business_id, payload.pre_approved)
        return ClientProfileResponse.model_validate(profile)
    except DomainException as e:
        handle_domain_exception(e)


# Policy


@router.get("/policy", response_model=CatchUpPolicyResponse)
def get_policy(
    principal: UserPrincipal = Depends(require_staff),
    policy_service: CatchUpPolicyService = Depends(get_catch_up_policy_service),
) -> CatchUpPolicyResponse:
    return CatchUpPolicyResponse.model_validate(policy_service.get_policy(principal.business_id))


@router.put("/policy", response_model=CatchUpPolicyResponse)
def update_policy(
    payload: CatchUpPolicyUpdate = Body(...),
    principal: UserPrincipal = Depends(require_admin),
    policy_service: CatchUpPolicyService = Depends(get_catch_up_policy_service),
) -> CatchUpPolicyResponse:
    try:
        policy = policy_service.update_policy(
            principal.business_id,
            catch_up_enabled=payload.catch_up_enabled,
            auto_approve=payload.auto_approve,
            updated_by_id=principal.user_id,
        )
        return CatchUpPolicyResponse.model_validate(policy)
    except DomainException as e:
        handle_domain_exception(e)
