# backend/swimdesk/core/exceptions.py
"""
Domain-specific exceptions for the SwimDesk platform.

Each failure keeps its own code so the UI can render an actionable
message instead of a generic "request failed".
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException carrying message, code and details."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data or state."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class UnauthorizedException(DomainException):
    """Raised when the caller is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def to_http_exception(self) -> HTTPException:
        exc = super().to_http_exception()
        exc.headers = {"WWW-Authenticate": "Bearer"}
        return exc


class ForbiddenException(DomainException):
    """Raised when the caller's role does not allow the action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """
    Raised when a service operation fails because the store is unavailable.

    Surfaced as 503 so callers know the request may be retried.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def to_http_exception(self) -> HTTPException:
        exc = super().to_http_exception()
        exc.headers = {"Retry-After": "2"}
        return exc


# Specific business exceptions


class SessionNotFoundException(NotFoundException):
    def __init__(self, session_id: str):
        super().__init__(
            message="Session not found",
            code="SESSION_NOT_FOUND",
            details={"session_id": session_id},
        )


class EnrollmentNotFoundException(NotFoundException):
    def __init__(self, session_id: str, client_id: str):
        super().__init__(
            message="No active enrollment exists for this client in this session",
            code="ENROLLMENT_NOT_FOUND",
            details={"session_id": session_id, "client_id": client_id},
        )


class ClientNotFoundException(NotFoundException):
    """Raised when a client has never booked with the caller's business."""

    def __init__(self, client_id: str):
        super().__init__(
            message="Client not found",
            code="CLIENT_NOT_FOUND",
            details={"client_id": client_id},
        )


class CancellationEventNotFoundException(NotFoundException):
    def __init__(self, event_id: str):
        super().__init__(
            message="Catch-up request not found",
            code="EVENT_NOT_FOUND",
            details={"event_id": event_id},
        )


class DuplicateEnrollmentException(ConflictException):
    """Raised when a client already holds an active enrollment for the session."""

    def __init__(self, session_id: str, client_id: str):
        super().__init__(
            message="Client is already enrolled in this session",
            code="DUPLICATE_ENROLLMENT",
            details={"session_id": session_id, "client_id": client_id},
        )


class CapacityExceededException(ConflictException):
    """Raised when enrolling into a session that is already full."""

    def __init__(self, session_id: str, capacity: int):
        super().__init__(
            message="This session is full",
            code="CAPACITY_EXCEEDED",
            details={"session_id": session_id, "capacity": capacity},
        )


class InvalidTransitionException(ConflictException):
    """Raised when a catch-up request is not in the state an action requires."""

    def __init__(self, event_id: str, current_status: str, attempted: str):
        super().__init__(
            message=f"Catch-up request is already {current_status} and cannot be {attempted}",
            code="INVALID_TRANSITION",
            details={
                "event_id": event_id,
                "current_status": current_status,
                "attempted": attempted,
            },
        )


class InsufficientCreditException(BusinessRuleException):
    """Raised when a client has no catch-up credit left to spend."""

    def __init__(self, client_id: str, balance: int, requested: int = 1):
        super().__init__(
            message="No catch-up credits available",
            code="INSUFFICIENT_CREDIT",
            details={"client_id": client_id, "balance": balance, "requested": requested},
        )


class NotCatchUpSlotException(BusinessRuleException):
    """Raised when a credit is used against a session without a freed seat."""

    def __init__(self, session_id: str):
        super().__init__(
            message="This session has no catch-up slot open",
            code="NOT_CATCH_UP_SLOT",
            details={"session_id": session_id},
        )


class CatchUpNotEligibleException(BusinessRuleException):
    """Raised when the client fails the catch-up eligibility gate."""

    MESSAGES = {
        "no_prior_cancellation": "Catch-up lessons are only available after cancelling a session",
        "catch_up_rejected": "Your catch-up request was rejected",
    }

    def __init__(self, client_id: str, reason: str):
        super().__init__(
            message=self.MESSAGES.get(reason, "Client is not eligible for catch-up lessons"),
            code="CATCH_UP_NOT_ELIGIBLE",
            details={"client_id": client_id, "reason": reason},
        )


class SessionInactiveException(BusinessRuleException):
    """Raised when enrolling into a deactivated or already started session."""

    def __init__(self, session_id: str, reason: str = "inactive"):
        super().__init__(
            message="This session is no longer open for enrollment",
            code="SESSION_INACTIVE",
            details={"session_id": session_id, "reason": reason},
        )


class RepositoryException(Exception):
    """A query or write against the store failed; services map it to STORE_UNAVAILABLE."""
