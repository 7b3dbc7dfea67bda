"""Shared helpers for v1 routes."""

from typing import NoReturn, Optional

from ...core.exceptions import DomainException, ForbiddenException, ValidationException
from ...principal import UserPrincipal

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


def resolve_acting_client(principal: UserPrincipal, client_id: Optional[str]) -> str:
    """
    Client a request acts on.

    Clients always act on themselves; staff must name the client.
    """
    if principal.is_client:
        if client_id and client_id != principal.user_id:
            raise ForbiddenException(
                "Clients can only act on their own enrollments", code="FORBIDDEN_CLIENT"
            )
        return principal.user_id
    if not client_id:
        raise ValidationException("client_id is required when acting for a client", code="CLIENT_REQUIRED")
    return client_id
