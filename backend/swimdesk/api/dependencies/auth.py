# backend/swimdesk/api/dependencies/auth.py
"""
Authentication and role dependencies.

``get_current_principal`` turns the bearer token into a UserPrincipal;
``require_roles`` narrows a route to specific roles.
"""

import logging
from typing import Callable, Optional

from fastapi import Depends

from ...auth import oauth2_scheme_optional, principal_from_token
from ...core.enums import STAFF_ROLES, RoleName
from ...core.exceptions import ForbiddenException, UnauthorizedException
from ...principal import UserPrincipal

logger = logging.getLogger(__name__)


def get_current_principal(token: Optional[str] = Depends(oauth2_scheme_optional)) -> UserPrincipal:
    """
    Resolve the authenticated caller.

    Raises:
        UnauthorizedException: No bearer token, or the token does not verify
    """
    if not token:
        raise UnauthorizedException("Not authenticated", code="NOT_AUTHENTICATED")
    return principal_from_token(token)


def require_roles(*roles: RoleName) -> Callable[..., UserPrincipal]:
    """Ensure the caller holds one of ``roles``."""
    allowed = set(roles)

    def checker(principal: UserPrincipal = Depends(get_current_principal)) -> UserPrincipal:
        if principal.role not in allowed:
            logger.warning(
                "Role check failed",
                extra={"user_id": principal.user_id, "role": principal.role.value},
            )
            raise ForbiddenException(
                f"Requires role: {', '.join(sorted(role.value for role in allowed))}",
                code="FORBIDDEN_ROLE",
                details={"role": principal.role.value},
            )
        return principal

    return checker


require_staff = require_roles(*STAFF_ROLES)
require_admin = require_roles(RoleName.ADMIN)
require_client = require_roles(RoleName.CLIENT)
