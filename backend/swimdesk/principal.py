"""Principal for authenticated API callers."""

from __future__ import annotations

from dataclasses import dataclass

from swimdesk.core.enums import STAFF_ROLES, RoleName


@dataclass(frozen=True)
class UserPrincipal:
    """
    Identity asserted by the user-management service's bearer token.

    ``user_id`` is the client id for clients and the staff member's id for
    admins and instructors. Every caller acts for exactly one business.
    """

    user_id: str
    role: RoleName
    business_id: str

    @property
    def id(self) -> str:
        return self.user_id

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def is_client(self) -> bool:
        return self.role == RoleName.CLIENT
