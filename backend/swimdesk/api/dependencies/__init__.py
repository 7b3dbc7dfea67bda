"""
API dependencies package.

Usage:
    from swimdesk.api.dependencies import get_current_principal, require_staff
"""

from .auth import get_current_principal, require_admin, require_client, require_roles, require_staff
from .database import get_db

__all__ = [
    "get_current_principal",
    "get_db",
    "require_admin",
    "require_client",
    "require_roles",
    "require_staff",
]
