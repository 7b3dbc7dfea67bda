# backend/swimdesk/auth.py
"""
Bearer token handling.

Tokens are issued by the external user-management service; this module
only verifies them. ``create_access_token`` signs tokens with the same
secret for local tooling and tests.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, cast

from fastapi.security import OAuth2PasswordBearer
import jwt
from jwt import PyJWTError

from .core.config import settings
from .core.enums import RoleName
from .core.exceptions import UnauthorizedException
from .principal import UserPrincipal

logger = logging.getLogger(__name__)

oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)

REQUIRED_CLAIMS = ("sub", "role", "business_id", "exp")


def _secret_value(secret_obj: Any) -> str:
    getter = getattr(secret_obj, "get_secret_value", None)
    if callable(getter):
        return cast(str, getter())
    return cast(str, secret_obj)


def create_access_token(
    user_id: str,
    role: RoleName | str,
    business_id: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed access token.

    Args:
        user_id: Subject of the token
        role: admin, instructor or client
        business_id: Business the caller acts for
        expires_delta: Optional expiration time delta

    Returns:
        str: The encoded JWT token
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = {
        "sub": user_id,
        "role": RoleName(role).value,
        "business_id": business_id,
        "exp": expire,
    }
    return cast(
        str,
        jwt.encode(to_encode, _secret_value(settings.jwt_secret_key), algorithm=settings.jwt_algorithm),
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry and return the claims."""
    payload = jwt.decode(
        token,
        _secret_value(settings.jwt_secret_key),
        algorithms=[settings.jwt_algorithm],
        options={"require": list(REQUIRED_CLAIMS)},
    )
    return cast(Dict[str, Any], payload)


def principal_from_token(token: str) -> UserPrincipal:
    """
    Build the caller's principal from a bearer token.

    Raises:
        UnauthorizedException: Missing, expired, tampered or malformed token
    """
    try:
        claims = decode_access_token(token)
        return UserPrincipal(
            user_id=str(claims["sub"]),
            role=RoleName(claims["role"]),
            business_id=str(claims["business_id"]),
        )
    except (PyJWTError, ValueError, KeyError) as exc:
        logger.warning("Rejected bearer token: %s", type(exc).__name__)
        raise UnauthorizedException("Could not validate credentials", code="INVALID_TOKEN") from exc
