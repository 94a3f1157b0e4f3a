"""Bearer-token auth for endpoints that act on behalf of a user.

Tokens are Supabase-issued HS256 JWTs; the `sub` claim is the user id.
"""

import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from mothership.config import settings
from mothership.exceptions import MothershipError

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class Unauthorized(MothershipError):
    """Missing, malformed or expired bearer token."""


def decode_user_id(token: str) -> str | None:
    """Return the `sub` claim of a valid token, else None."""
    if not settings.supabase_jwt_secret:
        logger.warning("Token rejected | SUPABASE_JWT_SECRET not configured")
        return None
    try:
        payload = jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=["HS256"],
            audience=settings.jwt_audience,
        )
    except JWTError as e:
        logger.info("Token rejected | %s", str(e)[:200])
        return None
    return payload.get("sub") or None


def get_optional_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    """User id when a valid token is present; anonymous callers get None."""
    if not credentials:
        return None
    return decode_user_id(credentials.credentials)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    if not credentials:
        raise Unauthorized("missing bearer token")

    user_id = decode_user_id(credentials.credentials)
    if not user_id:
        raise Unauthorized("invalid bearer token")
    return user_id
