"""
RoomStager Backend — Request Identity
=======================================

What:  FastAPI dependencies that turn a Bearer access token into an Identity.
Why:   Every /api/staging route except the public ones is scoped to the caller:
       owners see their own projects, admins see all of them.
How:   HTTPBearer extracts the token; PyJWT verifies it with the shared secret.
       The user id comes from the `id` claim (or `sub`); admin status from
       `isAdmin: true` or `role: "admin"`.
Who:   Tokens are issued by the external auth service. This module only verifies.

Failure modes:
    no/garbled/expired token         → AuthenticationError (401)
    valid token, admin route, no admin → PermissionDeniedError (403)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import settings
from app.exceptions import AuthenticationError, PermissionDeniedError

logger = logging.getLogger(__name__)

auth_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    user_id: str
    is_admin: bool = False


def decode_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError(message="Access token has expired")
    except jwt.InvalidTokenError as e:
        logger.debug("Rejected access token: %s", str(e))
        raise AuthenticationError(message="Invalid access token")


def identity_from_claims(claims: Dict[str, Any]) -> Identity:
    user_id = claims.get("id") or claims.get("sub")
    if not user_id:
        raise AuthenticationError(message="Access token carries no user id")
    is_admin = claims.get("isAdmin") is True or claims.get("role") == "admin"
    return Identity(user_id=str(user_id), is_admin=is_admin)


async def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(auth_scheme),
) -> Identity:
    """Dependency: the authenticated caller, or 401."""
    if creds is None or not creds.credentials.strip():
        raise AuthenticationError(message="Missing Authorization header")
    return identity_from_claims(decode_token(creds.credentials.strip()))


async def require_admin(identity: Identity = Depends(get_current_user)) -> Identity:
    """Dependency: the authenticated caller if they are an admin, or 403."""
    if not identity.is_admin:
        raise PermissionDeniedError()
    return identity
