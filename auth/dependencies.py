"""
auth/dependencies.py -- Bearer credential resolution and the FastAPI dependency.

resolve_principal() is the framework-free half of the gate: it turns a raw
bearer token into a Principal or raises Unauthenticated. get_current_principal()
is the FastAPI Depends() wrapper that pulls the token from the request and
the UserStore from app.state.

Resolution always re-reads the user from the store. The role in the token is
a hint only; a role change, deletion, or deactivation takes effect on the
next request without waiting for the token to expire.

Layer rule: no imports from api/ or inventory/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Request

from auth.models import Principal, Role
from auth.policy import require
from auth.store import UserStore
from auth.tokens import decode_access_token
from core.errors import Unauthenticated

logger = logging.getLogger("carinventory.auth")

_AUTH_REQUIRED = "Authentication required"


def bearer_token(request: Request) -> str | None:
    """Return the token from 'Authorization: Bearer <token>', or None."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def resolve_principal(user_store: UserStore, token: str | None) -> Principal:
    """Verify token and resolve it to the Principal it names.

    Raises Unauthenticated when the token is absent, malformed, expired,
    signed with an unrecognised key, or names a user that no longer exists
    or is deactivated. The reason is logged; the client always sees the
    same message.
    """
    if not token:
        logger.warning("Authentication failed: no bearer token")
        raise Unauthenticated(_AUTH_REQUIRED)

    payload = decode_access_token(token)
    if payload is None:
        logger.warning("Authentication failed: invalid or expired token")
        raise Unauthenticated(_AUTH_REQUIRED)

    user = user_store.get_by_id(payload["user_id"])
    if user is None or not user.is_active:
        logger.warning("Authentication failed: user %s not found or inactive", payload["user_id"])
        raise Unauthenticated(_AUTH_REQUIRED)

    return Principal(id=user.id, role=user.role)


def get_current_principal(request: Request) -> Principal:
    """Require authentication. Raises Unauthenticated (HTTP 401) on failure.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(principal: Principal = Depends(get_current_principal)): ...
    """
    return resolve_principal(request.app.state.user_store, bearer_token(request))


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    """Require an admin principal. Raises Unauthenticated (401) or Forbidden (403).

    Runs as a dependency so the role check happens before body validation.
    """
    require(principal, {Role.admin})
    return principal
