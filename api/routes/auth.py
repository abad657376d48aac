"""
api/routes/auth.py -- Registration, login and user management endpoints.

Routes:
  POST /auth/register  -- public self-registration (sales role only)
  POST /auth/login     -- email/password login; returns a bearer token
  GET  /auth/me        -- current user record (requires auth)
  POST /auth/users     -- create a user with any role (admin only)

Security:
  POST /login is rate-limited per client address (LOGIN_RATE_LIMIT).
  authenticate_user() provides timing equalization -- use it, never inline.
  Cache-Control: no-store on every response that carries a token.
  Wrong email and wrong password return the same "Invalid credentials" so
  the endpoint does not reveal which addresses are registered.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from api.envelope import success
from api.limiter import limiter
from api.models import AuthData, LoginRequest, RegisterRequest, UserCreate, UserOut
from auth.dependencies import get_current_principal, require_admin
from auth.models import Principal, Role, User
from auth.store import UserStore
from auth.tokens import authenticate_user, create_access_token, hash_password
from core.config import get_settings
from core.errors import BadRequest, Forbidden, NotFound, Unauthenticated

logger = logging.getLogger("carinventory.auth")

# Auth policy:
# - POST /api/auth/register: public, unless SELF_REGISTRATION_ENABLED=false
# - POST /api/auth/login:    public
# - GET  /api/auth/me:       requires auth (get_current_principal)
# - POST /api/auth/users:    requires admin (require_admin)
router = APIRouter()

_EMAIL_TAKEN = "Email already registered"


def _user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def _insert_user(store: UserStore, body: RegisterRequest, role: Role) -> User:
    """Hash the password, store the user, and return the stored record.

    Raises BadRequest when the email is taken. The IntegrityError branch
    covers two concurrent registrations racing past the lookup.
    """
    if store.get_by_email(body.email) is not None:
        raise BadRequest(_EMAIL_TAKEN)
    user = User(
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        role=role,
        hashed_password=hash_password(body.password),
    )
    try:
        user_id = store.create_user(user)
    except IntegrityError as exc:
        raise BadRequest(_EMAIL_TAKEN) from exc
    return store.get_by_id(user_id)


def _token_response(status_code: int, message: str, user: User) -> JSONResponse:
    token = create_access_token(user.id, user.email, user.role)
    resp = success(status_code, message, AuthData(token=token, user=UserOut.from_user(user)))
    resp.headers["Cache-Control"] = "no-store"
    return resp


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/register", status_code=201)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create a sales account and return a token for it.

    Public registration cannot grant privileges: asking for admin or manager
    is refused with 403. Elevated accounts are created by an admin through
    POST /auth/users or by an operator through `main.py create-user`.
    """
    if not get_settings().self_registration_enabled:
        raise Forbidden("Self-registration is disabled")
    if body.role is not None and body.role is not Role.sales:
        raise Forbidden("Insufficient permissions: public registration can only create sales accounts.")

    user = _insert_user(_user_store(request), body, Role.sales)
    logger.info("User %s registered (role=%s)", user.id, user.role.value)
    return _token_response(201, "User registered successfully", user)


@limiter.limit(get_settings().login_rate_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/login")
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return a bearer token."""
    store = _user_store(request)
    user = authenticate_user(store, body.email, body.password)
    if user is None:
        logger.warning("Login failed for %s", body.email.strip().lower())
        raise Unauthenticated("Invalid credentials")

    store.update_last_login(user.id)
    return _token_response(200, "Login successful", user)


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me")
def me(request: Request, principal: Principal = Depends(get_current_principal)) -> JSONResponse:
    user = _user_store(request).get_by_id(principal.id)
    if user is None:
        raise NotFound("User not found")
    return success(200, "User retrieved successfully", UserOut.from_user(user))


@router.post("/auth/users", status_code=201)
def create_user(
    request: Request,
    body: UserCreate,
    principal: Principal = Depends(require_admin),
) -> JSONResponse:
    """Create a user account with any role. Admin only."""
    user = _insert_user(_user_store(request), body, body.role)
    logger.info("User %s created by admin %s (role=%s)", user.id, principal.id, user.role.value)
    return success(201, "User created successfully", UserOut.from_user(user))
