"""
core/errors.py -- Typed failure kinds shared by every layer.

Each error class carries the HTTP status it maps to, so the API layer can
translate any AppError into the response envelope with one handler instead
of one handler per exception type.

All four kinds are client-caused. The server never retries them; they
propagate straight to the response. Anything that is not an AppError is an
internal failure and is reported as a generic 500 by api/main.py.

Layer rule: core/ is the kernel. No imports from api/, auth/, or inventory/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    """One violated field rule. field is the wire (camelCase) name."""

    field: str
    message: str


class AppError(Exception):
    """Base class for expected, client-facing failures.

    errors holds per-field violations for validation failures. When it is
    non-empty the envelope reports the list; otherwise it reports message.
    """

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, errors: list[FieldError] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors: list[FieldError] = list(errors or [])


class BadRequest(AppError):
    """Malformed input, failed field validation, or an empty update payload."""

    status_code = 400
    code = "bad_request"


class Unauthenticated(AppError):
    """Missing, malformed, expired, or unrecognised credential."""

    status_code = 401
    code = "unauthenticated"


class Forbidden(AppError):
    """Valid credential, but the principal's role does not permit the action."""

    status_code = 403
    code = "forbidden"


class NotFound(AppError):
    """The referenced record does not exist."""

    status_code = 404
    code = "not_found"
