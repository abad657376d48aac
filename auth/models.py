"""
auth/models.py -- Domain types for authentication entities.

Pattern: Data class (pure data container, zero logic). Dataclasses own domain
shape; stores and routes do the work.

Role is a closed str-Enum so an unknown role string fails at construction
time (Role("owner") raises ValueError) rather than slipping through to a
runtime membership check.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    admin = "admin"
    manager = "manager"
    sales = "sales"


@dataclass
class User:
    """A stored account that can log in and act on the inventory.

    email doubles as the login name. role defaults to sales, the lowest
    privilege, which is also what public self-registration produces.
    """

    email: str
    first_name: str
    last_name: str
    role: Role = Role.sales
    id: int | None = None
    hashed_password: str | None = None
    created_at: str | None = None
    last_login: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class Principal:
    """The authenticated caller for one request.

    Built by auth.dependencies from a verified bearer token and the stored
    user record. Frozen: a request cannot change who it is acting as.
    """

    id: int
    role: Role
