"""
auth/policy.py -- Role-action matrix and the single authorization gate.

Every role check in the project goes through require(). Callers either pass
an explicit role set or look one up from ROLE_MATRIX with authorize(), so
there is exactly one place that decides who may do what with a car record.

    create -> admin, manager
    read   -> admin, manager, sales
    update -> admin, manager
    delete -> admin

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from auth.models import Principal, Role
from core.errors import Forbidden


class Action(str, Enum):
    create = "create"
    read = "read"
    update = "update"
    delete = "delete"


ROLE_MATRIX: dict[Action, frozenset[Role]] = {
    Action.create: frozenset({Role.admin, Role.manager}),
    Action.read: frozenset({Role.admin, Role.manager, Role.sales}),
    Action.update: frozenset({Role.admin, Role.manager}),
    Action.delete: frozenset({Role.admin}),
}


def require(principal: Principal, allowed_roles: Iterable[Role]) -> None:
    """Raise Forbidden unless principal.role is one of allowed_roles.

    Stateless and side-effect free: the same principal and role set always
    produce the same outcome.
    """
    allowed = frozenset(allowed_roles)
    if principal.role not in allowed:
        names = " or ".join(sorted(r.value for r in allowed))
        raise Forbidden(f"Insufficient permissions: requires {names}.")


def authorize(principal: Principal, action: Action) -> None:
    """Apply the role matrix entry for action to principal."""
    require(principal, ROLE_MATRIX[action])
