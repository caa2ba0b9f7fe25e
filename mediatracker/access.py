"""Ownership-or-admin access policy.

Handlers never compare ids or roles themselves: they describe the target
(its owning user and the roles allowed to reach it) and call
:func:`authorize`. Shared reference data such as the media catalog goes
through :func:`authorize_role`, which looks at the role alone.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .errors import Forbidden
from .models import Role

logger = logging.getLogger(__name__)

#: Roles allowed on per-user resources
USER_ROLES = frozenset({Role.ADMIN.value, Role.USER.value})

#: Roles allowed on catalog-wide administrative operations
ADMIN_ONLY = frozenset({Role.ADMIN.value})


class Decision(str, Enum):
    """Outcome of an access decision."""

    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True)
class Caller:
    """Authenticated identity of the current request."""

    id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


def decide(
    caller: Caller,
    owner_id: int | None = None,
    allowed_roles: Iterable[str] = USER_ROLES,
) -> Decision:
    """
    Decide whether ``caller`` may act on a resource.

    Args:
        caller (Caller): Identity of the current request.
        owner_id (int | None): Id of the user owning the target. ``None``
            marks a catalog-wide target that only administrators reach.
        allowed_roles (Iterable[str]): Roles admitted to the operation.

    Returns:
        Decision: ``ALLOW`` or ``DENY``.
    """
    if caller.role not in allowed_roles:
        return Decision.DENY
    if caller.is_admin:
        return Decision.ALLOW
    if owner_id is not None and caller.id == owner_id:
        return Decision.ALLOW
    return Decision.DENY


def authorize(
    caller: Caller,
    owner_id: int | None = None,
    allowed_roles: Iterable[str] = USER_ROLES,
) -> None:
    """
    Apply :func:`decide` and raise when access is denied.

    Raises:
        Forbidden: If the policy denies the operation.
    """
    if decide(caller, owner_id, allowed_roles) is Decision.DENY:
        logger.warning(
            "User %s with role %s was denied access to data of user %s",
            caller.id,
            caller.role,
            "<catalog>" if owner_id is None else owner_id,
        )
        raise Forbidden()


def decide_role(caller: Caller, allowed_roles: Iterable[str] = USER_ROLES) -> Decision:
    """Decide on shared reference data, where only the role matters."""
    return Decision.ALLOW if caller.role in allowed_roles else Decision.DENY


def authorize_role(caller: Caller, allowed_roles: Iterable[str] = USER_ROLES) -> None:
    """
    Apply :func:`decide_role` and raise when access is denied.

    Raises:
        Forbidden: If the caller's role is not admitted.
    """
    if decide_role(caller, allowed_roles) is Decision.DENY:
        logger.warning(
            "User %s with role %s was denied access to shared data",
            caller.id,
            caller.role,
        )
        raise Forbidden()
