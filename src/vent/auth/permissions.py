"""Permission checks over the user -> group -> permission graph.

The principal is an EntityData resolved with PERMISSION_EDGES eager-loaded.
Nothing here performs I/O: the graph walk only reads relations that are
already attached to the principal.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from vent.core.errors import PermissionDeniedError
from vent.core.fields import EntityData

if TYPE_CHECKING:
    from vent.schema.config import SchemaConfig

logger = logging.getLogger(__name__)

SUPERUSER_FIELD = "is_superuser"
GROUPS_EDGE = "groups"
PERMISSIONS_EDGE = "permissions"
PERMISSION_NAME_FIELD = "name"

# Edge paths the principal must be loaded with before authorization
PERMISSION_EDGES = [f"{GROUPS_EDGE}__{PERMISSIONS_EDGE}"]

# Admin actions and the permission prefix each one requires
ACTIONS = ("view", "add", "change", "delete")


def is_superuser(principal: EntityData) -> bool:
    return principal.get_bool(SUPERUSER_FIELD)


def collect_permissions(principal: EntityData) -> set[str]:
    """Return every permission name reachable through the principal's groups.

    An unloaded "groups" edge contributes nothing, the same as a user in
    no groups. Callers needing to tell those apart must check
    ``principal.has_edge("groups")`` themselves.
    """
    names: set[str] = set()
    for group in principal.get_edges(GROUPS_EDGE) or []:
        for permission in group.get_edges(PERMISSIONS_EDGE) or []:
            names.add(permission.get_string(PERMISSION_NAME_FIELD))
    return names


def missing_permissions(principal: EntityData, *required: str) -> list[str]:
    """Required permission names the principal does not hold, in order."""
    if is_superuser(principal):
        return []
    held = collect_permissions(principal)
    return [name for name in required if name not in held]


def authorize(principal: EntityData, *required: str) -> bool:
    """Return True if the principal holds every required permission.

    Superusers are authorized for anything, including an empty requirement,
    without walking the graph. A single missing permission fails the check.
    """
    return not missing_permissions(principal, *required)


def require_permissions(principal: EntityData, *required: str) -> None:
    """Like authorize(), but raise on failure.

    Raises:
        PermissionDeniedError: Naming the missing permissions
    """
    missing = missing_permissions(principal, *required)
    if missing:
        if not principal.has_edge(GROUPS_EDGE):
            logger.warning(
                "Authorizing user %s without a loaded '%s' edge", principal.id, GROUPS_EDGE
            )
        logger.warning("User %s denied, missing: %s", principal.id, ", ".join(missing))
        raise PermissionDeniedError(missing)


def schema_permissions(schema: SchemaConfig) -> dict[str, str]:
    """Permission names guarding each admin action on a schema.

    Example:
        >>> schema_permissions(user_schema)
        {'view': 'view_user', 'add': 'add_user', 'change': 'change_user', 'delete': 'delete_user'}
    """
    return {action: f"{action}_{schema.permission_suffix}" for action in ACTIONS}
