"""Access policy for product mutation."""

from enum import Enum
from typing import Any

from catalog_api.domain.entities import Role


class Decision(str, Enum):
    """Authorization decision."""

    ALLOW = "allow"
    DENY = "deny"


def authorize(caller_id: Any, caller_role: Any, owner_id: Any) -> Decision:
    """Decide whether a caller may mutate a resource.

    Admins may mutate anything; everyone else only what they own.
    Never raises: absent ids or ids of different types are simply unequal.

    Args:
        caller_id: Identity of the caller.
        caller_role: Role of the caller (``Role`` or its string value).
        owner_id: Owner recorded on the target resource.

    Returns:
        ALLOW or DENY.
    """
    if caller_role == Role.ADMIN:
        return Decision.ALLOW

    if not caller_id or not owner_id:
        return Decision.DENY
    if type(caller_id) is not type(owner_id):
        return Decision.DENY
    if caller_id == owner_id:
        return Decision.ALLOW
    return Decision.DENY
