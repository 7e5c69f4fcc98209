"""Access-control evaluator for event-attribute data.

Rules, in precedence order:
1. ADMIN users may do anything on any attribute.
2. Otherwise the user's single Permission row for the attribute decides;
   no row means every operation is denied.
3. create / read need ``can_create`` / ``can_read``.
4. update / delete of an existing row also need the user to be its author.

Decisions are recomputed on every call; nothing is cached because
permission rows can change between requests.
"""
import enum
import logging
from typing import Optional

from app.exceptions import AuthorizationError, ValidationError
from app.models.user import UserRole
from app.services.store import Store

logger = logging.getLogger(__name__)


class Operation(str, enum.Enum):
    create = "create"
    read = "read"
    update = "update"
    delete = "delete"


_FLAG_FOR = {
    Operation.create: "can_create",
    Operation.read: "can_read",
    Operation.update: "can_update",
    Operation.delete: "can_delete",
}

_DENIED_MESSAGE = {
    Operation.create: "You do not have permission to create data",
    Operation.read: "You do not have permission to view this data",
    Operation.update: "You do not have permission to update this data",
    Operation.delete: "You do not have permission to delete this data",
}


def is_admin(user: dict) -> bool:
    return UserRole(user["role"]) == UserRole.admin


def is_permitted(
    user: dict,
    permission: Optional[dict],
    operation: Operation,
    owner_id: Optional[str] = None,
) -> bool:
    """Pure decision over (role, permission row, ownership)."""
    if is_admin(user):
        return True
    if permission is None:
        return False
    if operation in (Operation.update, Operation.delete):
        if owner_id is None or owner_id != user["id"]:
            return False
    return bool(permission.get(_FLAG_FOR[operation]))


def check_access(
    store: Store,
    user: dict,
    event_attribute_id: str,
    operation: Operation,
    owner_id: Optional[str] = None,
) -> None:
    """Raise AuthorizationError unless ``user`` may perform ``operation``."""
    if is_admin(user):
        return
    permission = store.find_permission(user["id"], event_attribute_id)
    if not is_permitted(user, permission, operation, owner_id):
        logger.info(
            "Denied %s on attribute %s for user %s", operation.value, event_attribute_id, user["id"]
        )
        raise AuthorizationError(_DENIED_MESSAGE[operation])


def check_image_allowed(attribute: dict, has_image: bool) -> None:
    """Reject an image on an attribute configured without image support."""
    if has_image and not attribute.get("allow_image"):
        raise ValidationError("This attribute does not allow images")


def require_admin(user: dict) -> None:
    if not is_admin(user):
        raise AuthorizationError("Access denied. Administrator role required")


def require_self_or_admin(user: dict, user_id: str) -> None:
    if not is_admin(user) and user["id"] != user_id:
        raise AuthorizationError("Access denied")
