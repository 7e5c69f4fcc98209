"""Permission API routes — per-user, per-attribute CRUD flags."""
import logging
from fastapi import APIRouter, Depends, status

from app.dependencies import get_admin_user, get_current_user, get_store
from app.exceptions import NotFoundError, ValidationError
from app.schemas.common import MessageOut
from app.schemas.permission import PermissionOut, PermissionUpdate, PermissionUpsert
from app.services.access_control import require_self_or_admin
from app.services.store import Store

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/user/{user_id}", response_model=list[PermissionOut])
def list_user_permissions(
    user_id: str,
    user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """Permissions held by a user. Employees may only list their own."""
    require_self_or_admin(user, user_id)
    if not store.get_user(user_id):
        raise NotFoundError("User", user_id)
    return store.list_permissions_for_user(user_id)


@router.get("/attribute/{attribute_id}", response_model=list[PermissionOut])
def list_attribute_permissions(
    attribute_id: str,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store),
):
    """Permissions granted on an attribute, with the users they belong to."""
    if not store.get_attribute(attribute_id):
        raise NotFoundError("Event attribute", attribute_id)
    return store.list_permissions_for_attribute(attribute_id)


@router.post("/", response_model=PermissionOut, status_code=status.HTTP_201_CREATED)
def upsert_permission(
    payload: PermissionUpsert,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store),
):
    """Create the permission for (user, attribute) or merge into the existing one."""
    if not payload.user_id or not payload.event_attribute_id:
        raise ValidationError("User and event attribute are required")
    if not store.get_user(payload.user_id):
        raise NotFoundError("User", payload.user_id)
    if not store.get_attribute(payload.event_attribute_id):
        raise NotFoundError("Event attribute", payload.event_attribute_id)
    return store.upsert_permission(
        payload.user_id,
        payload.event_attribute_id,
        can_create=payload.can_create,
        can_read=payload.can_read,
        can_update=payload.can_update,
        can_delete=payload.can_delete,
    )


@router.put("/{permission_id}", response_model=PermissionOut)
def update_permission(
    permission_id: str,
    payload: PermissionUpdate,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store),
):
    """Change only the flags present in the payload."""
    permission = store.update_permission(permission_id, payload.model_dump(exclude_unset=True))
    if not permission:
        raise NotFoundError("Permission", permission_id)
    return permission


@router.delete("/{permission_id}", response_model=MessageOut)
def delete_permission(
    permission_id: str,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store),
):
    if not store.delete_permission(permission_id):
        raise NotFoundError("Permission", permission_id)
    return {"message": "Permission deleted"}
