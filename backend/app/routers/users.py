"""User API routes."""
import logging
from fastapi import APIRouter, Depends, status

from app.dependencies import get_admin_user, get_auth_service, get_current_user, get_image_storage, get_store
from app.exceptions import NotFoundError, ValidationError
from app.schemas.common import MessageOut
from app.schemas.user import UserCreate, UserUpdate, UserOut
from app.services.access_control import require_self_or_admin
from app.services.auth_service import AuthService
from app.services.event_data_service import release_images
from app.services.image_storage import LocalImageStorage
from app.services.store import Store

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=list[UserOut])
def list_users(admin: dict = Depends(get_admin_user), store: Store = Depends(get_store)):
    """List all users (admin only)."""
    return store.list_users()


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store),
    auth: AuthService = Depends(get_auth_service),
):
    """Create a user with a hashed password (admin only)."""
    if not payload.email or not payload.password or not payload.name:
        raise ValidationError("Email, password and name are required")
    return store.create_user(
        email=payload.email,
        password_hash=auth.hash_password(payload.password),
        name=payload.name,
        role=payload.role,
    )


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, user: dict = Depends(get_current_user), store: Store = Depends(get_store)):
    """Fetch a single user. Employees may only fetch themselves."""
    require_self_or_admin(user, user_id)
    found = store.get_user(user_id)
    if not found:
        raise NotFoundError("User", user_id)
    return found


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: str,
    payload: UserUpdate,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store),
    auth: AuthService = Depends(get_auth_service),
):
    """Update a user (partial update, admin only). A new password is re-hashed."""
    updates = payload.model_dump(exclude_unset=True)
    password = updates.pop("password", None)
    if password:
        updates["password_hash"] = auth.hash_password(password)
    updated = store.update_user(user_id, updates)
    if not updated:
        raise NotFoundError("User", user_id)
    return updated


@router.delete("/{user_id}", response_model=MessageOut)
def delete_user(
    user_id: str,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store),
    images: LocalImageStorage = Depends(get_image_storage),
):
    """Delete a user, their permissions and their submitted data (admin only)."""
    purged = store.delete_user(user_id)
    if purged is None:
        raise NotFoundError("User", user_id)
    release_images(images, purged)
    return {"message": "User deleted"}
