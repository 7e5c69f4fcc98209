"""FastAPI dependencies — wire the application's store and services into routes."""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import Settings
from app.services.access_control import require_admin
from app.services.auth_service import AuthService
from app.services.image_storage import LocalImageStorage
from app.services.store import Store

bearer_scheme = HTTPBearer(auto_error=False)


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_image_storage(request: Request) -> LocalImageStorage:
    return request.app.state.image_storage


def get_auth_service(
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(store, settings)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> dict:
    """Resolve the bearer token to the live user record (401 otherwise)."""
    token = credentials.credentials if credentials else None
    return auth.authenticate(token)


def get_admin_user(user: dict = Depends(get_current_user)) -> dict:
    """Current user, required to be an administrator (403 otherwise)."""
    require_admin(user)
    return user
