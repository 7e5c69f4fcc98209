"""Authentication API routes."""
import logging
from fastapi import APIRouter, Depends

from app.dependencies import get_auth_service, get_current_user
from app.schemas.user import LoginRequest, LoginResponse, MeResponse
from app.services.auth_service import AuthService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    """Exchange email and password for a bearer token."""
    token, user = auth.login(payload.email, payload.password)
    return {"token": token, "user": user}


@router.get("/me", response_model=MeResponse)
def me(user: dict = Depends(get_current_user)):
    """Return the user the bearer token belongs to."""
    return {"user": user}
