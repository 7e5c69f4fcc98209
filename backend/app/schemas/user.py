"""Pydantic schemas for Users and sessions."""
from __future__ import annotations
from datetime import datetime
from typing import Optional

from app.models.user import UserRole
from app.schemas.common import CamelModel


class UserCreate(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    role: UserRole = UserRole.employee


class UserUpdate(CamelModel):
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[UserRole] = None
    password: Optional[str] = None


class UserOut(CamelModel):
    id: str
    email: str
    name: str
    role: UserRole
    created_at: datetime
    updated_at: datetime


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class SessionUser(CamelModel):
    id: str
    email: str
    name: str
    role: UserRole


class LoginResponse(CamelModel):
    token: str
    user: SessionUser


class MeResponse(CamelModel):
    user: UserOut
