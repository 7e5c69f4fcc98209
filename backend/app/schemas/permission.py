"""Pydantic schemas for Permissions."""
from __future__ import annotations
from datetime import datetime
from typing import Optional

from app.schemas.common import CamelModel, UserRef
from app.schemas.event import AttributeWithEvent


class PermissionUpsert(CamelModel):
    user_id: Optional[str] = None
    event_attribute_id: Optional[str] = None
    can_create: Optional[bool] = None
    can_read: Optional[bool] = None
    can_update: Optional[bool] = None
    can_delete: Optional[bool] = None


class PermissionUpdate(CamelModel):
    can_create: Optional[bool] = None
    can_read: Optional[bool] = None
    can_update: Optional[bool] = None
    can_delete: Optional[bool] = None


class PermissionOut(CamelModel):
    id: str
    user_id: str
    event_attribute_id: str
    can_create: bool
    can_read: bool
    can_update: bool
    can_delete: bool
    created_at: datetime
    updated_at: datetime
    user: Optional[UserRef] = None
    event_attribute: Optional[AttributeWithEvent] = None
