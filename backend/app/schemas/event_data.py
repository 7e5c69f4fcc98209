"""Pydantic schemas for submitted event data."""
from __future__ import annotations
from datetime import datetime
from typing import Any, Optional

from app.schemas.common import CamelModel, UserRef
from app.schemas.event import AttributeOut


class EventDataCreate(CamelModel):
    event_id: Optional[str] = None
    event_attribute_id: Optional[str] = None
    data: Any = None
    comment: Optional[str] = None
    image_url: Optional[str] = None


class EventDataUpdate(CamelModel):
    data: Any = None
    comment: Optional[str] = None
    image_url: Optional[str] = None


class EventDataOut(CamelModel):
    id: str
    event_id: str
    event_attribute_id: str
    user_id: str
    data: Any = None
    comment: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    user: Optional[UserRef] = None
    event_attribute: Optional[AttributeOut] = None
