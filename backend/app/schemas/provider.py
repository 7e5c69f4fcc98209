"""Pydantic schemas for Providers and event associations."""
from __future__ import annotations
from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from app.schemas.common import CamelModel, EventRef


class ProviderCreate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    dynamic_fields: Optional[dict[str, Any]] = None


class ProviderUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    dynamic_fields: Optional[dict[str, Any]] = None


class ProviderOut(CamelModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    dynamic_fields: dict[str, Any] = {}
    created_at: datetime
    updated_at: datetime


class ProviderCounts(CamelModel):
    events: int


class ProviderListOut(ProviderOut):
    counts: ProviderCounts = Field(alias="_count")


class ProviderEventEntry(CamelModel):
    event: EventRef


class ProviderDetailOut(ProviderOut):
    events: list[ProviderEventEntry] = []


class EventProviderAdd(CamelModel):
    provider_id: Optional[str] = None


class EventProviderOut(CamelModel):
    id: str
    event_id: str
    provider_id: str
    created_at: datetime
    provider: Optional[ProviderOut] = None
