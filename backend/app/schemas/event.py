"""Pydantic schemas for Events and their attributes."""
from __future__ import annotations
from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator

from app.models.event import DataType
from app.schemas.common import CamelModel, EventRef
from app.schemas.provider import ProviderOut


def _coerce_date(value: Any) -> Any:
    """Accept bare dates ("2024-06-01") and treat empty strings as unset."""
    if value == "":
        return None
    if isinstance(value, str) and len(value) == 10:
        return f"{value}T00:00:00"
    return value


class EventCreate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    dynamic_fields: Optional[dict[str, Any]] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def coerce_dates(cls, value: Any) -> Any:
        return _coerce_date(value)


class EventUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    dynamic_fields: Optional[dict[str, Any]] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def coerce_dates(cls, value: Any) -> Any:
        return _coerce_date(value)


class EventOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    dynamic_fields: dict[str, Any] = {}
    created_at: datetime
    updated_at: datetime


class AttributeCreate(CamelModel):
    name: Optional[str] = None
    data_type: Optional[DataType] = None
    allow_image: bool = False
    description: Optional[str] = None


class AttributeUpdate(CamelModel):
    name: Optional[str] = None
    data_type: Optional[DataType] = None
    allow_image: Optional[bool] = None
    description: Optional[str] = None


class AttributeOut(CamelModel):
    id: str
    event_id: str
    name: str
    data_type: DataType
    allow_image: bool
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AttributeWithEvent(AttributeOut):
    event: Optional[EventRef] = None


class EventProviderEntry(CamelModel):
    provider: ProviderOut


class EventCounts(CamelModel):
    event_data: int


class EventDetailOut(EventOut):
    attributes: list[AttributeOut] = []
    providers: list[EventProviderEntry] = []
    counts: EventCounts = Field(alias="_count")
