"""Provider and EventProvider ORM models."""
import uuid
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, UniqueConstraint
from app.database import Base


class Provider(Base):
    __tablename__ = "providers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    dynamic_fields = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)


class EventProvider(Base):
    __tablename__ = "event_providers"
    __table_args__ = (UniqueConstraint("event_id", "provider_id", name="uq_event_provider"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    provider_id = Column(String(36), ForeignKey("providers.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False)
