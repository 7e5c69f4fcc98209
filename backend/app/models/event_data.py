"""EventData ORM model — one submitted value against an event attribute."""
import uuid
from sqlalchemy import Column, String, Text, DateTime, JSON, ForeignKey
from app.database import Base


class EventData(Base):
    __tablename__ = "event_data"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    event_attribute_id = Column(String(36), ForeignKey("event_attributes.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    data = Column(JSON, nullable=True)
    comment = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False, index=True)
    updated_at = Column(DateTime, nullable=False)
