"""Event and EventAttribute ORM models."""
import enum
import uuid
from sqlalchemy import Column, String, Text, Boolean, DateTime, JSON, ForeignKey, UniqueConstraint, Enum as SAEnum
from app.database import Base


class DataType(str, enum.Enum):
    """Advisory type of an attribute's values. Never enforced on submitted data."""

    text = "TEXT"
    number = "NUMBER"
    date = "DATE"
    boolean = "BOOLEAN"


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    dynamic_fields = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)


class EventAttribute(Base):
    __tablename__ = "event_attributes"
    __table_args__ = (UniqueConstraint("event_id", "name", name="uq_event_attribute_name"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    data_type = Column(SAEnum(DataType), nullable=False, default=DataType.text)
    allow_image = Column(Boolean, nullable=False, default=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
