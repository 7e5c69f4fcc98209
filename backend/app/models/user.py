"""User ORM model."""
import enum
import uuid
from sqlalchemy import Column, String, DateTime, Enum as SAEnum
from app.database import Base


class UserRole(str, enum.Enum):
    admin = "ADMIN"
    employee = "EMPLOYEE"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(150), nullable=False)
    role = Column(SAEnum(UserRole), nullable=False, default=UserRole.employee)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
