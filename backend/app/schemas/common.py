"""Shared schema base and small reference shapes."""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serializes with camelCase keys; accepts camelCase or snake_case input."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "from_attributes": True}


class UserRef(CamelModel):
    id: str
    name: str
    email: str


class EventRef(CamelModel):
    id: str
    name: str


class MessageOut(CamelModel):
    message: str
