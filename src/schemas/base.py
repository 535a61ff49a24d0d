"""Shared base model for camelCase JSON payloads."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serializes to camelCase, accepts camelCase or snake_case input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StatusMessage(BaseModel):
    """Plain confirmation response."""

    message: str
