"""
Base schema with camelCase wire names
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case fields in Python, camelCase keys in JSON and the store"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(BaseModel):
    message: str


def reject_null(value):
    """Partial updates may omit a field but never null it out"""
    if value is None:
        raise ValueError("may not be null")
    return value
