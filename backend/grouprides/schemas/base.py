"""
Shared pydantic base for camelCase JSON bodies.
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serializes to camelCase keys and accepts either camelCase or snake_case."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
