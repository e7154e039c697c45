# app/schemas/common.py
"""
Base model for the JSON API.
The wire format is camelCase (regNumber, createdAt, ...) while Python code
and the ORM stay snake_case; populate_by_name lets the same model be built
from ORM rows and from request bodies.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True
