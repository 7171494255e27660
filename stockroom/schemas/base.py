"""
Base schemas with common functionality.
"""
from datetime import datetime
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class BaseSchema(BaseModel):
    """
    Base schema with common functionality for all schemas.
    Fields are exposed in camelCase on the wire and accepted in either case.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel
    )

class TimestampedSchema(BaseSchema):
    """Base schema for models with timestamp fields"""
    created_at: datetime
    updated_at: datetime
