"""
Utility functions for the application.
"""
from datetime import datetime, timezone
from typing import Type, TypeVar, List, Any
from pydantic import BaseModel

T = TypeVar('T', bound=BaseModel)


def utc_now() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def is_strict_int(value: Any) -> bool:
    """True for real integers. ``bool`` is rejected even though it subclasses ``int``."""
    return isinstance(value, int) and not isinstance(value, bool)


async def model_to_schema(
    db_model: Any,
    schema_class: Type[T],
) -> T:
    """
    Convert a SQLAlchemy model instance to a Pydantic schema instance.

    Args:
        db_model: SQLAlchemy model instance
        schema_class: Pydantic schema class

    Returns:
        Instance of the Pydantic schema
    """
    return schema_class.model_validate(
        db_model,
        from_attributes=True
    )

async def models_to_schemas(
    db_models: List[Any],
    schema_class: Type[T],
) -> List[T]:
    """
    Convert a list of SQLAlchemy model instances to a list of Pydantic schema instances.
    """
    return [await model_to_schema(model, schema_class) for model in db_models]
