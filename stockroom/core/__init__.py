"""
Core module exports.
"""
from .enums import (
    NotificationStatus,
    ReplenishmentState,
    StockErrorKind
)

from .exceptions import (
    BaseServiceError,
    StockServiceError,
    ValidationError,
    NotFoundError,
    StockEntryNotFoundError,
    NotificationNotFoundError,
    ConflictError,
    InternalError
)

from .utils import (
    model_to_schema,
    models_to_schemas
)
