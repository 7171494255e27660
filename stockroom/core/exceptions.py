from stockroom.core.enums import StockErrorKind


class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    error_kind: StockErrorKind = StockErrorKind.INTERNAL

class StockServiceError(BaseServiceError):
    """Base exception for stock service errors."""
    pass

class ValidationError(StockServiceError):
    """Raised when input data fails validation (e.g. a negative quantity)."""
    error_kind = StockErrorKind.VALIDATION

class NotFoundError(StockServiceError):
    """Raised when a stock entry or notification does not exist."""
    error_kind = StockErrorKind.NOT_FOUND

class StockEntryNotFoundError(NotFoundError):
    """Raised when a stock entry is not found."""
    pass

class NotificationNotFoundError(NotFoundError):
    """Raised when a replenishment notification is not found."""
    pass

class ConflictError(StockServiceError):
    """Raised when a change would break the non-negative quantity invariant."""
    error_kind = StockErrorKind.CONFLICT

class InternalError(StockServiceError):
    """Raised when storage fails or something unexpected happens."""
    error_kind = StockErrorKind.INTERNAL
