"""
Shared enums and constants used across the application.
"""

from enum import Enum


class NotificationStatus(str, Enum):
    """Replenishment notification lifecycle values used in both models and schemas"""
    OPEN = "OPEN"
    DISMISSED = "DISMISSED"


class ReplenishmentState(str, Enum):
    """Where a stock entry sits relative to its reorder threshold."""
    ABOVE_THRESHOLD = "ABOVE_THRESHOLD"
    BELOW_THRESHOLD_NO_NOTICE = "BELOW_THRESHOLD_NO_NOTICE"
    BELOW_THRESHOLD_NOTIFIED = "BELOW_THRESHOLD_NOTIFIED"


class StockErrorKind(str, Enum):
    """Error categories raised by the stock service, mapped to HTTP status at the route layer."""
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL"
