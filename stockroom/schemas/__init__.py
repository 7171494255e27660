"""
Schema exports for the application.
"""

# Base schemas
from .base import BaseSchema, TimestampedSchema

# Stock schemas
from .stock import (
    StockEntryBase,
    StockEntryCreate,
    StockEntryRead,
    StockQuantityUpdate,
    StockAdjustment,
    ReplenishmentNotificationRead,
    MessageResponse,
    NotificationDeleteResponse,
    StockEntryDeleteResponse
)
