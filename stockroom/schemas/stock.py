"""
Schemas for stock-related API endpoints.

Range checks (non-negative quantities) are left to StockService so that the
same rules apply whether a caller comes through HTTP or calls the service
directly. Integer fields are strict: ``true`` or ``"5"`` are rejected rather
than coerced.
"""

from typing import Optional
from datetime import datetime

from pydantic import StrictInt

from stockroom.core.enums import NotificationStatus
from stockroom.schemas.base import BaseSchema, TimestampedSchema


class StockEntryBase(BaseSchema):
    """Fields common to every stock entry operation"""
    product_id: StrictInt
    color: str
    size: str
    quantity: StrictInt
    reorder_threshold: StrictInt


class StockEntryCreate(StockEntryBase):
    """Body of POST /stocks"""
    pass


class StockEntryRead(StockEntryBase, TimestampedSchema):
    id: int


class StockQuantityUpdate(BaseSchema):
    """Body of PUT /stocks - replaces the quantity outright"""
    stock_id: StrictInt
    quantity: StrictInt


class StockAdjustment(BaseSchema):
    """Body of POST /stocks/{stock_id}/adjust - relative change, may be negative"""
    delta: StrictInt


class ReplenishmentNotificationRead(BaseSchema):
    id: int
    stock_id: int
    status: NotificationStatus
    quantity_at_creation: Optional[int] = None
    threshold_at_creation: Optional[int] = None
    created_at: datetime
    dismissed_at: Optional[datetime] = None


class MessageResponse(BaseSchema):
    message: str


class NotificationDeleteResponse(MessageResponse):
    result: ReplenishmentNotificationRead


class StockEntryDeleteResponse(MessageResponse):
    result: StockEntryRead
