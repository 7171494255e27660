"""Stock routes - create entries, update quantities and manage replenishment notifications."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from stockroom.core.config import Settings, get_settings
from stockroom.core.enums import StockErrorKind
from stockroom.core.exceptions import BaseServiceError
from stockroom.dependencies import get_stock_service
from stockroom.schemas.stock import (
    StockEntryCreate,
    StockEntryRead,
    StockQuantityUpdate,
    StockAdjustment,
    ReplenishmentNotificationRead,
    NotificationDeleteResponse,
    StockEntryDeleteResponse,
)
from stockroom.services.stock_service import StockService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/stocks", tags=["stocks"])

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"

# Used only when LEGACY_ERROR_STATUS is off; otherwise every error is a 500
ERROR_KIND_STATUS = {
    StockErrorKind.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    StockErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    StockErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    StockErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(exc: Exception, settings: Settings) -> JSONResponse:
    """Map a service error to ``{message}`` with the configured status code."""
    message = str(exc) or UNKNOWN_ERROR_MESSAGE
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(exc, BaseServiceError) and not settings.LEGACY_ERROR_STATUS:
        status_code = ERROR_KIND_STATUS[exc.error_kind]

    if isinstance(exc, BaseServiceError):
        logger.info(f"Stock request failed ({exc.error_kind.value}): {message}")
    else:
        logger.exception(f"Unexpected error in stock route: {message}")
    return JSONResponse(status_code=status_code, content={"message": message})


def validation_error_response(exc: RequestValidationError, settings: Settings) -> JSONResponse:
    """Request parsing failures get the same ``{message}`` body as service errors."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        # Drop the "body"/"path"/"query" prefix so the message names the field
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = UNKNOWN_ERROR_MESSAGE

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    if not settings.LEGACY_ERROR_STATUS:
        status_code = ERROR_KIND_STATUS[StockErrorKind.VALIDATION]

    logger.info(f"Rejected malformed stock request: {message}")
    return JSONResponse(status_code=status_code, content={"message": message})


@router.post("", response_model=StockEntryRead, status_code=status.HTTP_201_CREATED)
async def create_stock(
    payload: StockEntryCreate,
    service: StockService = Depends(get_stock_service),
    settings: Settings = Depends(get_settings),
):
    try:
        return await service.create_stock(
            payload.product_id,
            payload.color,
            payload.size,
            payload.quantity,
            payload.reorder_threshold,
        )
    except Exception as e:
        return error_response(e, settings)


@router.put("", response_model=StockEntryRead)
async def update_stock_entry(
    payload: StockQuantityUpdate,
    service: StockService = Depends(get_stock_service),
    settings: Settings = Depends(get_settings),
):
    """Replace the quantity, then run the reorder check as a second step."""
    try:
        updated = await service.update_stock_entry(payload.stock_id, payload.quantity)
        await service.check_reorder_threshold(payload.stock_id)
        return updated
    except Exception as e:
        return error_response(e, settings)


@router.get("", response_model=List[StockEntryRead])
async def list_stock_entries(
    product_id: Optional[int] = Query(None, alias="productId", description="Filter by product"),
    service: StockService = Depends(get_stock_service),
    settings: Settings = Depends(get_settings),
):
    try:
        return await service.list_stock_entries(product_id=product_id)
    except Exception as e:
        return error_response(e, settings)


@router.get("/below-threshold", response_model=List[StockEntryRead])
async def list_stock_entries_below_reorder_threshold(
    service: StockService = Depends(get_stock_service),
    settings: Settings = Depends(get_settings),
):
    try:
        return await service.list_stock_entries_below_reorder_threshold()
    except Exception as e:
        return error_response(e, settings)


@router.delete("/notifications/{notification_id}", response_model=NotificationDeleteResponse)
async def delete_replenishment_notification(
    notification_id: int,
    service: StockService = Depends(get_stock_service),
    settings: Settings = Depends(get_settings),
):
    try:
        result = await service.delete_replenishment_notification(notification_id)
        return NotificationDeleteResponse(message="Notification deleted successfully", result=result)
    except Exception as e:
        return error_response(e, settings)


@router.get("/{stock_id}/notifications", response_model=List[ReplenishmentNotificationRead])
async def get_all_replenishment_notifications(
    stock_id: int,
    service: StockService = Depends(get_stock_service),
    settings: Settings = Depends(get_settings),
):
    try:
        return await service.get_all_replenishment_notifications(stock_id)
    except Exception as e:
        return error_response(e, settings)


@router.post("/{stock_id}/adjust", response_model=StockEntryRead)
async def adjust_stock_quantity(
    stock_id: int,
    payload: StockAdjustment,
    service: StockService = Depends(get_stock_service),
    settings: Settings = Depends(get_settings),
):
    """Apply a relative change, then run the reorder check."""
    try:
        updated = await service.adjust_stock_quantity(stock_id, payload.delta)
        await service.check_reorder_threshold(stock_id)
        return updated
    except Exception as e:
        return error_response(e, settings)


@router.get("/{stock_id}", response_model=StockEntryRead)
async def get_stock_entry_details(
    stock_id: int,
    service: StockService = Depends(get_stock_service),
    settings: Settings = Depends(get_settings),
):
    try:
        stock_details = await service.get_stock_entry_details(stock_id)
    except Exception as e:
        return error_response(e, settings)

    if stock_details is None:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": "Stock entry not found"})
    return stock_details


@router.delete("/{stock_id}", response_model=StockEntryDeleteResponse)
async def delete_stock_entry(
    stock_id: int,
    service: StockService = Depends(get_stock_service),
    settings: Settings = Depends(get_settings),
):
    try:
        result = await service.delete_stock_entry(stock_id)
        return StockEntryDeleteResponse(message="Stock entry deleted successfully", result=result)
    except Exception as e:
        return error_response(e, settings)
