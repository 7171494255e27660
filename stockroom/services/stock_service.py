"""
Purpose: Maintains stock entries and derives replenishment notifications from them.

Role: The service behind the /stocks routes. It owns the quantity rules
(non-negative, replace-not-increment) and the reorder-threshold check.

Key behaviours:
- update_stock_entry and check_reorder_threshold are separate calls; the route
  runs them one after the other, so a reader can briefly see a low quantity
  with no notification yet
- check_reorder_threshold is idempotent: any number of calls leaves at most one
  OPEN notification per stock entry
- Notifications are dismissed, not deleted, so their history stays visible
- Storage failures are rolled back and re-raised as InternalError

The service is built per request with an injected repository (see
stockroom.dependencies.get_stock_service); there is no module-level instance.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from stockroom.core.enums import NotificationStatus, ReplenishmentState
from stockroom.core.exceptions import (
    ValidationError,
    ConflictError,
    InternalError,
    StockEntryNotFoundError,
    NotificationNotFoundError,
)
from stockroom.core.utils import model_to_schema, models_to_schemas, utc_now, is_strict_int
from stockroom.models.stock import StockEntry, ReplenishmentNotification
from stockroom.schemas.stock import StockEntryRead, ReplenishmentNotificationRead

logger = logging.getLogger(__name__)


def replenishment_state(entry: StockEntry, has_open_notification: bool) -> ReplenishmentState:
    """Where an entry sits in the replenishment state machine."""
    if not entry.needs_replenishment:
        return ReplenishmentState.ABOVE_THRESHOLD
    if has_open_notification:
        return ReplenishmentState.BELOW_THRESHOLD_NOTIFIED
    return ReplenishmentState.BELOW_THRESHOLD_NO_NOTICE


def _require_non_negative_int(field: str, value: Any) -> None:
    if not is_strict_int(value):
        raise ValidationError(f"{field} must be an integer, got {value!r}")
    if value < 0:
        raise ValidationError(f"{field} must be non-negative, got {value}")


class StockService:
    def __init__(self, repository, notifier=None, check_on_create: bool = False):
        """
        Args:
            repository: StockRepository (or any object with the same coroutines)
            notifier: Optional object with ``send_replenishment_alert(entry=, notification=)``
            check_on_create: Run the reorder check straight after create_stock
        """
        self.repository = repository
        self.notifier = notifier
        self.check_on_create = check_on_create

    # ------------------------------------------------------------------
    # Stock entries
    # ------------------------------------------------------------------
    async def create_stock(
        self,
        product_id: int,
        color: str,
        size: str,
        quantity: int,
        reorder_threshold: int
    ) -> StockEntryRead:
        """
        Creates a stock entry for one product variant.

        Returns:
            The persisted entry, including its generated id

        Raises:
            ValidationError: quantity or reorder_threshold is negative or not an integer
            InternalError: storage failed
        """
        if not is_strict_int(product_id):
            raise ValidationError(f"product_id must be an integer, got {product_id!r}")
        if not isinstance(color, str) or not isinstance(size, str):
            raise ValidationError("color and size must be strings")
        _require_non_negative_int("quantity", quantity)
        _require_non_negative_int("reorder_threshold", reorder_threshold)

        now = utc_now()
        entry = StockEntry(
            product_id=product_id,
            color=color,
            size=size,
            quantity=quantity,
            reorder_threshold=reorder_threshold,
            created_at=now,
            updated_at=now,
        )
        try:
            await self.repository.add_entry(entry)
            await self.repository.commit()
        except SQLAlchemyError as e:
            await self.repository.rollback()
            logger.error(f"Failed to create stock entry for product {product_id}: {str(e)}")
            raise InternalError(f"Failed to create stock entry: {str(e)}") from e

        logger.info(
            f"Created stock entry {entry.id} for product {product_id} "
            f"({color}/{size}) qty={quantity} threshold={reorder_threshold}"
        )

        if self.check_on_create:
            await self.check_reorder_threshold(entry.id)

        return await model_to_schema(entry, StockEntryRead)

    async def update_stock_entry(self, stock_id: int, quantity: int) -> StockEntryRead:
        """
        Replaces the quantity of a stock entry (it does not increment it).

        Raises:
            StockEntryNotFoundError: no entry with this id
            ValidationError: quantity is negative or not an integer
            InternalError: storage failed
        """
        entry = await self._get_entry_or_raise(stock_id)
        _require_non_negative_int("quantity", quantity)

        previous = entry.quantity
        return await self._write_quantity(entry, quantity, previous)

    async def adjust_stock_quantity(self, stock_id: int, delta: int) -> StockEntryRead:
        """
        Applies a relative change (received goods, sales) to a stock entry.

        Raises:
            StockEntryNotFoundError: no entry with this id
            ValidationError: delta is not an integer
            ConflictError: the change would take the quantity below zero
        """
        entry = await self._get_entry_or_raise(stock_id)
        if not is_strict_int(delta):
            raise ValidationError(f"delta must be an integer, got {delta!r}")

        previous = entry.quantity
        new_quantity = previous + delta
        if new_quantity < 0:
            raise ConflictError(
                f"Adjusting stock {stock_id} by {delta} would leave {new_quantity} units; "
                f"only {previous} available"
            )
        return await self._write_quantity(entry, new_quantity, previous)

    async def list_stock_entries(self, product_id: Optional[int] = None) -> List[StockEntryRead]:
        entries = await self.repository.list_entries(product_id=product_id)
        return await models_to_schemas(entries, StockEntryRead)

    async def list_stock_entries_below_reorder_threshold(self) -> List[StockEntryRead]:
        """All entries with quantity <= reorder_threshold, in insertion order."""
        entries = await self.repository.list_entries_below_threshold()
        return await models_to_schemas(entries, StockEntryRead)

    async def get_stock_entry_details(self, stock_id: int) -> Optional[StockEntryRead]:
        """
        Looks up a stock entry.

        Returns:
            The entry, or None if it does not exist. Not finding one is not an error here.
        """
        entry = await self.repository.get_entry(stock_id)
        if entry is None:
            return None
        return await model_to_schema(entry, StockEntryRead)

    async def delete_stock_entry(self, stock_id: int) -> StockEntryRead:
        """Removes a stock entry together with all of its notifications."""
        entry = await self._get_entry_or_raise(stock_id)
        snapshot = await model_to_schema(entry, StockEntryRead)
        try:
            await self.repository.delete_entry(entry)
            await self.repository.commit()
        except SQLAlchemyError as e:
            await self.repository.rollback()
            logger.error(f"Failed to delete stock entry {stock_id}: {str(e)}")
            raise InternalError(f"Failed to delete stock entry: {str(e)}") from e

        logger.info(f"Deleted stock entry {stock_id} and its replenishment notifications")
        return snapshot

    # ------------------------------------------------------------------
    # Reorder threshold
    # ------------------------------------------------------------------
    async def check_reorder_threshold(self, stock_id: int) -> None:
        """
        Re-reads the entry and, if it is at or below its reorder threshold,
        makes sure exactly one OPEN notification exists for it.

        Safe to call any number of times.

        Raises:
            StockEntryNotFoundError: no entry with this id
            InternalError: storage failed
        """
        entry = await self._get_entry_or_raise(stock_id)
        await self._ensure_open_notification(entry)

    async def sweep_reorder_thresholds(self) -> int:
        """
        Runs the threshold check for every entry currently below threshold.

        Picks up entries created below threshold, which create_stock does not
        notify unless check_on_create is set.

        Returns:
            Number of notifications created
        """
        created = 0
        for entry in await self.repository.list_entries_below_threshold():
            if await self._ensure_open_notification(entry):
                created += 1
        logger.info(f"Reorder sweep finished: {created} new replenishment notification(s)")
        return created

    async def get_replenishment_state(self, stock_id: int) -> ReplenishmentState:
        entry = await self._get_entry_or_raise(stock_id)
        open_notification = await self.repository.get_open_notification(stock_id)
        return replenishment_state(entry, open_notification is not None)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------
    async def get_all_replenishment_notifications(self, stock_id: int) -> List[ReplenishmentNotificationRead]:
        """All notifications for a stock entry, any status, most recent first."""
        notifications = await self.repository.list_notifications(stock_id)
        return await models_to_schemas(notifications, ReplenishmentNotificationRead)

    async def delete_replenishment_notification(self, notification_id: int) -> ReplenishmentNotificationRead:
        """
        Dismisses a replenishment notification.

        Dismissing one that is already DISMISSED returns it unchanged.

        Raises:
            NotificationNotFoundError: no notification with this id
        """
        notification = await self.repository.get_notification(notification_id)
        if notification is None:
            raise NotificationNotFoundError(f"Replenishment notification {notification_id} not found")

        if notification.is_open:
            previous_status, previous_dismissed_at = notification.status, notification.dismissed_at
            notification.status = NotificationStatus.DISMISSED.value
            notification.dismissed_at = utc_now()
            try:
                await self.repository.save_notification(notification)
                await self.repository.commit()
            except SQLAlchemyError as e:
                await self.repository.rollback()
                notification.status = previous_status
                notification.dismissed_at = previous_dismissed_at
                logger.error(f"Failed to dismiss notification {notification_id}: {str(e)}")
                raise InternalError(f"Failed to dismiss notification: {str(e)}") from e
            logger.info(f"Dismissed replenishment notification {notification_id} (stock {notification.stock_id})")

        return await model_to_schema(notification, ReplenishmentNotificationRead)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _get_entry_or_raise(self, stock_id: int) -> StockEntry:
        entry = await self.repository.get_entry(stock_id)
        if entry is None:
            raise StockEntryNotFoundError(f"Stock entry {stock_id} not found")
        return entry

    async def _write_quantity(self, entry: StockEntry, quantity: int, previous: int) -> StockEntryRead:
        entry.quantity = quantity
        entry.updated_at = utc_now()
        try:
            await self.repository.save_entry(entry)
            await self.repository.commit()
        except SQLAlchemyError as e:
            await self.repository.rollback()
            entry.quantity = previous
            logger.error(f"Failed to update stock entry {entry.id}: {str(e)}")
            raise InternalError(f"Failed to update stock entry: {str(e)}") from e

        logger.info(f"Stock entry {entry.id} quantity {previous} -> {quantity}")
        return await model_to_schema(entry, StockEntryRead)

    async def _ensure_open_notification(self, entry: StockEntry) -> bool:
        """Returns True only when this call created the notification."""
        if not entry.needs_replenishment:
            logger.debug(
                f"Stock entry {entry.id} above threshold ({entry.quantity} > {entry.reorder_threshold})"
            )
            return False

        if await self.repository.get_open_notification(entry.id) is not None:
            return False

        notification = ReplenishmentNotification(
            stock_id=entry.id,
            status=NotificationStatus.OPEN.value,
            quantity_at_creation=entry.quantity,
            threshold_at_creation=entry.reorder_threshold,
            created_at=utc_now(),
        )
        try:
            created = await self.repository.add_notification(notification)
            await self.repository.commit()
        except SQLAlchemyError as e:
            await self.repository.rollback()
            logger.error(f"Failed to create replenishment notification for stock {entry.id}: {str(e)}")
            raise InternalError(f"Failed to create replenishment notification: {str(e)}") from e

        if created is None:
            return False

        logger.warning(
            f"Stock entry {entry.id} at/below reorder threshold "
            f"({entry.quantity} <= {entry.reorder_threshold}); notification {created.id} raised"
        )
        if self.notifier is not None:
            await self.notifier.send_replenishment_alert(entry=entry, notification=created)
        return True
