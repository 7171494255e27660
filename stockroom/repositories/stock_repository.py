# stockroom/repositories/stock_repository.py
"""
Persistence for stock entries and replenishment notifications.

StockService only talks to this class, so anything exposing the same
coroutines can stand in for it (the test suite uses an in-memory double).
Every read goes back to the database; nothing is cached between calls.
"""

import logging
from typing import List, Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from stockroom.core.enums import NotificationStatus
from stockroom.models.stock import StockEntry, ReplenishmentNotification

logger = logging.getLogger(__name__)


class StockRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Stock entries
    # ------------------------------------------------------------------
    async def get_entry(self, stock_id: int) -> Optional[StockEntry]:
        query = (
            select(StockEntry)
            .where(StockEntry.id == stock_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_entries(self, product_id: Optional[int] = None) -> List[StockEntry]:
        query = select(StockEntry)
        if product_id is not None:
            query = query.where(StockEntry.product_id == product_id)
        result = await self.db.execute(query.order_by(StockEntry.id))
        return list(result.scalars().all())

    async def list_entries_below_threshold(self) -> List[StockEntry]:
        query = (
            select(StockEntry)
            .where(StockEntry.quantity <= StockEntry.reorder_threshold)
            .order_by(StockEntry.id)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def add_entry(self, entry: StockEntry) -> StockEntry:
        self.db.add(entry)
        await self.db.flush()  # Get the ID without committing
        return entry

    async def save_entry(self, entry: StockEntry) -> StockEntry:
        await self.db.flush()
        return entry

    async def delete_entry(self, entry: StockEntry) -> None:
        # The FK cascades too; this keeps backends without FK enforcement consistent
        await self.db.execute(
            delete(ReplenishmentNotification).where(ReplenishmentNotification.stock_id == entry.id)
        )
        await self.db.delete(entry)
        await self.db.flush()

    # ------------------------------------------------------------------
    # Replenishment notifications
    # ------------------------------------------------------------------
    async def get_notification(self, notification_id: int) -> Optional[ReplenishmentNotification]:
        query = (
            select(ReplenishmentNotification)
            .where(ReplenishmentNotification.id == notification_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_open_notification(self, stock_id: int) -> Optional[ReplenishmentNotification]:
        query = (
            select(ReplenishmentNotification)
            .where(
                ReplenishmentNotification.stock_id == stock_id,
                ReplenishmentNotification.status == NotificationStatus.OPEN.value,
            )
            .order_by(ReplenishmentNotification.id.desc())
            .limit(1)
        )
        result = await self.db.execute(query)
        return result.scalars().first()

    async def list_notifications(self, stock_id: int) -> List[ReplenishmentNotification]:
        query = (
            select(ReplenishmentNotification)
            .where(ReplenishmentNotification.stock_id == stock_id)
            .order_by(ReplenishmentNotification.created_at.desc(), ReplenishmentNotification.id.desc())
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def add_notification(
        self,
        notification: ReplenishmentNotification
    ) -> Optional[ReplenishmentNotification]:
        """
        Insert an OPEN notification.

        Returns None when another request already holds the OPEN slot for
        this stock entry (unique partial index), leaving the session usable.
        """
        try:
            async with self.db.begin_nested():
                self.db.add(notification)
                await self.db.flush()
        except IntegrityError:
            logger.info(
                "OPEN replenishment notification already exists for stock %s; insert skipped",
                notification.stock_id
            )
            return None
        return notification

    async def save_notification(self, notification: ReplenishmentNotification) -> ReplenishmentNotification:
        await self.db.flush()
        return notification

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------
    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
