"""
Models for stock levels and replenishment alerts.

A StockEntry records quantity-on-hand for one product variant (color/size).
A ReplenishmentNotification is raised against an entry whenever its quantity
sits at or below the entry's reorder threshold.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint, Index, text
from sqlalchemy.sql import func

from stockroom.database import Base
from stockroom.core.enums import NotificationStatus


class StockEntry(Base):
    __tablename__ = "stock_entries"

    id = Column(Integer, primary_key=True)

    # Product rows live in the catalogue; kept as a plain reference
    product_id = Column(Integer, nullable=False, index=True)
    color = Column(String(64), nullable=False)
    size = Column(String(32), nullable=False)

    quantity = Column(Integer, nullable=False, default=0)
    reorder_threshold = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="chk_stock_quantity_non_negative"),
        CheckConstraint("reorder_threshold >= 0", name="chk_stock_threshold_non_negative"),
    )

    @property
    def needs_replenishment(self) -> bool:
        return self.quantity <= self.reorder_threshold

    def __repr__(self):
        return (f"<StockEntry(id={self.id}, product_id={self.product_id}, color='{self.color}', "
                f"size='{self.size}', quantity={self.quantity}, threshold={self.reorder_threshold})>")


class ReplenishmentNotification(Base):
    """
    Alert that a stock entry needs restocking.
    Dismissed rather than deleted so the history stays queryable.
    """
    __tablename__ = "replenishment_notifications"

    id = Column(Integer, primary_key=True)
    stock_id = Column(
        Integer,
        ForeignKey("stock_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status = Column(String(16), nullable=False, default=NotificationStatus.OPEN.value, index=True)

    # Snapshot of the entry when the alert was raised
    quantity_at_creation = Column(Integer, nullable=True)
    threshold_at_creation = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    dismissed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("status IN ('OPEN', 'DISMISSED')", name="chk_notification_status"),
        # One OPEN notification per stock entry; dismissed rows are outside the index
        Index(
            "uq_replenishment_notifications_open_stock",
            "stock_id",
            unique=True,
            postgresql_where=text("status = 'OPEN'"),
            sqlite_where=text("status = 'OPEN'"),
        ),
    )

    @property
    def is_open(self) -> bool:
        return self.status == NotificationStatus.OPEN.value

    def __repr__(self):
        return f"<ReplenishmentNotification(id={self.id}, stock_id={self.stock_id}, status={self.status})>"
