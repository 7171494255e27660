from .stock import StockEntry, ReplenishmentNotification

# This ensures all models are registered with SQLAlchemy
__all__ = [
    'StockEntry',
    'ReplenishmentNotification',
]
