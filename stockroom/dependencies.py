from typing import AsyncGenerator
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from stockroom.core.config import Settings, get_settings
from stockroom.database import async_session
from stockroom.repositories.stock_repository import StockRepository
from stockroom.services.notification_service import EmailNotificationService
from stockroom.services.stock_service import StockService

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()

def get_stock_repository(db: AsyncSession = Depends(get_db)) -> StockRepository:
    return StockRepository(db)

def get_stock_service(
    repository: StockRepository = Depends(get_stock_repository),
    settings: Settings = Depends(get_settings),
) -> StockService:
    """One service per request, wired to that request's session."""
    return StockService(
        repository,
        notifier=EmailNotificationService(settings),
        check_on_create=settings.CHECK_THRESHOLD_ON_CREATE,
    )
