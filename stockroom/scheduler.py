"""
Scheduled tasks for the stock service.
Runs the nightly reorder sweep inside the FastAPI process.
"""

import logging
from datetime import datetime
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.events import EVENT_JOB_EXECUTED, EVENT_JOB_ERROR

from stockroom.core.config import Settings, get_settings
from stockroom.database import async_session
from stockroom.repositories.stock_repository import StockRepository
from stockroom.services.notification_service import EmailNotificationService
from stockroom.services.stock_service import StockService

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler: Optional[AsyncIOScheduler] = None


async def reorder_sweep_task():
    """Raise notifications for every entry sitting at or below its threshold"""
    settings = get_settings()
    try:
        logger.info("=== SCHEDULED REORDER SWEEP STARTING ===")
        async with async_session() as db:
            service = StockService(
                StockRepository(db),
                notifier=EmailNotificationService(settings),
            )
            created = await service.sweep_reorder_thresholds()
        logger.info(f"Scheduled reorder sweep completed: {created} notification(s) created")
    except Exception as e:
        logger.exception(f"Error in reorder sweep task: {str(e)}")


def job_listener(event):
    """Listen to job events for logging"""
    if event.exception:
        logger.error(f"Job {event.job_id} crashed: {event.exception}")
    else:
        logger.info(f"Job {event.job_id} executed successfully at {datetime.now()}")


def create_scheduler(settings: Optional[Settings] = None) -> AsyncIOScheduler:
    """Create and configure the scheduler"""
    global scheduler

    if scheduler is not None:
        return scheduler

    settings = settings or get_settings()
    scheduler = AsyncIOScheduler()

    # Add job event listeners
    scheduler.add_listener(job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

    if settings.SWEEP_SCHEDULE_ENABLED:
        scheduler.add_job(
            reorder_sweep_task,
            CronTrigger(hour=settings.SWEEP_CRON_HOUR, minute=0),
            id="reorder_sweep",
            name="Reorder Threshold Sweep",
            replace_existing=True,
            max_instances=1,
            misfire_grace_time=3600
        )
        logger.info(f"Scheduled reorder sweep added for {settings.SWEEP_CRON_HOUR:02d}:00 daily")
    else:
        logger.info("Scheduled reorder sweep is disabled. Set SWEEP_SCHEDULE_ENABLED=true to enable")

    return scheduler


async def start_scheduler(settings: Optional[Settings] = None):
    """Start the scheduler"""
    global scheduler

    if scheduler is None:
        scheduler = create_scheduler(settings)

    if not scheduler.running:
        scheduler.start()
        jobs = scheduler.get_jobs()
        logger.info(f"Scheduler started with {len(jobs)} job(s)")


async def stop_scheduler():
    """Stop the scheduler gracefully"""
    global scheduler

    if scheduler and scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Scheduler stopped successfully")
    scheduler = None
