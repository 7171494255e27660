# stockroom/cli/sweep_thresholds.py
import asyncio
import click

from stockroom.core.config import get_settings
from stockroom.database import async_session
from stockroom.repositories.stock_repository import StockRepository
from stockroom.services.notification_service import EmailNotificationService
from stockroom.services.stock_service import StockService

@click.command()
@click.option('--dry-run', is_flag=True, help='List entries below threshold without raising notifications')
@click.option('--no-email', is_flag=True, help='Raise notifications without sending alert emails')
def sweep_thresholds(dry_run, no_email):
    """Raise replenishment notifications for every entry at or below its reorder threshold"""

    async def _sweep():
        async with async_session() as session:
            notifier = None if no_email else EmailNotificationService(get_settings())
            service = StockService(StockRepository(session), notifier=notifier)

            entries = await service.list_stock_entries_below_reorder_threshold()
            click.echo(f"{len(entries)} stock entr{'y' if len(entries) == 1 else 'ies'} at or below threshold")
            for entry in entries:
                click.echo(
                    f"  #{entry.id} product={entry.product_id} {entry.color}/{entry.size} "
                    f"qty={entry.quantity} threshold={entry.reorder_threshold}"
                )

            if dry_run:
                click.echo("Dry run - no notifications raised")
                return

            created = await service.sweep_reorder_thresholds()
            click.echo(f"Raised {created} new replenishment notification(s)")

    asyncio.run(_sweep())

if __name__ == "__main__":
    sweep_thresholds()
