# stockroom/cli/create_tables.py
import asyncio
import click

from stockroom.database import Base, get_engine

# Import the models so they're registered with the Base
from stockroom.models.stock import StockEntry, ReplenishmentNotification  # noqa: F401

@click.command()
@click.option('--drop', is_flag=True, help='Drop the stock tables before creating them')
def create_tables(drop):
    """Create the stock tables directly using SQLAlchemy"""

    async def _create_tables():
        engine = get_engine()
        async with engine.begin() as conn:
            if drop:
                await conn.run_sync(Base.metadata.drop_all)
                click.echo("Dropped existing tables")
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()
        click.echo("All tables created successfully!")

    asyncio.run(_create_tables())

if __name__ == "__main__":
    create_tables()
