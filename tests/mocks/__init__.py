from .mock_repository import InMemoryStockRepository

__all__ = ['InMemoryStockRepository']
