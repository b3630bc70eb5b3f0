"""
Store Module - Persistence adapters for the board.
"""

from cadence.store.memory import InMemoryRepository
from cadence.store.repository import BatchingRepository, BoardRepository
from cadence.store.sql_repository import SqlRepository

__all__ = [
    "BoardRepository",
    "BatchingRepository",
    "InMemoryRepository",
    "SqlRepository",
]
