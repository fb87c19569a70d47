"""Repository backends."""

from keno.repositories.base import BetRecord, GameRecord, KenoRepository, UserRecord
from keno.repositories.memory_repository import InMemoryKenoRepository
from keno.repositories.sql_repository import SqlKenoRepository

__all__ = [
    "BetRecord",
    "GameRecord",
    "InMemoryKenoRepository",
    "KenoRepository",
    "SqlKenoRepository",
    "UserRecord",
]
