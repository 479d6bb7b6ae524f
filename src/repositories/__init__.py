"""Database repository helpers."""

from repositories.matches import SqlMatchStore
from repositories.memory import InMemoryMatchStore, InMemoryRatingStore
from repositories.ratings import SqlRatingStore
from repositories.schema import ensure_schema

__all__ = [
    "InMemoryMatchStore",
    "InMemoryRatingStore",
    "SqlMatchStore",
    "SqlRatingStore",
    "ensure_schema",
]
