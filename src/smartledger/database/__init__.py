"""Database layer for smartledger application."""

from smartledger.database.base import Database
from smartledger.database.factories import create_sqlite_database, create_memory_database

__all__ = ["Database", "create_sqlite_database", "create_memory_database"]
