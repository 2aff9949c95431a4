"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from smartledger.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks SMARTLEDGER_DB_PATH
            environment variable, then defaults to ~/.smartledger/smartledger.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("SMARTLEDGER_DB_PATH")

    if database_path is None:
        # Default to ~/.smartledger/smartledger.db
        home = Path.home()
        db_dir = home / ".smartledger"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "smartledger.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)


def create_memory_database() -> SQLAlchemyDatabase:
    """Create an in-memory SQLite database, discarded on process exit."""
    return SQLAlchemyDatabase("sqlite://")
