"""Factory for the SQLite database holding one business's books."""

import os
from pathlib import Path
from typing import Optional

from cashflow.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV = "CASHFLOW_DB_PATH"
DEFAULT_DB_PATH = Path("~/.cashflow/cashflow.db")


def resolve_database_path(database_path: Optional[str] = None) -> Path:
    """Return the database file to use, creating its directory if needed.

    An explicit path wins over ``CASHFLOW_DB_PATH``; an unset or blank
    variable falls back to ``~/.cashflow/cashflow.db``. ``~`` is expanded
    in all three.
    """
    if not database_path:
        database_path = os.environ.get(DB_PATH_ENV, "").strip() or None

    path = Path(database_path).expanduser() if database_path else DEFAULT_DB_PATH.expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Each database file holds the books of one business, so switching
    business means pointing at another file.

    Args:
        database_path: Path to SQLite database file (see resolve_database_path)

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    return SQLAlchemyDatabase(f"sqlite:///{resolve_database_path(database_path)}")
