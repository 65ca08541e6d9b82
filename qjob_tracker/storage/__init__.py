# qjob_tracker/storage/__init__.py

"""Storage module initialization.

Shared SQLite connection handling and schema setup for the user directory.
"""

from .sqlite_base import (
    get_sqlite_db_connection,
    init_sqlite_db,
    close_sqlite_db_connection
)

__all__ = [
    "get_sqlite_db_connection",
    "init_sqlite_db",
    "close_sqlite_db_connection"
]
