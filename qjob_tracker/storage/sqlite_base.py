# qjob_tracker/storage/sqlite_base.py
import sqlite3
import logging
from pathlib import Path
from typing import Optional

from ..settings import settings

logger = logging.getLogger(__name__)

# Global connection instance to ensure single connection per application lifecycle
_db_connection: Optional[sqlite3.Connection] = None


async def get_sqlite_db_connection() -> sqlite3.Connection:
    """
    Get or create a SQLite database connection with proper initialization.

    Uses a singleton pattern to maintain a single connection throughout
    the application lifecycle. Ensures the database directory exists
    and initializes the schema on first connection.

    Returns:
        sqlite3.Connection: The database connection instance

    Raises:
        sqlite3.Error: If database connection fails
    """
    global _db_connection
    if _db_connection is None:
        try:
            db_path = Path(settings.sqlite_db_path).resolve()
            db_path.parent.mkdir(parents=True, exist_ok=True)

            logger.info(f"Attempting to connect to SQLite DB at: {db_path}")

            # Enable thread-safe access for async/FastAPI compatibility
            _db_connection = sqlite3.connect(str(db_path), check_same_thread=False)
            _db_connection.row_factory = sqlite3.Row

            logger.info(f"Successfully connected to SQLite DB: {db_path}")

            await init_sqlite_db(_db_connection)
        except sqlite3.Error as e:
            logger.error(
                f"Error connecting to SQLite database at {settings.sqlite_db_path}: {e}",
                exc_info=True
            )
            raise
    return _db_connection


async def init_sqlite_db(conn: Optional[sqlite3.Connection] = None):
    """
    Initialize the SQLite database schema.

    The UNIQUE constraints on username and email are what actually keep
    identities unique when two signups race past the application-level check.

    Args:
        conn: Optional database connection. If None, uses the global connection.
    """
    db_conn = conn or await get_sqlite_db_connection()
    cursor = db_conn.cursor()

    cursor.execute('''
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        username TEXT NOT NULL UNIQUE,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        service_crn TEXT NOT NULL,
        api_key TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    ''')
    logger.info("Ensured 'users' table exists.")

    db_conn.commit()
    logger.info("SQLite database schema initialized/verified.")


async def close_sqlite_db_connection():
    """
    Properly close the global SQLite database connection.

    Should be called during application shutdown to ensure
    proper cleanup of database resources.
    """
    global _db_connection
    if _db_connection is not None:
        logger.info("Closing SQLite DB connection.")
        _db_connection.close()
        _db_connection = None
        logger.info("SQLite DB connection closed.")
