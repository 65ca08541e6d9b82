# qjob_tracker/users/sqlite_user_store.py
import sqlite3
import logging
from typing import Optional
from datetime import datetime, timezone
from uuid import uuid4

from .storage_interfaces import AbstractUserStore
from .models import UserCreate, UserInDB
from .errors import DuplicateIdentityError
from ..storage.sqlite_base import get_sqlite_db_connection

logger = logging.getLogger(__name__)

_USER_COLUMNS = "id, username, email, password_hash, service_crn, api_key, created_at"


class SQLiteUserStore(AbstractUserStore):
    """SQLite implementation of the user directory."""

    async def initialize(self) -> None:
        """Initialize the user store by ensuring database and table exist."""
        await get_sqlite_db_connection()
        logger.info("SQLiteUserStore initialized (tables ensured by sqlite_base).")

    async def teardown(self) -> None:
        """Clean up resources. Connection is managed globally so no action needed."""
        logger.info("SQLiteUserStore teardown (connection managed globally).")

    async def _execute_query(self, query: str, params: tuple = (), commit: bool = True) -> sqlite3.Cursor:
        """
        Execute a SQL query with transaction management.

        Integrity errors are rolled back and re-raised untouched so callers can
        map them; other SQLite errors are logged first.
        """
        conn = await get_sqlite_db_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(query, params)
            if commit:
                conn.commit()
        except sqlite3.IntegrityError:
            if commit:
                conn.rollback()
            raise
        except sqlite3.Error as e:
            logger.error(f"SQLite error executing query '{query}': {e}", exc_info=True)
            if commit:
                conn.rollback()
            raise
        return cursor

    async def _fetchone(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        """Execute a query and return a single row."""
        cursor = await self._execute_query(query, params, commit=False)
        return cursor.fetchone()

    def _row_to_user_in_db(self, row: Optional[sqlite3.Row]) -> Optional[UserInDB]:
        """Convert a database row to a UserInDB object."""
        if not row:
            return None

        created_at = row["created_at"]
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at.replace("Z", "+00:00"))

        return UserInDB(
            id=row["id"],
            username=row["username"],
            email=row["email"],
            password_hash=row["password_hash"],
            service_crn=row["service_crn"],
            api_key=row["api_key"],
            created_at=created_at,
        )

    async def find_by_email_or_username(self, email: str, username: str) -> Optional[UserInDB]:
        query = f"SELECT {_USER_COLUMNS} FROM users WHERE email = ? OR username = ? LIMIT 1"
        row = await self._fetchone(query, (email, username))
        return self._row_to_user_in_db(row)

    async def get_user_by_email(self, email: str) -> Optional[UserInDB]:
        query = f"SELECT {_USER_COLUMNS} FROM users WHERE email = ?"
        row = await self._fetchone(query, (email,))
        return self._row_to_user_in_db(row)

    async def get_user_by_id(self, user_id: str) -> Optional[UserInDB]:
        query = f"SELECT {_USER_COLUMNS} FROM users WHERE id = ?"
        row = await self._fetchone(query, (user_id,))
        return self._row_to_user_in_db(row)

    async def create_user(self, user_create: UserCreate) -> UserInDB:
        """
        Insert a new user row.

        Raises:
            DuplicateIdentityError: If the UNIQUE constraint on username or
                email rejects the insert.
        """
        user_in_db = UserInDB(
            id=uuid4().hex,
            created_at=datetime.now(timezone.utc),
            **user_create.model_dump(),
        )

        query = f"""
            INSERT INTO users ({_USER_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """
        params = (
            user_in_db.id,
            user_in_db.username,
            user_in_db.email,
            user_in_db.password_hash,
            user_in_db.service_crn,
            user_in_db.api_key,
            user_in_db.created_at.isoformat(),
        )

        try:
            await self._execute_query(query, params)
        except sqlite3.IntegrityError as e:
            logger.warning(f"Insert for username '{user_create.username}' hit a uniqueness constraint: {e}")
            raise DuplicateIdentityError() from e

        logger.info(f"Created user '{user_in_db.username}' with id '{user_in_db.id}'.")
        return user_in_db


# Singleton instance management
_sqlite_user_store_instance: Optional[SQLiteUserStore] = None


async def get_sqlite_user_store() -> SQLiteUserStore:
    """
    Get or create the singleton SQLiteUserStore instance.

    Ensures only one instance exists and is properly initialized.
    """
    global _sqlite_user_store_instance
    if _sqlite_user_store_instance is None:
        _sqlite_user_store_instance = SQLiteUserStore()
        await _sqlite_user_store_instance.initialize()
    return _sqlite_user_store_instance
