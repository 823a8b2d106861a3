"""Async SQLite database management."""

import logging
from pathlib import Path
from typing import Optional

import aiosqlite

from charmcatalog.config import get_settings
from charmcatalog.exceptions import InternalError

logger = logging.getLogger(__name__)


class Database:
    """Async SQLite database manager.

    Handles connection management and schema creation. Driver errors
    surface as InternalError.

    Attributes:
        db_path: Path to the SQLite database file.
        connection: Active database connection.
    """

    def __init__(self, db_url: Optional[str] = None) -> None:
        """Initialize the database manager.

        Args:
            db_url: Database URL (default: from settings).
        """
        url = db_url or get_settings().database_url
        # Extract path from sqlite:/// URL
        if url.startswith("sqlite:///"):
            self.db_path = Path(url[10:])
        else:
            self.db_path = Path(url)
        self.connection: Optional[aiosqlite.Connection] = None

    async def initialize(self) -> None:
        """Initialize the database connection and schema.

        Creates the database directory if needed and sets up tables.
        """
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self.connection = await aiosqlite.connect(str(self.db_path))
        self.connection.row_factory = aiosqlite.Row

        await self.connection.execute("PRAGMA foreign_keys = ON")
        await self._create_schema()

        logger.info(f"Database initialized at {self.db_path}")

    async def close(self) -> None:
        """Close the database connection."""
        if self.connection:
            await self.connection.close()
            self.connection = None
            logger.info("Database connection closed")

    async def _create_schema(self) -> None:
        """Create database tables if they don't exist."""
        schema = """
        -- Base entities: one row per (user, name)
        CREATE TABLE IF NOT EXISTS base_entities (
            user TEXT NOT NULL DEFAULT '',
            name TEXT NOT NULL,
            acl_read TEXT DEFAULT '["everyone"]',
            acl_write TEXT DEFAULT '[]',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (user, name)
        );

        -- Entities: one row per published revision
        CREATE TABLE IF NOT EXISTS entities (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user TEXT NOT NULL DEFAULT '',
            name TEXT NOT NULL,
            series TEXT NOT NULL,
            revision INTEGER NOT NULL,
            size INTEGER DEFAULT 0,
            blob_hash TEXT DEFAULT '',
            blob_hash256 TEXT DEFAULT '',
            upload_time TIMESTAMP NOT NULL,
            extra_info TEXT DEFAULT '{}',
            UNIQUE(user, name, series, revision),
            FOREIGN KEY (user, name) REFERENCES base_entities(user, name) ON DELETE CASCADE
        );

        -- Daily statistics counters
        CREATE TABLE IF NOT EXISTS stats_counters (
            key TEXT NOT NULL,
            day TEXT NOT NULL,
            count INTEGER DEFAULT 0,
            PRIMARY KEY (key, day)
        );

        CREATE INDEX IF NOT EXISTS idx_entities_base ON entities(user, name);
        CREATE INDEX IF NOT EXISTS idx_entities_upload_time ON entities(upload_time);
        """
        await self.connection.executescript(schema)
        await self.connection.commit()

    async def execute(
        self,
        query: str,
        params: tuple = (),
    ) -> aiosqlite.Cursor:
        """Execute a query and return the cursor.

        Args:
            query: SQL query string.
            params: Query parameters.

        Returns:
            Database cursor.
        """
        try:
            return await self.connection.execute(query, params)
        except aiosqlite.Error as e:
            logger.error(f"Query failed: {e}")
            raise InternalError(f"database error: {e}") from e

    async def fetch_one(
        self,
        query: str,
        params: tuple = (),
    ) -> Optional[aiosqlite.Row]:
        """Fetch a single row.

        Args:
            query: SQL query string.
            params: Query parameters.

        Returns:
            Single row or None.
        """
        cursor = await self.execute(query, params)
        return await cursor.fetchone()

    async def fetch_all(
        self,
        query: str,
        params: tuple = (),
    ) -> list[aiosqlite.Row]:
        """Fetch all rows.

        Args:
            query: SQL query string.
            params: Query parameters.

        Returns:
            List of rows.
        """
        cursor = await self.execute(query, params)
        return list(await cursor.fetchall())

    async def commit(self) -> None:
        """Commit the current transaction."""
        try:
            await self.connection.commit()
        except aiosqlite.Error as e:
            logger.error(f"Commit failed: {e}")
            raise InternalError(f"database error: {e}") from e

    async def rollback(self) -> None:
        """Discard the current transaction."""
        try:
            await self.connection.rollback()
        except aiosqlite.Error as e:
            logger.error(f"Rollback failed: {e}")
            raise InternalError(f"database error: {e}") from e

    async def health_check(self) -> bool:
        """Check database connectivity.

        Returns:
            True if database is healthy, False otherwise.
        """
        try:
            if not self.connection:
                return False
            cursor = await self.connection.execute("SELECT 1")
            result = await cursor.fetchone()
            return result is not None and result[0] == 1
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False
