"""
Database connection and initialization for content storage.

This module provides SQLite database connectivity with per-use connections
and schema bootstrapping from schema.sql.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


class ContentDatabase:
    """SQLite database manager for CMS content tables."""

    def __init__(self):
        self.db_path: Optional[Path] = None
        self.initialized = False

    def initialize(self, db_path: str) -> None:
        """
        Initialize the database with schema.

        Args:
            db_path: Path to SQLite database file
        """
        if self.initialized:
            logger.info("Database already initialized")
            return

        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Initializing database at: {self.db_path}")

        self._create_schema()
        self.initialized = True
        logger.info("Database initialized successfully")

    def _create_schema(self) -> None:
        """Create database schema from schema.sql file."""
        schema_path = Path(__file__).parent / "schema.sql"

        if not schema_path.exists():
            raise FileNotFoundError(f"Schema file not found: {schema_path}")

        with open(schema_path, "r") as f:
            schema_sql = f.read()

        with self.get_connection() as conn:
            conn.executescript(schema_sql)
            conn.commit()

        logger.info("Database schema created successfully")

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        """
        Get a database connection with proper context management.

        Yields:
            sqlite3.Connection: Database connection

        Example:
            with db.get_connection() as conn:
                rows = conn.execute("SELECT uid FROM pages").fetchall()
        """
        if not self.db_path:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        conn = None
        try:
            conn = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
                timeout=30.0,
            )
            conn.row_factory = sqlite3.Row
            yield conn
        finally:
            if conn:
                conn.close()

    def is_reachable(self) -> bool:
        """Check whether a trivial query succeeds."""
        if not self.db_path:
            return False
        try:
            with self.get_connection() as conn:
                conn.execute("SELECT 1").fetchone()
            return True
        except sqlite3.Error as e:
            logger.warning(f"Database health check failed: {e}")
            return False
