"""
Database connection and initialization for reaction storage.

This module provides SQLite connectivity with a dedicated writer connection,
a reader connection, thread safety, and idempotent schema setup.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from event_reactions.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class ReactionDatabase:
    """SQLite database manager for reaction storage.

    Constructed explicitly and handed to the store; the owner is responsible
    for calling ``initialize()`` before use and ``close()`` on shutdown.
    """

    def __init__(self, db_path: str, busy_timeout_ms: int = 10000):
        self.db_path = Path(db_path)
        self.busy_timeout_ms = busy_timeout_ms
        self._write_lock = threading.Lock()
        self._read_lock = threading.Lock()
        self._writer_conn: Optional[sqlite3.Connection] = None
        self._reader_conn: Optional[sqlite3.Connection] = None

    @property
    def initialized(self) -> bool:
        return self._writer_conn is not None and self._reader_conn is not None

    def initialize(self) -> None:
        """
        Open connections and apply the schema.

        Raises:
            StorageError: If the database file cannot be opened or the schema
                cannot be applied
        """
        if self.initialized:
            logger.info("Database already initialized")
            return

        logger.info(f"Initializing reaction database at: {self.db_path}")

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._writer_conn = self._connect(isolation_level="IMMEDIATE")
            self._reader_conn = self._connect(isolation_level="DEFERRED")
            self._create_schema()
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Failed to initialize database at {self.db_path}: {e}")
            self.close()
            raise StorageError(str(e), operation="connect") from e

        logger.info("Reaction database initialized successfully")

    def _connect(self, isolation_level: str) -> sqlite3.Connection:
        conn = sqlite3.connect(
            str(self.db_path),
            check_same_thread=False,  # Access is serialized by the locks below
            isolation_level=isolation_level,
            timeout=self.busy_timeout_ms / 1000.0,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute(f"PRAGMA busy_timeout={int(self.busy_timeout_ms)}")
        conn.execute("PRAGMA synchronous=NORMAL")
        return conn

    def _create_schema(self) -> None:
        """Create database schema from schema.sql file."""
        schema_path = Path(__file__).parent / "schema.sql"

        if not schema_path.exists():
            raise FileNotFoundError(f"Schema file not found: {schema_path}")

        schema_sql = schema_path.read_text(encoding="utf-8")

        with self._write_lock:
            self._writer_conn.executescript(schema_sql)
            self._writer_conn.commit()

        logger.info("Database schema created successfully")

    @contextmanager
    def writer(self) -> Iterator[sqlite3.Connection]:
        """
        Yield the writer connection inside a transaction.

        Commits when the block exits normally, rolls back otherwise.

        Example:
            with db.writer() as conn:
                conn.execute("INSERT INTO reactions ...")
        """
        conn = self._require(self._writer_conn)
        with self._write_lock:
            try:
                yield conn
                conn.commit()
            except BaseException:
                conn.rollback()
                raise

    @contextmanager
    def reader(self) -> Iterator[sqlite3.Connection]:
        """Yield the reader connection while holding the read lock."""
        conn = self._require(self._reader_conn)
        with self._read_lock:
            yield conn

    def ping(self) -> bool:
        """Return True when the database answers a trivial query."""
        if not self.initialized:
            return False
        try:
            with self.reader() as conn:
                conn.execute("SELECT 1").fetchone()
            return True
        except sqlite3.Error as e:
            logger.warning(f"Database ping failed: {e}")
            return False

    @staticmethod
    def _require(conn: Optional[sqlite3.Connection]) -> sqlite3.Connection:
        if conn is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return conn

    def close(self) -> None:
        """Close database connections. Safe to call more than once."""
        with self._write_lock:
            if self._writer_conn is not None:
                self._writer_conn.close()
                self._writer_conn = None
        with self._read_lock:
            if self._reader_conn is not None:
                self._reader_conn.close()
                self._reader_conn = None
        logger.info("Database connection closed")

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
