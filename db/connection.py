"""
db/connection.py
----------------
Manages the PostgreSQL connection lifecycle.

A StorageContext owns one psycopg2 ThreadedConnectionPool, which is the
shared handle every repository borrows connections from. The pool is created
by init() (open, probe, create schema) and closed by cleanup(). Both, and
every read of the pool reference, go through a lock so concurrent callers
cannot race on the initialized state.
"""

import threading
from typing import Optional

import psycopg2
from psycopg2 import pool

from config import DB_POOL_MAX, DB_POOL_MIN, get_database_url
from db.errors import (
    AlreadyInitializedError,
    DatabaseConnectionError,
    NotInitializedError,
    QueryError,
    SchemaError,
)
from db.init_db import create_tables, truncate_tables
from utils.logger import get_logger

logger = get_logger(__name__)


class StorageContext:
    """Initialize-once / cleanup-resets owner of the database connection pool."""

    def __init__(
        self,
        dsn: Optional[str] = None,
        min_conn: int = DB_POOL_MIN,
        max_conn: int = DB_POOL_MAX,
    ):
        """
        Args:
            dsn: Connection string. When None, DATABASE_URL (or the local
                default) is read at init() time.
            min_conn: Minimum number of connections to keep open.
            max_conn: Maximum number of connections allowed.
        """
        self._dsn = dsn
        self._min_conn = min_conn
        self._max_conn = max_conn
        self._pool: Optional[pool.ThreadedConnectionPool] = None
        self._slots: Optional[threading.BoundedSemaphore] = None
        self._borrowed: dict[int, tuple] = {}
        self._lock = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        with self._lock:
            return self._pool is not None

    # ── LIFECYCLE ─────────────────────────────────────────

    def init(self) -> None:
        """
        Open the pool, verify the database answers, and create the schema.

        Raises:
            AlreadyInitializedError: If called twice without cleanup().
            DatabaseConnectionError: If the database cannot be opened or probed.
            SchemaError: If table creation fails.
        """
        with self._lock:
            if self._pool is not None:
                raise AlreadyInitializedError()

            dsn = self._dsn or get_database_url()
            try:
                new_pool = pool.ThreadedConnectionPool(self._min_conn, self._max_conn, dsn)
            except psycopg2.Error as e:
                logger.error(f"Failed to open database: {e}")
                raise DatabaseConnectionError(f"failed to open database: {e}") from e

            try:
                self._prepare(new_pool)
            except Exception:
                new_pool.closeall()
                raise

            self._pool = new_pool
            self._slots = threading.BoundedSemaphore(self._max_conn)
            logger.info("Database connection pool initialized successfully.")

    @staticmethod
    def _prepare(new_pool: pool.ThreadedConnectionPool) -> None:
        """Probe a freshly opened pool and make sure the tables exist."""
        conn = None
        try:
            conn = new_pool.getconn()
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
            conn.commit()
        except psycopg2.Error as e:
            logger.error(f"Failed to ping database: {e}")
            if conn is not None:
                new_pool.putconn(conn)
            raise DatabaseConnectionError(f"failed to ping database: {e}") from e

        try:
            create_tables(conn)
        except psycopg2.Error as e:
            raise SchemaError(f"failed to create tables: {e}") from e
        finally:
            new_pool.putconn(conn)

    def cleanup(self) -> None:
        """Close all connections and return to the uninitialized state. Idempotent."""
        with self._lock:
            if self._pool is None:
                return
            self._pool.closeall()
            self._pool = None
            self._slots = None
        logger.info("Database connection pool closed.")

    # ── CONNECTIONS ───────────────────────────────────────

    def get_connection(self):
        """
        Borrow a connection from the pool.

        Blocks while max_conn connections are already borrowed, until one of
        them is released.

        Returns:
            A psycopg2 connection object.

        Raises:
            NotInitializedError: If init() has not been called.
            DatabaseConnectionError: If no connection can be handed out.
        """
        with self._lock:
            current, slots = self._pool, self._slots
        if current is None:
            raise NotInitializedError()
        slots.acquire()
        try:
            conn = current.getconn()
        except psycopg2.Error as e:
            slots.release()
            logger.error(f"Failed to get a database connection: {e}")
            raise DatabaseConnectionError(f"failed to get connection: {e}") from e
        with self._lock:
            self._borrowed[id(conn)] = (current, slots)
        return conn

    def release_connection(self, conn) -> None:
        """
        Return a connection to the pool it was borrowed from.

        A connection that outlived its pool (cleanup() ran while it was out)
        is closed instead of being handed to the current pool.
        """
        with self._lock:
            origin, slots = self._borrowed.pop(id(conn), (None, None))
            current = self._pool
        if origin is None:
            return
        try:
            if origin is current:
                origin.putconn(conn)
            else:
                logger.debug("Closing connection borrowed from a pool that was since closed.")
                conn.close()
        finally:
            slots.release()

    # ── MAINTENANCE ───────────────────────────────────────

    def reset(self) -> None:
        """
        Empty both tables and restart their id sequences.
        Does nothing when the context is not initialized.
        """
        if not self.is_initialized:
            return
        conn = self.get_connection()
        try:
            truncate_tables(conn)
        except psycopg2.Error as e:
            raise QueryError(f"failed to reset tables: {e}") from e
        finally:
            self.release_connection(conn)


_default_context = StorageContext()


def get_default_context() -> StorageContext:
    """The process-wide context used by repositories built without one."""
    return _default_context


def init_storage() -> None:
    """Initialize the process-wide storage context."""
    _default_context.init()


def close_storage() -> None:
    """Clean up the process-wide storage context."""
    _default_context.cleanup()
