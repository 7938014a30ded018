"""
repositories/bug_repo.py
-------------------------
Data access layer for bugs.
All SQL queries related to the `bugs` table live here.
"""

from datetime import datetime, timezone
from typing import Optional

import psycopg2

from db.connection import StorageContext, get_default_context
from db.errors import DeleteError, InsertError, NotFoundError, QueryError, UpdateError
from models.bug import Bug
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, title, description, status, priority, created_at, updated_at"


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive timestamps are taken as UTC; aware ones are converted to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class BugRepository:
    """Repository for CRUD operations on the bugs table."""

    def __init__(self, context: Optional[StorageContext] = None):
        self.context = context or get_default_context()

    # ── CREATE ────────────────────────────────────────────

    def create(self, bug: Bug) -> Bug:
        """
        Insert a new bug.

        Args:
            bug: The Bug to persist. Missing timestamps are stamped with now.

        Returns:
            The same Bug with its `id` populated.
        """
        now = datetime.now(timezone.utc)
        bug.created_at = _as_utc(bug.created_at) or now
        bug.updated_at = _as_utc(bug.updated_at)
        if bug.updated_at is None or bug.updated_at < bug.created_at:
            bug.updated_at = max(now, bug.created_at)

        sql = """
            INSERT INTO bugs (title, description, status, priority, created_at, updated_at)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id;
        """
        conn = self.context.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    bug.title, bug.description, bug.status,
                    bug.priority, bug.created_at, bug.updated_at,
                ))
                bug.id = cur.fetchone()[0]
            conn.commit()
            logger.info(f"Created bug #{bug.id}")
            return bug
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to insert bug: {e}")
            raise InsertError(f"failed to insert bug: {e}") from e
        finally:
            self.context.release_connection(conn)

    # ── READ ──────────────────────────────────────────────

    def get(self, bug_id: int) -> Bug:
        """
        Fetch a single bug by ID.

        Raises:
            NotFoundError: If no bug has this ID.
            QueryError: On any other database failure.
        """
        sql = f"SELECT {_COLUMNS} FROM bugs WHERE id = %s;"
        conn = self.context.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (bug_id,))
                row = cur.fetchone()
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to query bug #{bug_id}: {e}")
            raise QueryError(f"failed to query bug: {e}") from e
        finally:
            self.context.release_connection(conn)

        if row is None:
            raise NotFoundError(f"bug {bug_id} not found")
        return self._row_to_bug(row)

    def get_all(self) -> list[Bug]:
        """Fetch every bug ordered by ID. Returns an empty list when there are none."""
        sql = f"SELECT {_COLUMNS} FROM bugs ORDER BY id ASC;"
        conn = self.context.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql)
                rows = cur.fetchall()
            conn.commit()
            return [self._row_to_bug(r) for r in rows]
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to query bugs: {e}")
            raise QueryError(f"failed to query bugs: {e}") from e
        finally:
            self.context.release_connection(conn)

    # ── UPDATE ────────────────────────────────────────────

    def update(self, bug: Bug) -> Bug:
        """
        Update all mutable fields of an existing bug and refresh `updated_at`.

        Args:
            bug: Bug with updated fields (must have id set).

        Returns:
            The same Bug with its new `updated_at`.

        Raises:
            NotFoundError: If no bug has this ID.
            UpdateError: On any other database failure.
        """
        now = datetime.now(timezone.utc)
        previous = _as_utc(bug.updated_at)
        bug.updated_at = max(now, previous) if previous is not None else now

        sql = """
            UPDATE bugs
            SET title = %s, description = %s, status = %s, priority = %s, updated_at = %s
            WHERE id = %s;
        """
        conn = self.context.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    bug.title, bug.description, bug.status,
                    bug.priority, bug.updated_at, bug.id,
                ))
                updated = cur.rowcount > 0
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to update bug #{bug.id}: {e}")
            raise UpdateError(f"failed to update bug: {e}") from e
        finally:
            self.context.release_connection(conn)

        if not updated:
            raise NotFoundError(f"bug {bug.id} not found")
        logger.info(f"Updated bug #{bug.id}")
        return bug

    # ── DELETE ────────────────────────────────────────────

    def delete(self, bug_id: int) -> None:
        """
        Delete a bug by ID. Its comments are removed by the ON DELETE CASCADE.

        Raises:
            NotFoundError: If no bug has this ID.
            DeleteError: On any other database failure.
        """
        sql = "DELETE FROM bugs WHERE id = %s;"
        conn = self.context.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (bug_id,))
                deleted = cur.rowcount > 0
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to delete bug #{bug_id}: {e}")
            raise DeleteError(f"failed to delete bug: {e}") from e
        finally:
            self.context.release_connection(conn)

        if not deleted:
            raise NotFoundError(f"bug {bug_id} not found")
        logger.info(f"Deleted bug #{bug_id}")

    def delete_all(self) -> int:
        """
        Delete every bug (and, by cascade, every comment).

        The id sequence is restarted at 1 afterwards. That step is best-effort:
        a failure there is logged and not raised.

        Returns:
            Number of bugs that existed before the call.
        """
        conn = self.context.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM bugs;")
                count = cur.rowcount
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            self.context.release_connection(conn)
            logger.error(f"Failed to delete bugs: {e}")
            raise DeleteError(f"failed to delete bugs: {e}") from e

        try:
            with conn.cursor() as cur:
                cur.execute("SELECT setval(pg_get_serial_sequence('bugs', 'id'), 1, false);")
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.warning(f"Could not reset bugs id sequence: {e}")
        finally:
            self.context.release_connection(conn)

        logger.info(f"Deleted all bugs ({count})")
        return count

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_bug(row: tuple) -> Bug:
        """Convert a database row tuple to a Bug domain object."""
        return Bug(
            id=row[0],
            title=row[1],
            description=row[2],
            status=row[3],
            priority=row[4],
            created_at=row[5],
            updated_at=row[6],
        )
