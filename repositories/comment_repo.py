"""
repositories/comment_repo.py
-----------------------------
Data access layer for bug comments.
Every operation checks that the parent bug exists before touching `comments`.
"""

from datetime import datetime, timezone
from typing import Optional, Union

import psycopg2

from db.connection import StorageContext, get_default_context
from db.errors import InsertError, NotFoundError, ParentNotFoundError, QueryError
from models.bug import BugID, parse_bug_id
from models.comment import Comment
from repositories.bug_repo import BugRepository
from utils.logger import get_logger

logger = get_logger(__name__)


class CommentRepository:
    """Repository for CRUD operations on the comments table."""

    def __init__(
        self,
        context: Optional[StorageContext] = None,
        bug_repo: Optional[BugRepository] = None,
    ):
        self.context = context or get_default_context()
        self.bug_repo = bug_repo or BugRepository(self.context)

    def create(self, bug_id: Union[int, str], comment: Comment) -> Comment:
        """
        Attach a new comment to a bug.

        Args:
            bug_id: Parent bug reference, as an int or a decimal string.
            comment: The Comment to persist.

        Returns:
            The same Comment with `id`, `bug_id` and `created_at` populated.

        Raises:
            InvalidReferenceError: If bug_id is malformed.
            ParentNotFoundError: If the bug does not exist.
            InsertError: On any other database failure.
        """
        parent_id = self._require_parent(bug_id)
        comment.bug_id = parent_id
        comment.created_at = datetime.now(timezone.utc)

        sql = """
            INSERT INTO comments (bug_id, content, author, created_at)
            VALUES (%s, %s, %s, %s)
            RETURNING id;
        """
        conn = self.context.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    comment.bug_id, comment.content, comment.author, comment.created_at,
                ))
                comment.id = cur.fetchone()[0]
            conn.commit()
            logger.info(f"Added comment #{comment.id} to bug #{parent_id}")
            return comment
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to insert comment on bug #{parent_id}: {e}")
            raise InsertError(f"failed to insert comment: {e}") from e
        finally:
            self.context.release_connection(conn)

    def get_by_bug(self, bug_id: Union[int, str]) -> list[Comment]:
        """
        Fetch all comments of a bug ordered by ID.

        Returns:
            List of Comment objects, empty if the bug has none.

        Raises:
            InvalidReferenceError: If bug_id is malformed.
            ParentNotFoundError: If the bug does not exist.
            QueryError: On any other database failure.
        """
        parent_id = self._require_parent(bug_id)

        sql = """
            SELECT id, bug_id, content, author, created_at
            FROM comments
            WHERE bug_id = %s
            ORDER BY id ASC;
        """
        conn = self.context.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (parent_id,))
                rows = cur.fetchall()
            conn.commit()
            return [self._row_to_comment(r) for r in rows]
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to query comments for bug #{parent_id}: {e}")
            raise QueryError(f"failed to query comments: {e}") from e
        finally:
            self.context.release_connection(conn)

    # ── HELPERS ───────────────────────────────────────────

    def _require_parent(self, bug_id: Union[int, str]) -> BugID:
        """Parse the reference and make sure the bug it names exists."""
        parent_id = parse_bug_id(bug_id)
        try:
            self.bug_repo.get(parent_id)
        except NotFoundError as e:
            raise ParentNotFoundError(f"bug {parent_id} not found") from e
        return parent_id

    @staticmethod
    def _row_to_comment(row: tuple) -> Comment:
        """Convert a database row tuple to a Comment domain object."""
        return Comment(
            id=row[0],
            bug_id=row[1],
            content=row[2],
            author=row[3],
            created_at=row[4],
        )
