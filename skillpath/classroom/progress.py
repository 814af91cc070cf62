"""
ProgressStore - Track which lessons and nodes each user has completed.

Completion rows are insert-only. A duplicate insert is reported as
ALREADY_COMPLETED and leaves the table untouched, so callers can retry a
completion safely.
"""

import logging
import sqlite3
from typing import Optional

from skillpath.schemas import RecordStatus, UserProgress

from .database import Database, utcnow

logger = logging.getLogger(__name__)


class ProgressStore:
    """
    Read and record lesson/node completions.

    Reads are never cached: every get_progress() call hits the database, so
    a completion written by another session is always visible.
    """

    def __init__(self, db: Database):
        self.db = db

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_progress(self, user_id: str) -> UserProgress:
        """Get a fresh snapshot of completed lessons and nodes."""
        with self.db.read() as conn:
            lessons = conn.execute(
                "SELECT lesson_id FROM lesson_completions WHERE user_id = ?",
                (user_id,)
            ).fetchall()
            nodes = conn.execute(
                "SELECT node_id FROM node_completions WHERE user_id = ?",
                (user_id,)
            ).fetchall()
        return UserProgress(
            completed_lessons={row["lesson_id"] for row in lessons},
            completed_nodes={row["node_id"] for row in nodes},
        )

    def is_lesson_completed(self, user_id: str, lesson_id: str) -> bool:
        """Check if a lesson is completed."""
        with self.db.read() as conn:
            row = conn.execute(
                "SELECT 1 FROM lesson_completions WHERE user_id = ? AND lesson_id = ?",
                (user_id, lesson_id)
            ).fetchone()
        return row is not None

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def record_lesson_completion(
        self,
        user_id: str,
        lesson_id: str,
        conn: Optional[sqlite3.Connection] = None,
    ) -> RecordStatus:
        """
        Insert a lesson completion.

        Args:
            user_id: User identifier
            lesson_id: Lesson identifier
            conn: Open transaction to join (default: run in a new one)

        Returns:
            OK if inserted, ALREADY_COMPLETED if the row existed
        """
        return self._record("lesson_completions", "lesson_id", user_id, lesson_id, conn)

    def record_node_completion(
        self,
        user_id: str,
        node_id: str,
        conn: Optional[sqlite3.Connection] = None,
    ) -> RecordStatus:
        """Insert a node completion. Same semantics as record_lesson_completion."""
        return self._record("node_completions", "node_id", user_id, node_id, conn)

    def _record(
        self,
        table: str,
        column: str,
        user_id: str,
        ref_id: str,
        conn: Optional[sqlite3.Connection],
    ) -> RecordStatus:
        if conn is None:
            with self.db.transaction() as own_conn:
                return self._record(table, column, user_id, ref_id, own_conn)

        cursor = conn.execute(
            f"""INSERT OR IGNORE INTO {table} (user_id, {column}, completed_at)
                VALUES (?, ?, ?)""",
            (user_id, ref_id, utcnow().isoformat())
        )
        if cursor.rowcount == 0:
            logger.info(f"Duplicate completion ignored: user={user_id}, {column}={ref_id}")
            return RecordStatus.ALREADY_COMPLETED
        return RecordStatus.OK
