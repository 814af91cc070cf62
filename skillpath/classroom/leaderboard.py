"""
LeaderboardView - Ranked XP views over user profiles.

All-time ranks by total_xp_earned; weekly ranks by XP earned inside the
trailing window. Ties share a rank. Read-only.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from skillpath.errors import ValidationError
from skillpath.schemas import LeaderboardEntry, LeaderboardPeriod

from .database import Database, utcnow

logger = logging.getLogger(__name__)

ALL_TIME_QUERY = """
    SELECT user_id, display_name, total_xp_earned AS xp, current_level,
           lessons_completed, nodes_completed,
           RANK() OVER (ORDER BY total_xp_earned DESC) AS rank
    FROM user_profiles
"""

WEEKLY_QUERY = """
    SELECT p.user_id, p.display_name, w.xp, p.current_level,
           p.lessons_completed, p.nodes_completed,
           RANK() OVER (ORDER BY w.xp DESC) AS rank
    FROM (
        SELECT user_id, SUM(amount) AS xp
        FROM xp_events
        WHERE created_at >= ?
        GROUP BY user_id
    ) w
    JOIN user_profiles p ON p.user_id = w.user_id
"""


def _row_to_entry(row) -> LeaderboardEntry:
    return LeaderboardEntry(
        rank=row["rank"],
        user_id=row["user_id"],
        display_name=row["display_name"],
        xp=row["xp"],
        current_level=row["current_level"],
        lessons_completed=row["lessons_completed"],
        nodes_completed=row["nodes_completed"],
    )


class LeaderboardView:
    """Global and weekly rankings."""

    def __init__(self, db: Database, weekly_window_days: int = 7):
        self.db = db
        self.weekly_window_days = weekly_window_days

    def _ranked_query(self, period: LeaderboardPeriod, now: Optional[datetime]) -> tuple[str, tuple]:
        if period == LeaderboardPeriod.WEEKLY:
            since = (now or utcnow()) - timedelta(days=self.weekly_window_days)
            return WEEKLY_QUERY, (since.isoformat(),)
        return ALL_TIME_QUERY, ()

    def top(
        self,
        n: int = 10,
        period: LeaderboardPeriod = LeaderboardPeriod.ALL_TIME,
        now: Optional[datetime] = None,
    ) -> list[LeaderboardEntry]:
        """Get the top n entries for a period."""
        if n < 1:
            raise ValidationError(f"Leaderboard size must be at least 1, got {n}")
        query, params = self._ranked_query(LeaderboardPeriod(period), now)
        with self.db.read() as conn:
            rows = conn.execute(
                f"SELECT * FROM ({query}) ORDER BY rank, display_name, user_id LIMIT ?",
                (*params, n)
            ).fetchall()
        return [_row_to_entry(row) for row in rows]

    def rank_of(
        self,
        user_id: str,
        period: LeaderboardPeriod = LeaderboardPeriod.ALL_TIME,
        now: Optional[datetime] = None,
    ) -> Optional[LeaderboardEntry]:
        """Get one user's entry, or None if they are not ranked."""
        query, params = self._ranked_query(LeaderboardPeriod(period), now)
        with self.db.read() as conn:
            row = conn.execute(
                f"SELECT * FROM ({query}) WHERE user_id = ?",
                (*params, user_id)
            ).fetchone()
        return _row_to_entry(row) if row else None
