"""
ProfileStore - XP, level and completion counters per user.

Profiles are created lazily with current_xp=0, current_level=1. XP changes
go through apply_xp_transaction, which keeps
0 <= current_xp < current_level * level_xp_step.
"""

import logging
import sqlite3
from typing import Optional

from skillpath.errors import ValidationError
from skillpath.schemas import UserProfile, XpUpdate

from .database import Database, utcnow

logger = logging.getLogger(__name__)

DEFAULT_LEVEL_XP_STEP = 50

PROFILE_COLUMNS = """user_id, display_name, current_xp, current_level,
                     total_xp_earned, lessons_completed, nodes_completed"""

COUNTER_COLUMNS = ("lessons_completed", "nodes_completed")


def apply_level_up(
    current_xp: int,
    current_level: int,
    award: int,
    step: int = DEFAULT_LEVEL_XP_STEP,
) -> tuple[int, int, int]:
    """
    Add an XP award and roll over levels.

    The threshold for leaving a level is level * step. A single award may
    cross several thresholds.

    Args:
        current_xp: XP within the current level
        current_level: Current level (>= 1)
        award: XP to add (>= 0)
        step: XP per level multiplier

    Returns:
        Tuple of (new_xp, new_level, levels_gained)
    """
    if award < 0:
        raise ValidationError(f"XP award must be non-negative, got {award}")
    if current_level < 1 or current_xp < 0:
        raise ValidationError(f"Invalid profile state: xp={current_xp}, level={current_level}")

    xp = current_xp + award
    level = current_level
    while xp >= level * step:
        xp -= level * step
        level += 1
    return xp, level, level - current_level


def default_display_name(user_id: str) -> str:
    """Local part of an e-mail style id, or the id itself."""
    return user_id.split("@")[0] or user_id


def _row_to_profile(row: sqlite3.Row) -> UserProfile:
    return UserProfile(
        user_id=row["user_id"],
        display_name=row["display_name"],
        current_xp=row["current_xp"],
        current_level=row["current_level"],
        total_xp_earned=row["total_xp_earned"],
        lessons_completed=row["lessons_completed"],
        nodes_completed=row["nodes_completed"],
    )


class ProfileStore:
    """Database access for user profiles."""

    def __init__(self, db: Database, level_xp_step: int = DEFAULT_LEVEL_XP_STEP):
        self.db = db
        self.level_xp_step = level_xp_step

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        """Get a profile without creating it."""
        with self.db.read() as conn:
            row = conn.execute(
                f"SELECT {PROFILE_COLUMNS} FROM user_profiles WHERE user_id = ?",
                (user_id,)
            ).fetchone()
        return _row_to_profile(row) if row else None

    def get_or_create_profile(self, user_id: str, display_name: Optional[str] = None) -> UserProfile:
        """Get a profile, creating it with defaults on first access."""
        profile = self.get_profile(user_id)
        if profile is not None:
            return profile
        with self.db.transaction() as conn:
            self.ensure_profile(conn, user_id, display_name)
            row = conn.execute(
                f"SELECT {PROFILE_COLUMNS} FROM user_profiles WHERE user_id = ?",
                (user_id,)
            ).fetchone()
        logger.info(f"Profile ready for user={user_id}")
        return _row_to_profile(row)

    def ensure_profile(self, conn: sqlite3.Connection, user_id: str, display_name: Optional[str] = None):
        """Insert a default profile row inside an open transaction if missing."""
        now = utcnow().isoformat()
        conn.execute(
            """INSERT OR IGNORE INTO user_profiles
                 (user_id, display_name, created_at, updated_at)
               VALUES (?, ?, ?, ?)""",
            (user_id, display_name or default_display_name(user_id), now, now)
        )

    def apply_xp_transaction(
        self,
        user_id: str,
        award: int,
        conn: Optional[sqlite3.Connection] = None,
        source_id: Optional[str] = None,
    ) -> XpUpdate:
        """
        Award XP with level roll-over as one read-modify-write.

        Args:
            user_id: User identifier
            award: XP to add
            conn: Open transaction to join (default: run in a new one)
            source_id: What earned the XP (lesson id), kept on the xp event

        Returns:
            XpUpdate with the new XP/level
        """
        if conn is None:
            with self.db.transaction() as own_conn:
                return self.apply_xp_transaction(user_id, award, own_conn, source_id)

        self.ensure_profile(conn, user_id)
        row = conn.execute(
            "SELECT current_xp, current_level FROM user_profiles WHERE user_id = ?",
            (user_id,)
        ).fetchone()

        new_xp, new_level, levels_gained = apply_level_up(
            row["current_xp"], row["current_level"], award, self.level_xp_step
        )
        now = utcnow().isoformat()
        conn.execute(
            """UPDATE user_profiles
               SET current_xp = ?, current_level = ?,
                   total_xp_earned = total_xp_earned + ?, updated_at = ?
               WHERE user_id = ?""",
            (new_xp, new_level, award, now, user_id)
        )
        conn.execute(
            "INSERT INTO xp_events (user_id, amount, source_id, created_at) VALUES (?, ?, ?, ?)",
            (user_id, award, source_id, now)
        )

        if levels_gained:
            logger.info(f"Level up: user={user_id}, level {row['current_level']} -> {new_level}")
        return XpUpdate(
            new_xp=new_xp,
            new_level=new_level,
            leveled_up=levels_gained > 0,
            levels_gained=levels_gained,
        )

    def increment_counter(self, conn: sqlite3.Connection, user_id: str, column: str):
        """Add one to lessons_completed or nodes_completed inside a transaction."""
        if column not in COUNTER_COLUMNS:
            raise ValidationError(f"Unknown profile counter: {column}")
        self.ensure_profile(conn, user_id)
        conn.execute(
            f"UPDATE user_profiles SET {column} = {column} + 1, updated_at = ? WHERE user_id = ?",
            (utcnow().isoformat(), user_id)
        )
