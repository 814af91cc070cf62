"""
Database - SQLite file shared by the progress, profile and currency stores.

Every operation opens its own connection. Writes go through transaction(),
which issues BEGIN IMMEDIATE so the write lock is taken before anything is
read; concurrent writers (other sessions, other devices) queue behind it for
up to busy_timeout seconds.
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from skillpath.errors import StorageError

logger = logging.getLogger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS lesson_completions (
    user_id TEXT NOT NULL,
    lesson_id TEXT NOT NULL,
    completed_at TEXT NOT NULL,
    PRIMARY KEY (user_id, lesson_id)
);

CREATE TABLE IF NOT EXISTS node_completions (
    user_id TEXT NOT NULL,
    node_id TEXT NOT NULL,
    completed_at TEXT NOT NULL,
    PRIMARY KEY (user_id, node_id)
);

CREATE TABLE IF NOT EXISTS user_profiles (
    user_id TEXT PRIMARY KEY,
    display_name TEXT NOT NULL,
    current_xp INTEGER NOT NULL DEFAULT 0 CHECK (current_xp >= 0),
    current_level INTEGER NOT NULL DEFAULT 1 CHECK (current_level >= 1),
    total_xp_earned INTEGER NOT NULL DEFAULT 0,
    lessons_completed INTEGER NOT NULL DEFAULT 0,
    nodes_completed INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS xp_events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    amount INTEGER NOT NULL,
    source_id TEXT,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS user_currency (
    user_id TEXT PRIMARY KEY,
    gems INTEGER NOT NULL DEFAULT 0 CHECK (gems >= 0),
    total_gems_earned INTEGER NOT NULL DEFAULT 0,
    total_gems_spent INTEGER NOT NULL DEFAULT 0,
    CHECK (gems = total_gems_earned - total_gems_spent)
);

CREATE TABLE IF NOT EXISTS shop_items (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    item_type TEXT NOT NULL DEFAULT 'item',
    price_gems INTEGER NOT NULL CHECK (price_gems >= 0),
    max_inventory INTEGER,
    icon_emoji TEXT NOT NULL DEFAULT '',
    sort_order INTEGER NOT NULL DEFAULT 0,
    active INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS boost_items (
    item_id TEXT PRIMARY KEY REFERENCES shop_items(id),
    multiplier REAL NOT NULL,
    duration_minutes INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS user_inventory (
    user_id TEXT NOT NULL,
    item_id TEXT NOT NULL REFERENCES shop_items(id),
    quantity INTEGER NOT NULL DEFAULT 0 CHECK (quantity >= 0),
    last_acquired_at TEXT NOT NULL,
    PRIMARY KEY (user_id, item_id)
);

CREATE TABLE IF NOT EXISTS active_boosts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    item_id TEXT NOT NULL,
    multiplier REAL NOT NULL,
    activated_at TEXT NOT NULL,
    expires_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_xp_events_user_time
ON xp_events(user_id, created_at);

CREATE INDEX IF NOT EXISTS idx_active_boosts_user
ON active_boosts(user_id, expires_at);
"""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Database:
    """
    SQLite database holding progress and ledger tables.

    Thread-safe: each method creates a new connection.
    """

    def __init__(self, db_path: str | Path, busy_timeout: float = 5.0):
        """
        Initialize database, creating the file and tables if needed.

        Args:
            db_path: Path to the SQLite file
            busy_timeout: Seconds to wait for another writer's lock
        """
        self.db_path = Path(db_path)
        self.busy_timeout = busy_timeout
        self._ensure_database()

    def _ensure_database(self):
        """Create database and tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._get_connection()
        try:
            conn.executescript(SCHEMA)
        except sqlite3.Error as e:
            logger.exception(f"Failed to initialize database at {self.db_path}")
            raise StorageError("Failed to initialize database") from e
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new connection in autocommit mode (transactions are explicit)."""
        conn = sqlite3.connect(str(self.db_path), timeout=self.busy_timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def read(self) -> Iterator[sqlite3.Connection]:
        """Connection for read-only queries."""
        try:
            conn = self._get_connection()
        except sqlite3.Error as e:
            raise StorageError("Failed to open database") from e
        try:
            yield conn
        except sqlite3.Error as e:
            logger.exception("Read query failed")
            raise StorageError("Failed to read from storage") from e
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Run a block as one write transaction.

        Commits on success. Any exception rolls back every statement in the
        block; sqlite errors surface as StorageError, anything else is
        re-raised unchanged.
        """
        try:
            conn = self._get_connection()
        except sqlite3.Error as e:
            raise StorageError("Failed to open database") from e
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            logger.exception("Transaction failed and was rolled back")
            raise StorageError("Storage transaction failed") from e
        finally:
            conn.close()
