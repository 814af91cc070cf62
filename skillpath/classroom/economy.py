"""
Virtual economy - Shop catalog, gem balances, inventory and boosts.

Provides:
- ShopCatalog: catalog entries with optional boost metadata
- CurrencyStore: balances, gem credits and the atomic purchase transaction

Balance rows always satisfy gems = total_gems_earned - total_gems_spent >= 0
(also enforced by CHECK constraints on the table).
"""

import logging
import sqlite3
from datetime import datetime, timedelta
from typing import Optional

from skillpath.errors import (
    InsufficientFunds,
    InventoryLimitReached,
    NotFound,
    ValidationError,
)
from skillpath.schemas import (
    ActiveBoost,
    BoostInfo,
    InventoryItem,
    PurchaseResult,
    ShopItem,
    UserCurrency,
)

from .database import Database, utcnow

logger = logging.getLogger(__name__)

ITEM_SELECT = """SELECT s.id, s.name, s.description, s.item_type, s.price_gems,
                        s.max_inventory, s.icon_emoji, s.sort_order, s.active,
                        b.multiplier, b.duration_minutes
                 FROM shop_items s
                 LEFT JOIN boost_items b ON b.item_id = s.id"""


def _row_to_item(row: sqlite3.Row) -> ShopItem:
    boost = None
    if row["multiplier"] is not None:
        boost = BoostInfo(multiplier=row["multiplier"], duration_minutes=row["duration_minutes"])
    return ShopItem(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        item_type=row["item_type"],
        price_gems=row["price_gems"],
        max_inventory=row["max_inventory"],
        icon_emoji=row["icon_emoji"],
        sort_order=row["sort_order"],
        active=bool(row["active"]),
        boost=boost,
    )


# -----------------------------------------------------------------------------
# Shop catalog
# -----------------------------------------------------------------------------

class ShopCatalog:
    """Shop items and their boost metadata."""

    def __init__(self, db: Database):
        self.db = db

    def add_item(self, item: ShopItem):
        """Insert or replace a catalog entry."""
        with self.db.transaction() as conn:
            conn.execute(
                """INSERT INTO shop_items
                     (id, name, description, item_type, price_gems, max_inventory,
                      icon_emoji, sort_order, active)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                     name = excluded.name,
                     description = excluded.description,
                     item_type = excluded.item_type,
                     price_gems = excluded.price_gems,
                     max_inventory = excluded.max_inventory,
                     icon_emoji = excluded.icon_emoji,
                     sort_order = excluded.sort_order,
                     active = excluded.active""",
                (item.id, item.name, item.description, item.item_type, item.price_gems,
                 item.max_inventory, item.icon_emoji, item.sort_order, int(item.active))
            )
            conn.execute("DELETE FROM boost_items WHERE item_id = ?", (item.id,))
            if item.boost is not None:
                conn.execute(
                    "INSERT INTO boost_items (item_id, multiplier, duration_minutes) VALUES (?, ?, ?)",
                    (item.id, item.boost.multiplier, item.boost.duration_minutes)
                )
        logger.info(f"Catalog item saved: {item.id} ({item.price_gems} gems)")

    def list_items(self, active_only: bool = True) -> list[ShopItem]:
        """Get catalog items ordered by sort_order."""
        query = ITEM_SELECT
        if active_only:
            query += " WHERE s.active = 1"
        query += " ORDER BY s.sort_order, s.id"
        with self.db.read() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_item(row) for row in rows]

    def get_item(self, item_id: str) -> Optional[ShopItem]:
        """Get one catalog item by ID."""
        with self.db.read() as conn:
            return self._get_item(conn, item_id)

    @staticmethod
    def _get_item(conn: sqlite3.Connection, item_id: str) -> Optional[ShopItem]:
        row = conn.execute(f"{ITEM_SELECT} WHERE s.id = ?", (item_id,)).fetchone()
        return _row_to_item(row) if row else None


# -----------------------------------------------------------------------------
# Balances and purchases
# -----------------------------------------------------------------------------

class CurrencyStore:
    """Gem balances, inventory and the purchase transaction."""

    def __init__(self, db: Database):
        self.db = db

    def ensure_balance(self, conn: sqlite3.Connection, user_id: str):
        """Insert a zero balance row inside an open transaction if missing."""
        conn.execute(
            "INSERT OR IGNORE INTO user_currency (user_id) VALUES (?)",
            (user_id,)
        )

    def _read_balance(self, conn: sqlite3.Connection, user_id: str) -> Optional[UserCurrency]:
        row = conn.execute(
            """SELECT user_id, gems, total_gems_earned, total_gems_spent
               FROM user_currency WHERE user_id = ?""",
            (user_id,)
        ).fetchone()
        if not row:
            return None
        return UserCurrency(
            user_id=row["user_id"],
            gems=row["gems"],
            total_gems_earned=row["total_gems_earned"],
            total_gems_spent=row["total_gems_spent"],
        )

    def get_or_create_balance(self, user_id: str) -> UserCurrency:
        """Get the user's balance, creating a zero balance on first access."""
        with self.db.read() as conn:
            balance = self._read_balance(conn, user_id)
        if balance is not None:
            return balance
        with self.db.transaction() as conn:
            self.ensure_balance(conn, user_id)
            return self._read_balance(conn, user_id)

    def credit(self, user_id: str, amount: int, conn: Optional[sqlite3.Connection] = None) -> int:
        """
        Add earned gems.

        Returns:
            New gem balance
        """
        if amount < 0:
            raise ValidationError(f"Gem credit must be non-negative, got {amount}")
        if conn is None:
            with self.db.transaction() as own_conn:
                return self.credit(user_id, amount, own_conn)

        self.ensure_balance(conn, user_id)
        conn.execute(
            """UPDATE user_currency
               SET gems = gems + ?, total_gems_earned = total_gems_earned + ?
               WHERE user_id = ?""",
            (amount, amount, user_id)
        )
        return self._read_balance(conn, user_id).gems

    def apply_purchase(self, user_id: str, item_id: str, now: Optional[datetime] = None) -> PurchaseResult:
        """
        Buy one unit of an item.

        Debit, inventory credit and boost activation commit together; if any
        step fails the whole purchase is rolled back.

        Args:
            user_id: Buyer
            item_id: Catalog item ID
            now: Purchase time (default: current UTC time)

        Returns:
            PurchaseResult with the new balance and owned quantity

        Raises:
            NotFound: Item missing or inactive
            InsufficientFunds: Price exceeds balance
            InventoryLimitReached: max_inventory already held
            StorageError: Storage failure
        """
        now = now or utcnow()
        with self.db.transaction() as conn:
            item = ShopCatalog._get_item(conn, item_id)
            if item is None or not item.active:
                raise NotFound("Shop item", item_id)

            self.ensure_balance(conn, user_id)

            if item.max_inventory is not None:
                held = self._quantity(conn, user_id, item_id)
                if held >= item.max_inventory:
                    raise InventoryLimitReached(item_id, item.max_inventory)

            # Check and debit in one statement
            cursor = conn.execute(
                """UPDATE user_currency
                   SET gems = gems - ?, total_gems_spent = total_gems_spent + ?
                   WHERE user_id = ? AND gems >= ?""",
                (item.price_gems, item.price_gems, user_id, item.price_gems)
            )
            if cursor.rowcount == 0:
                balance = self._read_balance(conn, user_id)
                logger.info(
                    f"Purchase refused: user={user_id}, item={item_id}, "
                    f"price={item.price_gems}, balance={balance.gems}"
                )
                raise InsufficientFunds(item_id, item.price_gems, balance.gems)

            quantity = self._add_to_inventory(conn, user_id, item_id, now)

            boost_expires_at = None
            if item.boost is not None:
                boost_expires_at = self._activate_boost(conn, user_id, item_id, item.boost, now)

            new_balance = self._read_balance(conn, user_id).gems

        logger.info(
            f"Purchase: user={user_id}, item={item_id}, price={item.price_gems}, balance={new_balance}"
        )
        return PurchaseResult(
            item_id=item_id,
            new_balance=new_balance,
            quantity=quantity,
            boost_expires_at=boost_expires_at,
        )

    def _quantity(self, conn: sqlite3.Connection, user_id: str, item_id: str) -> int:
        row = conn.execute(
            "SELECT quantity FROM user_inventory WHERE user_id = ? AND item_id = ?",
            (user_id, item_id)
        ).fetchone()
        return row["quantity"] if row else 0

    def _add_to_inventory(self, conn: sqlite3.Connection, user_id: str, item_id: str, now: datetime) -> int:
        conn.execute(
            """INSERT INTO user_inventory (user_id, item_id, quantity, last_acquired_at)
               VALUES (?, ?, 1, ?)
               ON CONFLICT(user_id, item_id) DO UPDATE SET
                 quantity = quantity + 1,
                 last_acquired_at = excluded.last_acquired_at""",
            (user_id, item_id, now.isoformat())
        )
        return self._quantity(conn, user_id, item_id)

    def _activate_boost(
        self,
        conn: sqlite3.Connection,
        user_id: str,
        item_id: str,
        boost: BoostInfo,
        now: datetime,
    ) -> datetime:
        """Record an active boost; a second purchase extends a running one."""
        row = conn.execute(
            """SELECT MAX(expires_at) AS expires_at FROM active_boosts
               WHERE user_id = ? AND item_id = ? AND expires_at > ?""",
            (user_id, item_id, now.isoformat())
        ).fetchone()
        starts_at = datetime.fromisoformat(row["expires_at"]) if row["expires_at"] else now
        expires_at = starts_at + timedelta(minutes=boost.duration_minutes)
        conn.execute(
            """INSERT INTO active_boosts (user_id, item_id, multiplier, activated_at, expires_at)
               VALUES (?, ?, ?, ?, ?)""",
            (user_id, item_id, boost.multiplier, now.isoformat(), expires_at.isoformat())
        )
        return expires_at

    # -------------------------------------------------------------------------
    # Inventory queries
    # -------------------------------------------------------------------------

    def get_inventory(self, user_id: str) -> list[InventoryItem]:
        """Get owned items (quantity > 0) with catalog details."""
        with self.db.read() as conn:
            rows = conn.execute(
                """SELECT i.item_id, i.quantity, i.last_acquired_at
                   FROM user_inventory i
                   JOIN shop_items s ON s.id = i.item_id
                   WHERE i.user_id = ? AND i.quantity > 0
                   ORDER BY s.sort_order, s.id""",
                (user_id,)
            ).fetchall()
            return [
                InventoryItem(
                    item=ShopCatalog._get_item(conn, row["item_id"]),
                    quantity=row["quantity"],
                    last_acquired_at=datetime.fromisoformat(row["last_acquired_at"]),
                )
                for row in rows
            ]

    def active_boosts(self, user_id: str, now: Optional[datetime] = None) -> list[ActiveBoost]:
        """Get boosts that have not expired yet."""
        now = now or utcnow()
        with self.db.read() as conn:
            rows = conn.execute(
                """SELECT item_id, multiplier, activated_at, expires_at
                   FROM active_boosts
                   WHERE user_id = ? AND expires_at > ?
                   ORDER BY expires_at""",
                (user_id, now.isoformat())
            ).fetchall()
        return [
            ActiveBoost(
                item_id=row["item_id"],
                multiplier=row["multiplier"],
                activated_at=datetime.fromisoformat(row["activated_at"]),
                expires_at=datetime.fromisoformat(row["expires_at"]),
            )
            for row in rows
        ]
