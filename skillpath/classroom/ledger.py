"""
RewardLedger - Atomic reward transactions.

Provides:
- Lesson completion: completion row + XP/level + counters + gems, one transaction
- Node completion: idempotent completion row + counter (+ checkpoint gems)
- Purchases: delegated to CurrencyStore.apply_purchase
- Progress observers notified after each successful commit
"""

import logging
from typing import Callable, Optional

from skillpath.schemas import (
    LessonCompletionResult,
    ProgressEvent,
    ProgressEventKind,
    PurchaseResult,
    RecordStatus,
)

from .database import Database, utcnow
from .economy import CurrencyStore
from .profiles import ProfileStore
from .progress import ProgressStore

logger = logging.getLogger(__name__)

DEFAULT_LESSON_XP = 10
DEFAULT_LESSON_GEMS = 5

ProgressObserver = Callable[[ProgressEvent], None]


class RewardLedger:
    """
    Transactional reward accounting.

    Every mutating method runs in a single BEGIN IMMEDIATE transaction, so
    concurrent calls for the same user serialize and a failure leaves no
    partial award behind.
    """

    def __init__(
        self,
        db: Database,
        progress: ProgressStore,
        profiles: ProfileStore,
        currency: CurrencyStore,
        lesson_xp: int = DEFAULT_LESSON_XP,
        lesson_gems: int = DEFAULT_LESSON_GEMS,
    ):
        self.db = db
        self.progress = progress
        self.profiles = profiles
        self.currency = currency
        self.lesson_xp = lesson_xp
        self.lesson_gems = lesson_gems
        self._observers: list[ProgressObserver] = []

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def subscribe(self, callback: ProgressObserver) -> Callable[[], None]:
        """
        Register a progress observer.

        Returns:
            Function that removes the observer again
        """
        self._observers.append(callback)

        def unsubscribe():
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def _notify(self, kind: ProgressEventKind, user_id: str, ref_id: str, detail: Optional[dict] = None):
        event = ProgressEvent(
            kind=kind,
            user_id=user_id,
            ref_id=ref_id,
            occurred_at=utcnow(),
            detail=detail,
        )
        for callback in list(self._observers):
            try:
                callback(event)
            except Exception:
                logger.exception(f"Progress observer failed for {kind.value} {ref_id}")

    # -------------------------------------------------------------------------
    # Lesson completion
    # -------------------------------------------------------------------------

    def complete_lesson(
        self,
        user_id: str,
        lesson_id: str,
        xp_award: Optional[int] = None,
    ) -> LessonCompletionResult:
        """
        Record a lesson completion and award its rewards.

        A lesson already completed by the user is a no-op: the result carries
        status ALREADY_COMPLETED and the profile is left untouched.

        Args:
            user_id: User identifier
            lesson_id: Completed lesson
            xp_award: XP to award (default: the configured per-lesson award)

        Returns:
            LessonCompletionResult with the post-transaction XP and level

        Raises:
            StorageError: The transaction failed and was rolled back
        """
        award = self.lesson_xp if xp_award is None else xp_award

        with self.db.transaction() as conn:
            status = self.progress.record_lesson_completion(user_id, lesson_id, conn)

            if status == RecordStatus.ALREADY_COMPLETED:
                self.profiles.ensure_profile(conn, user_id)
                row = conn.execute(
                    "SELECT current_xp, current_level FROM user_profiles WHERE user_id = ?",
                    (user_id,)
                ).fetchone()
                return LessonCompletionResult(
                    status=status,
                    lesson_id=lesson_id,
                    new_xp=row["current_xp"],
                    new_level=row["current_level"],
                )

            update = self.profiles.apply_xp_transaction(user_id, award, conn, source_id=lesson_id)
            self.profiles.increment_counter(conn, user_id, "lessons_completed")
            if self.lesson_gems:
                self.currency.credit(user_id, self.lesson_gems, conn)

        logger.info(
            f"Lesson completed: user={user_id}, lesson={lesson_id}, +{award} XP, "
            f"level={update.new_level}, xp={update.new_xp}"
        )
        result = LessonCompletionResult(
            status=RecordStatus.OK,
            lesson_id=lesson_id,
            new_xp=update.new_xp,
            new_level=update.new_level,
            leveled_up=update.leveled_up,
            xp_awarded=award,
            gems_awarded=self.lesson_gems,
        )
        self._notify(ProgressEventKind.LESSON_COMPLETED, user_id, lesson_id, result.model_dump(mode="json"))
        return result

    # -------------------------------------------------------------------------
    # Node completion
    # -------------------------------------------------------------------------

    def complete_node(self, user_id: str, node_id: str, reward_gems: int = 0) -> RecordStatus:
        """
        Record a node completion and bump nodes_completed.

        Duplicates return ALREADY_COMPLETED without touching counters or gems.
        """
        with self.db.transaction() as conn:
            status = self.progress.record_node_completion(user_id, node_id, conn)
            if status == RecordStatus.ALREADY_COMPLETED:
                return status
            self.profiles.increment_counter(conn, user_id, "nodes_completed")
            if reward_gems:
                self.currency.credit(user_id, reward_gems, conn)

        logger.info(f"Node completed: user={user_id}, node={node_id}, +{reward_gems} gems")
        self._notify(ProgressEventKind.NODE_COMPLETED, user_id, node_id, {"gems": reward_gems})
        return status

    # -------------------------------------------------------------------------
    # Purchases
    # -------------------------------------------------------------------------

    def purchase(self, user_id: str, item_id: str) -> PurchaseResult:
        """Buy one unit of a shop item (see CurrencyStore.apply_purchase)."""
        result = self.currency.apply_purchase(user_id, item_id)
        self._notify(ProgressEventKind.PURCHASE, user_id, item_id, result.model_dump(mode="json"))
        return result
