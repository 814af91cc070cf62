"""
LearningService - Boundary between callers and the SkillPath core.

Wires settings, content, stores and the reward ledger together. Each
public method resolves the current user once through the AuthContext and
passes the id explicitly to everything below it.
"""

import logging
import random
from typing import Optional

from skillpath.config import Settings
from skillpath.errors import NotFound
from skillpath.schemas import (
    ActiveBoost,
    CheckpointNode,
    InventoryItem,
    LeaderboardEntry,
    LeaderboardPeriod,
    LessonContent,
    NodeState,
    PurchaseResult,
    ShopItem,
    Topic,
    UserCurrency,
    UserProfile,
    UserProgress,
)

from .auth import AuthContext, require_user
from .database import Database
from .economy import CurrencyStore, ShopCatalog
from .leaderboard import LeaderboardView
from .ledger import ProgressObserver, RewardLedger
from .loader import ContentLoader
from .navigator import NavigationUnit, Navigator
from .player import LessonOutcome, LessonPlayer
from .profiles import ProfileStore
from .progress import ProgressStore
from .unlock import evaluate, evaluate_all, node_lessons_complete

logger = logging.getLogger(__name__)


class LearningService:
    """Facade over content, progress, rewards and the shop."""

    def __init__(
        self,
        settings: Settings,
        auth: AuthContext,
        loader: Optional[ContentLoader] = None,
        db: Optional[Database] = None,
    ):
        self.settings = settings
        self.auth = auth
        self.loader = loader or ContentLoader(settings.content_dir)
        self.db = db or Database(settings.db_path, settings.busy_timeout)

        self.progress_store = ProgressStore(self.db)
        self.profiles = ProfileStore(self.db, settings.level_xp_step)
        self.currency = CurrencyStore(self.db)
        self.catalog = ShopCatalog(self.db)
        self.leaderboards = LeaderboardView(self.db, settings.weekly_window_days)
        self.ledger = RewardLedger(
            self.db,
            self.progress_store,
            self.profiles,
            self.currency,
            lesson_xp=settings.lesson_xp,
            lesson_gems=settings.lesson_gems,
        )

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    def topic(self, name: str) -> Topic:
        topic = self.loader.load_topic(name)
        if topic is None:
            raise NotFound("Topic", name)
        return topic

    def lesson(self, lesson_id: str, topic_name: str) -> LessonContent:
        """Load lesson content for a lesson listed in the topic tree."""
        ref = self.topic(topic_name).find_lesson(lesson_id)
        if ref is None:
            raise NotFound("Lesson", lesson_id)
        lesson = self.loader.load_lesson(lesson_id, ref.content_ref)
        if lesson is None:
            raise NotFound("Lesson content", lesson_id)
        return lesson

    # -------------------------------------------------------------------------
    # Progress and unlock state
    # -------------------------------------------------------------------------

    def progress(self) -> UserProgress:
        return self.progress_store.get_progress(require_user(self.auth))

    def node_state(self, topic_name: str, node_id: str) -> NodeState:
        """State of one node from a freshly read progress snapshot."""
        topic = self.topic(topic_name)
        return evaluate(node_id, self.progress(), topic)

    def node_states(self, topic_name: str) -> dict[str, NodeState]:
        topic = self.topic(topic_name)
        return evaluate_all(self.progress(), topic)

    def navigation(self, topic_name: str) -> list[NavigationUnit]:
        topic = self.topic(topic_name)
        return Navigator(topic).navigation_tree(self.progress())

    def progress_summary(self, topic_name: str) -> dict:
        topic = self.topic(topic_name)
        return Navigator(topic).progress_summary(self.progress())

    # -------------------------------------------------------------------------
    # Lessons
    # -------------------------------------------------------------------------

    def start_lesson(self, lesson_id: str, topic_name: str, rng: Optional[random.Random] = None) -> LessonPlayer:
        """Create a player whose completion effect is complete_lesson()."""
        require_user(self.auth)
        lesson = self.lesson(lesson_id, topic_name)
        return LessonPlayer(
            lesson,
            on_complete=lambda completed_id: self.complete_lesson(completed_id, topic_name),
            rng=rng,
        )

    def complete_lesson(self, lesson_id: str, topic_name: str) -> LessonOutcome:
        """
        Lesson completion effects.

        1. Record the lesson and award XP (one ledger transaction)
        2. Re-read progress, so the check below sees this and any other
           session's completions
        3. Complete the parent node if all of its lessons are now done
        """
        user_id = require_user(self.auth)
        topic = self.topic(topic_name)
        if topic.find_lesson(lesson_id) is None:
            raise NotFound("Lesson", lesson_id)

        completion = self.ledger.complete_lesson(user_id, lesson_id)

        node = topic.node_for_lesson(lesson_id)
        if node is None:
            return LessonOutcome(completion=completion)

        fresh = self.progress_store.get_progress(user_id)
        if not node_lessons_complete(node, fresh):
            return LessonOutcome(completion=completion, node_id=node.id)

        reward_gems = node.reward.gems if isinstance(node, CheckpointNode) else 0
        node_status = self.ledger.complete_node(user_id, node.id, reward_gems)
        return LessonOutcome(completion=completion, node_id=node.id, node_status=node_status)

    def subscribe(self, callback: ProgressObserver):
        """Register an observer for progress changes (see RewardLedger.subscribe)."""
        return self.ledger.subscribe(callback)

    # -------------------------------------------------------------------------
    # Profile and economy
    # -------------------------------------------------------------------------

    def profile(self) -> UserProfile:
        return self.profiles.get_or_create_profile(require_user(self.auth))

    def balance(self) -> UserCurrency:
        return self.currency.get_or_create_balance(require_user(self.auth))

    def shop(self) -> list[ShopItem]:
        require_user(self.auth)
        return self.catalog.list_items()

    def purchase(self, item_id: str) -> PurchaseResult:
        return self.ledger.purchase(require_user(self.auth), item_id)

    def inventory(self) -> list[InventoryItem]:
        return self.currency.get_inventory(require_user(self.auth))

    def active_boosts(self) -> list[ActiveBoost]:
        return self.currency.active_boosts(require_user(self.auth))

    # -------------------------------------------------------------------------
    # Leaderboards
    # -------------------------------------------------------------------------

    def leaderboard(
        self,
        period: LeaderboardPeriod = LeaderboardPeriod.ALL_TIME,
        limit: Optional[int] = None,
    ) -> list[LeaderboardEntry]:
        require_user(self.auth)
        return self.leaderboards.top(self.settings.leaderboard_limit if limit is None else limit, period)

    def my_rank(self, period: LeaderboardPeriod = LeaderboardPeriod.ALL_TIME) -> Optional[LeaderboardEntry]:
        return self.leaderboards.rank_of(require_user(self.auth), period)
