"""
SkillPath Classroom - Runtime components for progression and rewards.

This module provides:
- Database / stores: progress, profiles, currency, shop catalog, leaderboards
- Unlock engine and Navigator: node states over a progress snapshot
- RewardLedger: atomic lesson/node completion and purchases
- Lesson session state machine and LessonPlayer
- LearningService: auth-resolved facade over all of the above
"""

from .database import Database
from .progress import ProgressStore
from .profiles import ProfileStore, apply_level_up
from .economy import CurrencyStore, ShopCatalog
from .leaderboard import LeaderboardView
from .ledger import RewardLedger
from .loader import ContentLoader
from .unlock import evaluate, evaluate_all, node_lessons_complete
from .navigator import Navigator, NavigationNode, NavigationUnit
from .session import (
    SessionPhase,
    SessionState,
    MatchSide,
    is_answer_correct,
    start_session,
)
from .player import LessonPlayer, LessonOutcome
from .auth import AuthContext, StaticAuth, require_user
from .service import LearningService

__all__ = [
    # Storage
    "Database",
    "ProgressStore",
    "ProfileStore",
    "apply_level_up",
    "CurrencyStore",
    "ShopCatalog",
    "LeaderboardView",
    "RewardLedger",
    "ContentLoader",
    # Unlock / navigation
    "evaluate",
    "evaluate_all",
    "node_lessons_complete",
    "Navigator",
    "NavigationNode",
    "NavigationUnit",
    # Session
    "SessionPhase",
    "SessionState",
    "MatchSide",
    "is_answer_correct",
    "start_session",
    "LessonPlayer",
    "LessonOutcome",
    # Boundary
    "AuthContext",
    "StaticAuth",
    "require_user",
    "LearningService",
]
