"""
SkillPath Schemas - Pydantic models for the lesson platform.

This module exports all schema classes for:
- Content: topic tree, nodes, lesson references
- Questions: question types, lesson content
- Progress: completion snapshots, profiles, ledger results, leaderboard
- Shop: gem balances, catalog, inventory, boosts
"""

# Content schemas
from .content import (
    LessonReward,
    LessonRef,
    SkillNode,
    CheckpointReward,
    CheckpointNode,
    LearningNode,
    Guidebook,
    Unit,
    Section,
    Topic,
)

# Question schemas
from .questions import (
    QUESTION_TYPES,
    MCQQuestion,
    TypeInQuestion,
    TrueFalseQuestion,
    OrderQuestion,
    MatchQuestion,
    Question,
    LessonContent,
)

# Progress schemas
from .progress import (
    RecordStatus,
    UserProgress,
    NodeState,
    UserProfile,
    XpUpdate,
    LessonCompletionResult,
    LeaderboardPeriod,
    LeaderboardEntry,
    ProgressEventKind,
    ProgressEvent,
)

# Shop schemas
from .shop import (
    UserCurrency,
    BoostInfo,
    ShopItem,
    InventoryItem,
    ActiveBoost,
    PurchaseResult,
)

__all__ = [
    # Content
    'LessonReward',
    'LessonRef',
    'SkillNode',
    'CheckpointReward',
    'CheckpointNode',
    'LearningNode',
    'Guidebook',
    'Unit',
    'Section',
    'Topic',
    # Questions
    'QUESTION_TYPES',
    'MCQQuestion',
    'TypeInQuestion',
    'TrueFalseQuestion',
    'OrderQuestion',
    'MatchQuestion',
    'Question',
    'LessonContent',
    # Progress
    'RecordStatus',
    'UserProgress',
    'NodeState',
    'UserProfile',
    'XpUpdate',
    'LessonCompletionResult',
    'LeaderboardPeriod',
    'LeaderboardEntry',
    'ProgressEventKind',
    'ProgressEvent',
    # Shop
    'UserCurrency',
    'BoostInfo',
    'ShopItem',
    'InventoryItem',
    'ActiveBoost',
    'PurchaseResult',
]
