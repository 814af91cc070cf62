"""
Progress and reward schemas for SkillPath.

Defines Pydantic models for:
- Completion snapshots and node unlock state
- User profile (XP / level) and ledger results
- Leaderboard entries
- Progress change events
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class RecordStatus(str, Enum):
    OK = "ok"
    ALREADY_COMPLETED = "already_completed"


class UserProgress(BaseModel):
    completed_lessons: set[str] = set()
    completed_nodes: set[str] = set()


class NodeState(BaseModel):
    is_locked: bool
    is_completed: bool
    is_available: bool  # unlocked but not completed

    @property
    def label(self) -> str:
        if self.is_completed:
            return "completed"
        if self.is_available:
            return "available"
        return "locked"


class UserProfile(BaseModel):
    user_id: str
    display_name: str
    current_xp: int = Field(default=0, ge=0)
    current_level: int = Field(default=1, ge=1)
    total_xp_earned: int = Field(default=0, ge=0)
    lessons_completed: int = Field(default=0, ge=0)
    nodes_completed: int = Field(default=0, ge=0)


class XpUpdate(BaseModel):
    new_xp: int
    new_level: int
    leveled_up: bool
    levels_gained: int = 0


class LessonCompletionResult(BaseModel):
    status: RecordStatus
    lesson_id: str
    new_xp: int
    new_level: int
    leveled_up: bool = False
    xp_awarded: int = 0
    gems_awarded: int = 0

    @property
    def already_completed(self) -> bool:
        return self.status == RecordStatus.ALREADY_COMPLETED


class LeaderboardPeriod(str, Enum):
    ALL_TIME = "all-time"
    WEEKLY = "weekly"


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    display_name: str
    xp: int              # total_xp_earned (all-time) or weekly XP
    current_level: int
    lessons_completed: int = 0
    nodes_completed: int = 0


class ProgressEventKind(str, Enum):
    LESSON_COMPLETED = "lesson_completed"
    NODE_COMPLETED = "node_completed"
    PURCHASE = "purchase"


class ProgressEvent(BaseModel):
    kind: ProgressEventKind
    user_id: str
    ref_id: str          # lesson, node or item id
    occurred_at: datetime
    detail: Optional[dict] = None
