"""
Content tree schemas for SkillPath.

Defines Pydantic models for the topic hierarchy:
Topic -> Section -> Unit -> LearningNode (skill | checkpoint) -> LessonRef

Flattening sections -> units -> nodes depth-first, in declaration order,
gives the canonical linear sequence used by the unlock rules.
"""

from pydantic import AliasChoices, BaseModel, Field, model_validator
from typing import Annotated, Literal, Optional, Union

from skillpath.utils.ids import node_id_for_lesson


class LessonReward(BaseModel):
    xp: int = Field(default=10, ge=0)
    bonus_xp: int = Field(default=0, ge=0)


class LessonRef(BaseModel):
    id: str
    question_count: int = Field(..., ge=1)
    content_ref: str
    reward: LessonReward = LessonReward()


# -----------------------------------------------------------------------------
# Node types
# -----------------------------------------------------------------------------

class NodeBase(BaseModel):
    type: str
    id: str
    title: str
    lessons: list[LessonRef] = []

    @property
    def total_lessons(self) -> int:
        return len(self.lessons)

    @property
    def lesson_ids(self) -> list[str]:
        return [lesson.id for lesson in self.lessons]


class SkillNode(NodeBase):
    """Sequential node: unlocked once the previous node is completed."""
    type: Literal["skill"] = "skill"


class CheckpointReward(BaseModel):
    gems: int = Field(default=0, ge=0)
    badge: Optional[str] = None


class CheckpointNode(NodeBase):
    """Gate node: unlocked once every node in `requires` is completed."""
    type: Literal["checkpoint"] = "checkpoint"
    requires: list[str] = []
    reward: CheckpointReward = CheckpointReward()


LearningNode = Annotated[
    Union[SkillNode, CheckpointNode],
    Field(discriminator="type"),
]


# -----------------------------------------------------------------------------
# Tree containers
# -----------------------------------------------------------------------------

class Guidebook(BaseModel):
    summary: str = ""
    key_points: list[str] = []


class Unit(BaseModel):
    name: str
    guidebook: Optional[Guidebook] = None
    nodes: list[LearningNode] = []


class Section(BaseModel):
    name: str
    units: list[Unit] = []


class Topic(BaseModel):
    name: str = Field(validation_alias=AliasChoices("name", "topic"))
    sections: list[Section] = []

    @model_validator(mode="after")
    def node_ids_unique(self):
        seen = set()
        for node in self.nodes():
            if node.id in seen:
                raise ValueError(f"Duplicate node id: {node.id}")
            seen.add(node.id)
        return self

    def units(self) -> list[Unit]:
        return [unit for section in self.sections for unit in section.units]

    def nodes(self) -> list[Union[SkillNode, CheckpointNode]]:
        """Canonical linear sequence of nodes."""
        return [node for unit in self.units() for node in unit.nodes]

    def find_node(self, node_id: str) -> Optional[Union[SkillNode, CheckpointNode]]:
        for node in self.nodes():
            if node.id == node_id:
                return node
        return None

    def node_for_lesson(self, lesson_id: str) -> Optional[Union[SkillNode, CheckpointNode]]:
        """
        Find the node that owns a lesson.

        Looks for the lesson in each node's lesson list first, then falls back
        to the id convention ("FRA-101-L1" belongs to "FRA-101").
        """
        for node in self.nodes():
            if lesson_id in node.lesson_ids:
                return node
        fallback_id = node_id_for_lesson(lesson_id)
        return self.find_node(fallback_id) if fallback_id else None

    def find_lesson(self, lesson_id: str) -> Optional[LessonRef]:
        for node in self.nodes():
            for lesson in node.lessons:
                if lesson.id == lesson_id:
                    return lesson
        return None
