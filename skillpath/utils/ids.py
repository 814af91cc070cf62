"""
Lesson identifier helpers.

Lesson ids follow "{SUBJECT}-{UNIT}0{NODE}-L{n}", e.g. "FRA-101-L1":
subject FRA, unit 1, node 1, lesson 1, parent node "FRA-101".
"""

import re
from dataclasses import dataclass
from typing import Optional

LESSON_ID_PATTERN = re.compile(r'^(?P<subject>[A-Z]+)-(?P<unit>\d)0(?P<node>\d)-L(?P<number>\d+)$')


@dataclass(frozen=True)
class LessonKey:
    """Decomposed lesson id."""
    subject: str
    unit: int
    node: int
    number: int

    @property
    def node_id(self) -> str:
        return f"{self.subject}-{self.unit}0{self.node}"

    @property
    def lesson_id(self) -> str:
        return f"{self.node_id}-L{self.number}"


def parse_lesson_id(lesson_id: str) -> Optional[LessonKey]:
    """Parse a lesson id, returning None if it doesn't follow the convention."""
    match = LESSON_ID_PATTERN.match(lesson_id)
    if not match:
        return None
    return LessonKey(
        subject=match.group("subject"),
        unit=int(match.group("unit")),
        node=int(match.group("node")),
        number=int(match.group("number")),
    )


def node_id_for_lesson(lesson_id: str) -> Optional[str]:
    """Parent node id derived from the lesson id ("FRA-101-L1" -> "FRA-101")."""
    key = parse_lesson_id(lesson_id)
    return key.node_id if key else None
