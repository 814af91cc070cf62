"""SkillPath utilities."""

from .ids import LessonKey, parse_lesson_id, node_id_for_lesson

__all__ = [
    "LessonKey",
    "parse_lesson_id",
    "node_id_for_lesson",
]
