"""Lesson id convention tests."""

import pytest

from skillpath.utils import LessonKey, node_id_for_lesson, parse_lesson_id


class TestLessonIds:

    def test_parse(self):
        key = parse_lesson_id("FRA-203-L12")
        assert key == LessonKey(subject="FRA", unit=2, node=3, number=12)
        assert key.node_id == "FRA-203"
        assert key.lesson_id == "FRA-203-L12"

    def test_node_for_lesson(self):
        assert node_id_for_lesson("FRA-101-L1") == "FRA-101"

    @pytest.mark.parametrize("lesson_id", ["FRA-101", "fra-101-L1", "FRA-111-L1", "FRA-101-X1", ""])
    def test_unconventional_ids(self, lesson_id):
        assert parse_lesson_id(lesson_id) is None
        assert node_id_for_lesson(lesson_id) is None
