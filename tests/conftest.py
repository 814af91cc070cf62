"""Shared fixtures: a small fractions topic, its lesson files and a temp database."""

import json
import random

import pytest

from skillpath.classroom import ContentLoader, Database, LearningService, StaticAuth
from skillpath.config import Settings
from skillpath.schemas import LessonContent, Topic


TOPIC_DATA = {
    "topic": "maths",
    "sections": [
        {
            "name": "Fractions",
            "units": [
                {
                    "name": "Unit 1",
                    "guidebook": {"summary": "Halves and quarters", "key_points": ["1/2 = 2/4"]},
                    "nodes": [
                        {
                            "id": "FRA-101",
                            "type": "skill",
                            "title": "What is a fraction",
                            "lessons": [
                                {"id": "FRA-101-L1", "question_count": 2, "content_ref": "lessons/FRA-101-L1.json",
                                 "reward": {"xp": 10, "bonus_xp": 5}},
                                {"id": "FRA-101-L2", "question_count": 1, "content_ref": "lessons/FRA-101-L2.json",
                                 "reward": {"xp": 10, "bonus_xp": 5}},
                            ],
                        },
                        {
                            "id": "FRA-102",
                            "type": "skill",
                            "title": "Equivalent fractions",
                            "lessons": [
                                {"id": "FRA-102-L1", "question_count": 1, "content_ref": "lessons/FRA-102-L1.json",
                                 "reward": {"xp": 10, "bonus_xp": 5}},
                            ],
                        },
                        {
                            "id": "FRA-103",
                            "type": "checkpoint",
                            "title": "Checkpoint",
                            "requires": ["FRA-101", "FRA-102"],
                            "reward": {"gems": 20, "badge": "fraction-starter"},
                            "lessons": [
                                {"id": "FRA-103-L1", "question_count": 1, "content_ref": "lessons/FRA-103-L1.json",
                                 "reward": {"xp": 10, "bonus_xp": 5}},
                            ],
                        },
                    ],
                }
            ],
        }
    ],
}


def _common(text):
    return {
        "question": text,
        "correct_feedback": "Nice!",
        "incorrect_feedback": "Not quite.",
        "explanation": "See the guidebook.",
    }


LESSONS = {
    "FRA-101-L1": {
        "lesson_id": "FRA-101-L1",
        "questions": [
            {"type": "MCQ", **_common("What is 1/2 of 4?"), "options": ["1", "2", "3"], "answer": "2"},
            {"type": "TrueFalse", **_common("2/4 equals 1/2"), "answer": True},
        ],
    },
    "FRA-101-L2": {
        "lesson_id": "FRA-101-L2",
        "questions": [
            {"type": "TypeIn", **_common("Write one half as a fraction"), "answer": "1/2"},
        ],
    },
    "FRA-102-L1": {
        "lesson_id": "FRA-102-L1",
        "questions": [
            {"type": "Order", **_common("Smallest to largest"),
             "items": ["1/2", "1/4", "3/4"], "answer": ["1/4", "1/2", "3/4"]},
        ],
    },
    "FRA-103-L1": {
        "lesson_id": "FRA-103-L1",
        "questions": [
            {"type": "Match", **_common("Match equal fractions"),
             "pairs": {"1/2": "2/4", "1/3": "2/6"}},
        ],
    },
}


@pytest.fixture
def topic_data():
    return json.loads(json.dumps(TOPIC_DATA))


@pytest.fixture
def topic(topic_data):
    return Topic.model_validate(topic_data)


@pytest.fixture
def lessons():
    return {lesson_id: LessonContent.model_validate(data) for lesson_id, data in LESSONS.items()}


@pytest.fixture
def content_dir(tmp_path):
    root = tmp_path / "content"
    (root / "topics").mkdir(parents=True)
    (root / "lessons").mkdir()
    (root / "topics" / "maths.json").write_text(json.dumps(TOPIC_DATA), encoding="utf-8")
    for lesson_id, data in LESSONS.items():
        (root / "lessons" / f"{lesson_id}.json").write_text(json.dumps(data), encoding="utf-8")
    return root


@pytest.fixture
def settings(tmp_path, content_dir):
    return Settings(db_path=tmp_path / "skillpath.db", content_dir=content_dir)


@pytest.fixture
def db(settings):
    return Database(settings.db_path, settings.busy_timeout)


@pytest.fixture
def rng():
    return random.Random(7)


@pytest.fixture
def make_service(settings, db):
    """Build a LearningService for a given user sharing one database."""
    loader = ContentLoader(settings.content_dir)

    def _make(user_id="ana@example.com"):
        return LearningService(settings, StaticAuth(user_id), loader=loader, db=db)

    return _make


@pytest.fixture
def service(make_service):
    return make_service()
