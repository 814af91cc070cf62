"""
Schema validation tests for SkillPath.

Tests the Pydantic models for the content tree, questions and ledger records.
"""

import pytest
from pydantic import TypeAdapter

from skillpath.schemas import (
    # Content
    LessonRef,
    SkillNode,
    CheckpointNode,
    Topic,
    # Questions
    MCQQuestion,
    TypeInQuestion,
    TrueFalseQuestion,
    OrderQuestion,
    MatchQuestion,
    Question,
    LessonContent,
    # Progress
    NodeState,
    UserProfile,
    # Shop
    UserCurrency,
    ShopItem,
)


question_adapter = TypeAdapter(Question)


class TestQuestionSchemas:
    """Test the question discriminated union."""

    def test_mcq_valid(self):
        q = question_adapter.validate_python(
            {"type": "MCQ", "question": "1+1?", "options": ["1", "2"], "answer": "2"}
        )
        assert isinstance(q, MCQQuestion)
        assert q.correct_feedback == ""

    def test_mcq_answer_must_be_option(self):
        with pytest.raises(ValueError):
            MCQQuestion(question="1+1?", options=["1", "3"], answer="2")

    def test_type_in_valid(self):
        q = question_adapter.validate_python({"type": "TypeIn", "question": "Half?", "answer": "1/2"})
        assert isinstance(q, TypeInQuestion)

    def test_true_false_answer_is_bool(self):
        q = question_adapter.validate_python({"type": "TrueFalse", "question": "?", "answer": False})
        assert isinstance(q, TrueFalseQuestion)
        assert q.answer is False

    def test_order_answer_must_be_permutation(self):
        OrderQuestion(question="?", items=["b", "a"], answer=["a", "b"])
        with pytest.raises(ValueError):
            OrderQuestion(question="?", items=["b", "a"], answer=["a", "c"])

    def test_match_right_items_unique(self):
        MatchQuestion(question="?", pairs={"a": "1", "b": "2"})
        with pytest.raises(ValueError):
            MatchQuestion(question="?", pairs={"a": "1", "b": "1"})

    def test_unknown_question_type_rejected(self):
        with pytest.raises(ValueError):
            question_adapter.validate_python({"type": "Essay", "question": "?", "answer": "x"})

    def test_lesson_requires_questions(self):
        with pytest.raises(ValueError):
            LessonContent(lesson_id="FRA-101-L1", questions=[])

    def test_lesson_parses_mixed_questions(self, lessons):
        lesson = lessons["FRA-101-L1"]
        assert [q.type for q in lesson.questions] == ["MCQ", "TrueFalse"]


class TestContentSchemas:
    """Test the topic tree."""

    def test_topic_alias(self, topic):
        assert topic.name == "maths"
        assert Topic(name="science").name == "science"

    def test_node_kinds(self, topic):
        nodes = topic.nodes()
        assert [type(n) for n in nodes] == [SkillNode, SkillNode, CheckpointNode]
        assert nodes[2].requires == ["FRA-101", "FRA-102"]
        assert nodes[2].reward.gems == 20

    def test_linear_sequence_order(self, topic_data):
        topic_data["sections"].append({
            "name": "Percentages",
            "units": [{"name": "Unit 1", "nodes": [
                {"id": "PER-101", "type": "skill", "title": "Percent", "lessons": []},
            ]}],
        })
        topic = Topic.model_validate(topic_data)
        assert [n.id for n in topic.nodes()] == ["FRA-101", "FRA-102", "FRA-103", "PER-101"]

    def test_duplicate_node_ids_rejected(self, topic_data):
        nodes = topic_data["sections"][0]["units"][0]["nodes"]
        nodes.append(dict(nodes[0]))
        with pytest.raises(ValueError):
            Topic.model_validate(topic_data)

    def test_unknown_node_type_rejected(self, topic_data):
        topic_data["sections"][0]["units"][0]["nodes"][0]["type"] = "boss"
        with pytest.raises(ValueError):
            Topic.model_validate(topic_data)

    def test_node_for_lesson(self, topic):
        assert topic.node_for_lesson("FRA-101-L2").id == "FRA-101"
        assert topic.node_for_lesson("FRA-102-L9").id == "FRA-102"  # id convention fallback
        assert topic.node_for_lesson("XYZ") is None

    def test_lesson_ref_defaults(self):
        ref = LessonRef(id="FRA-101-L1", question_count=3, content_ref="x.json")
        assert ref.reward.xp == 10
        assert ref.reward.bonus_xp == 0


class TestProgressSchemas:
    """Test ledger record schemas."""

    def test_profile_defaults(self):
        profile = UserProfile(user_id="u1", display_name="u1")
        assert profile.current_xp == 0
        assert profile.current_level == 1

    def test_node_state_label(self):
        assert NodeState(is_locked=True, is_completed=False, is_available=False).label == "locked"
        assert NodeState(is_locked=False, is_completed=False, is_available=True).label == "available"
        assert NodeState(is_locked=False, is_completed=True, is_available=False).label == "completed"

    def test_currency_invariant(self):
        UserCurrency(user_id="u1", gems=5, total_gems_earned=10, total_gems_spent=5)
        with pytest.raises(ValueError):
            UserCurrency(user_id="u1", gems=6, total_gems_earned=10, total_gems_spent=5)

    def test_shop_item_boost_flag(self):
        item = ShopItem(id="x2", name="Double XP", price_gems=50,
                        boost={"multiplier": 2.0, "duration_minutes": 15})
        assert item.is_boost
        assert not ShopItem(id="hat", name="Hat", price_gems=5).is_boost
