"""Unlock engine and navigator tests."""

import pytest

from skillpath.classroom import Navigator, evaluate, evaluate_all, node_lessons_complete
from skillpath.schemas import CheckpointNode, NodeState, Topic, UserProgress


def progress(nodes=(), lessons=()):
    return UserProgress(completed_nodes=set(nodes), completed_lessons=set(lessons))


def make_topic(nodes):
    return Topic.model_validate({
        "topic": "t",
        "sections": [{"name": "s", "units": [{"name": "u", "nodes": nodes}]}],
    })


class TestSequentialGate:

    def test_first_node_always_unlocked(self, topic):
        state = evaluate("FRA-101", progress(), topic)
        assert state == NodeState(is_locked=False, is_completed=False, is_available=True)

    def test_first_node_completed(self, topic):
        state = evaluate("FRA-101", progress(["FRA-101"]), topic)
        assert not state.is_locked
        assert state.is_completed
        assert not state.is_available

    def test_skill_locked_until_previous_completed(self, topic):
        assert evaluate("FRA-102", progress(), topic).is_locked
        assert not evaluate("FRA-102", progress(["FRA-101"]), topic).is_locked

    def test_sequential_gate_for_every_skill_node(self):
        nodes = [{"id": f"N{i}", "type": "skill", "title": f"N{i}"} for i in range(5)]
        topic = make_topic(nodes)
        completed = {"N0", "N2"}
        sequence = topic.nodes()
        for i in range(1, len(sequence)):
            state = evaluate(sequence[i].id, progress(completed), topic)
            assert state.is_locked == (sequence[i - 1].id not in completed)

    def test_gate_uses_position_not_type(self):
        topic = make_topic([
            {"id": "A", "type": "skill", "title": "A"},
            {"id": "CP", "type": "checkpoint", "title": "CP", "requires": []},
            {"id": "B", "type": "skill", "title": "B"},
        ])
        # B follows the checkpoint, so B waits for CP
        assert evaluate("B", progress(["A"]), topic).is_locked
        assert not evaluate("B", progress(["CP"]), topic).is_locked


class TestCheckpointGate:

    def test_requires_all(self, topic):
        assert evaluate("FRA-103", progress(), topic).is_locked
        assert evaluate("FRA-103", progress(["FRA-101"]), topic).is_locked
        assert evaluate("FRA-103", progress(["FRA-102"]), topic).is_locked
        assert evaluate("FRA-103", progress(["FRA-101", "FRA-102"]), topic).is_available

    def test_checkpoint_ignores_linear_position(self):
        topic = make_topic([
            {"id": "A", "type": "skill", "title": "A"},
            {"id": "B", "type": "skill", "title": "B"},
            {"id": "CP", "type": "checkpoint", "title": "CP", "requires": ["A"]},
        ])
        # previous node B is not completed, but CP only requires A
        assert evaluate("CP", progress(["A"]), topic).is_available

    def test_first_position_checkpoint_uses_requires(self):
        topic = make_topic([
            {"id": "CP", "type": "checkpoint", "title": "CP", "requires": ["X"]},
            {"id": "A", "type": "skill", "title": "A"},
        ])
        assert evaluate("CP", progress(), topic).is_locked
        assert not evaluate("CP", progress(["X"]), topic).is_locked


class TestEvaluation:

    def test_unknown_node_is_locked(self, topic):
        state = evaluate("NOPE", progress(["FRA-101"]), topic)
        assert state == NodeState(is_locked=True, is_completed=False, is_available=False)

    def test_idempotent(self, topic):
        snapshot = progress(["FRA-101"], ["FRA-101-L1"])
        first = evaluate("FRA-102", snapshot, topic)
        second = evaluate("FRA-102", snapshot, topic)
        assert first == second
        assert snapshot.completed_nodes == {"FRA-101"}

    def test_scenario_progression(self, topic):
        states = evaluate_all(progress(), topic)
        assert [s.label for s in states.values()] == ["available", "locked", "locked"]

        states = evaluate_all(progress(["FRA-101"]), topic)
        assert [s.label for s in states.values()] == ["completed", "available", "locked"]

        states = evaluate_all(progress(["FRA-101", "FRA-102"]), topic)
        assert [s.label for s in states.values()] == ["completed", "completed", "available"]

    def test_evaluate_all_matches_evaluate(self, topic):
        snapshot = progress(["FRA-101"])
        states = evaluate_all(snapshot, topic)
        for node_id, state in states.items():
            assert state == evaluate(node_id, snapshot, topic)

    def test_node_lessons_complete(self, topic):
        node = topic.find_node("FRA-101")
        assert not node_lessons_complete(node, progress(lessons=["FRA-101-L1"]))
        assert node_lessons_complete(node, progress(lessons=["FRA-101-L1", "FRA-101-L2"]))


class TestNavigator:

    def test_navigation_tree(self, topic):
        tree = Navigator(topic).navigation_tree(progress(["FRA-101"], ["FRA-101-L1", "FRA-101-L2"]))
        assert len(tree) == 1
        unit = tree[0]
        assert unit.section_name == "Fractions"
        assert unit.completed_count == 1
        assert unit.total_count == 3
        first, second, checkpoint = unit.nodes
        assert first.completed_lessons == 2
        assert second.state.is_available
        assert isinstance(checkpoint.node, CheckpointNode)
        assert checkpoint.missing_requirements == ["FRA-102"]

    def test_recommended_node(self, topic):
        navigator = Navigator(topic)
        assert navigator.recommended_node_id(progress()) == "FRA-101"
        assert navigator.recommended_node_id(progress(["FRA-101"])) == "FRA-102"
        everything = progress(["FRA-101", "FRA-102", "FRA-103"])
        assert navigator.recommended_node_id(everything) == "FRA-101"

    def test_next_lesson(self, topic):
        navigator = Navigator(topic)
        assert navigator.next_lesson_id("FRA-101", progress(lessons=["FRA-101-L1"])) == "FRA-101-L2"
        assert navigator.next_lesson_id("FRA-101", progress(lessons=["FRA-101-L1", "FRA-101-L2"])) is None
        assert navigator.next_lesson_id("NOPE", progress()) is None

    @pytest.mark.parametrize("done,percent", [((), 0.0), (("FRA-101",), 33.3)])
    def test_progress_summary(self, topic, done, percent):
        summary = Navigator(topic).progress_summary(progress(done))
        assert summary["total_nodes"] == 3
        assert summary["total_lessons"] == 4
        assert summary["completion_percent"] == percent
