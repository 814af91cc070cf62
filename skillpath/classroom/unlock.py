"""
Unlock engine - Derive locked/available/completed state for nodes.

Rules:
- completed: node id is in the completed node set
- first node of the linear sequence: always unlocked (skill nodes only)
- skill node at index i > 0: locked until node i-1 is completed
- checkpoint node: locked until every id in `requires` is completed
- unknown node id: locked

Pure functions of (node id, progress snapshot, topic); nothing is stored.
"""

from typing import Union

from skillpath.schemas import CheckpointNode, NodeState, SkillNode, Topic, UserProgress

UNKNOWN_NODE_STATE = NodeState(is_locked=True, is_completed=False, is_available=False)


def _state(is_locked: bool, is_completed: bool) -> NodeState:
    return NodeState(
        is_locked=is_locked,
        is_completed=is_completed,
        is_available=not is_locked and not is_completed,
    )


def _is_locked(
    node: Union[SkillNode, CheckpointNode],
    index: int,
    sequence: list[Union[SkillNode, CheckpointNode]],
    completed_nodes: set[str],
) -> bool:
    if isinstance(node, CheckpointNode):
        return not all(required in completed_nodes for required in node.requires)
    if index == 0:
        return False
    return sequence[index - 1].id not in completed_nodes


def evaluate(node_id: str, progress: UserProgress, topic: Topic) -> NodeState:
    """
    Compute the state of one node.

    Args:
        node_id: Node to evaluate
        progress: Completion snapshot (read only)
        topic: Content tree the node belongs to

    Returns:
        NodeState; unknown ids are locked
    """
    sequence = topic.nodes()
    for index, node in enumerate(sequence):
        if node.id == node_id:
            return _state(
                _is_locked(node, index, sequence, progress.completed_nodes),
                node.id in progress.completed_nodes,
            )
    return UNKNOWN_NODE_STATE


def evaluate_all(progress: UserProgress, topic: Topic) -> dict[str, NodeState]:
    """Compute states for every node, keyed by id in linear order."""
    sequence = topic.nodes()
    return {
        node.id: _state(
            _is_locked(node, index, sequence, progress.completed_nodes),
            node.id in progress.completed_nodes,
        )
        for index, node in enumerate(sequence)
    }


def node_lessons_complete(node: Union[SkillNode, CheckpointNode], progress: UserProgress) -> bool:
    """Whether every lesson of a node is in the completed lesson set."""
    return bool(node.lessons) and all(
        lesson_id in progress.completed_lessons for lesson_id in node.lesson_ids
    )
