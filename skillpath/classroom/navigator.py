"""
Navigator - Topic tree navigation with unlock states.

Provides:
- Navigation tree (units -> nodes) annotated with node state
- Recommended node and next lesson lookups
- Progress summary for display
"""

from dataclasses import dataclass
from typing import Optional, Union

from skillpath.schemas import CheckpointNode, NodeState, SkillNode, Topic, UserProgress

from .unlock import evaluate_all


@dataclass
class NavigationNode:
    """Node with navigation metadata."""
    node: Union[SkillNode, CheckpointNode]
    state: NodeState
    completed_lessons: int
    total_lessons: int
    missing_requirements: list[str]  # unmet checkpoint requirements


@dataclass
class NavigationUnit:
    """Unit with nodes and navigation metadata."""
    section_name: str
    unit_name: str
    nodes: list[NavigationNode]
    completed_count: int
    total_count: int


class Navigator:
    """
    Navigate a topic tree using a progress snapshot.

    The snapshot is passed into every call; the navigator itself holds only
    the immutable topic.
    """

    def __init__(self, topic: Topic):
        self.topic = topic

    # -------------------------------------------------------------------------
    # Curriculum Tree
    # -------------------------------------------------------------------------

    def navigation_tree(self, progress: UserProgress) -> list[NavigationUnit]:
        """
        Get the full tree with per-node state.

        Returns list of units with nodes, each annotated with:
        - Unlock state
        - Lesson completion counts
        - Unmet checkpoint requirements
        """
        states = evaluate_all(progress, self.topic)

        tree = []
        for section in self.topic.sections:
            for unit in section.units:
                nav_nodes = []
                completed_count = 0
                for node in unit.nodes:
                    state = states[node.id]
                    if state.is_completed:
                        completed_count += 1

                    missing = []
                    if isinstance(node, CheckpointNode):
                        missing = [
                            required for required in node.requires
                            if required not in progress.completed_nodes
                        ]

                    nav_nodes.append(NavigationNode(
                        node=node,
                        state=state,
                        completed_lessons=sum(
                            1 for lesson_id in node.lesson_ids
                            if lesson_id in progress.completed_lessons
                        ),
                        total_lessons=node.total_lessons,
                        missing_requirements=missing,
                    ))

                tree.append(NavigationUnit(
                    section_name=section.name,
                    unit_name=unit.name,
                    nodes=nav_nodes,
                    completed_count=completed_count,
                    total_count=len(unit.nodes),
                ))
        return tree

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def first_node_id(self) -> Optional[str]:
        nodes = self.topic.nodes()
        return nodes[0].id if nodes else None

    def recommended_node_id(self, progress: UserProgress) -> Optional[str]:
        """
        Get the node the user should work on next.

        Priority:
        1. First available (unlocked, not completed) node
        2. First node
        """
        for node_id, state in evaluate_all(progress, self.topic).items():
            if state.is_available:
                return node_id
        return self.first_node_id()

    def next_lesson_id(self, node_id: str, progress: UserProgress) -> Optional[str]:
        """First lesson of a node that is not completed yet."""
        node = self.topic.find_node(node_id)
        if node is None:
            return None
        for lesson_id in node.lesson_ids:
            if lesson_id not in progress.completed_lessons:
                return lesson_id
        return None

    # -------------------------------------------------------------------------
    # Progress Summary
    # -------------------------------------------------------------------------

    def progress_summary(self, progress: UserProgress) -> dict:
        """Get progress summary for display."""
        nodes = self.topic.nodes()
        total_nodes = len(nodes)
        completed_nodes = sum(1 for node in nodes if node.id in progress.completed_nodes)
        lesson_ids = [lesson_id for node in nodes for lesson_id in node.lesson_ids]
        completed_lessons = sum(1 for lesson_id in lesson_ids if lesson_id in progress.completed_lessons)

        return {
            "topic": self.topic.name,
            "total_nodes": total_nodes,
            "completed_nodes": completed_nodes,
            "total_lessons": len(lesson_ids),
            "completed_lessons": completed_lessons,
            "completion_percent": round(completed_nodes / total_nodes * 100, 1) if total_nodes > 0 else 0,
            "recommended_node_id": self.recommended_node_id(progress),
        }
