"""
Lesson session - Per-attempt question flow as pure state transitions.

Phases:
    ANSWERING -> CORRECT | INCORRECT     (check_answer)
    INCORRECT -> ANSWERING               (retry, same question, buffer cleared)
    CORRECT   -> ANSWERING               (advance, next question)
    CORRECT   -> COMPLETED               (mark_completed, last question only)

Every transition returns a new SessionState; nothing here does I/O.
Wrong answers are a phase, not an error. Calling a transition from the
wrong phase raises ValidationError.
"""

import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Union

from skillpath.errors import ValidationError
from skillpath.schemas import (
    LessonContent,
    MatchQuestion,
    MCQQuestion,
    OrderQuestion,
    TrueFalseQuestion,
    TypeInQuestion,
)


class SessionPhase(str, Enum):
    ANSWERING = "answering"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    COMPLETED = "completed"


class MatchSide(str, Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class MatchSelection:
    item: str
    side: MatchSide


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of one lesson attempt."""
    lesson: LessonContent
    index: int = 0
    phase: SessionPhase = SessionPhase.ANSWERING
    text_answer: str = ""                      # MCQ, TypeIn, TrueFalse
    order_answer: tuple[str, ...] = ()         # Order
    match_answer: dict[str, str] = field(default_factory=dict)  # Match, left -> right
    match_values: tuple[str, ...] = ()         # shuffled right-hand items
    selected: Optional[MatchSelection] = None

    @property
    def question(self):
        return self.lesson.questions[self.index]

    @property
    def total(self) -> int:
        return len(self.lesson.questions)

    @property
    def is_last(self) -> bool:
        return self.index == self.total - 1

    @property
    def position(self) -> tuple[int, int]:
        """(current, total), 1-based."""
        return (self.index + 1, self.total)


# -----------------------------------------------------------------------------
# Answer validation
# -----------------------------------------------------------------------------

def _normalize_bool(value: Union[bool, str]) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).strip().lower()


TRUE_FALSE_VALUES = ("true", "false")


def is_answer_correct(question, answer) -> bool:
    """
    Check a user answer against a question.

    - MCQ / TypeIn: exact string equality
    - TrueFalse: bool/string normalized equality
    - Order: same length and same item at every index
    - Match: same left keys, each mapped to the same right item
    """
    if isinstance(question, (MCQQuestion, TypeInQuestion)):
        return answer == question.answer
    if isinstance(question, TrueFalseQuestion):
        return answer != "" and _normalize_bool(answer) == _normalize_bool(question.answer)
    if isinstance(question, OrderQuestion):
        answer = list(answer)
        return len(answer) == len(question.answer) and all(
            item == expected for item, expected in zip(answer, question.answer)
        )
    if isinstance(question, MatchQuestion):
        answer = dict(answer)
        return answer.keys() == question.pairs.keys() and all(
            answer[left] == right for left, right in question.pairs.items()
        )
    raise ValidationError(f"Unsupported question type: {type(question).__name__}")


def current_answer(state: SessionState):
    """The buffer that applies to the current question."""
    question = state.question
    if isinstance(question, OrderQuestion):
        return list(state.order_answer)
    if isinstance(question, MatchQuestion):
        return dict(state.match_answer)
    return state.text_answer


def can_check(state: SessionState) -> bool:
    """Whether the current buffer holds an answer worth checking."""
    if state.phase != SessionPhase.ANSWERING:
        return False
    question = state.question
    if isinstance(question, OrderQuestion):
        return len(state.order_answer) > 0
    if isinstance(question, MatchQuestion):
        return len(state.match_answer) > 0
    return state.text_answer != ""


# -----------------------------------------------------------------------------
# Session setup
# -----------------------------------------------------------------------------

def _fresh_buffers(question, rng: Optional[random.Random]) -> dict:
    """Empty per-question buffers; Order starts from the presented items."""
    buffers = {
        "text_answer": "",
        "order_answer": (),
        "match_answer": {},
        "match_values": (),
        "selected": None,
    }
    if isinstance(question, OrderQuestion):
        buffers["order_answer"] = tuple(question.items)
    elif isinstance(question, MatchQuestion):
        values = list(question.pairs.values())
        (rng or random).shuffle(values)
        buffers["match_values"] = tuple(values)
    return buffers


def start_session(lesson: LessonContent, rng: Optional[random.Random] = None) -> SessionState:
    """Create the initial ANSWERING state for a lesson."""
    if not lesson.questions:
        raise ValidationError(f"Lesson {lesson.lesson_id} has no questions")
    return SessionState(lesson=lesson, **_fresh_buffers(lesson.questions[0], rng))


def _require_phase(state: SessionState, *phases: SessionPhase):
    if state.phase not in phases:
        allowed = ", ".join(p.value for p in phases)
        raise ValidationError(f"Action not allowed in phase {state.phase.value} (expected {allowed})")


def _require_question(state: SessionState, *types):
    _require_phase(state, SessionPhase.ANSWERING)
    if not isinstance(state.question, types):
        raise ValidationError(f"Action not valid for {state.question.type} question")


# -----------------------------------------------------------------------------
# Answer input
# -----------------------------------------------------------------------------

def select_option(state: SessionState, option: str) -> SessionState:
    """Pick an MCQ option."""
    _require_question(state, MCQQuestion)
    if option not in state.question.options:
        raise ValidationError(f"Unknown option: {option!r}")
    return replace(state, text_answer=option)


def type_answer(state: SessionState, text: str) -> SessionState:
    """Set the TypeIn answer text."""
    _require_question(state, TypeInQuestion)
    return replace(state, text_answer=text)


def choose_true_false(state: SessionState, value: Union[bool, str]) -> SessionState:
    _require_question(state, TrueFalseQuestion)
    normalized = _normalize_bool(value)
    if normalized not in TRUE_FALSE_VALUES:
        raise ValidationError(f"Expected true or false, got {value!r}")
    return replace(state, text_answer=normalized)


def _swap(state: SessionState, i: int, j: int) -> SessionState:
    items = list(state.order_answer)
    items[i], items[j] = items[j], items[i]
    return replace(state, order_answer=tuple(items))


def move_item_up(state: SessionState, index: int) -> SessionState:
    """Move an Order item one place up; no-op at the top."""
    _require_question(state, OrderQuestion)
    if 0 < index < len(state.order_answer):
        return _swap(state, index, index - 1)
    return state


def move_item_down(state: SessionState, index: int) -> SessionState:
    """Move an Order item one place down; no-op at the bottom."""
    _require_question(state, OrderQuestion)
    if 0 <= index < len(state.order_answer) - 1:
        return _swap(state, index, index + 1)
    return state


def select_match_item(state: SessionState, item: str, side: Union[MatchSide, str]) -> SessionState:
    """
    Click an item in a Match question.

    - Nothing selected: select it
    - Same item again: deselect
    - Same side: switch the selection
    - Other side: pair left -> right; a right item already paired elsewhere
      is moved to the new left item
    """
    _require_question(state, MatchQuestion)
    side = MatchSide(side)
    pairs = state.question.pairs
    valid = pairs.keys() if side == MatchSide.LEFT else pairs.values()
    if item not in valid:
        raise ValidationError(f"Unknown {side.value} item: {item!r}")

    selected = state.selected
    if selected is None:
        return replace(state, selected=MatchSelection(item, side))
    if selected.item == item and selected.side == side:
        return replace(state, selected=None)
    if selected.side == side:
        return replace(state, selected=MatchSelection(item, side))

    left, right = (selected.item, item) if selected.side == MatchSide.LEFT else (item, selected.item)
    matches = {k: v for k, v in state.match_answer.items() if v != right}
    matches[left] = right
    return replace(state, match_answer=matches, selected=None)


def unmatch(state: SessionState, left: str) -> SessionState:
    """Remove the pair starting at a left item."""
    _require_question(state, MatchQuestion)
    matches = {k: v for k, v in state.match_answer.items() if k != left}
    return replace(state, match_answer=matches)


# -----------------------------------------------------------------------------
# Phase transitions
# -----------------------------------------------------------------------------

def check_answer(state: SessionState) -> SessionState:
    """ANSWERING -> CORRECT | INCORRECT. An empty buffer leaves the state as is."""
    _require_phase(state, SessionPhase.ANSWERING)
    if not can_check(state):
        return state
    correct = is_answer_correct(state.question, current_answer(state))
    return replace(state, phase=SessionPhase.CORRECT if correct else SessionPhase.INCORRECT)


def retry(state: SessionState, rng: Optional[random.Random] = None) -> SessionState:
    """INCORRECT -> ANSWERING on the same question with fresh buffers."""
    _require_phase(state, SessionPhase.INCORRECT)
    return replace(state, phase=SessionPhase.ANSWERING, **_fresh_buffers(state.question, rng))


def advance(state: SessionState, rng: Optional[random.Random] = None) -> SessionState:
    """CORRECT -> ANSWERING on the next question."""
    _require_phase(state, SessionPhase.CORRECT)
    if state.is_last:
        raise ValidationError("Last question answered; complete the lesson instead")
    next_index = state.index + 1
    return replace(
        state,
        index=next_index,
        phase=SessionPhase.ANSWERING,
        **_fresh_buffers(state.lesson.questions[next_index], rng),
    )


def mark_completed(state: SessionState) -> SessionState:
    """CORRECT on the last question -> COMPLETED (terminal)."""
    _require_phase(state, SessionPhase.CORRECT)
    if not state.is_last:
        raise ValidationError("Lesson has unanswered questions")
    return replace(state, phase=SessionPhase.COMPLETED)
