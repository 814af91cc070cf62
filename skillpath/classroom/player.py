"""
LessonPlayer - Drive a lesson session and run its completion effects.

The player owns the current SessionState and forwards user actions to the
pure transitions in session.py. Continuing past the last correct question
calls the completion effect once; the session only becomes COMPLETED after
the effect succeeds. If it fails, the session stays on the answered last
question so the write can be retried without answering again.
"""

import logging
import random
from dataclasses import dataclass
from typing import Callable, Optional, Union

from skillpath.errors import SkillPathError, ValidationError
from skillpath.schemas import LessonCompletionResult, LessonContent, RecordStatus

from . import session
from .session import MatchSide, SessionPhase, SessionState

logger = logging.getLogger(__name__)


@dataclass
class LessonOutcome:
    """What the completion effects wrote."""
    completion: LessonCompletionResult
    node_id: Optional[str] = None
    node_status: Optional[RecordStatus] = None

    @property
    def node_completed(self) -> bool:
        return self.node_status == RecordStatus.OK


CompletionEffect = Callable[[str], LessonOutcome]


class LessonPlayer:
    """Stateful wrapper around one lesson attempt."""

    def __init__(
        self,
        lesson: LessonContent,
        on_complete: CompletionEffect,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize player at the first question.

        Args:
            lesson: Lesson content to play
            on_complete: Called with the lesson id when the last question is continued
            rng: Random source for shuffling match items
        """
        self.rng = rng
        self.state: SessionState = session.start_session(lesson, rng)
        self.outcome: Optional[LessonOutcome] = None
        self.last_error: Optional[SkillPathError] = None
        self._on_complete = on_complete

    @property
    def lesson_id(self) -> str:
        return self.state.lesson.lesson_id

    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    @property
    def is_completed(self) -> bool:
        return self.state.phase == SessionPhase.COMPLETED

    @property
    def can_check(self) -> bool:
        return session.can_check(self.state)

    # -------------------------------------------------------------------------
    # Answer input
    # -------------------------------------------------------------------------

    def select_option(self, option: str) -> SessionState:
        self.state = session.select_option(self.state, option)
        return self.state

    def type_answer(self, text: str) -> SessionState:
        self.state = session.type_answer(self.state, text)
        return self.state

    def choose_true_false(self, value: Union[bool, str]) -> SessionState:
        self.state = session.choose_true_false(self.state, value)
        return self.state

    def move_item_up(self, index: int) -> SessionState:
        self.state = session.move_item_up(self.state, index)
        return self.state

    def move_item_down(self, index: int) -> SessionState:
        self.state = session.move_item_down(self.state, index)
        return self.state

    def select_match_item(self, item: str, side: Union[MatchSide, str]) -> SessionState:
        self.state = session.select_match_item(self.state, item, side)
        return self.state

    def unmatch(self, left: str) -> SessionState:
        self.state = session.unmatch(self.state, left)
        return self.state

    # -------------------------------------------------------------------------
    # Flow
    # -------------------------------------------------------------------------

    def check(self) -> SessionState:
        self.state = session.check_answer(self.state)
        return self.state

    def retry(self) -> SessionState:
        self.state = session.retry(self.state, self.rng)
        return self.state

    def continue_(self) -> SessionState:
        """
        Move past a correct answer.

        On the last question this runs the completion effect, then enters
        COMPLETED. Errors from the effect propagate; the state stays CORRECT
        and last_error is set.
        """
        if self.state.phase == SessionPhase.COMPLETED:
            raise ValidationError(f"Lesson {self.lesson_id} is already completed")

        if not self.state.is_last:
            self.state = session.advance(self.state, self.rng)
            return self.state

        if self.state.phase != SessionPhase.CORRECT:
            raise ValidationError("Answer the last question correctly before continuing")

        try:
            outcome = self._on_complete(self.lesson_id)
        except SkillPathError as e:
            self.last_error = e
            logger.warning(f"Completion of {self.lesson_id} failed, retry possible: {e}")
            raise

        self.outcome = outcome
        self.last_error = None
        self.state = session.mark_completed(self.state)
        return self.state

    def exit(self) -> bool:
        """
        Abandon the attempt. Nothing is written.

        Returns:
            True if unsaved progress was discarded
        """
        discarded = not self.is_completed
        if discarded:
            logger.info(f"Lesson {self.lesson_id} abandoned at question {self.state.position[0]}")
        return discarded
