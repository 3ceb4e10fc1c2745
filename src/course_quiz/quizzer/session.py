"""Quiz session controller and supporting data structures.

The controller owns one :class:`QuizSession` value at a time. Every accepted
action swaps in a new value built with :func:`dataclasses.replace`; retakes
and re-entries swap in a brand new session, so nothing from an earlier attempt
can leak into the next one. User input is validated here before it reaches the
recorder, which keeps :class:`PreconditionViolation` out of the public API.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Callable, Mapping, Sequence, Union

from . import recorder
from .evaluator import is_answered, is_correct
from .models import (
    AnswerState,
    FillInBlankQuestion,
    MatchingQuestion,
    MultiSelectQuestion,
    MultipleChoiceQuestion,
    OrderingAnswer,
    OrderingQuestion,
    Question,
    QuestionKind,
    QuizDefinition,
    TrueFalseQuestion,
    blank_answer,
)
from .recorder import Direction
from .shuffle import DisplayShuffle, OrderingShuffle, initialize_display

__all__ = [
    "InProgress",
    "Completed",
    "SessionStatus",
    "QuizCompleted",
    "QuestionOutcome",
    "QuizReport",
    "QuizSession",
    "SessionController",
    "compute_score",
    "summarize",
]

CompletionHandler = Callable[["QuizCompleted"], None]


@dataclass(frozen=True)
class InProgress:
    index: int


@dataclass(frozen=True)
class Completed:
    score: int


SessionStatus = Union[InProgress, Completed]


@dataclass(frozen=True)
class QuizCompleted:
    """Event emitted to the host when the last question is passed."""

    score: int
    correct: int
    total: int


@dataclass(frozen=True)
class QuestionOutcome:
    question_id: str
    kind: QuestionKind
    answered: bool
    correct: bool


@dataclass(frozen=True)
class QuizReport:
    """Per-question outcomes plus the aggregate score."""

    outcomes: tuple[QuestionOutcome, ...]

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def correct(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.correct)

    @property
    def answered(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.answered)

    @property
    def score(self) -> int:
        return _percentage(self.correct, self.total)


@dataclass(frozen=True)
class QuizSession:
    """Complete state of one quiz attempt."""

    quiz: QuizDefinition
    answers: tuple[AnswerState, ...]
    shuffles: Mapping[str, DisplayShuffle] = field(
        default_factory=lambda: MappingProxyType({})
    )
    current_index: int = 0
    completed: bool = False
    score: int | None = None
    pending_left: int | None = None

    @classmethod
    def fresh(cls, quiz: QuizDefinition) -> "QuizSession":
        return cls(
            quiz=quiz,
            answers=tuple(blank_answer(question) for question in quiz),
        )

    @property
    def current_question(self) -> Question:
        return self.quiz[self.current_index]

    @property
    def current_answer(self) -> AnswerState:
        return self.answers[self.current_index]

    @property
    def status(self) -> SessionStatus:
        if self.completed and self.score is not None:
            return Completed(self.score)
        return InProgress(self.current_index)


def compute_score(
    quiz: QuizDefinition, answers: Sequence[AnswerState]
) -> int:
    """Percentage of correct answers, rounded half up.

    Unanswered questions count as incorrect.
    """

    correct = sum(
        1
        for question, state in zip(quiz, answers)
        if is_answered(question, state) and is_correct(question, state)
    )
    return _percentage(correct, len(quiz))


def summarize(session: QuizSession) -> QuizReport:
    outcomes = []
    for question, state in zip(session.quiz, session.answers):
        answered = is_answered(question, state)
        outcomes.append(
            QuestionOutcome(
                question_id=question.id,
                kind=question.kind,
                answered=answered,
                correct=answered and is_correct(question, state),
            )
        )
    return QuizReport(tuple(outcomes))


def _percentage(correct: int, total: int) -> int:
    if total <= 0:
        return 0
    # Integer form of floor(100 * correct / total + 0.5).
    return (200 * correct + total) // (2 * total)


class SessionController:
    """Drive a quiz attempt: answers, navigation, completion and resets.

    Action methods return ``True`` when the action was applied and ``False``
    when it was ignored (wrong question kind, out-of-range index, locked
    question, navigation not allowed, or the quiz is already completed).
    """

    def __init__(
        self,
        quiz: QuizDefinition,
        *,
        rng: random.Random | None = None,
        on_complete: CompletionHandler | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._quiz = quiz
        self._rng = rng if rng is not None else random.Random()
        self._on_complete = on_complete
        self._logger = logger or logging.getLogger(__name__)
        self._session = self._new_session()
        self._logger.info(
            "Quiz session started",
            extra={"question_count": len(quiz)},
        )

    # Read-only views ---------------------------------------------------

    @property
    def quiz(self) -> QuizDefinition:
        return self._quiz

    @property
    def session(self) -> QuizSession:
        return self._session

    @property
    def status(self) -> SessionStatus:
        return self._session.status

    @property
    def current_index(self) -> int:
        return self._session.current_index

    @property
    def total_questions(self) -> int:
        return len(self._quiz)

    @property
    def current_question(self) -> Question:
        return self._session.current_question

    @property
    def current_answer(self) -> AnswerState:
        return self._session.current_answer

    @property
    def current_shuffle(self) -> DisplayShuffle | None:
        return self._session.shuffles.get(self.current_question.id)

    @property
    def pending_left(self) -> int | None:
        return self._session.pending_left

    @property
    def is_completed(self) -> bool:
        return self._session.completed

    @property
    def score(self) -> int | None:
        return self._session.score

    def is_current_answered(self) -> bool:
        return is_answered(self.current_question, self.current_answer)

    def is_current_correct(self) -> bool | None:
        if not self.is_current_answered():
            return None
        return is_correct(self.current_question, self.current_answer)

    def is_current_locked(self) -> bool:
        return recorder.is_locked(self.current_question, self.current_answer)

    def answered_count(self) -> int:
        return sum(
            1
            for question, state in zip(self._quiz, self._session.answers)
            if is_answered(question, state)
        )

    def can_go_next(self) -> bool:
        return not self.is_completed and self.is_current_answered()

    def can_go_previous(self) -> bool:
        return not self.is_completed and self.current_index > 0

    def report(self) -> QuizReport:
        return summarize(self._session)

    # Answer actions ------------------------------------------------------

    def select(self, index: int) -> bool:
        question = self._editable(MultipleChoiceQuestion, TrueFalseQuestion)
        if question is None or not _in_range(index, len(question.options)):
            return False
        return self._record(
            "select",
            recorder.select(question, self.current_answer, index),
        )

    def toggle(self, index: int) -> bool:
        question = self._editable(MultiSelectQuestion)
        if question is None or not _in_range(index, len(question.options)):
            return False
        return self._record(
            "toggle",
            recorder.toggle(question, self.current_answer, index),
        )

    def select_left(self, left_index: int) -> bool:
        """Pick the left item that the next :meth:`pair_right` will use."""

        question = self._editable(MatchingQuestion)
        if question is None or not _in_range(left_index, len(question.pairs)):
            return False
        self._session = replace(self._session, pending_left=left_index)
        return True

    def pair_right(self, right_original_index: int) -> bool:
        left = self._session.pending_left
        if left is None:
            return False
        return self.pair(left, right_original_index)

    def pair(self, left_index: int, right_original_index: int) -> bool:
        question = self._editable(MatchingQuestion)
        if question is None:
            return False
        size = len(question.pairs)
        if not (
            _in_range(left_index, size) and _in_range(right_original_index, size)
        ):
            return False
        state = recorder.pair(
            question, self.current_answer, left_index, right_original_index
        )
        self._session = replace(self._session, pending_left=None)
        return self._record("pair", state)

    def reset_matching(self) -> bool:
        """Clear all pairs of the current matching question and reshuffle."""

        question = self._editable(MatchingQuestion)
        if question is None:
            return False
        state, shuffle = recorder.reset_matching(
            question, self.current_answer, self._rng
        )
        if shuffle is None:
            return False
        shuffles = dict(self._session.shuffles)
        shuffles[question.id] = shuffle
        self._session = replace(
            self._session,
            shuffles=MappingProxyType(shuffles),
            pending_left=None,
        )
        return self._record("reset_matching", state)

    def set_text(self, text: str) -> bool:
        question = self._editable(FillInBlankQuestion)
        if question is None or not isinstance(text, str):
            return False
        return self._record(
            "set_text",
            recorder.set_text(question, self.current_answer, text),
        )

    def move(self, index: int, direction: Direction | str) -> bool:
        question = self._editable(OrderingQuestion)
        if question is None:
            return False
        try:
            resolved = Direction(direction)
        except ValueError:
            return False
        order = self.current_answer.order  # type: ignore[union-attr]
        if order is None or not _in_range(index, len(order)):
            return False
        before = self.current_answer
        after = recorder.move_adjacent(question, before, index, resolved)
        if after == before:
            return False
        return self._record("move", after)

    # Navigation ----------------------------------------------------------

    def next(self) -> bool:
        """Advance, or complete the quiz when on the last question."""

        if not self.can_go_next():
            return False
        if self.current_index == self.total_questions - 1:
            self._complete()
        else:
            self._session = self._with_display(
                self._session, self.current_index + 1
            )
            self._logger.debug(
                "Moved to next question",
                extra={"index": self.current_index},
            )
        return True

    def previous(self) -> bool:
        if not self.can_go_previous():
            return False
        self._session = self._with_display(
            self._session, self.current_index - 1
        )
        self._logger.debug(
            "Moved to previous question",
            extra={"index": self.current_index},
        )
        return True

    def retake(self) -> bool:
        """Start over after completion."""

        if not self.is_completed:
            return False
        self._session = self._new_session()
        self._logger.info("Quiz retake started")
        return True

    def on_reentry(self) -> None:
        """Discard the attempt when the hosting view regains focus."""

        self._session = self._new_session()
        self._logger.info("Quiz session reset on re-entry")

    # Internals -----------------------------------------------------------

    def _new_session(self) -> QuizSession:
        return self._with_display(QuizSession.fresh(self._quiz), 0)

    def _with_display(self, session: QuizSession, index: int) -> QuizSession:
        question = self._quiz[index]
        existing = session.shuffles.get(question.id)
        shuffle = initialize_display(question, existing, self._rng)
        shuffles = session.shuffles
        answers = session.answers
        if shuffle is not None and shuffle is not existing:
            updated = dict(shuffles)
            updated[question.id] = shuffle
            shuffles = MappingProxyType(updated)
            if isinstance(shuffle, OrderingShuffle):
                answers = _replace_at(
                    answers, index, OrderingAnswer(shuffle.items)
                )
        return replace(
            session,
            answers=answers,
            shuffles=shuffles,
            current_index=index,
            pending_left=None,
        )

    def _editable(self, *kinds: type) -> Question | None:
        if self.is_completed:
            return None
        question = self.current_question
        if not isinstance(question, kinds):
            return None
        if recorder.is_locked(question, self.current_answer):
            return None
        return question

    def _record(self, action: str, state: AnswerState) -> bool:
        index = self.current_index
        self._session = replace(
            self._session,
            answers=_replace_at(self._session.answers, index, state),
        )
        question = self.current_question
        self._logger.debug(
            "Answer recorded",
            extra={
                "action": action,
                "question_id": question.id,
                "kind": question.kind.value,
                "index": index,
            },
        )
        return True

    def _complete(self) -> None:
        report = summarize(self._session)
        score = compute_score(self._quiz, self._session.answers)
        self._session = replace(self._session, completed=True, score=score)
        self._logger.info(
            "Quiz completed",
            extra={
                "score": score,
                "correct": report.correct,
                "total": report.total,
            },
        )
        if self._on_complete is not None:
            self._on_complete(QuizCompleted(score, report.correct, report.total))


def _in_range(value: object, size: int) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and 0 <= value < size
    )


def _replace_at(
    answers: tuple[AnswerState, ...], index: int, state: AnswerState
) -> tuple[AnswerState, ...]:
    return answers[:index] + (state,) + answers[index + 1:]
