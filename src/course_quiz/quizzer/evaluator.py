"""Kind-specific "is answered" and "is correct" predicates."""

from __future__ import annotations

from .errors import PreconditionViolation
from .models import (
    AnswerState,
    ChoiceAnswer,
    FillInBlankAnswer,
    FillInBlankQuestion,
    MatchingAnswer,
    MatchingQuestion,
    MultiSelectAnswer,
    MultiSelectQuestion,
    MultipleChoiceQuestion,
    OrderingAnswer,
    OrderingQuestion,
    Question,
    TrueFalseQuestion,
)

__all__ = [
    "CORRECT_FEEDBACK",
    "INCORRECT_FEEDBACK",
    "is_answered",
    "is_correct",
    "feedback_text",
    "expect_state",
]

CORRECT_FEEDBACK = "Correct!"
INCORRECT_FEEDBACK = "Incorrect. Try reviewing the material."

_STATE_FOR = {
    MultipleChoiceQuestion: ChoiceAnswer,
    TrueFalseQuestion: ChoiceAnswer,
    MultiSelectQuestion: MultiSelectAnswer,
    MatchingQuestion: MatchingAnswer,
    FillInBlankQuestion: FillInBlankAnswer,
    OrderingQuestion: OrderingAnswer,
}


def expect_state(question: Question, state: AnswerState) -> None:
    """Raise when ``state`` does not have the shape ``question`` needs."""

    expected = _STATE_FOR.get(type(question))
    if expected is None:
        raise PreconditionViolation(
            f"Unsupported question type: {type(question).__name__}"
        )
    if not isinstance(state, expected):
        raise PreconditionViolation(
            "Question '{0}' expects {1}, got {2}.".format(
                question.id, expected.__name__, type(state).__name__
            )
        )


def is_answered(question: Question, state: AnswerState) -> bool:
    expect_state(question, state)
    if isinstance(state, ChoiceAnswer):
        return state.selected is not None
    if isinstance(state, MultiSelectAnswer):
        return bool(state.selected)
    if isinstance(state, FillInBlankAnswer):
        return state.text is not None and bool(state.text.strip())
    if isinstance(state, MatchingAnswer):
        return len(state.mapping) == len(question.pairs)  # type: ignore[union-attr]
    # An ordering counts as answered once its permutation exists, before any
    # move is made.
    return state.order is not None


def is_correct(question: Question, state: AnswerState) -> bool:
    """Evaluate ``state`` against ``question``.

    Only defined for answered questions; calling it earlier raises
    :class:`PreconditionViolation`.
    """

    if not is_answered(question, state):
        raise PreconditionViolation(
            f"Question '{question.id}' has not been answered yet."
        )
    if isinstance(question, (MultipleChoiceQuestion, TrueFalseQuestion)):
        return state.selected == question.correct_index  # type: ignore[union-attr]
    if isinstance(question, MultiSelectQuestion):
        selected = state.selected  # type: ignore[union-attr]
        return len(selected) == len(question.correct_indices) and all(
            index in question.correct_indices for index in selected
        )
    if isinstance(question, FillInBlankQuestion):
        text = state.text  # type: ignore[union-attr]
        if question.case_sensitive:
            return text == question.correct_text
        return text.lower() == question.correct_text.lower()
    if isinstance(question, MatchingQuestion):
        mapping = state.mapping  # type: ignore[union-attr]
        return all(
            mapping.get(index) == index for index in range(len(question.pairs))
        )
    return tuple(state.order) == question.correct_order  # type: ignore[union-attr]


def feedback_text(question: Question, state: AnswerState) -> str | None:
    """Message shown once a question is answered; ``None`` before that."""

    if not is_answered(question, state):
        return None
    return CORRECT_FEEDBACK if is_correct(question, state) else INCORRECT_FEEDBACK
