"""Apply user actions to answer states.

Every function takes the question and its current state and returns the next
state without touching the inputs. Once a question is answered its state is
locked and mutations hand back the state unchanged; ordering questions are the
exception and stay movable. Out-of-range indices or a state of the wrong shape
raise :class:`PreconditionViolation`.
"""

from __future__ import annotations

import random
from enum import Enum
from types import MappingProxyType

from .errors import PreconditionViolation
from .evaluator import expect_state, is_answered
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
from .shuffle import MatchingShuffle, reshuffle

__all__ = [
    "Direction",
    "is_locked",
    "select",
    "toggle",
    "pair",
    "reset_matching",
    "set_text",
    "move_adjacent",
]


class Direction(Enum):
    UP = "up"
    DOWN = "down"


def is_locked(question: Question, state: AnswerState) -> bool:
    """Whether further input for ``question`` must be rejected."""

    if isinstance(question, OrderingQuestion):
        return False
    return is_answered(question, state)


def select(question: Question, state: AnswerState, index: int) -> AnswerState:
    if not isinstance(question, (MultipleChoiceQuestion, TrueFalseQuestion)):
        raise _wrong_kind(question, "select")
    expect_state(question, state)
    _check_index(index, len(question.options), "option")
    if is_locked(question, state):
        return state
    return ChoiceAnswer(index)


def toggle(question: Question, state: AnswerState, index: int) -> AnswerState:
    if not isinstance(question, MultiSelectQuestion):
        raise _wrong_kind(question, "toggle")
    expect_state(question, state)
    _check_index(index, len(question.options), "option")
    if is_locked(question, state):
        return state
    return MultiSelectAnswer(state.selected ^ {index})  # type: ignore[union-attr]


def pair(
    question: Question,
    state: AnswerState,
    left_index: int,
    right_original_index: int,
) -> AnswerState:
    """Record ``left_index`` -> ``right_original_index``.

    Other entries are left alone even when they already point at the same
    right item; duplicates only matter when the answer is evaluated.
    """

    if not isinstance(question, MatchingQuestion):
        raise _wrong_kind(question, "pair")
    expect_state(question, state)
    _check_index(left_index, len(question.pairs), "left")
    _check_index(right_original_index, len(question.pairs), "right")
    if is_locked(question, state):
        return state
    return state.with_pair(left_index, right_original_index)  # type: ignore[union-attr]


def reset_matching(
    question: Question, state: AnswerState, rng: random.Random
) -> tuple[AnswerState, MatchingShuffle | None]:
    """Clear every pair and draw a fresh right-column shuffle.

    Returns ``(state, None)`` when the question is already locked.
    """

    if not isinstance(question, MatchingQuestion):
        raise _wrong_kind(question, "reset_matching")
    expect_state(question, state)
    if is_locked(question, state):
        return state, None
    shuffle = reshuffle(question, rng)
    return MatchingAnswer(MappingProxyType({})), shuffle  # type: ignore[return-value]


def set_text(question: Question, state: AnswerState, text: str) -> AnswerState:
    if not isinstance(question, FillInBlankQuestion):
        raise _wrong_kind(question, "set_text")
    expect_state(question, state)
    if not isinstance(text, str):
        raise PreconditionViolation("Fill-in-blank text must be a string.")
    if is_locked(question, state):
        return state
    return FillInBlankAnswer(text)


def move_adjacent(
    question: Question,
    state: AnswerState,
    index: int,
    direction: Direction,
) -> AnswerState:
    """Swap the item at ``index`` with its neighbour; no-op at the edges."""

    if not isinstance(question, OrderingQuestion):
        raise _wrong_kind(question, "move_adjacent")
    expect_state(question, state)
    order = state.order  # type: ignore[union-attr]
    if order is None:
        raise PreconditionViolation(
            f"Ordering question '{question.id}' has not been initialized."
        )
    _check_index(index, len(order), "item")
    target = index - 1 if direction is Direction.UP else index + 1
    if not 0 <= target < len(order):
        return state
    items = list(order)
    items[index], items[target] = items[target], items[index]
    return OrderingAnswer(tuple(items))


def _check_index(index: int, size: int, label: str) -> None:
    if isinstance(index, bool) or not isinstance(index, int):
        raise PreconditionViolation(f"{label} index must be an integer.")
    if not 0 <= index < size:
        raise PreconditionViolation(
            f"{label} index {index} is out of range (0..{size - 1})."
        )


def _wrong_kind(question: Question, action: str) -> PreconditionViolation:
    return PreconditionViolation(
        "'{0}' does not apply to {1} question '{2}'.".format(
            action, question.kind.value, question.id
        )
    )
