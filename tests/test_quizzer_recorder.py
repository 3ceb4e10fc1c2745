from __future__ import annotations

import pytest

from course_quiz.quizzer import recorder
from course_quiz.quizzer.errors import PreconditionViolation
from course_quiz.quizzer.models import (
    ChoiceAnswer,
    FillInBlankAnswer,
    MatchingAnswer,
    MultiSelectAnswer,
    OrderingAnswer,
)
from course_quiz.quizzer.recorder import Direction
from course_quiz.quizzer.shuffle import MatchingShuffle

from fixtures import (
    build_quiz,
    fill_in_blank,
    matching,
    multi_select,
    multiple_choice,
    ordering,
    true_false,
)


def test_select_records_choice_and_then_locks() -> None:
    question = build_quiz(multiple_choice())[0]

    state = recorder.select(question, ChoiceAnswer(), 1)
    assert state == ChoiceAnswer(1)
    assert recorder.is_locked(question, state)

    again = recorder.select(question, state, 3)
    assert again is state


def test_select_works_for_true_false() -> None:
    question = build_quiz(true_false())[0]
    assert recorder.select(question, ChoiceAnswer(), 1) == ChoiceAnswer(1)


def test_select_out_of_range_raises() -> None:
    question = build_quiz(multiple_choice())[0]
    with pytest.raises(PreconditionViolation):
        recorder.select(question, ChoiceAnswer(), 4)


def test_toggle_flips_membership_until_locked() -> None:
    question = build_quiz(multi_select())[0]

    state = recorder.toggle(question, MultiSelectAnswer(), 2)
    assert state == MultiSelectAnswer(frozenset({2}))

    # A non-empty selection counts as answered, so later toggles are ignored.
    assert recorder.toggle(question, state, 2) is state
    assert recorder.toggle(question, state, 0) is state


def test_pair_overwrites_unlocked_entries() -> None:
    question = build_quiz(matching())[0]

    state = recorder.pair(question, MatchingAnswer(), 0, 1)
    state = recorder.pair(question, state, 0, 2)

    assert dict(state.mapping) == {0: 2}


def test_pair_does_not_enforce_unique_right_items() -> None:
    question = build_quiz(matching())[0]

    state = recorder.pair(question, MatchingAnswer(), 0, 1)
    state = recorder.pair(question, state, 1, 1)

    assert dict(state.mapping) == {0: 1, 1: 1}


def test_pair_locks_once_every_left_is_paired() -> None:
    question = build_quiz(matching())[0]
    state = MatchingAnswer()
    for left in range(3):
        state = recorder.pair(question, state, left, left)

    assert recorder.is_locked(question, state)
    assert recorder.pair(question, state, 0, 2) is state


def test_pair_rejects_out_of_range_indices() -> None:
    question = build_quiz(matching())[0]
    with pytest.raises(PreconditionViolation):
        recorder.pair(question, MatchingAnswer(), 0, 3)
    with pytest.raises(PreconditionViolation):
        recorder.pair(question, MatchingAnswer(), -1, 0)


def test_reset_matching_clears_pairs_and_reshuffles(reversing_rng) -> None:
    question = build_quiz(matching())[0]
    partial = recorder.pair(question, MatchingAnswer(), 0, 0)

    state, shuffle = recorder.reset_matching(question, partial, reversing_rng)

    assert dict(state.mapping) == {}
    assert isinstance(shuffle, MatchingShuffle)
    assert reversing_rng.shuffle_calls == 1


def test_reset_matching_is_ignored_when_locked(reversing_rng) -> None:
    question = build_quiz(matching())[0]
    state = MatchingAnswer()
    for left in range(3):
        state = recorder.pair(question, state, left, left)

    result, shuffle = recorder.reset_matching(question, state, reversing_rng)

    assert result is state
    assert shuffle is None
    assert reversing_rng.shuffle_calls == 0


def test_set_text_keeps_raw_text() -> None:
    question = build_quiz(fill_in_blank())[0]

    blank = recorder.set_text(question, FillInBlankAnswer(), "   ")
    assert blank == FillInBlankAnswer("   ")
    assert not recorder.is_locked(question, blank)

    typed = recorder.set_text(question, blank, " Paris ")
    assert typed.text == " Paris "
    assert recorder.set_text(question, typed, "Lyon") is typed


def test_move_adjacent_swaps_neighbours() -> None:
    question = build_quiz(ordering())[0]
    state = OrderingAnswer(("c", "b", "a"))

    up = recorder.move_adjacent(question, state, 2, Direction.UP)
    down = recorder.move_adjacent(question, state, 0, Direction.DOWN)

    assert up.order == ("c", "a", "b")
    assert down.order == ("b", "c", "a")


def test_move_adjacent_is_noop_at_edges() -> None:
    question = build_quiz(ordering())[0]
    state = OrderingAnswer(("c", "b", "a"))

    assert recorder.move_adjacent(question, state, 0, Direction.UP) is state
    assert recorder.move_adjacent(question, state, 2, Direction.DOWN) is state


def test_ordering_never_locks() -> None:
    question = build_quiz(ordering())[0]
    solved = OrderingAnswer(("a", "b", "c"))

    assert not recorder.is_locked(question, solved)
    moved = recorder.move_adjacent(question, solved, 0, Direction.DOWN)
    assert moved.order == ("b", "a", "c")


def test_move_adjacent_requires_initialized_order() -> None:
    question = build_quiz(ordering())[0]
    with pytest.raises(PreconditionViolation):
        recorder.move_adjacent(question, OrderingAnswer(), 0, Direction.UP)


@pytest.mark.parametrize(
    "action",
    [
        lambda q: recorder.select(q, MultiSelectAnswer(), 0),
        lambda q: recorder.set_text(q, MultiSelectAnswer(), "x"),
        lambda q: recorder.pair(q, MultiSelectAnswer(), 0, 0),
    ],
)
def test_wrong_kind_raises(action) -> None:
    question = build_quiz(multi_select())[0]
    with pytest.raises(PreconditionViolation):
        action(question)


def test_mismatched_state_raises() -> None:
    question = build_quiz(multiple_choice())[0]
    with pytest.raises(PreconditionViolation):
        recorder.select(question, MultiSelectAnswer(), 0)
