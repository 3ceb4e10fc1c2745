"""Quiz payload builders and deterministic randomness for tests."""

from __future__ import annotations

import json
import random
from typing import Any, Dict, List, MutableSequence

from course_quiz.quizzer.models import QuizDefinition, decode_quiz_payload


class ReversingRandom(random.Random):
    """``random.Random`` whose ``shuffle`` simply reverses the sequence.

    Makes display shuffles predictable: pairs/items come out in reverse of
    their canonical order.
    """

    def __init__(self) -> None:
        super().__init__(0)
        self.shuffle_calls = 0

    def shuffle(self, x: MutableSequence[Any]) -> None:  # type: ignore[override]
        self.shuffle_calls += 1
        x.reverse()


class IdentityRandom(random.Random):
    """``random.Random`` whose ``shuffle`` leaves the sequence untouched."""

    def __init__(self) -> None:
        super().__init__(0)
        self.shuffle_calls = 0

    def shuffle(self, x: MutableSequence[Any]) -> None:  # type: ignore[override]
        self.shuffle_calls += 1


def multiple_choice(
    qid: str = "mc", correct: int = 2, options: List[str] | None = None
) -> Dict[str, Any]:
    return {
        "id": qid,
        "questionType": "multipleChoice",
        "question": "Pick the third letter",
        "options": options or ["A", "B", "C", "D"],
        "correctAnswer": correct,
    }


def true_false(qid: str = "tf", correct: int = 0) -> Dict[str, Any]:
    return {
        "id": qid,
        "questionType": "trueFalse",
        "question": "The sky is blue",
        "options": ["True", "False"],
        "correctAnswer": correct,
    }


def multi_select(
    qid: str = "ms", correct: List[int] | None = None
) -> Dict[str, Any]:
    return {
        "id": qid,
        "questionType": "multiSelect",
        "question": "Select the primes",
        "options": ["2", "3", "4", "5"],
        "correctAnswers": [0, 1, 3] if correct is None else correct,
    }


def matching(qid: str = "match") -> Dict[str, Any]:
    return {
        "id": qid,
        "questionType": "matching",
        "question": "Match capitals",
        "pairs": [
            {"left": "France", "right": "Paris"},
            {"left": "Japan", "right": "Tokyo"},
            {"left": "Peru", "right": "Lima"},
        ],
    }


def fill_in_blank(
    qid: str = "fib", text: str = "Paris", case_sensitive: bool = False
) -> Dict[str, Any]:
    return {
        "id": qid,
        "questionType": "fillInBlank",
        "question": "Capital of France?",
        "correctText": text,
        "caseSensitive": case_sensitive,
    }


def ordering(
    qid: str = "order", order: List[str] | None = None
) -> Dict[str, Any]:
    return {
        "id": qid,
        "questionType": "ordering",
        "question": "Order the steps",
        "correctOrder": order or ["a", "b", "c"],
    }


def all_kinds_payload() -> Dict[str, Any]:
    return {
        "questions": [
            multiple_choice(),
            true_false(),
            multi_select(),
            matching(),
            fill_in_blank(),
            ordering(),
        ]
    }


def build_quiz(*questions: Dict[str, Any]) -> QuizDefinition:
    return decode_quiz_payload({"questions": list(questions)})


def quiz_json(*questions: Dict[str, Any]) -> str:
    return json.dumps({"questions": list(questions)})
