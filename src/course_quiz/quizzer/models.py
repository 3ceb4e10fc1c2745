"""Question and answer-state model for quiz course elements.

A quiz element stores its definition as JSON text shaped like
``{"questions": [...]}``. Each entry is tagged with ``questionType`` and maps
onto exactly one of the frozen question dataclasses below. Answer states
mirror the question variants and are replaced, never mutated, by the
recorder functions.
"""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Iterator, Mapping, Union

from .errors import ContentDecodeError, InvalidQuestionVariant

__all__ = [
    "QuestionKind",
    "MultipleChoiceQuestion",
    "TrueFalseQuestion",
    "MultiSelectQuestion",
    "MatchPair",
    "MatchingQuestion",
    "FillInBlankQuestion",
    "OrderingQuestion",
    "Question",
    "QuizDefinition",
    "ChoiceAnswer",
    "MultiSelectAnswer",
    "MatchingAnswer",
    "FillInBlankAnswer",
    "OrderingAnswer",
    "AnswerState",
    "blank_answer",
    "decode_quiz_content",
    "decode_quiz_payload",
]


class QuestionKind(Enum):
    """Discriminator values used by ``questionType``."""

    MULTIPLE_CHOICE = "multipleChoice"
    TRUE_FALSE = "trueFalse"
    MULTI_SELECT = "multiSelect"
    MATCHING = "matching"
    FILL_IN_BLANK = "fillInBlank"
    ORDERING = "ordering"


TRUE_FALSE_OPTIONS = ("True", "False")


@dataclass(frozen=True)
class MultipleChoiceQuestion:
    id: str
    prompt: str
    options: tuple[str, ...]
    correct_index: int

    kind: ClassVar[QuestionKind] = QuestionKind.MULTIPLE_CHOICE

    def to_payload(self) -> dict[str, object]:
        return {
            "id": self.id,
            "questionType": self.kind.value,
            "question": self.prompt,
            "options": list(self.options),
            "correctAnswer": self.correct_index,
        }


@dataclass(frozen=True)
class TrueFalseQuestion:
    id: str
    prompt: str
    correct_index: int
    options: tuple[str, ...] = TRUE_FALSE_OPTIONS

    kind: ClassVar[QuestionKind] = QuestionKind.TRUE_FALSE

    def to_payload(self) -> dict[str, object]:
        return {
            "id": self.id,
            "questionType": self.kind.value,
            "question": self.prompt,
            "options": list(self.options),
            "correctAnswer": self.correct_index,
        }


@dataclass(frozen=True)
class MultiSelectQuestion:
    id: str
    prompt: str
    options: tuple[str, ...]
    correct_indices: frozenset[int]

    kind: ClassVar[QuestionKind] = QuestionKind.MULTI_SELECT

    def to_payload(self) -> dict[str, object]:
        return {
            "id": self.id,
            "questionType": self.kind.value,
            "question": self.prompt,
            "options": list(self.options),
            "correctAnswers": sorted(self.correct_indices),
        }


@dataclass(frozen=True)
class MatchPair:
    """A left/right association; pair ``i`` is the correct match for ``i``."""

    left: str
    right: str


@dataclass(frozen=True)
class MatchingQuestion:
    id: str
    prompt: str
    pairs: tuple[MatchPair, ...]

    kind: ClassVar[QuestionKind] = QuestionKind.MATCHING

    def to_payload(self) -> dict[str, object]:
        return {
            "id": self.id,
            "questionType": self.kind.value,
            "question": self.prompt,
            "pairs": [
                {"left": pair.left, "right": pair.right} for pair in self.pairs
            ],
        }


@dataclass(frozen=True)
class FillInBlankQuestion:
    id: str
    prompt: str
    correct_text: str
    case_sensitive: bool = False

    kind: ClassVar[QuestionKind] = QuestionKind.FILL_IN_BLANK

    def to_payload(self) -> dict[str, object]:
        return {
            "id": self.id,
            "questionType": self.kind.value,
            "question": self.prompt,
            "correctText": self.correct_text,
            "caseSensitive": self.case_sensitive,
        }


@dataclass(frozen=True)
class OrderingQuestion:
    id: str
    prompt: str
    correct_order: tuple[str, ...]

    kind: ClassVar[QuestionKind] = QuestionKind.ORDERING

    def to_payload(self) -> dict[str, object]:
        return {
            "id": self.id,
            "questionType": self.kind.value,
            "question": self.prompt,
            "correctOrder": list(self.correct_order),
        }


Question = Union[
    MultipleChoiceQuestion,
    TrueFalseQuestion,
    MultiSelectQuestion,
    MatchingQuestion,
    FillInBlankQuestion,
    OrderingQuestion,
]


@dataclass(frozen=True)
class QuizDefinition:
    """Ordered, immutable list of questions decoded from a quiz element."""

    questions: tuple[Question, ...]

    def __len__(self) -> int:
        return len(self.questions)

    def __iter__(self) -> Iterator[Question]:
        return iter(self.questions)

    def __getitem__(self, index: int) -> Question:
        return self.questions[index]

    def counts_by_kind(self) -> dict[QuestionKind, int]:
        counts = Counter(question.kind for question in self.questions)
        return {kind: counts[kind] for kind in QuestionKind if counts[kind]}

    def to_payload(self) -> dict[str, object]:
        return {
            "questions": [question.to_payload() for question in self.questions]
        }


@dataclass(frozen=True)
class ChoiceAnswer:
    """Selection for multiple-choice and true/false questions."""

    selected: int | None = None


@dataclass(frozen=True)
class MultiSelectAnswer:
    selected: frozenset[int] = frozenset()


@dataclass(frozen=True)
class MatchingAnswer:
    """Partial mapping of left index to right original index."""

    mapping: Mapping[int, int] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def with_pair(self, left: int, right: int) -> "MatchingAnswer":
        updated = dict(self.mapping)
        updated[left] = right
        return MatchingAnswer(MappingProxyType(updated))


@dataclass(frozen=True)
class FillInBlankAnswer:
    """Typed text; ``None`` means nothing was entered yet."""

    text: str | None = None


@dataclass(frozen=True)
class OrderingAnswer:
    """Current permutation; ``None`` until the display is initialized."""

    order: tuple[str, ...] | None = None


AnswerState = Union[
    ChoiceAnswer,
    MultiSelectAnswer,
    MatchingAnswer,
    FillInBlankAnswer,
    OrderingAnswer,
]


def blank_answer(question: Question) -> AnswerState:
    """Return the unset answer state for ``question``'s variant."""

    if isinstance(question, (MultipleChoiceQuestion, TrueFalseQuestion)):
        return ChoiceAnswer()
    if isinstance(question, MultiSelectQuestion):
        return MultiSelectAnswer()
    if isinstance(question, MatchingQuestion):
        return MatchingAnswer()
    if isinstance(question, FillInBlankQuestion):
        return FillInBlankAnswer()
    if isinstance(question, OrderingQuestion):
        return OrderingAnswer()
    raise TypeError(f"Unsupported question type: {type(question).__name__}")


def decode_quiz_content(raw: str | bytes) -> QuizDefinition:
    """Decode a quiz element's ``content`` text into a definition.

    Raises :class:`ContentDecodeError` when the text is not JSON or lacks a
    ``questions`` list, and :class:`InvalidQuestionVariant` when a question
    carries an unknown ``questionType``. No partial definitions are returned.
    """

    try:
        payload = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as exc:
        raise ContentDecodeError(f"Quiz content is not valid JSON: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise ContentDecodeError("Quiz content must be a JSON object.")
    return decode_quiz_payload(payload)


def decode_quiz_payload(payload: Mapping[str, Any]) -> QuizDefinition:
    """Build a definition from an already-parsed ``{"questions": [...]}``."""

    raw_questions = payload.get("questions")
    if not isinstance(raw_questions, list):
        raise ContentDecodeError("Quiz content must define a 'questions' list.")
    if not raw_questions:
        raise ContentDecodeError("Quiz content must contain at least one question.")

    questions: list[Question] = []
    seen: set[str] = set()
    for position, entry in enumerate(raw_questions):
        question = _decode_question(entry, position)
        if question.id in seen:
            raise ContentDecodeError(
                f"Question {position + 1} reuses id '{question.id}'."
            )
        seen.add(question.id)
        questions.append(question)
    return QuizDefinition(tuple(questions))


def _decode_question(entry: object, position: int) -> Question:
    if not isinstance(entry, Mapping):
        raise ContentDecodeError(f"Question {position + 1} must be an object.")
    tag = entry.get("questionType")
    try:
        kind = QuestionKind(tag)
    except ValueError:
        raise InvalidQuestionVariant(tag, position) from None

    raw_id = entry.get("id")
    identifier = str(raw_id) if raw_id is not None else str(position)
    prompt = _optional_string(entry.get("question"), position, "question")

    if kind is QuestionKind.MULTIPLE_CHOICE:
        options = _string_list(entry.get("options"), position, "options")
        return MultipleChoiceQuestion(
            id=identifier,
            prompt=prompt,
            options=options,
            correct_index=_option_index(
                entry.get("correctAnswer"), options, position, "correctAnswer"
            ),
        )
    if kind is QuestionKind.TRUE_FALSE:
        options = TRUE_FALSE_OPTIONS
        if entry.get("options") is not None:
            options = _string_list(entry.get("options"), position, "options")
            if len(options) != 2:
                raise ContentDecodeError(
                    f"Question {position + 1}: 'options' must hold exactly "
                    "two entries for trueFalse."
                )
        return TrueFalseQuestion(
            id=identifier,
            prompt=prompt,
            correct_index=_option_index(
                entry.get("correctAnswer"), options, position, "correctAnswer"
            ),
            options=options,
        )
    if kind is QuestionKind.MULTI_SELECT:
        options = _string_list(entry.get("options"), position, "options")
        raw_indices = entry.get("correctAnswers")
        if not isinstance(raw_indices, list):
            raise ContentDecodeError(
                f"Question {position + 1}: 'correctAnswers' must be a list."
            )
        indices = frozenset(
            _option_index(value, options, position, "correctAnswers")
            for value in raw_indices
        )
        return MultiSelectQuestion(
            id=identifier,
            prompt=prompt,
            options=options,
            correct_indices=indices,
        )
    if kind is QuestionKind.MATCHING:
        return MatchingQuestion(
            id=identifier,
            prompt=prompt,
            pairs=_match_pairs(entry.get("pairs"), position),
        )
    if kind is QuestionKind.FILL_IN_BLANK:
        correct_text = entry.get("correctText")
        if not isinstance(correct_text, str):
            raise ContentDecodeError(
                f"Question {position + 1}: 'correctText' must be a string."
            )
        case_sensitive = entry.get("caseSensitive", False)
        if case_sensitive is None:
            case_sensitive = False
        if not isinstance(case_sensitive, bool):
            raise ContentDecodeError(
                f"Question {position + 1}: 'caseSensitive' must be a boolean."
            )
        return FillInBlankQuestion(
            id=identifier,
            prompt=prompt,
            correct_text=correct_text,
            case_sensitive=case_sensitive,
        )
    return OrderingQuestion(
        id=identifier,
        prompt=prompt,
        correct_order=_string_list(
            entry.get("correctOrder"), position, "correctOrder"
        ),
    )


def _optional_string(value: object, position: int, name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ContentDecodeError(
            f"Question {position + 1}: '{name}' must be a string."
        )
    return value


def _string_list(value: object, position: int, name: str) -> tuple[str, ...]:
    if not isinstance(value, list) or not value:
        raise ContentDecodeError(
            f"Question {position + 1}: '{name}' must be a non-empty list."
        )
    if not all(isinstance(item, str) for item in value):
        raise ContentDecodeError(
            f"Question {position + 1}: '{name}' entries must be strings."
        )
    return tuple(value)


def _option_index(
    value: object, options: tuple[str, ...], position: int, name: str
) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ContentDecodeError(
            f"Question {position + 1}: '{name}' must hold option indices."
        )
    if not 0 <= value < len(options):
        raise ContentDecodeError(
            f"Question {position + 1}: '{name}' index {value} is out of range."
        )
    return value


def _match_pairs(value: object, position: int) -> tuple[MatchPair, ...]:
    if not isinstance(value, list) or not value:
        raise ContentDecodeError(
            f"Question {position + 1}: 'pairs' must be a non-empty list."
        )
    pairs: list[MatchPair] = []
    for item in value:
        if not isinstance(item, Mapping):
            raise ContentDecodeError(
                f"Question {position + 1}: each pair must be an object."
            )
        left = item.get("left")
        right = item.get("right")
        if not isinstance(left, str) or not isinstance(right, str):
            raise ContentDecodeError(
                f"Question {position + 1}: pairs need string 'left' and "
                "'right' values."
            )
        pairs.append(MatchPair(left, right))
    return tuple(pairs)
