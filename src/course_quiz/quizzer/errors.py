"""Exception taxonomy for the quiz engine."""

from __future__ import annotations

__all__ = [
    "QuizError",
    "ContentDecodeError",
    "InvalidQuestionVariant",
    "PreconditionViolation",
]


class QuizError(RuntimeError):
    """Base class for quiz engine failures."""


class ContentDecodeError(QuizError):
    """Raised when quiz element content cannot be decoded."""


class InvalidQuestionVariant(ContentDecodeError):
    """Raised when a question carries an unknown ``questionType`` tag."""

    def __init__(self, question_type: object, position: int) -> None:
        self.question_type = question_type
        self.position = position
        super().__init__(
            "Question {0} has unknown questionType {1!r}.".format(
                position + 1, question_type
            )
        )


class PreconditionViolation(QuizError):
    """Raised when a recorder or evaluator call breaks its contract.

    The session controller validates user input before delegating, so this
    only surfaces when library code is called directly with bad arguments.
    """
