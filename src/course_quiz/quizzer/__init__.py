from ._main import build_arg_parser
from .errors import (
    QuizError,
    ContentDecodeError,
    InvalidQuestionVariant,
    PreconditionViolation,
)
from .models import (
    QuestionKind,
    QuizDefinition,
    blank_answer,
    decode_quiz_content,
    decode_quiz_payload,
)
from .shuffle import initialize_display, reshuffle
from .evaluator import is_answered, is_correct, feedback_text
from .recorder import Direction
from .session import (
    Completed,
    InProgress,
    QuizCompleted,
    QuizReport,
    QuizSession,
    SessionController,
    compute_score,
    summarize,
)
from .console import run_console_session, ConsoleSessionResult

__all__ = [
    "build_arg_parser",
    "QuizError",
    "ContentDecodeError",
    "InvalidQuestionVariant",
    "PreconditionViolation",
    "QuestionKind",
    "QuizDefinition",
    "blank_answer",
    "decode_quiz_content",
    "decode_quiz_payload",
    "initialize_display",
    "reshuffle",
    "is_answered",
    "is_correct",
    "feedback_text",
    "Direction",
    "Completed",
    "InProgress",
    "QuizCompleted",
    "QuizReport",
    "QuizSession",
    "SessionController",
    "compute_score",
    "summarize",
    "run_console_session",
    "ConsoleSessionResult",
]
