"""Shared testing fixtures for the course_quiz test suite."""

from .quizzes import (  # noqa: F401
    IdentityRandom,
    ReversingRandom,
    all_kinds_payload,
    build_quiz,
    fill_in_blank,
    matching,
    multi_select,
    multiple_choice,
    ordering,
    quiz_json,
    true_false,
)

__all__ = [
    "IdentityRandom",
    "ReversingRandom",
    "all_kinds_payload",
    "build_quiz",
    "fill_in_blank",
    "matching",
    "multi_select",
    "multiple_choice",
    "ordering",
    "quiz_json",
    "true_false",
]
