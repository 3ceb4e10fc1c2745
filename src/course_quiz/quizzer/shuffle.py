"""Session-stable display permutations for matching and ordering questions."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Union

from .models import MatchingQuestion, OrderingQuestion, Question

__all__ = [
    "ShuffledPair",
    "MatchingShuffle",
    "OrderingShuffle",
    "DisplayShuffle",
    "initialize_display",
    "reshuffle",
]


@dataclass(frozen=True)
class ShuffledPair:
    """A pair shown in the right column, tagged with its canonical index."""

    original_index: int
    left: str
    right: str


@dataclass(frozen=True)
class MatchingShuffle:
    entries: tuple[ShuffledPair, ...]

    def right_indices(self) -> tuple[int, ...]:
        """Original pair indices in display order."""

        return tuple(entry.original_index for entry in self.entries)


@dataclass(frozen=True)
class OrderingShuffle:
    items: tuple[str, ...]


DisplayShuffle = Union[MatchingShuffle, OrderingShuffle]


def initialize_display(
    question: Question,
    existing: DisplayShuffle | None,
    rng: random.Random,
) -> DisplayShuffle | None:
    """Return the display shuffle for ``question``, creating it once.

    An ``existing`` shuffle is returned untouched so re-rendering a question
    never reorders it. Questions without an on-screen permutation get
    ``None``.
    """

    if existing is not None:
        return existing
    return reshuffle(question, rng)


def reshuffle(question: Question, rng: random.Random) -> DisplayShuffle | None:
    """Draw a fresh uniformly random permutation for ``question``."""

    if isinstance(question, MatchingQuestion):
        entries = [
            ShuffledPair(index, pair.left, pair.right)
            for index, pair in enumerate(question.pairs)
        ]
        rng.shuffle(entries)
        return MatchingShuffle(tuple(entries))
    if isinstance(question, OrderingQuestion):
        items = list(question.correct_order)
        rng.shuffle(items)
        return OrderingShuffle(tuple(items))
    return None
