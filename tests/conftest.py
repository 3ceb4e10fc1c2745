from __future__ import annotations

import sys
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import ReversingRandom  # noqa: E402


@pytest.fixture
def reversing_rng() -> ReversingRandom:
    """Randomness source whose shuffles reverse canonical order."""

    return ReversingRandom()


@pytest.fixture
def workspace_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``COURSE_QUIZ_HOME`` at a per-test directory."""

    home = tmp_path / "quiz-home"
    monkeypatch.setenv("COURSE_QUIZ_HOME", str(home))
    monkeypatch.delenv("COURSE_QUIZ_CONFIG", raising=False)
    return home
