from __future__ import annotations

import json
import logging
from pathlib import Path

from course_quiz.core import logging as core_logging


def _close(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_configure_logger_writes_json(tmp_path):
    log_dir = tmp_path / "logs"
    logger, log_path = core_logging.configure_logger(
        "course_quiz.test_json",
        log_dir=log_dir,
        level="INFO",
        verbose=False,
    )

    logger.debug("hidden detail")
    logger.info("hello world", extra={"event": "unit", "value": 3})

    class _Helper:
        def __repr__(self):  # noqa: D401
            return "helper"

    try:
        raise ValueError("boom")
    except ValueError:
        logger.exception(
            "with error",
            extra={
                "value": {
                    "items": [Path(log_dir), 1],
                    "mapping": {"k": "v"},
                },
                "obj": _Helper(),
            },
        )
    for handler in logger.handlers:
        handler.flush()

    assert log_path == log_dir / "test_json.log"
    contents = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(contents) == 2
    first = json.loads(contents[0])
    assert first["message"] == "hello world"
    assert first["level"] == "INFO"
    assert first["logger"] == "course_quiz.test_json"
    assert first["extra"] == {"event": "unit", "value": 3}

    payload = json.loads(contents[-1])
    assert "ValueError: boom" in payload["exception"]
    assert payload["extra"]["obj"] == "helper"
    assert payload["extra"]["value"]["items"] == [str(log_dir), 1]

    _close(logger)


def test_configure_logger_reuses_file_handler(tmp_path):
    name = "course_quiz.test_reuse"
    logger, first_path = core_logging.configure_logger(
        name, log_dir=tmp_path / "logs"
    )
    _, second_path = core_logging.configure_logger(
        name, log_dir=tmp_path / "logs", level="DEBUG"
    )

    file_handlers = [
        handler
        for handler in logger.handlers
        if getattr(handler, "_course_quiz_file", False)
    ]
    assert len(file_handlers) == 1
    assert file_handlers[0].level == logging.DEBUG
    assert first_path == second_path
    assert logger.propagate is False

    _close(logger)


def test_console_handler_toggle(tmp_path):
    log_dir = tmp_path / "logs"
    logger_name = "course_quiz.test_toggle"

    def console_handlers(logger):
        return [
            handler
            for handler in logger.handlers
            if getattr(handler, "_course_quiz_console", False)
        ]

    logger, _ = core_logging.configure_logger(
        logger_name, log_dir=log_dir, verbose=True
    )
    assert len(console_handlers(logger)) == 1

    # Calling configure_logger again with verbose=True should reuse the handler.
    core_logging.configure_logger(logger_name, log_dir=log_dir, verbose=True)
    assert len(console_handlers(logger)) == 1

    # Disabling verbose should remove the console handler.
    core_logging.configure_logger(logger_name, log_dir=log_dir, verbose=False)
    assert not console_handlers(logger)

    _close(logger)


def test_coerce_level_defaults():
    assert core_logging._coerce_level("bogus") == logging.INFO
    assert core_logging._coerce_level("warning") == logging.WARNING
