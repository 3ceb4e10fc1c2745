"""TOML configuration for course-quiz hosts.

The file is optional: built-in defaults apply when it is absent, and any
table present is merged over them with unknown keys rejected.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional

try:  # Python >= 3.11 ships ``tomllib`` in the stdlib.
    import tomllib
except ModuleNotFoundError as exc:  # pragma: no cover - defensive guard
    raise RuntimeError("Python 3.11+ is required for tomllib support.") from exc

from .workspace import WorkspaceLayout

__all__ = [
    "CONFIG_PATH_ENV",
    "CONFIG_FILENAME",
    "ConfigError",
    "SessionConfig",
    "LoggingConfig",
    "QuizConfig",
    "load_config",
    "resolve_config_path",
    "config_template",
    "write_template",
]

CONFIG_PATH_ENV = "COURSE_QUIZ_CONFIG"
CONFIG_FILENAME = "course-quiz.toml"

_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

_DEFAULTS: Dict[str, Any] = {
    "session": {
        "seed": None,
        "show_feedback": True,
    },
    "logging": {
        "level": "INFO",
        "verbose": False,
    },
}

_CONFIG_TEMPLATE = """
# course-quiz configuration

[session]
# Fix the shuffle seed for reproducible matching/ordering layouts.
# seed = 42
show_feedback = true

[logging]
level = "INFO"
verbose = false
"""


class ConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class SessionConfig:
    seed: Optional[int]
    show_feedback: bool


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    verbose: bool


@dataclass(frozen=True)
class QuizConfig:
    session: SessionConfig
    logging: LoggingConfig
    source: Optional[Path] = None


def resolve_config_path(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
    layout: WorkspaceLayout | None = None,
) -> Optional[Path]:
    """Pick the config file: explicit path, env override, then workspace."""

    env_map = os.environ if env is None else env
    if explicit_path is not None:
        return explicit_path.expanduser().resolve()
    env_override = (env_map.get(CONFIG_PATH_ENV) or "").strip()
    if env_override:
        return Path(env_override).expanduser().resolve()
    if layout is not None:
        return layout.path_for("config") / CONFIG_FILENAME
    return None


def load_config(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
    layout: WorkspaceLayout | None = None,
) -> QuizConfig:
    """Load the TOML config, applying defaults and validation.

    An explicitly requested file must exist; the workspace default may be
    missing, in which case defaults are returned.
    """

    env_map = os.environ if env is None else env
    path = resolve_config_path(
        explicit_path=explicit_path, env=env_map, layout=layout
    )
    required = explicit_path is not None or bool(
        (env_map.get(CONFIG_PATH_ENV) or "").strip()
    )
    tree = copy.deepcopy(_DEFAULTS)
    source: Optional[Path] = None
    if path is not None and (required or path.exists()):
        data = _load_toml(path)
        _merge_dict(tree, data)
        source = path
    return _build_config(tree, source)


def config_template() -> str:
    """Return the TOML template written by ``course-quiz init``."""

    return _CONFIG_TEMPLATE.strip() + "\n"


def write_template(
    path: Path, *, overwrite: bool = False, mode: int = 0o600
) -> Path:
    """Write the default template to ``path`` honouring ``overwrite``."""

    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and not overwrite:
        raise ConfigError(f"Config already exists: {path}")
    with path.open("w", encoding="utf-8") as fh:
        fh.write(config_template())
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path


def _load_toml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read config {path}: {exc.strerror or exc}"
        ) from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse config TOML: {exc}") from exc


def _merge_dict(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    for key, value in override.items():
        dotted = f"{path}{key}"
        if key not in base:
            raise ConfigError(f"Unknown configuration key '{dotted}'.")
        if isinstance(base[key], MutableMapping):
            if not isinstance(value, Mapping):
                raise ConfigError(
                    "Expected table for '{0}', found {1}.".format(
                        dotted, type(value).__name__
                    )
                )
            _merge_dict(base[key], value, path=f"{dotted}.")
        else:
            base[key] = value


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"'{field}' must be a boolean.")
    return value


def _coerce_optional_int(value: Any, *, field: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"'{field}' must be an integer when set.")
    return value


def _build_config(tree: Mapping[str, Any], source: Optional[Path]) -> QuizConfig:
    session = tree["session"]
    logging_section = tree["logging"]

    level = logging_section.get("level")
    if not isinstance(level, str) or level.strip().upper() not in _LEVELS:
        raise ConfigError(
            "logging.level must be one of DEBUG, INFO, WARNING, ERROR, "
            "CRITICAL."
        )

    return QuizConfig(
        session=SessionConfig(
            seed=_coerce_optional_int(session.get("seed"), field="session.seed"),
            show_feedback=_require_bool(
                session.get("show_feedback"), field="session.show_feedback"
            ),
        ),
        logging=LoggingConfig(
            level=level.strip().upper(),
            verbose=_require_bool(
                logging_section.get("verbose"), field="logging.verbose"
            ),
        ),
        source=source,
    )
