import argparse
import json
import random
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple

from rich.console import Console

from ..core import configure_logger, ensure_workspace, load_config
from ..core.config import CONFIG_FILENAME, ConfigError, QuizConfig, write_template
from ..core.workspace import WorkspaceError, WorkspaceLayout
from .console import run_console_session
from .errors import ContentDecodeError
from .models import QuizDefinition, decode_quiz_content
from .view import QuizApp


def _error(message: str) -> None:
    sys.stderr.write(f"Error: {message}\n")


def _load_quiz(path: Path) -> Optional[QuizDefinition]:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        _error(f"cannot read {path}: {exc.strerror or exc}")
        return None
    try:
        return decode_quiz_content(raw)
    except ContentDecodeError as exc:
        _error(f"{path}: {exc}")
        return None


def _prepare(
    args: argparse.Namespace,
) -> Optional[Tuple[QuizConfig, WorkspaceLayout]]:
    try:
        layout = ensure_workspace(path=args.workspace)
        config = load_config(explicit_path=args.config, layout=layout)
    except (ConfigError, WorkspaceError) as exc:
        _error(str(exc))
        return None
    return config, layout


def _rng_for(args: argparse.Namespace, config: QuizConfig) -> random.Random:
    seed = args.seed if args.seed is not None else config.session.seed
    return random.Random(seed)


def _cmd_init(args: argparse.Namespace) -> int:
    try:
        layout = ensure_workspace(path=args.workspace)
        target = layout.path_for("config") / CONFIG_FILENAME
        write_template(target, overwrite=bool(args.force))
    except (ConfigError, WorkspaceError) as exc:
        _error(str(exc))
        return 1
    print(f"Workspace ready at {layout.home}")
    print(f"Wrote config template -> {target}")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    quiz = _load_quiz(args.path)
    if quiz is None:
        return 1
    if args.normalize:
        print(json.dumps(quiz.to_payload(), indent=2, ensure_ascii=False))
        return 0
    print(f"{args.path}: {len(quiz)} question(s)")
    for kind, count in quiz.counts_by_kind().items():
        print(f"- {kind.value}: {count}")
    return 0


def _cmd_play(args: argparse.Namespace) -> int:
    quiz = _load_quiz(args.path)
    if quiz is None:
        return 1
    prepared = _prepare(args)
    if prepared is None:
        return 2
    config, layout = prepared
    logger, _ = configure_logger(
        "course_quiz.quizzer",
        log_dir=layout.path_for("logs"),
        level=config.logging.level,
        verbose=config.logging.verbose,
    )
    logger.debug("play command invoked", extra={"path": args.path})
    console = Console()
    show_feedback = (
        config.session.show_feedback
        if args.feedback is None
        else bool(args.feedback)
    )
    result = run_console_session(
        quiz,
        console,
        lambda: console.input("[bold cyan]> [/]"),
        rng=_rng_for(args, config),
        show_feedback=show_feedback,
        logger=logger,
    )
    return 0 if result.exit_action == "completed" else 1


def _cmd_tui(args: argparse.Namespace) -> int:
    quiz = _load_quiz(args.path)
    if quiz is None:
        return 1
    prepared = _prepare(args)
    if prepared is None:
        return 2
    config, layout = prepared
    logger, _ = configure_logger(
        "course_quiz.quizzer",
        log_dir=layout.path_for("logs"),
        level=config.logging.level,
        verbose=False,
    )
    app = QuizApp(quiz, rng=_rng_for(args, config), logger=logger)
    app.run()
    return 0


def _add_runtime_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", type=Path, help="Quiz element JSON file")
    parser.add_argument(
        "--seed", type=int, help="Seed for matching/ordering shuffles"
    )
    parser.add_argument("--config", type=Path, help="Path to a config TOML")
    parser.add_argument(
        "--workspace", type=Path, help="Override the data home directory"
    )


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="course-quiz",
        description="Play and validate course quiz elements",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    sub = p.add_subparsers(dest="command", required=True)

    sp_init = sub.add_parser(
        "init", help="Create the workspace and a config template"
    )
    sp_init.add_argument("--workspace", type=Path)
    sp_init.add_argument(
        "--force", action="store_true", help="Overwrite an existing config"
    )

    sp_check = sub.add_parser("check", help="Validate a quiz element file")
    sp_check.add_argument("path", type=Path)
    sp_check.add_argument(
        "--normalize",
        action="store_true",
        help="Print the canonical JSON form instead of a summary",
    )

    sp_play = sub.add_parser("play", help="Play a quiz in the console")
    _add_runtime_options(sp_play)
    sp_play.add_argument("--feedback", dest="feedback", action="store_true")
    sp_play.add_argument("--no-feedback", dest="feedback", action="store_false")
    sp_play.set_defaults(feedback=None)

    sp_tui = sub.add_parser("tui", help="Play a quiz in the Textual UI")
    _add_runtime_options(sp_tui)
    return p


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.command == "init":
        code = _cmd_init(args)
    elif args.command == "check":
        code = _cmd_check(args)
    elif args.command == "play":
        code = _cmd_play(args)
    elif args.command == "tui":
        code = _cmd_tui(args)
    else:  # pragma: no cover - fallback guard
        parser.print_help()
        code = 2
    raise SystemExit(code)
