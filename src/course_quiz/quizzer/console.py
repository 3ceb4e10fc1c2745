"""Rich-powered console host for quiz sessions.

The loop renders the current question, reads one command at a time from an
input provider and forwards it to :class:`SessionController`. It keeps no quiz
state of its own, so tests can drive it with a scripted provider and a
recording console.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Literal

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .evaluator import feedback_text
from .models import (
    ChoiceAnswer,
    FillInBlankAnswer,
    FillInBlankQuestion,
    MatchingAnswer,
    MatchingQuestion,
    MultiSelectAnswer,
    MultiSelectQuestion,
    MultipleChoiceQuestion,
    OrderingAnswer,
    OrderingQuestion,
    QuizDefinition,
    TrueFalseQuestion,
)
from .session import QuizCompleted, QuizReport, SessionController
from .shuffle import MatchingShuffle

InputProvider = Callable[[], str]
ExitAction = Literal["completed", "quit"]
CommandType = Literal[
    "choose",
    "left",
    "right",
    "reset",
    "text",
    "up",
    "down",
    "next",
    "prev",
    "retake",
    "quit",
]

_KIND_LABELS = {
    MultipleChoiceQuestion: "Multiple choice",
    TrueFalseQuestion: "True / False",
    MultiSelectQuestion: "Select all that apply",
    MatchingQuestion: "Matching",
    FillInBlankQuestion: "Fill in the blank",
    OrderingQuestion: "Arrange in order",
}


@dataclass(frozen=True)
class SessionCommand:
    """Normalized user command parsed from console input.

    Numeric arguments are 1-based as typed; ``text`` carries the raw answer
    for fill-in-the-blank questions.
    """

    type: CommandType
    number: int | None = None
    text: str | None = None


@dataclass(frozen=True)
class ConsoleSessionResult:
    """Return value from :func:`run_console_session`."""

    exit_action: ExitAction
    report: QuizReport
    scores: list[int] = field(default_factory=list)


_SIMPLE_COMMANDS: dict[str, CommandType] = {
    "n": "next",
    "next": "next",
    "p": "prev",
    "prev": "prev",
    "previous": "prev",
    "q": "quit",
    "quit": "quit",
    "exit": "quit",
    "retake": "retake",
    "reset": "reset",
}

_NUMBERED_COMMANDS: dict[str, CommandType] = {
    "l": "left",
    "left": "left",
    "r": "right",
    "right": "right",
    "u": "up",
    "up": "up",
    "d": "down",
    "down": "down",
}


def parse_session_command(raw: str | None) -> SessionCommand | None:
    """Parse raw user input into a structured command."""

    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    head, _, rest = text.partition(" ")
    lowered = head.lower()
    if lowered in {"t", "type"}:
        return SessionCommand("text", text=raw.lstrip()[len(head) + 1:])
    if not rest and lowered in _SIMPLE_COMMANDS:
        return SessionCommand(_SIMPLE_COMMANDS[lowered])
    if lowered in _NUMBERED_COMMANDS:
        number = _parse_number(rest)
        if number is None:
            return None
        return SessionCommand(_NUMBERED_COMMANDS[lowered], number=number)
    if not rest:
        number = _parse_number(head)
        if number is not None:
            return SessionCommand("choose", number=number)
    return None


def _parse_number(value: str) -> int | None:
    value = value.strip()
    if not value.isdigit():
        return None
    number = int(value)
    return number if number > 0 else None


def run_console_session(
    quiz: QuizDefinition,
    console: Console,
    input_provider: InputProvider,
    *,
    rng: random.Random | None = None,
    show_feedback: bool = True,
    logger: logging.Logger | None = None,
) -> ConsoleSessionResult:
    """Run an interactive quiz attempt using Rich-rendered prompts."""

    scores: list[int] = []

    def _completed(event: QuizCompleted) -> None:
        scores.append(event.score)

    controller = SessionController(
        quiz, rng=rng, on_complete=_completed, logger=logger
    )

    exit_action: ExitAction = "quit"
    while True:
        if controller.is_completed:
            _render_summary(console, controller)
        else:
            _render_question(console, controller, show_feedback=show_feedback)
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            if controller.is_completed:
                exit_action = "completed"
            break
        command = parse_session_command(raw)
        if command is None:
            console.print("[red]Unrecognized command. Try again.[/]")
            continue
        if command.type == "quit":
            if controller.is_completed:
                exit_action = "completed"
            else:
                console.print(
                    "\n[bold yellow]Ending session without finishing.[/]"
                )
            break
        if not _apply_command(command, controller):
            console.print("[red]That action is not available right now.[/]")

    return ConsoleSessionResult(exit_action, controller.report(), scores)


def _apply_command(
    command: SessionCommand, controller: SessionController
) -> bool:
    if command.type == "next":
        return controller.next()
    if command.type == "prev":
        return controller.previous()
    if command.type == "retake":
        return controller.retake()
    if controller.is_completed:
        return False
    question = controller.current_question
    index = (command.number or 0) - 1
    if command.type == "choose":
        if isinstance(question, MultiSelectQuestion):
            return controller.toggle(index)
        return controller.select(index)
    if command.type == "text":
        return controller.set_text(command.text or "")
    if command.type == "left":
        return controller.select_left(index)
    if command.type == "right":
        shuffle = controller.current_shuffle
        if not isinstance(shuffle, MatchingShuffle):
            return False
        if not 0 <= index < len(shuffle.entries):
            return False
        return controller.pair_right(shuffle.entries[index].original_index)
    if command.type == "reset":
        return controller.reset_matching()
    if command.type in ("up", "down"):
        return controller.move(index, command.type)
    return False


def _render_question(
    console: Console,
    controller: SessionController,
    *,
    show_feedback: bool,
) -> None:
    question = controller.current_question
    header = Text.assemble(
        (f"Question {controller.current_index + 1}", "bold cyan"),
        (f" / {controller.total_questions}", "dim"),
    )
    console.print()
    console.rule(header)
    console.print(Text(_KIND_LABELS[type(question)], style="dim"))
    if question.prompt:
        console.print(Text(question.prompt, style="bold"))

    state = controller.current_answer
    hint = "n (next), p (prev), quit"
    if isinstance(question, (MultipleChoiceQuestion, TrueFalseQuestion)):
        selected = state.selected if isinstance(state, ChoiceAnswer) else None
        console.print(_options_table(question.options, {selected}))
        hint = "number (select), " + hint
    elif isinstance(question, MultiSelectQuestion):
        selected = (
            set(state.selected) if isinstance(state, MultiSelectAnswer) else set()
        )
        console.print(_options_table(question.options, selected))
        hint = "number (toggle), " + hint
    elif isinstance(question, FillInBlankQuestion):
        text = state.text if isinstance(state, FillInBlankAnswer) else None
        console.print(Text(f"Your answer: {text or ''}"))
        if controller.is_current_answered():
            console.print(
                Text(f"Correct answer: {question.correct_text}", style="dim")
            )
        hint = "t <answer>, " + hint
    elif isinstance(question, MatchingQuestion):
        mapping = state.mapping if isinstance(state, MatchingAnswer) else {}
        console.print(
            _matching_table(
                question,
                controller.current_shuffle,
                mapping,
                controller.pending_left,
            )
        )
        hint = "l <n> then r <n> (pair), reset, " + hint
    elif isinstance(question, OrderingQuestion):
        order = state.order if isinstance(state, OrderingAnswer) else None
        console.print(_options_table(order or (), set()))
        hint = "u <n> / d <n> (move), " + hint

    if show_feedback:
        message = feedback_text(question, state)
        if message:
            style = "bold green" if controller.is_current_correct() else "bold red"
            console.print(Text(message, style=style))

    console.print(
        Text(
            f"Answered {controller.answered_count()}/"
            f"{controller.total_questions} | Commands: {hint}",
            style="dim",
        )
    )


def _options_table(options, selected: set) -> Table:
    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Option")
    for idx, option in enumerate(options):
        chosen = idx in selected
        row_text = Text("• " if chosen else "  ")
        row_text += Text(option, style="bold green" if chosen else "")
        table.add_row(str(idx + 1), row_text)
    return table


def _matching_table(
    question: MatchingQuestion,
    shuffle: object,
    mapping,
    pending_left: int | None,
) -> Table:
    table = Table(box=box.SIMPLE, expand=True)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Match these")
    table.add_column("Paired with")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("To these")
    entries = shuffle.entries if isinstance(shuffle, MatchingShuffle) else ()
    display_position = {
        entry.original_index: pos for pos, entry in enumerate(entries)
    }
    for idx, pair in enumerate(question.pairs):
        left = Text(pair.left, style="bold yellow" if idx == pending_left else "")
        paired = mapping.get(idx)
        paired_text = (
            f"→ {display_position[paired] + 1}" if paired is not None else ""
        )
        right = entries[idx].right if idx < len(entries) else ""
        table.add_row(str(idx + 1), left, paired_text, str(idx + 1), right)
    return table


def _render_summary(console: Console, controller: SessionController) -> None:
    report = controller.report()
    console.print()
    console.rule(Text("Quiz Completed!", style="bold magenta"))

    overview = Table(
        show_header=False,
        box=box.MINIMAL_DOUBLE_HEAD,
        expand=False,
    )
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Total questions", str(report.total))
    overview.add_row("Answered", str(report.answered))
    overview.add_row("Correct", str(report.correct))
    overview.add_row("Your Score", f"{controller.score}%")
    console.print(overview)

    responses = Table(title="Responses", box=box.SIMPLE, expand=True)
    responses.add_column("#", justify="right")
    responses.add_column("Question", overflow="fold")
    responses.add_column("Kind")
    responses.add_column("Result", justify="center")
    for idx, (question, outcome) in enumerate(
        zip(controller.quiz, report.outcomes), start=1
    ):
        responses.add_row(
            str(idx),
            question.prompt or f"Question {idx}",
            question.kind.value,
            "✅" if outcome.correct else "❌",
        )
    console.print(responses)
    console.print(
        Panel(
            "Type 'retake' to try again or 'quit' to leave.",
            title="Retake Quiz",
            border_style="cyan",
        )
    )
