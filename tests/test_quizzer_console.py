from __future__ import annotations

from rich.console import Console

from course_quiz.quizzer.console import (
    ConsoleSessionResult,
    SessionCommand,
    parse_session_command,
    run_console_session,
)

from fixtures import (
    ReversingRandom,
    build_quiz,
    fill_in_blank,
    matching,
    multi_select,
    multiple_choice,
    ordering,
)


def make_provider(commands: list[str]):
    iterator = iter(commands)

    def _provider() -> str:
        return next(iterator)

    return _provider


def make_console() -> Console:
    return Console(record=True, width=80, force_terminal=True)


def test_parse_session_command_variants() -> None:
    assert parse_session_command("2") == SessionCommand("choose", 2)
    assert parse_session_command("  Next ") == SessionCommand("next")
    assert parse_session_command("p") == SessionCommand("prev")
    assert parse_session_command("l 1") == SessionCommand("left", 1)
    assert parse_session_command("right 3") == SessionCommand("right", 3)
    assert parse_session_command("u 2") == SessionCommand("up", 2)
    assert parse_session_command("down 1") == SessionCommand("down", 1)
    assert parse_session_command("reset") == SessionCommand("reset")
    assert parse_session_command("retake") == SessionCommand("retake")
    assert parse_session_command("exit") == SessionCommand("quit")
    assert parse_session_command("t paris") == SessionCommand("text", text="paris")
    assert parse_session_command("type New York") == SessionCommand(
        "text", text="New York"
    )


def test_parse_session_command_rejects_noise() -> None:
    assert parse_session_command(None) is None
    assert parse_session_command("   ") is None
    assert parse_session_command("0") is None
    assert parse_session_command("r x") is None
    assert parse_session_command("n 2") is None
    assert parse_session_command("?unknown") is None


def test_console_session_full_run() -> None:
    console = make_console()
    quiz = build_quiz(multiple_choice(correct=2), fill_in_blank(text="Paris"))
    provider = make_provider(["3", "n", "t paris", "n", "quit"])

    result = run_console_session(quiz, console, provider, rng=ReversingRandom())

    assert isinstance(result, ConsoleSessionResult)
    assert result.exit_action == "completed"
    assert result.scores == [100]
    assert result.report.correct == 2
    rendered = console.export_text()
    assert "Correct!" in rendered
    assert "Quiz Completed!" in rendered
    assert "Your Score" in rendered
    assert "100%" in rendered
    assert "Retake Quiz" in rendered


def test_console_session_quit_before_finishing() -> None:
    console = make_console()
    quiz = build_quiz(multiple_choice())

    result = run_console_session(quiz, console, make_provider(["1", "quit"]))

    assert result.exit_action == "quit"
    assert result.scores == []
    assert result.report.answered == 1
    output = console.export_text()
    assert "Incorrect. Try reviewing the material." in output
    assert "Ending session without finishing." in output


def test_console_session_reports_rejected_input() -> None:
    console = make_console()
    quiz = build_quiz(multiple_choice())

    run_console_session(quiz, console, make_provider(["zzz", "n", "9", "quit"]))

    output = console.export_text()
    assert "Unrecognized command. Try again." in output
    assert output.count("That action is not available right now.") == 2


def test_console_session_hides_feedback_when_disabled() -> None:
    console = make_console()
    quiz = build_quiz(multi_select(correct=[1]))

    result = run_console_session(
        quiz,
        console,
        make_provider(["2", "quit"]),
        show_feedback=False,
    )

    assert result.report.correct == 1
    assert "Correct!" not in console.export_text()


def test_console_matching_uses_display_positions() -> None:
    console = make_console()
    quiz = build_quiz(matching())
    # Reversed display: 1 = Lima, 2 = Tokyo, 3 = Paris.
    commands = ["r 1", "l 1", "r 3", "l 2", "r 2", "l 3", "r 1", "n", "quit"]

    result = run_console_session(
        quiz, console, make_provider(commands), rng=ReversingRandom()
    )

    assert result.exit_action == "completed"
    assert result.scores == [100]
    assert "That action is not available right now." in console.export_text()


def test_console_ordering_moves_items() -> None:
    console = make_console()
    quiz = build_quiz(ordering(order=["a", "b", "c"]))
    commands = ["u 1", "d 1", "d 2", "d 1", "n", "quit"]

    result = run_console_session(
        quiz, console, make_provider(commands), rng=ReversingRandom()
    )

    assert result.scores == [100]


def test_console_retake_then_interrupt() -> None:
    console = make_console()
    quiz = build_quiz(multiple_choice(correct=0))

    result = run_console_session(
        quiz, console, make_provider(["1", "n", "retake"])
    )

    assert result.exit_action == "quit"
    assert result.scores == [100]
    assert result.report.answered == 0
    assert "Session interrupted." in console.export_text()


def test_console_interrupt_after_completion_keeps_result() -> None:
    console = make_console()
    quiz = build_quiz(multiple_choice(correct=0))

    result = run_console_session(quiz, console, make_provider(["1", "n"]))

    assert result.exit_action == "completed"
    assert result.scores == [100]
    assert "Session interrupted." in console.export_text()
