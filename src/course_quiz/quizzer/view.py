import logging
import random
from typing import List, Optional

from textual import events
from textual.app import App, ComposeResult
from textual.widget import Widget
from textual.widgets import Button, Input, Static
from textual.containers import Container, Vertical

from .evaluator import feedback_text
from .models import (
    AnswerState,
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
    Question,
    QuizDefinition,
    TrueFalseQuestion,
)
from .recorder import Direction
from .session import QuizCompleted, SessionController
from .shuffle import DisplayShuffle, MatchingShuffle


class QuizApp(App):
    """Textual host for one quiz element.

    Leaving the app (terminal blur) and coming back discards the attempt, the
    same way the course screen restarts a quiz when it regains focus.
    """

    CSS_PATH = None
    CSS = """
#stage Button.selected { background: $accent; color: black; }
#stage Button.paired { border: tall $success; }
#footer { height: auto; }
"""
    BINDINGS = [
        ("n", "next", "Next"),
        ("p", "prev", "Prev"),
        ("r", "retake", "Retake"),
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        quiz: QuizDefinition,
        *,
        rng: Optional[random.Random] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__()
        self.scores: List[int] = []
        self.controller = SessionController(
            quiz, rng=rng, on_complete=self._record_score, logger=logger
        )
        self._away = False

    def compose(self) -> ComposeResult:
        with Container(id="stage"):
            yield self._stage_widget()
        with Container(id="footer"):
            yield Button("Prev", id="prev")
            yield Button("Next", id="next")
            yield Static(self._progress_text(), id="progress")

    def _record_score(self, event: QuizCompleted) -> None:
        self.scores.append(event.score)

    def _stage_widget(self) -> Widget:
        controller = self.controller
        if controller.is_completed:
            return SummaryView(controller.score or 0)
        return QuestionView(
            controller.current_question,
            controller.current_answer,
            controller.current_shuffle,
            index=controller.current_index + 1,
            total=controller.total_questions,
            pending_left=controller.pending_left,
            locked=controller.is_current_locked(),
        )

    def _progress_text(self) -> str:
        controller = self.controller
        if controller.is_completed:
            return f"Score: {controller.score}%"
        return (
            f"Answered: {controller.answered_count()}/"
            f"{controller.total_questions}"
        )

    def _update_stage(self) -> None:
        if not self.is_running:
            return
        stage = self.query_one("#stage", Container)
        stage.remove_children()
        stage.mount(self._stage_widget())
        self.query_one("#progress", Static).update(self._progress_text())

    # Focus handling drives the reset-on-reentry rule.
    def on_app_blur(self, event: events.AppBlur) -> None:
        self._away = True

    def on_app_focus(self, event: events.AppFocus) -> None:
        if self._away:
            self._away = False
            self.controller.on_reentry()
            self._update_stage()

    def action_next(self) -> None:
        if self.controller.next():
            self._update_stage()

    def action_prev(self) -> None:
        if self.controller.previous():
            self._update_stage()

    def action_retake(self) -> None:
        if self.controller.retake():
            self._update_stage()

    def handle_button(self, button_id: str) -> bool:
        """Translate a pressed button id into a controller action."""

        controller = self.controller
        if button_id == "next":
            return controller.next()
        if button_id == "prev":
            return controller.previous()
        if button_id == "retake":
            return controller.retake()
        if button_id == "reset-matching":
            return controller.reset_matching()
        action, _, raw = button_id.rpartition("-")
        if not raw.isdigit():
            return False
        index = int(raw)
        if action == "option":
            if isinstance(controller.current_question, MultiSelectQuestion):
                return controller.toggle(index)
            return controller.select(index)
        if action == "left":
            return controller.select_left(index)
        if action == "right":
            return controller.pair_right(index)
        if action == "up":
            return controller.move(index, Direction.UP)
        if action == "down":
            return controller.move(index, Direction.DOWN)
        return False

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = getattr(event.button, "id", "") or ""
        if self.handle_button(bid):
            self._update_stage()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if self.controller.set_text(event.value):
            self._update_stage()


class QuestionView(Widget):
    """Render one question with controls that match its kind."""

    def __init__(
        self,
        question: Question,
        answer: AnswerState,
        shuffle: Optional[DisplayShuffle],
        *,
        index: int,
        total: int,
        pending_left: Optional[int] = None,
        locked: bool = False,
    ) -> None:
        super().__init__()
        self.question = question
        self.answer = answer
        self.shuffle = shuffle
        self.index = index
        self.total = total
        self.pending_left = pending_left
        self.locked = locked

    def compose(self) -> ComposeResult:
        yield Static(f"{self.index}/{self.total}", id="progress-label")
        yield Static(self.question.prompt, id="prompt")
        with Vertical(id="controls"):
            for widget in self.control_widgets():
                yield widget
        yield Static(self.feedback() or "", id="feedback")

    def feedback(self) -> Optional[str]:
        return feedback_text(self.question, self.answer)

    def control_widgets(self) -> List[Widget]:
        question = self.question
        answer = self.answer
        if isinstance(question, (MultipleChoiceQuestion, TrueFalseQuestion)):
            selected = (
                {answer.selected} if isinstance(answer, ChoiceAnswer) else set()
            )
            return self._option_buttons(question.options, selected)
        if isinstance(question, MultiSelectQuestion):
            selected = (
                set(answer.selected)
                if isinstance(answer, MultiSelectAnswer)
                else set()
            )
            return self._option_buttons(question.options, selected)
        if isinstance(question, FillInBlankQuestion):
            text = answer.text if isinstance(answer, FillInBlankAnswer) else None
            widgets: List[Widget] = [
                Input(
                    value=text or "",
                    placeholder="Type your answer...",
                    id="answer-text",
                    disabled=self.locked,
                )
            ]
            if self.locked:
                widgets.append(
                    Static(
                        f"Correct answer: {question.correct_text}",
                        id="correct-text",
                    )
                )
            return widgets
        if isinstance(question, MatchingQuestion):
            return self._matching_buttons(question, answer)
        if isinstance(question, OrderingQuestion):
            order = answer.order if isinstance(answer, OrderingAnswer) else None
            widgets = []
            for idx, item in enumerate(order or ()):
                widgets.append(Static(f"{idx + 1}. {item}", id=f"item-{idx}"))
                widgets.append(Button("Up", id=f"up-{idx}"))
                widgets.append(Button("Down", id=f"down-{idx}"))
            return widgets
        return []

    def _option_buttons(self, options, selected) -> List[Widget]:
        buttons: List[Widget] = []
        for idx, option in enumerate(options):
            btn = Button(option, id=f"option-{idx}", disabled=self.locked)
            if idx in selected:
                btn.add_class("selected")
            buttons.append(btn)
        return buttons

    def _matching_buttons(
        self, question: MatchingQuestion, answer: AnswerState
    ) -> List[Widget]:
        mapping = answer.mapping if isinstance(answer, MatchingAnswer) else {}
        widgets: List[Widget] = []
        for idx, pair in enumerate(question.pairs):
            btn = Button(pair.left, id=f"left-{idx}", disabled=self.locked)
            if idx == self.pending_left:
                btn.add_class("selected")
            if idx in mapping:
                btn.add_class("paired")
            widgets.append(btn)
        entries = (
            self.shuffle.entries
            if isinstance(self.shuffle, MatchingShuffle)
            else ()
        )
        paired_right = set(mapping.values())
        for entry in entries:
            btn = Button(
                entry.right,
                id=f"right-{entry.original_index}",
                disabled=self.locked,
            )
            if entry.original_index in paired_right:
                btn.add_class("paired")
            widgets.append(btn)
        if not self.locked:
            widgets.append(Button("Reset", id="reset-matching"))
        return widgets


class SummaryView(Widget):
    """Completion screen with the score and a retake button."""

    def __init__(self, score: int) -> None:
        super().__init__()
        self.score = score

    def compose(self) -> ComposeResult:
        yield Static("Quiz Completed!", id="title")
        yield Static(f"Your Score: {self.score}%", id="score")
        yield Button("Retake Quiz", id="retake")
