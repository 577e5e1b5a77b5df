"""
Free response handler.

Exact match is correct. A near miss (small edit distance) asks the user
whether they meant the expected answer, which absorbs typos and small
phrasing differences; only an explicit "y" counts it as correct.
Anything further off is wrong without asking.
"""

from collections.abc import Callable

from rich.console import Console
from rich.markup import escape

from ..deck import Question
from ..grading import Outcome, QuizMode, levenshtein
from ..visuals import InputAborted, ask_confirm, ask_text, get_prompt, render_question_panel
from . import register
from .base import AnswerResult, AskContext


@register(QuizMode.FREE_RESPONSE)
class FreeResponseHandler:
    """Handler for typed answers."""

    def present(self, question: Question, console: Console) -> None:
        """Display the question."""
        render_question_panel(console, question.question, "FREE RESPONSE")

    def get_input(self, console: Console) -> str:
        """Read the typed answer."""
        return ask_text(console, get_prompt("free_response"))

    def check(
        self,
        correct_answer: str,
        response: str,
        confirm: Callable[[str], bool],
        near_miss_distance: int = 3,
    ) -> AnswerResult:
        """
        Grade a typed answer.

        Args:
            correct_answer: Expected answer
            response: What the user typed
            confirm: Asks whether a near miss was meant as the expected answer;
                may raise InputAborted
            near_miss_distance: Distances below this ask for confirmation

        Raises:
            InputAborted: If the confirmation prompt is aborted
        """
        if response == correct_answer:
            return AnswerResult(
                outcome=Outcome.CORRECT,
                user_answer=response,
                correct_answer=correct_answer,
                distance=0,
            )

        distance = levenshtein(response, correct_answer)
        if distance >= near_miss_distance:
            return AnswerResult(
                outcome=Outcome.WRONG,
                user_answer=response,
                correct_answer=correct_answer,
                distance=distance,
            )

        confirmed = confirm(correct_answer)
        return AnswerResult(
            outcome=Outcome.CORRECT if confirmed else Outcome.WRONG,
            user_answer=response,
            correct_answer=correct_answer,
            distance=distance,
            confirmed=confirmed,
        )

    def ask(self, question: Question, context: AskContext, console: Console) -> AnswerResult:
        """Present the question, read an answer and grade it."""
        self.present(question, console)

        def confirm(expected: str) -> bool:
            return ask_confirm(console, f"{get_prompt('confirm')} {escape(expected)}?", default=False)

        try:
            response = self.get_input(console)
            return self.check(question.answer, response, confirm, context.near_miss_distance)
        except InputAborted:
            return AnswerResult(
                outcome=Outcome.EXIT,
                user_answer="",
                correct_answer=question.answer,
            )
