"""
Multiple choice handler.

- Options are the answers most similar to the correct one, so the
  distractors look plausible.
- The correct answer is always among them, in a shuffled position.
- The user picks an option by its 0-based index.
"""

import random

from rich.console import Console

from ..deck import Question
from ..grading import Outcome, QuizMode, rank_by_similarity
from ..visuals import InputAborted, ask_text, get_prompt, render_options, render_question_panel
from . import register
from .base import AnswerResult, AskContext


def build_options(
    answer: str,
    answer_pool: list[str],
    count: int,
    rng: random.Random | None = None,
) -> list[str]:
    """
    Pick ``count`` options: the correct answer plus its closest distractors.

    Fewer options are returned when the pool has fewer distinct answers.
    """
    distractors = rank_by_similarity(
        answer,
        (candidate for candidate in answer_pool if candidate != answer),
        limit=max(0, count - 1),
    )
    options = [answer] + distractors
    (rng or random).shuffle(options)
    return options


@register(QuizMode.MULTIPLE_CHOICE)
class MultipleChoiceHandler:
    """Handler for multiple choice questions."""

    def present(self, question: Question, options: list[str], console: Console) -> None:
        """Display the question and its numbered options."""
        render_question_panel(console, question.question, "MULTIPLE CHOICE")
        render_options(console, options)

    def get_input(self, options: list[str], console: Console) -> str:
        """Read the selected option number."""
        return ask_text(console, get_prompt("multiple_choice", f"[0-{len(options) - 1}]"))

    def check(self, options: list[str], correct_answer: str, selection: str) -> AnswerResult:
        """Compare the selected option's text with the correct answer."""
        choice = selection.strip()
        chosen = ""
        if choice.isdecimal() and int(choice) < len(options):
            chosen = options[int(choice)]

        # Out-of-range or non-numeric selections never match
        is_correct = choice.isdecimal() and chosen == correct_answer
        return AnswerResult(
            outcome=Outcome.CORRECT if is_correct else Outcome.WRONG,
            user_answer=chosen or choice,
            correct_answer=correct_answer,
        )

    def ask(self, question: Question, context: AskContext, console: Console) -> AnswerResult:
        """Present the options, read a selection and grade it."""
        options = build_options(question.answer, context.answer_pool, context.option_count)
        self.present(question, options, console)

        try:
            selection = self.get_input(options, console)
        except InputAborted:
            return AnswerResult(
                outcome=Outcome.EXIT,
                user_answer="",
                correct_answer=question.answer,
            )

        return self.check(options, question.answer, selection)
