"""
Base protocol and types for question handlers.
"""

from dataclasses import dataclass
from typing import Protocol

from rich.console import Console

from ..deck import Question
from ..grading import Outcome


@dataclass
class AnswerResult:
    """Result of asking one question."""
    outcome: Outcome
    user_answer: str
    correct_answer: str
    distance: int | None = None  # edit distance, free response only
    confirmed: bool = False  # True if the user confirmed a near miss

    @property
    def correct(self) -> bool:
        return self.outcome is Outcome.CORRECT

    @property
    def exited(self) -> bool:
        return self.outcome is Outcome.EXIT


@dataclass
class AskContext:
    """Everything a handler needs besides the question itself."""
    answer_pool: list[str]
    option_count: int = 4
    near_miss_distance: int = 3


class QuestionHandler(Protocol):
    """Protocol for quiz mode handlers."""

    def ask(self, question: Question, context: AskContext, console: Console) -> AnswerResult:
        """Present the question, read the answer and grade it."""
        ...
