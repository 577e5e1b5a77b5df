"""
Study Session: orchestration of the quiz loop.

State machine:
    LOADING -> ITERATING -> (ASKING <-> GRADING) -> ITERATION_COMPLETE
            -> ITERATING (continue) | SAVED (exit)

Progress is written only at the exit points: an aborted prompt at any
depth, or declining to continue after an iteration.

Architecture:
- Loading -> rankdrill.deck
- Persistence -> rankdrill.state_store
- Scheduling -> rankdrill.scheduler
- Grading -> rankdrill.atoms (handlers) and rankdrill.grading
- Rendering -> rankdrill.visuals
"""

from __future__ import annotations

import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from loguru import logger
from rich.console import Console

from .atoms import get_handler
from .atoms.base import AnswerResult, AskContext
from .config import Settings, get_settings
from .deck import Question, SetDeck
from .grading import choose_mode, update_rank
from .scheduler import complete_iteration, plan_iteration, progress_percent
from .state_store import ProgressState, ProgressStore
from . import visuals as ui


class SessionPhase(str, Enum):
    """Where the session is in its loop."""
    LOADING = "loading"
    ITERATING = "iterating"
    ASKING = "asking"
    GRADING = "grading"
    ITERATION_COMPLETE = "iteration_complete"
    SAVED = "saved"


@dataclass
class SessionSummary:
    """What happened during one run."""

    answered: int = 0
    correct: int = 0
    wrong: int = 0
    iterations_completed: int = 0
    exited_early: bool = False

    @property
    def accuracy_percent(self) -> float:
        if not self.answered:
            return 0.0
        return 100.0 * self.correct / self.answered


class StudySession:
    """
    Orchestrator for the study loop.

    Owns the progress state for the lifetime of the run; the store is
    only touched when loading and when saving on exit.
    """

    def __init__(
        self,
        deck: SetDeck,
        store: ProgressStore,
        settings: Settings | None = None,
        console: Console | None = None,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.deck = deck
        self.store = store
        self.settings = settings or get_settings()
        self.console = console or Console()
        self.rng = rng or random.Random()
        self.sleep = sleep

        self.phase = SessionPhase.LOADING
        self.state = ProgressState()
        self.summary = SessionSummary()
        self._answer_pool: list[str] = []

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def load(self) -> int:
        """
        Load progress and questions.

        Returns:
            Number of questions loaded
        """
        self.phase = SessionPhase.LOADING
        self.state = self.store.load()
        loaded = self.deck.load(self.state.known)
        self._answer_pool = self.deck.answer_pool()
        return loaded

    def save(self) -> None:
        """Persist current ranks and resume state."""
        self.state.apply_ranks(self.deck.ranks())
        self.store.save(self.state)
        self.phase = SessionPhase.SAVED
        logger.info(
            f"Saved progress: iteration {self.state.iteration}, "
            f"{len(self.state.answered_in_iteration)} answered in iteration"
        )

    def run(self) -> SessionSummary:
        """
        Quiz until the user exits.

        Returns:
            SessionSummary for the run
        """
        ui.render_session_banner(self.console, self.deck.titles)

        while True:
            self.phase = SessionPhase.ITERATING
            plan = plan_iteration(self.deck.get_all(), self.state, self.rng)
            answered = plan.already_answered

            if not plan.due:
                self.console.print(f"[dim]Nothing due in iteration {plan.iteration}.[/dim]")

            for question in plan.queue:
                self.console.clear()
                ui.render_progress(self.console, progress_percent(answered, plan.due_count))

                self.phase = SessionPhase.ASKING
                result = self.ask(question)

                if result.exited:
                    logger.info(f"Input aborted at {question.id}; saving and exiting")
                    self.summary.exited_early = True
                    self.save()
                    return self.summary

                self.phase = SessionPhase.GRADING
                self.grade(question, result)
                answered += 1

                self.sleep(self.settings.feedback_delay)

            self.phase = SessionPhase.ITERATION_COMPLETE
            complete_iteration(self.state)
            self.summary.iterations_completed += 1

            try:
                leave = ui.ask_confirm(self.console, "This iteration is complete. Exit?", default=False)
            except ui.InputAborted:
                leave = True

            if leave:
                self.save()
                return self.summary

    # =========================================================================
    # Steps
    # =========================================================================

    def ask(self, question: Question) -> AnswerResult:
        """Ask one question in the mode its rank calls for."""
        mode, option_count = choose_mode(question.rank, self.settings.free_response_rank)
        handler = get_handler(mode)
        context = AskContext(
            answer_pool=self._answer_pool,
            option_count=option_count,
            near_miss_distance=self.settings.near_miss_distance,
        )
        logger.debug(f"Asking {question.id} (rank {question.rank}) as {mode.value}")
        return handler.ask(question, context, self.console)

    def grade(self, question: Question, result: AnswerResult) -> None:
        """Record the answer, update the rank and show feedback."""
        self.state.mark_answered(question.id)

        previous = question.rank
        question.rank = update_rank(question.rank, result.outcome)

        self.summary.answered += 1
        if result.correct:
            self.summary.correct += 1
        else:
            self.summary.wrong += 1

        logger.debug(f"{question.id}: {result.outcome.value}, rank {previous} -> {question.rank}")
        ui.render_feedback(
            self.console,
            result.correct,
            None if result.correct else result.correct_answer,
        )
