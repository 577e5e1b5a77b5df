"""
Iteration Scheduler.

Rank works as a spacing exponent: a question is due in iteration ``i``
when ``i % 2**rank == 0``. Rank 0 is due every iteration, rank 1 every
second one, rank 2 every fourth, and so on.

Within an iteration the due questions are shuffled afresh, and questions
already answered before an interruption are skipped until the next one.
"""

from __future__ import annotations

import random
from collections.abc import Iterable
from dataclasses import dataclass, field

from loguru import logger

from .deck import Question
from .state_store import ProgressState


def is_due(rank: int, iteration: int) -> bool:
    """Check if a question of this rank is due in the iteration."""
    return iteration % (2 ** max(0, rank)) == 0


def due_questions(questions: Iterable[Question], iteration: int) -> list[Question]:
    """Questions due in the iteration, in input order."""
    return [q for q in questions if is_due(q.rank, iteration)]


def progress_percent(answered: int, due_total: int) -> float:
    """Completion of the current iteration as a percentage."""
    if due_total <= 0:
        return 100.0
    return 100.0 * answered / due_total


@dataclass
class IterationPlan:
    """The questions for one iteration."""

    iteration: int
    due: list[Question] = field(default_factory=list)
    queue: list[Question] = field(default_factory=list)

    @property
    def due_count(self) -> int:
        return len(self.due)

    @property
    def already_answered(self) -> int:
        """Due questions answered before the session was interrupted."""
        return len(self.due) - len(self.queue)

    @property
    def is_empty(self) -> bool:
        return not self.queue


def plan_iteration(
    questions: Iterable[Question],
    state: ProgressState,
    rng: random.Random | None = None,
) -> IterationPlan:
    """
    Build the plan for the state's current iteration.

    Answered ids that are no longer due are dropped from the state so the
    answered list stays a subset of the due set.

    Args:
        questions: Every loaded question
        state: Progress state (iteration and answered list)
        rng: Random source for the shuffle

    Returns:
        IterationPlan with a shuffled due list and the remaining queue
    """
    rng = rng or random.Random()

    due = due_questions(questions, state.iteration)
    rng.shuffle(due)

    due_ids = {q.id for q in due}
    stale = [qid for qid in state.answered_in_iteration if qid not in due_ids]
    if stale:
        logger.debug(f"Dropping {len(stale)} answered ids no longer due")
        state.answered_in_iteration = [
            qid for qid in state.answered_in_iteration if qid in due_ids
        ]

    answered = set(state.answered_in_iteration)
    queue = [q for q in due if q.id not in answered]

    logger.info(
        f"Iteration {state.iteration}: {len(due)} due, "
        f"{len(due) - len(queue)} already answered"
    )
    return IterationPlan(iteration=state.iteration, due=due, queue=queue)


def complete_iteration(state: ProgressState) -> int:
    """Close the current iteration and return the new iteration number."""
    state.answered_in_iteration.clear()
    state.iteration += 1
    logger.debug(f"Advanced to iteration {state.iteration}")
    return state.iteration
