"""
Grading rules shared by the question handlers.

- Quiz mode by rank (multiple choice for unfamiliar questions, free response after)
- Levenshtein edit distance for near-miss detection
- Similarity ordering of the answer pool for plausible distractors
- Rank promotion/demotion
"""

from __future__ import annotations

import heapq
from collections.abc import Iterable
from enum import Enum

from rapidfuzz.distance import Levenshtein

# Multiple-choice option counts by rank; ranks past the table use free response
CHOICE_COUNTS = {0: 4, 1: 8}
DEFAULT_FREE_RESPONSE_RANK = 2


class Outcome(str, Enum):
    """Result of asking one question."""
    CORRECT = "correct"
    WRONG = "wrong"
    EXIT = "exit"


class QuizMode(str, Enum):
    """How a question is asked."""
    MULTIPLE_CHOICE = "multiple_choice"
    FREE_RESPONSE = "free_response"


def choose_mode(rank: int, free_response_rank: int = DEFAULT_FREE_RESPONSE_RANK) -> tuple[QuizMode, int]:
    """
    Pick the quiz mode for a rank.

    Returns:
        (mode, option_count); option_count is 0 for free response
    """
    if rank >= free_response_rank:
        return QuizMode.FREE_RESPONSE, 0
    count = CHOICE_COUNTS.get(rank, max(CHOICE_COUNTS.values()))
    return QuizMode.MULTIPLE_CHOICE, count


def update_rank(rank: int, outcome: Outcome) -> int:
    """Promote on a correct answer, demote on a wrong one, never below zero."""
    if outcome is Outcome.CORRECT:
        return rank + 1
    if outcome is Outcome.WRONG:
        return max(0, rank - 1)
    return rank


def levenshtein(a: str, b: str) -> int:
    """Edit distance between two strings (insertions, deletions, substitutions)."""
    return Levenshtein.distance(a, b)


def rank_by_similarity(target: str, pool: Iterable[str], limit: int | None = None) -> list[str]:
    """
    Unique pool entries ordered from most to least similar to the target.

    Similarity is case-insensitive edit distance; ties keep pool order.

    Args:
        target: Text to compare against
        pool: Candidate strings (duplicates are dropped)
        limit: Keep only the closest ``limit`` entries
    """
    unique = list(dict.fromkeys(pool))

    def distance(candidate: str) -> int:
        return Levenshtein.distance(target, candidate, processor=str.lower)

    if limit is None:
        return sorted(unique, key=distance)
    return heapq.nsmallest(limit, unique, key=distance)
