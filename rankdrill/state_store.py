"""
Progress persistence for rankdrill.

The progress file is the only durable state. It records the rank of every
question above rank 0, the current iteration, and which questions were
already answered in that iteration so an interrupted session can resume.

File format (``user.json``):
    {"known": {"<set>/<id>": 2}, "iteration": 5, "answeredInIteration": ["<set>/<id>"]}
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from loguru import logger

from .errors import ProgressStoreError


@dataclass
class ProgressState:
    """Serializable progress state."""

    known: dict[str, int] = field(default_factory=dict)
    iteration: int = 0
    answered_in_iteration: list[str] = field(default_factory=list)

    def apply_ranks(self, ranks: Mapping[str, int]) -> None:
        """Record ranks, dropping any id whose rank is back to zero."""
        for question_id, rank in ranks.items():
            self.known[question_id] = rank
        self.known = {qid: rank for qid, rank in self.known.items() if rank > 0}

    def mark_answered(self, question_id: str) -> None:
        """Remember that a question was answered in the current iteration."""
        if question_id not in self.answered_in_iteration:
            self.answered_in_iteration.append(question_id)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "known": {qid: rank for qid, rank in self.known.items() if rank > 0},
            "iteration": self.iteration,
            "answeredInIteration": list(self.answered_in_iteration),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProgressState":
        """Create from dictionary; absent fields take their defaults."""
        known = data.get("known")
        known = {} if known is None else known
        answered = data.get("answeredInIteration")
        answered = [] if answered is None else answered
        iteration = data.get("iteration")
        return cls(
            known={str(qid): int(rank) for qid, rank in known.items()},
            iteration=0 if iteration is None else int(iteration),
            answered_in_iteration=list(dict.fromkeys(str(qid) for qid in answered)),
        )


class ProgressStore:
    """
    Manages the progress file.

    A missing file is created with default state on first load.
    """

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> ProgressState:
        """
        Load progress, creating a default file if none exists.

        Raises:
            ProgressStoreError: If the file exists but cannot be parsed
        """
        if not self.path.exists():
            logger.info(f"No progress file at {self.path}; starting fresh")
            state = ProgressState()
            self.save(state)
            return state

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise TypeError("top-level value must be an object")
            state = ProgressState.from_dict(data)
        except (OSError, json.JSONDecodeError, TypeError, ValueError, AttributeError) as e:
            raise ProgressStoreError(f"Could not read progress file {self.path}: {e}") from e

        logger.debug(
            f"Loaded progress: {len(state.known)} known, iteration {state.iteration}, "
            f"{len(state.answered_in_iteration)} answered in iteration"
        )
        return state

    def save(self, state: ProgressState) -> Path:
        """Save progress state to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(state.to_dict(), f, indent=2)

        logger.debug(f"Saved progress to {self.path}")
        return self.path

    def reset(self) -> bool:
        """Delete the progress file."""
        if self.path.exists():
            self.path.unlink()
            return True
        return False
