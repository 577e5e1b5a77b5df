"""
Set Deck: Question Set Loader.

Loads question sets from JSON files under a sets directory:
- Discovers every *.json file recursively
- Filters set files by a regular expression
- Loads matched files concurrently
- Expands reversible entries into forward/backward pairs

Set file format (JSON array):
    [{"id": "Q1", "q": "hola", "a": "hello", "r": true}, ...]
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterator, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from .errors import SetLoadError

REVERSED_SUFFIX = "_R"
DEFAULT_PATTERN = "."

# =============================================================================
# Question Data Class
# =============================================================================


@dataclass
class Question:
    """
    A single question loaded from a set file.

    ``rank`` is the mastery level: it picks the quiz mode and how often
    the question comes up for review.
    """

    id: str
    question: str
    answer: str
    rank: int = 0
    set_name: str = ""

    @property
    def is_reversed(self) -> bool:
        """Check if this question was generated from a reversible entry."""
        return self.id.endswith(REVERSED_SUFFIX)


# =============================================================================
# Parsing
# =============================================================================


def set_name_for(path: Path, sets_dir: Path) -> str:
    """Set name: path relative to the sets directory, without the .json suffix."""
    return path.relative_to(sets_dir).with_suffix("").as_posix()


def prettify_set_name(name: str) -> str:
    """
    Turn a set name into a display title.

    ``spanish/irregular_verbs`` becomes ``Spanish/Irregular Verbs``.
    """

    def capitalize(token: str) -> str:
        return token[:1].upper() + token[1:]

    spaced = " ".join(capitalize(token) for token in name.split("_"))
    return "/".join(capitalize(section) for section in spaced.split("/"))


def _require_text(entry: Mapping[str, Any], key: str, set_name: str, index: int) -> str:
    value = entry.get(key)
    if not isinstance(value, str):
        raise SetLoadError(
            f"Set '{set_name}' entry {index}: field '{key}' must be a string, got {value!r}"
        )
    return value


def parse_set(set_name: str, entries: Any) -> list[Question]:
    """
    Build questions from the raw JSON content of one set file.

    Args:
        set_name: Namespace for the question ids
        entries: Decoded JSON (must be a list of objects)

    Returns:
        Original questions in file order, followed by reversed variants

    Raises:
        SetLoadError: If the content does not follow the set format
    """
    if not isinstance(entries, list):
        raise SetLoadError(f"Set '{set_name}' must be a JSON array of questions")

    questions: list[Question] = []
    reversible: list[Question] = []

    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise SetLoadError(f"Set '{set_name}' entry {index} is not an object")

        raw_id = entry.get("id")
        local_id = f"Q{index}" if raw_id is None else str(raw_id)

        question = Question(
            id=f"{set_name}/{local_id}",
            question=_require_text(entry, "q", set_name, index),
            answer=_require_text(entry, "a", set_name, index),
            set_name=set_name,
        )
        questions.append(question)

        if entry.get("r"):
            reversible.append(question)

    # Only original entries are reversed; generated ones never recurse
    for original in reversible:
        questions.append(
            Question(
                id=original.id + REVERSED_SUFFIX,
                question=original.answer,
                answer=original.question,
                set_name=set_name,
            )
        )

    return questions


# =============================================================================
# Set Deck
# =============================================================================


class SetDeck:
    """
    Manages the questions of every matched set.

    Features:
    - Regex selection of set files
    - Concurrent loading (fan-out, join-all)
    - Answer pool for multiple-choice distractors
    """

    def __init__(
        self,
        sets_dir: Path,
        pattern: str = DEFAULT_PATTERN,
        max_workers: int = 8,
    ):
        """
        Initialize the deck.

        Args:
            sets_dir: Directory tree with set files
            pattern: Regular expression matched against set file paths
            max_workers: Threads used while loading

        Raises:
            re.error: If the pattern is not a valid regular expression
        """
        self.sets_dir = sets_dir
        self.matcher = re.compile(pattern)
        self.max_workers = max_workers

        self._questions: dict[str, Question] = {}
        self._set_names: list[str] = []

    @property
    def set_names(self) -> list[str]:
        """Names of the loaded sets, in load order."""
        return list(self._set_names)

    @property
    def titles(self) -> list[str]:
        """Display titles of the loaded sets."""
        return [prettify_set_name(name) for name in self._set_names]

    def discover(self) -> list[Path]:
        """Every set file under the sets directory whose path matches the pattern."""
        if not self.sets_dir.is_dir():
            logger.warning(f"Sets directory {self.sets_dir} does not exist")
            return []

        paths = sorted(path for path in self.sets_dir.rglob("*.json") if path.is_file())
        return [path for path in paths if self.matcher.search(path.as_posix())]

    def load(self, known: Mapping[str, int] | None = None) -> int:
        """
        Load every matched set file.

        Args:
            known: Persisted ranks by question id (missing ids start at 0)

        Returns:
            Number of questions loaded

        Raises:
            SetLoadError: If any matched file is unreadable or malformed
        """
        known = known or {}
        self._questions.clear()
        self._set_names.clear()

        paths = self.discover()
        if not paths:
            return 0

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            # map() preserves input order, so the merge is deterministic
            loaded = list(executor.map(self._load_file, paths))

        for path, questions in zip(paths, loaded):
            self._set_names.append(set_name_for(path, self.sets_dir))
            for question in questions:
                if question.id in self._questions:
                    logger.warning(f"Duplicate question id {question.id}; keeping the last one")
                question.rank = max(0, int(known.get(question.id, 0)))
                self._questions[question.id] = question

        logger.info(f"SetDeck loaded: {len(self._questions)} questions from {len(paths)} sets")
        return len(self._questions)

    def _load_file(self, path: Path) -> list[Question]:
        """Load and parse a single set file."""
        set_name = set_name_for(path, self.sets_dir)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SetLoadError(f"Failed to load {path}: {e}") from e

        questions = parse_set(set_name, data)
        logger.debug(f"Loaded {len(questions)} questions from {path}")
        return questions

    # =========================================================================
    # Access Methods
    # =========================================================================

    def get(self, question_id: str) -> Question | None:
        """Get a question by ID."""
        return self._questions.get(question_id)

    def get_all(self) -> list[Question]:
        """Get all questions."""
        return list(self._questions.values())

    def answer_pool(self) -> list[str]:
        """Every answer across all loaded questions, reversed ones included."""
        return [question.answer for question in self._questions.values()]

    def ranks(self) -> dict[str, int]:
        """Current rank of every loaded question."""
        return {qid: question.rank for qid, question in self._questions.items()}

    def __iter__(self) -> Iterator[Question]:
        return iter(self._questions.values())

    def __len__(self) -> int:
        return len(self._questions)

    def __contains__(self, question_id: str) -> bool:
        return question_id in self._questions
