"""
Question handlers for rankdrill sessions.

Each quiz mode has its own module with:
- present(): Display the question to the user
- get_input(): Get the user's answer
- check(): Grade the answer
- ask(): present, read and grade in one call
"""

from typing import TYPE_CHECKING

from ..grading import QuizMode

if TYPE_CHECKING:
    from .base import QuestionHandler


# Handler registry - populated by @register decorator
HANDLERS: dict[QuizMode, "QuestionHandler"] = {}


def register(mode: QuizMode):
    """Decorator to register a question handler."""
    def decorator(cls):
        HANDLERS[mode] = cls()
        return cls
    return decorator


def get_handler(mode: str | QuizMode) -> "QuestionHandler | None":
    """Get the handler for a quiz mode."""
    if isinstance(mode, str):
        try:
            mode = QuizMode(mode.lower())
        except ValueError:
            return None
    return HANDLERS.get(mode)


# Import handlers to trigger registration
from . import mcq  # noqa: E402
from . import free_response  # noqa: E402

__all__ = [
    "HANDLERS",
    "get_handler",
    "register",
]
