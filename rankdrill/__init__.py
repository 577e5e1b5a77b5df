"""
rankdrill: rank-based spaced repetition flashcards for the terminal.

Components:
- SetDeck: question-set loading and reversal expansion
- ProgressStore: JSON persistence of ranks and resume state
- Scheduler: due rule and per-iteration plans
- Handlers: multiple choice and free response grading
- StudySession: the quiz loop
"""

from .deck import Question, SetDeck
from .grading import Outcome, QuizMode
from .scheduler import IterationPlan, is_due, plan_iteration
from .session import SessionSummary, StudySession
from .state_store import ProgressState, ProgressStore

__version__ = "1.0.0"

__all__ = [
    # Loading
    "SetDeck",
    "Question",
    # Persistence
    "ProgressStore",
    "ProgressState",
    # Scheduling
    "IterationPlan",
    "is_due",
    "plan_iteration",
    # Grading
    "Outcome",
    "QuizMode",
    # Session
    "StudySession",
    "SessionSummary",
]
