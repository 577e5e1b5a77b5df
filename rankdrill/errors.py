"""
Exception hierarchy for rankdrill.
"""


class RankdrillError(Exception):
    """Base class for fatal, user-facing errors."""
    pass


class SetLoadError(RankdrillError):
    """Raised when a question-set file cannot be read or parsed."""
    pass


class ProgressStoreError(RankdrillError):
    """Raised when the progress file exists but cannot be read or parsed."""
    pass
