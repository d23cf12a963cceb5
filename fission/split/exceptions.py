"""Split pipeline exceptions."""

from typing import Optional


class SplitError(Exception):
    """Base exception for split operations."""

    pass


class PlanGenerationError(SplitError):
    """The oracle did not return a usable plan."""

    pass


class PatchValidationError(SplitError):
    """Patches still failed validation after every retry."""

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class SplitExecutionError(SplitError):
    """Applying the patches failed part way through.

    Carries the partial SplitResult so callers can report which commits
    were created and where the remaining patches were saved.
    """

    def __init__(self, message: str, result=None):
        super().__init__(message)
        self.result = result
