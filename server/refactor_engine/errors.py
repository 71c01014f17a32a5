"""
Exceptions raised by the refactoring engine.

NotApplicable results are never exceptions: refactors and code fixes return
``None`` or an empty list when the cursor does not sit on something they can
handle. The exceptions below signal contract violations.
"""

from typing import Tuple


class RefactorError(Exception):
    """Base exception for all engine errors."""
    pass


class OverlapError(RefactorError):
    """Raised when two edits recorded for the same file intersect."""

    def __init__(self, first: Tuple[int, int], second: Tuple[int, int]):
        self.first = first
        self.second = second
        super().__init__(
            f"Overlapping edits: [{first[0]}, {first[1]}) and [{second[0]}, {second[1]})"
        )


class InvalidActionError(RefactorError):
    """Raised when a refactor, action or fix id was never advertised."""

    def __init__(self, name: str, detail: str = ""):
        self.name = name
        message = f"Invalid action '{name}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class UnsupportedLanguageError(RefactorError):
    """Raised when no adapter handles a file's extension."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"No language adapter for '{path}'")
