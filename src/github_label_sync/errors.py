"""Error taxonomy for label sync.

The three failure families are kept distinct so callers can tell bad input from
a bad network from a failed write:

- ConfigurationError: the declared configuration is malformed. Never retried.
- FetchError: repository state could not be read.
- MutationError: a planned change could not be applied.
"""

from __future__ import annotations


class LabelSyncError(Exception):
    """Base class for all label sync errors."""


class ConfigurationError(LabelSyncError, ValueError):
    """Raised when a configuration violates a structural invariant."""

    def __init__(self, message: str, *, repository: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.repository = repository

    def __str__(self) -> str:
        message = super().__str__()
        if self.repository:
            return f"{self.repository}: {message}"
        return message


class FetchError(LabelSyncError):
    """Raised when the state of a repository could not be fetched."""

    def __init__(self, repository: str, message: str) -> None:
        super().__init__(message)
        self.repository = repository

    def __str__(self) -> str:
        return f"Failed to fetch {self.repository}: {super().__str__()}"


class MutationError(LabelSyncError):
    """Raised when a single planned operation could not be applied."""

    def __init__(self, repository: str, operation: str, message: str) -> None:
        super().__init__(message)
        self.repository = repository
        self.operation = operation

    def __str__(self) -> str:
        return f"{self.repository}: {self.operation} failed: {super().__str__()}"
