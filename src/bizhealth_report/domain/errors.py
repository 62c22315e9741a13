"""Exceptions raised by the analysis core."""
from __future__ import annotations


class AnalysisError(ValueError):
    """Base class for analysis failures caused by missing inputs."""


class NoStatementError(AnalysisError):
    """No explicit statement was passed and the session has no current one."""

    def __init__(self, message: str = "No financial statement available") -> None:
        super().__init__(message)


class InsufficientHistoryError(AnalysisError):
    """Fewer than two statements exist for a history-based calculation."""

    def __init__(self, available: int, required: int = 2) -> None:
        self.available = available
        self.required = required
        super().__init__(
            f"Need at least {required} financial statements for trend analysis (have {available})"
        )


class NoCurrentStatementError(AnalysisError):
    """A forecast was requested before any statement was imported."""

    def __init__(self, message: str = "No current financial statement available") -> None:
        super().__init__(message)
