"""Per-business statement history owned and passed around by the caller."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from bizhealth_report.domain.errors import InsufficientHistoryError
from bizhealth_report.domain.models.financials import FinancialStatement


@dataclass
class AnalysisSession:
    """Ordered statement history plus a pointer to the latest import.

    A session belongs to exactly one business. It is not synchronized:
    concurrent imports for the same business must be serialized by the caller.
    """

    business_id: Optional[str] = None
    history: List[FinancialStatement] = field(default_factory=list)
    current_index: Optional[int] = None
    max_history: Optional[int] = None

    @property
    def current(self) -> Optional[FinancialStatement]:
        if self.current_index is None or not self.history:
            return None
        return self.history[self.current_index]

    def __len__(self) -> int:
        return len(self.history)

    def append(self, statement: FinancialStatement) -> FinancialStatement:
        """Record a statement and make it the current one.

        Past ``max_history``, the earliest-dated older imports are evicted.
        The new statement always stays, even when it back-fills an older period.
        """
        self.history.append(statement)
        if self.max_history is not None and len(self.history) > self.max_history:
            self._evict_earliest(len(self.history) - self.max_history)
        self.current_index = len(self.history) - 1
        return statement

    def extend(self, statements: List[FinancialStatement]) -> None:
        for statement in statements:
            self.append(statement)

    def _evict_earliest(self, count: int) -> None:
        older = sorted(range(len(self.history) - 1), key=lambda i: self.history[i].date)
        evicted = set(older[:count])
        self.history = [s for i, s in enumerate(self.history) if i not in evicted]

    def sorted_history(self) -> List[FinancialStatement]:
        """Ascending by date; imports sharing a timestamp keep their import order."""
        return sorted(self.history, key=lambda s: s.date)

    def latest_pair(self) -> Tuple[FinancialStatement, FinancialStatement]:
        """Return ``(previous, latest)`` from the date-sorted history."""
        if len(self.history) < 2:
            raise InsufficientHistoryError(available=len(self.history))
        ordered = self.sorted_history()
        return ordered[-2], ordered[-1]
