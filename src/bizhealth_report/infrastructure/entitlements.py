"""Feature gating for advanced analysis stages."""
from __future__ import annotations

from typing import FrozenSet, Iterable, Protocol

ADVANCED_ANALYSIS = "advanced_analysis"


class FeatureGate(Protocol):
    def __call__(self, feature: str) -> bool:
        ...


class StaticFeatureGate:
    """Allow a fixed set of features, typically read from configuration."""

    def __init__(self, enabled: Iterable[str] = (ADVANCED_ANALYSIS,)) -> None:
        self.enabled: FrozenSet[str] = frozenset(f.strip().lower() for f in enabled if f and f.strip())

    def __call__(self, feature: str) -> bool:
        return feature.lower() in self.enabled

    def __repr__(self) -> str:
        return f"StaticFeatureGate({sorted(self.enabled)!r})"
