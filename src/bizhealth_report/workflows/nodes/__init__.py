"""Convenience re-exports for workflow nodes."""
from __future__ import annotations

from . import (
    cash_flow,
    data_quality,
    forecast,
    health,
    ratios,
    statement_build,
    trends,
    valuation,
    writing,
)

__all__ = [
    "cash_flow",
    "data_quality",
    "forecast",
    "health",
    "ratios",
    "statement_build",
    "trends",
    "valuation",
    "writing",
]
