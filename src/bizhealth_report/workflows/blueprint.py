"""Workflow blueprint describing analysis stages and their handlers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, TYPE_CHECKING

from bizhealth_report.workflows.nodes import (
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

if TYPE_CHECKING:
    from bizhealth_report.workflows.context import WorkflowContext
    from bizhealth_report.workflows.state import AnalysisState


@dataclass
class StageSpec:
    """Single LangGraph stage definition.

    ``advanced`` stages only run when the feature gate allows advanced analysis.
    """

    key: str
    description: str
    handler: Callable[["AnalysisState", "WorkflowContext"], "AnalysisState"]
    depends_on: List[str] = field(default_factory=list)
    advanced: bool = False


def build_default_stages() -> List[StageSpec]:
    """Return the ordered stages for the analysis workflow."""
    return [
        StageSpec(
            key="build_statement",
            description="Normalize the business profile into a statement and append it to the session.",
            handler=statement_build.run,
        ),
        StageSpec(
            key="data_quality",
            description="Check data quality of the raw profile and score it against industry benchmarks.",
            handler=data_quality.run,
        ),
        StageSpec(
            key="ratios",
            description="Compute profitability, liquidity, efficiency, leverage and growth ratios.",
            handler=ratios.run,
            depends_on=["build_statement"],
        ),
        StageSpec(
            key="trends",
            description="Compare the two latest statements for revenue, net income and cash flow.",
            handler=trends.run,
            depends_on=["build_statement"],
        ),
        StageSpec(
            key="health",
            description="Score the five categories, risk level and narrative.",
            handler=health.run,
            depends_on=["ratios"],
        ),
        StageSpec(
            key="cash_flow",
            description="Estimate cash flow breakdown, conversion cycle and predictability.",
            handler=cash_flow.run,
            depends_on=["build_statement"],
        ),
        StageSpec(
            key="forecast",
            description="Project revenue, profit and cash flow with scenario bands.",
            handler=forecast.run,
            depends_on=["ratios", "trends"],
            advanced=True,
        ),
        StageSpec(
            key="valuation",
            description="Blend revenue, EBITDA, P/E, asset and DCF valuations.",
            handler=valuation.run,
            depends_on=["ratios", "health", "data_quality"],
            advanced=True,
        ),
        StageSpec(
            key="writing",
            description="Assemble the analysis report and render Markdown.",
            handler=writing.run,
            depends_on=["health", "cash_flow", "forecast", "valuation"],
        ),
    ]
