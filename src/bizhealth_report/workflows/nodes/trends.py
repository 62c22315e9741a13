"""LangGraph node comparing the two latest statements."""
from __future__ import annotations

from bizhealth_report.domain.services.analyst import REPORT_TREND_METRICS
from bizhealth_report.workflows.context import WorkflowContext
from bizhealth_report.workflows.state import AnalysisState


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])
    errors = state.setdefault("errors", [])
    session = state.get("session")
    state["trends"] = []

    if session is None or len(session) < 2:
        logs.append("TrendAgent -> fewer than two statements, trends skipped")
        return state

    logs.append(f"TrendAgent -> compare {', '.join(REPORT_TREND_METRICS)}")
    for metric in REPORT_TREND_METRICS:
        try:
            state["trends"].append(context.analyst.trends.analyze(session, metric))
        except Exception as exc:  # pylint: disable=broad-except
            errors.append(f"Trend analysis failed for {metric}: {exc}")
    return state
