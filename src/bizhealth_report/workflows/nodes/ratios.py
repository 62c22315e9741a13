"""LangGraph node deriving financial ratios."""
from __future__ import annotations

from bizhealth_report.workflows.context import WorkflowContext
from bizhealth_report.workflows.state import AnalysisState


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])
    errors = state.setdefault("errors", [])
    session = state.get("session")

    if session is None or session.current is None:
        errors.append("RatioCalcAgent skipped because no statement is available.")
        return state

    logs.append("RatioCalcAgent -> derive ratio set")
    try:
        state["ratios"] = context.analyst.ratios.calculate(session)
    except Exception as exc:  # pylint: disable=broad-except
        errors.append(f"Ratio calculation failed: {exc}")
    return state
