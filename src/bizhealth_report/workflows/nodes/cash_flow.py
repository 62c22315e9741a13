"""LangGraph node estimating the cash flow breakdown."""
from __future__ import annotations

from bizhealth_report.workflows.context import WorkflowContext
from bizhealth_report.workflows.state import AnalysisState


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])
    errors = state.setdefault("errors", [])
    session = state.get("session")

    if session is None or session.current is None:
        errors.append("CashFlowAgent skipped because no statement is available.")
        return state

    logs.append("CashFlowAgent -> estimate operating, investing and financing flows")
    try:
        state["cash_flow_analysis"] = context.analyst.cash_flow.analyze(session)
    except Exception as exc:  # pylint: disable=broad-except
        errors.append(f"Cash flow analysis failed: {exc}")
    return state
