"""LangGraph node normalizing the raw profile into a financial statement."""
from __future__ import annotations

from bizhealth_report.workflows.context import WorkflowContext
from bizhealth_report.workflows.state import AnalysisState


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])
    errors = state.setdefault("errors", [])
    profile = state.get("profile")
    session = state.get("session")

    if profile is None or session is None:
        errors.append("StatementBuilder skipped because no business profile was supplied.")
        return state

    logs.append("StatementBuilder -> normalize profile into statement")
    try:
        state["statement"] = context.analyst.import_business_data(session, profile, as_of=state.get("as_of"))
    except Exception as exc:  # pylint: disable=broad-except
        errors.append(f"Statement build failed: {exc}")
    return state
