"""LangGraph node running the multi-method valuation."""
from __future__ import annotations

from bizhealth_report.workflows.context import WorkflowContext
from bizhealth_report.workflows.state import AnalysisState


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])
    errors = state.setdefault("errors", [])
    session = state.get("session")
    profile = state.get("profile")

    if session is None or profile is None or session.current is None:
        errors.append("ValuationAgent skipped because statement or profile is missing.")
        return state

    logs.append("ValuationAgent -> revenue, EBITDA, P/E, asset and DCF methods")
    try:
        result = context.analyst.valuate(
            session,
            profile,
            state.get("ratios"),
            health=state.get("health_score"),
            quality=state.get("data_quality"),
        )
    except Exception as exc:  # pylint: disable=broad-except
        errors.append(f"Valuation failed: {exc}")
        return state

    state["valuation"] = result
    logs.append(f"ValuationAgent -> estimate {result.estimated_value:,.0f}")
    return state
