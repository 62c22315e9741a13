"""LangGraph node projecting revenue and profit scenarios."""
from __future__ import annotations

from bizhealth_report.workflows.context import WorkflowContext
from bizhealth_report.workflows.state import AnalysisState


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])
    errors = state.setdefault("errors", [])
    session = state.get("session")
    months = state.get("months") or context.config.forecast_months

    if session is None:
        errors.append("ForecastAgent skipped because no session is available.")
        return state

    logs.append(f"ForecastAgent -> project {months} months")
    try:
        state["forecast"] = context.analyst.forecaster.forecast(session, months)
    except Exception as exc:  # pylint: disable=broad-except
        errors.append(f"Forecast failed: {exc}")
    return state
