"""LangGraph node scoring financial health from the ratio set."""
from __future__ import annotations

from bizhealth_report.workflows.context import WorkflowContext
from bizhealth_report.workflows.state import AnalysisState


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])
    errors = state.setdefault("errors", [])
    ratios = state.get("ratios")

    if ratios is None:
        errors.append("HealthAgent skipped because ratios are missing.")
        return state

    logs.append("HealthAgent -> score categories and risk level")
    try:
        health = context.analyst.health.score(ratios)
    except Exception as exc:  # pylint: disable=broad-except
        errors.append(f"Health scoring failed: {exc}")
        return state

    state["health_score"] = health
    logs.append(f"HealthAgent -> overall {health.overall_score} ({health.risk_level.value})")
    return state
