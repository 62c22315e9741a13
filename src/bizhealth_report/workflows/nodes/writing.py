"""LangGraph node responsible for report assembly and Markdown rendering."""
from __future__ import annotations

from datetime import datetime, timezone

from bizhealth_report.domain.models.financials import AnalysisReport
from bizhealth_report.workflows.context import WorkflowContext
from bizhealth_report.workflows.state import AnalysisState

_REQUIRED = ("statement", "ratios", "health_score", "cash_flow_analysis")


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])
    errors = state.setdefault("errors", [])

    missing = [key for key in _REQUIRED if state.get(key) is None]
    if missing:
        errors.append(f"WritingAgent skipped because {', '.join(missing)} missing.")
        return state

    logs.append("WritingAgent -> assemble report and render Markdown")
    report = AnalysisReport(
        statement=state["statement"],
        ratios=state["ratios"],
        health_score=state["health_score"],
        cash_flow_analysis=state["cash_flow_analysis"],
        forecast=state.get("forecast"),
        trends=list(state.get("trends") or []),
        data_quality=state.get("data_quality"),
        valuation=state.get("valuation"),
        benchmarks=state.get("benchmarks"),
    )
    state["report"] = report

    render_context = {
        "business_name": state.get("business_name") or "Business",
        "report_date": state.get("report_date") or datetime.now(timezone.utc).date().isoformat(),
        "statement": report.statement,
        "ratios": report.ratios,
        "health": report.health_score,
        "cash_flow": report.cash_flow_analysis,
        "forecast": report.forecast,
        "trends": report.trends,
        "valuation": report.valuation,
        "data_quality": report.data_quality,
        "benchmarks": report.benchmarks,
        "skipped_stages": state.get("skipped_stages") or [],
    }
    try:
        state["markdown_report"] = context.renderer.render(render_context)
    except Exception as exc:  # pylint: disable=broad-except
        errors.append(f"Markdown rendering failed: {exc}")
    return state
