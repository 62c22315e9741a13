"""LangGraph node running advisory data-quality checks and benchmark scoring on the raw profile."""
from __future__ import annotations

from bizhealth_report.workflows.context import WorkflowContext
from bizhealth_report.workflows.state import AnalysisState


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])
    errors = state.setdefault("errors", [])
    profile = state.get("profile")

    if profile is None:
        return state

    statement = state.get("statement")
    today = statement.date.date() if statement is not None else None

    logs.append("DataQualityAgent -> completeness, outliers, consistency")
    try:
        report = context.quality_checker.assess(profile, today=today)
    except Exception as exc:  # pylint: disable=broad-except
        errors.append(f"Data quality check failed: {exc}")
        return state

    state["data_quality"] = report
    for tag in report.outliers + report.inconsistencies:
        logs.append(f"DataQualityAgent -> flagged {tag}")

    logs.append("BenchmarkAgent -> financial and growth dimensions")
    try:
        benchmarks = context.analyst.benchmarks.score(profile, quality=report, today=today)
    except Exception as exc:  # pylint: disable=broad-except
        errors.append(f"Benchmark scoring failed: {exc}")
        return state

    state["benchmarks"] = benchmarks
    logs.append(
        f"BenchmarkAgent -> overall {benchmarks.overall:.1f} ({benchmarks.trajectory.value.lower()})"
    )
    return state
