"""CLI command definitions for the financial health report generator."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from bizhealth_report.domain.models.financials import BusinessProfile, FinancialStatement
from bizhealth_report.domain.models.session import AnalysisSession
from bizhealth_report.settings.config import Config
from bizhealth_report.settings.loader import load_settings
from bizhealth_report.utils.logging import configure_logging
from bizhealth_report.workflows.graph import AnalysisWorkflow
from bizhealth_report.workflows.state import AnalysisState

console = Console()
app = typer.Typer(help="Analyze small-business financial health from the terminal.")


@dataclass
class AppContext:
    """Holds reusable process-wide objects for CLI commands."""

    config: Config
    workflow: AnalysisWorkflow


def _init_context(
    debug_override: Optional[bool] = None,
    features_override: Optional[List[str]] = None,
) -> AppContext:
    """Create a context with configuration, logging, and workflow wiring."""
    config = load_settings(debug_override, features_override)
    configure_logging(debug=config.debug)
    workflow = AnalysisWorkflow(config=config)
    return AppContext(config=config, workflow=workflow)


@app.callback()
def main_callback(
    ctx: typer.Context,
    debug: Optional[bool] = typer.Option(
        None,
        "--debug/--no-debug",
        help="Temporarily toggle verbose logging without touching environment variables.",
    ),
    features: Optional[str] = typer.Option(
        None,
        "--features",
        help="Comma separated feature list overriding ENABLED_FEATURES; pass an empty string for basic analysis.",
    ),
) -> None:
    """Attach the lazily constructed application context to Typer."""
    override = features.split(",") if features is not None else None
    ctx.obj = _init_context(debug_override=debug, features_override=override)


@app.command()
def analyze(
    ctx: typer.Context,
    profile_path: Path = typer.Argument(..., help="Business profile JSON file."),
    history: Optional[Path] = typer.Option(
        None,
        "--history",
        help="JSON list of earlier statements to seed the session with.",
    ),
    months: Optional[int] = typer.Option(None, "--months", min=1, help="Forecast horizon in months."),
    json_path: Optional[Path] = typer.Option(None, "--json", help="Persist the analysis outputs to JSON."),
    markdown_path: Optional[Path] = typer.Option(
        None,
        "--markdown",
        help="Optional custom path for the rendered Markdown report.",
    ),
) -> None:
    """Run the analysis workflow for a single business profile."""
    if ctx.obj is None:
        raise typer.Exit(code=1)

    context: AppContext = ctx.obj
    profile = _load_profile(profile_path)
    session = AnalysisSession(business_id=profile.business_name, max_history=context.config.max_history)
    if history is not None:
        session.extend(_load_history(history))

    console.rule(f"Analyzing {profile.business_name or profile_path.stem}")
    with console.status("[bold cyan]Running workflow..."):
        result = context.workflow.run(profile, session=session, months=months)

    _report_errors(result)
    _print_run_summary(result)

    slug = _slug(profile.business_name or profile_path.stem)
    if json_path is not None:
        context.workflow.persist_state(result, json_path)
        console.print(f"State saved to {json_path}")

    if result.get("markdown_report"):
        context.config.ensure_directories()
        output_md = markdown_path or context.config.output_dir / f"{slug}.md"
        context.workflow.persist_markdown(result["markdown_report"], output_md)
        console.print(f"Markdown report available at {output_md}")


@app.command()
def batch(
    ctx: typer.Context,
    profiles: List[Path] = typer.Argument(..., help="One or more business profile JSON files."),
    months: Optional[int] = typer.Option(None, "--months", min=1, help="Forecast horizon in months."),
) -> None:
    """Run the workflow for multiple profiles sequentially, one session each."""
    if ctx.obj is None:
        raise typer.Exit(code=1)
    context: AppContext = ctx.obj
    for path in profiles:
        profile = _load_profile(path)
        console.rule(f"Batch analyzing {profile.business_name or path.stem}")
        result = context.workflow.run(profile, months=months)
        if result.get("markdown_report"):
            context.config.ensure_directories()
            output_md = context.config.output_dir / f"{_slug(profile.business_name or path.stem)}.md"
            context.workflow.persist_markdown(result["markdown_report"], output_md)
            console.print(f"Markdown report available at {output_md}")
        if result.get("errors"):
            console.print(f"[yellow]Completed with errors for {path}: {result['errors']}[/yellow]")


@app.command()
def plan(ctx: typer.Context) -> None:
    """Display the high-level workflow path for quick operator reference."""
    if ctx.obj is None:
        raise typer.Exit(code=1)

    context: AppContext = ctx.obj
    table = Table(title="Workflow Stages")
    table.add_column("Step", style="cyan")
    table.add_column("Description")

    for idx, step in enumerate(context.workflow.describe_stages(), start=1):
        table.add_row(str(idx), step)

    console.print(table)


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        console.print(f"[bold red]Cannot read {path}: {exc}[/bold red]")
        raise typer.Exit(code=1) from exc


def _load_profile(path: Path) -> BusinessProfile:
    data = _read_json(path)
    if not isinstance(data, dict):
        console.print(f"[bold red]{path} must contain a JSON object.[/bold red]")
        raise typer.Exit(code=1)
    return BusinessProfile.from_dict(data)


def _load_history(path: Path) -> List[FinancialStatement]:
    data = _read_json(path)
    if not isinstance(data, list):
        console.print(f"[bold red]{path} must contain a JSON list of statements.[/bold red]")
        raise typer.Exit(code=1)
    try:
        return [FinancialStatement.from_dict(item) for item in data]
    except (TypeError, ValueError) as exc:
        console.print(f"[bold red]Invalid statement in {path}: {exc}[/bold red]")
        raise typer.Exit(code=1) from exc


def _slug(name: str) -> str:
    cleaned = "".join(ch if ch.isalnum() else "_" for ch in name.strip().lower())
    return cleaned.strip("_") or "business"


def _report_errors(state: AnalysisState) -> None:
    if state.get("errors"):
        console.print("[bold red]Workflow completed with errors:[/bold red]")
        for issue in state["errors"]:
            console.print(f"- {issue}")
    else:
        console.print("[bold green]Workflow completed successfully.[/bold green]")


def _print_run_summary(state: AnalysisState) -> None:
    """Pretty-print a short run summary for operators."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Key")
    table.add_column("Value")

    health = state.get("health_score")
    forecast = state.get("forecast")
    valuation = state.get("valuation")
    quality = state.get("data_quality")
    benchmarks = state.get("benchmarks")
    session = state.get("session")

    table.add_row("Business", state.get("business_name") or "N/A")
    table.add_row("Report Date", state.get("report_date") or "N/A")
    table.add_row("Statements", str(len(session)) if session is not None else "0")
    table.add_row(
        "Health Score",
        f"{health.overall_score} ({health.risk_level.value})" if health is not None else "N/A",
    )
    table.add_row(
        "Forecast Revenue",
        f"{forecast.projected_revenue:,.0f}" if forecast is not None else "N/A",
    )
    table.add_row(
        "Estimated Value",
        f"{valuation.estimated_value:,.0f}" if valuation is not None else "N/A",
    )
    table.add_row("Data Quality", f"{quality.quality_score:.1f}" if quality is not None else "N/A")
    table.add_row(
        "Benchmark Score",
        f"{benchmarks.overall:.1f} ({benchmarks.trajectory.value.lower()})" if benchmarks is not None else "N/A",
    )
    table.add_row("Skipped", ", ".join(state.get("skipped_stages") or []) or "none")
    table.add_row("Markdown", "yes" if state.get("markdown_report") else "no")
    table.add_row("Errors", str(len(state.get("errors", []))))

    console.print(table)
