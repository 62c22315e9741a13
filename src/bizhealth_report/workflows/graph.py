"""LangGraph workflow assembly for the end-to-end analysis pipeline."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from langgraph.graph import END, StateGraph

from bizhealth_report.domain.models.financials import BusinessProfile
from bizhealth_report.domain.models.session import AnalysisSession
from bizhealth_report.domain.services.analyst import FinancialAnalyst
from bizhealth_report.domain.services.data_quality import DataQualityChecker
from bizhealth_report.infrastructure.entitlements import ADVANCED_ANALYSIS, FeatureGate, StaticFeatureGate
from bizhealth_report.reports.renderer import ReportRenderer
from bizhealth_report.settings.config import Config
from bizhealth_report.utils.serialization import dumps
from bizhealth_report.workflows import context as context_module
from bizhealth_report.workflows.blueprint import StageSpec, build_default_stages
from bizhealth_report.workflows.state import AnalysisState

logger = logging.getLogger(__name__)

# Runtime objects kept in state that are not part of the persisted output
_TRANSIENT_KEYS = ("profile", "session", "report", "markdown_report")


class AnalysisWorkflow:
    """Compose LangGraph nodes into a runnable workflow."""

    def __init__(
        self,
        config: Config,
        feature_gate: Optional[FeatureGate] = None,
        analyst: Optional[FinancialAnalyst] = None,
    ) -> None:
        self._config = config
        self._context = context_module.WorkflowContext(
            config=config,
            analyst=analyst or FinancialAnalyst(),
            quality_checker=DataQualityChecker(),
            feature_gate=feature_gate or StaticFeatureGate(config.enabled_features),
            renderer=ReportRenderer(),
        )
        self._stages: List[StageSpec] = build_default_stages()
        self._graph = self._build_graph()

    @property
    def context(self) -> context_module.WorkflowContext:
        return self._context

    def _build_graph(self):
        builder = StateGraph(dict)

        if not self._stages:
            raise RuntimeError("Workflow blueprint is empty; cannot build LangGraph.")

        for stage in self._stages:
            builder.add_node(stage.key, self._wrap(stage))

        # Serialize execution in declared stage order to avoid concurrent state writes.
        builder.set_entry_point(self._stages[0].key)
        for current, nxt in zip(self._stages, self._stages[1:]):
            builder.add_edge(current.key, nxt.key)
        builder.add_edge(self._stages[-1].key, END)

        return builder.compile(checkpointer=None)

    def _wrap(self, stage: StageSpec) -> Callable[[Dict[str, Any]], Dict[str, Any]]:
        func = stage.handler

        def wrapper(state: Dict[str, Any]) -> Dict[str, Any]:
            if stage.advanced and not self._context.feature_gate(ADVANCED_ANALYSIS):
                state.setdefault("skipped_stages", []).append(stage.key)
                state.setdefault("logs", []).append(f"{stage.key} skipped: advanced analysis not enabled")
                return state
            logger.debug("Running stage %s", stage.key)
            return func(state, self._context)

        return wrapper

    def run(
        self,
        profile: BusinessProfile,
        session: Optional[AnalysisSession] = None,
        months: Optional[int] = None,
        *,
        as_of: Optional[datetime] = None,
    ) -> AnalysisState:
        """Execute the workflow for a single business profile.

        A fresh session is created when none is given; pass an existing one to
        analyze the new profile against earlier statements.
        """
        if session is None:
            session = AnalysisSession(business_id=profile.business_name, max_history=self._config.max_history)
        initial_state: AnalysisState = {
            "business_name": profile.business_name or "Business",
            "report_date": (as_of or datetime.now(timezone.utc)).date().isoformat(),
            "months": months or self._config.forecast_months,
            "as_of": as_of,
            "profile": profile,
            "session": session,
            "logs": [],
            "errors": [],
            "skipped_stages": [],
            "extras": {},
            "stage_order": [stage.key for stage in self._stages],
        }
        result: AnalysisState = self._graph.invoke(initial_state)
        return result  # type: ignore[return-value]

    def persist_state(self, state: AnalysisState, path: Path) -> None:
        """Serialize the workflow outputs to disk for auditing."""
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {k: v for k, v in state.items() if k not in _TRANSIENT_KEYS}
        path.write_text(dumps(payload), encoding="utf-8")

    def persist_markdown(self, markdown: str, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(markdown, encoding="utf-8")

    def describe_stages(self) -> List[str]:
        """Return human-readable workflow stage descriptions."""
        gate = self._context.feature_gate
        lines = []
        for stage in self._stages:
            suffix = ""
            if stage.advanced:
                suffix = " [advanced]" if gate(ADVANCED_ANALYSIS) else " [advanced, disabled]"
            lines.append(f"{stage.key}: {stage.description}{suffix}")
        return lines
