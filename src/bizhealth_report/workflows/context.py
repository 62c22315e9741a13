"""Workflow dependency container."""
from __future__ import annotations

from dataclasses import dataclass

from bizhealth_report.domain.services.analyst import FinancialAnalyst
from bizhealth_report.domain.services.data_quality import DataQualityChecker
from bizhealth_report.infrastructure.entitlements import FeatureGate
from bizhealth_report.reports.renderer import ReportRenderer
from bizhealth_report.settings.config import Config


@dataclass
class WorkflowContext:
    """Holds the services shared by LangGraph nodes."""

    config: Config
    analyst: FinancialAnalyst
    quality_checker: DataQualityChecker
    feature_gate: FeatureGate
    renderer: ReportRenderer
