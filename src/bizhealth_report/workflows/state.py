"""Workflow state definitions shared by LangGraph nodes."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, TypedDict

from bizhealth_report.domain.models.financials import (
    AnalysisReport,
    BenchmarkScores,
    BusinessProfile,
    CashFlowAnalysis,
    DataQualityReport,
    FinancialForecast,
    FinancialHealthScore,
    FinancialRatios,
    FinancialStatement,
    TrendAnalysis,
)
from bizhealth_report.domain.models.session import AnalysisSession
from bizhealth_report.domain.models.valuation import ValuationResult


class AnalysisState(TypedDict, total=False):
    business_name: str
    report_date: str
    months: int
    as_of: Optional[datetime]
    profile: BusinessProfile
    session: AnalysisSession

    statement: Optional[FinancialStatement]
    data_quality: Optional[DataQualityReport]
    benchmarks: Optional[BenchmarkScores]
    ratios: Optional[FinancialRatios]
    trends: List[TrendAnalysis]
    health_score: Optional[FinancialHealthScore]
    cash_flow_analysis: Optional[CashFlowAnalysis]
    forecast: Optional[FinancialForecast]
    valuation: Optional[ValuationResult]
    report: Optional[AnalysisReport]
    markdown_report: Optional[str]

    stage_order: List[str]
    skipped_stages: List[str]
    logs: List[str]
    errors: List[str]

    extras: Dict[str, Any]
