"""Facade tying the calculation services together into one analysis report."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from bizhealth_report.domain.constants import DEFAULT_CONSTANTS, EstimationConstants
from bizhealth_report.domain.errors import NoStatementError
from bizhealth_report.domain.models.financials import (
    AnalysisReport,
    BusinessProfile,
    DataQualityReport,
    FinancialHealthScore,
    FinancialRatios,
    FinancialStatement,
    TrendAnalysis,
)
from bizhealth_report.domain.models.session import AnalysisSession
from bizhealth_report.domain.models.valuation import ValuationInput, ValuationResult
from bizhealth_report.domain.services.benchmarks import BenchmarkScorer
from bizhealth_report.domain.services.calculations import (
    CashFlowAnalyzer,
    ForecastEngine,
    RatioCalculator,
    StatementBuilder,
    TrendAnalyzer,
)
from bizhealth_report.domain.services.health import HealthScorer
from bizhealth_report.domain.services.valuation import ValuationEngine

logger = logging.getLogger(__name__)

REPORT_TREND_METRICS = ("revenue", "net_income", "cash_flow")


class FinancialAnalyst:
    """Run every analysis over a caller-owned session."""

    def __init__(
        self,
        constants: EstimationConstants = DEFAULT_CONSTANTS,
        valuation_engine: Optional[ValuationEngine] = None,
    ) -> None:
        self.constants = constants
        self.builder = StatementBuilder(constants)
        self.ratios = RatioCalculator(constants)
        self.trends = TrendAnalyzer(constants)
        self.cash_flow = CashFlowAnalyzer(constants)
        self.forecaster = ForecastEngine(constants, self.ratios, self.trends)
        self.health = HealthScorer(self.ratios)
        self.benchmarks = BenchmarkScorer()
        self.valuation = valuation_engine or ValuationEngine()

    def import_business_data(
        self,
        session: AnalysisSession,
        profile: BusinessProfile,
        as_of: Optional[datetime] = None,
    ) -> FinancialStatement:
        return self.builder.import_profile(session, profile, as_of=as_of)

    def generate_report(
        self,
        session: AnalysisSession,
        profile: Optional[BusinessProfile] = None,
        months: int = 12,
        quality: Optional[DataQualityReport] = None,
    ) -> AnalysisReport:
        statement = session.current
        if statement is None:
            raise NoStatementError()

        ratios = self.ratios.calculate(session, statement)
        health = self.health.score(ratios)
        trends: List[TrendAnalysis] = []
        if len(session) >= 2:
            trends = [self.trends.analyze(session, metric) for metric in REPORT_TREND_METRICS]

        valuation = None
        benchmarks = None
        if profile is not None:
            valuation = self.valuate(session, profile, ratios, health=health, quality=quality)
            benchmarks = self.benchmarks.score(profile, quality=quality, today=statement.date.date())

        logger.debug("Report generated for %s", session.business_id or "business")
        return AnalysisReport(
            statement=statement,
            ratios=ratios,
            health_score=health,
            cash_flow_analysis=self.cash_flow.analyze(session, statement),
            forecast=self.forecaster.forecast(session, months),
            trends=trends,
            data_quality=quality,
            valuation=valuation,
            benchmarks=benchmarks,
        )

    def valuate(
        self,
        session: AnalysisSession,
        profile: BusinessProfile,
        ratios: Optional[FinancialRatios] = None,
        health: Optional[FinancialHealthScore] = None,
        quality: Optional[DataQualityReport] = None,
    ) -> ValuationResult:
        """Value the current statement, dated by the statement itself.

        Previous-year revenue comes from the profile, else from the prior
        statement in the session.
        """
        statement = session.current
        if statement is None:
            raise NoStatementError()
        if ratios is None:
            ratios = self.ratios.calculate(session, statement)
        previous_revenue = profile.previous_year_revenue
        if previous_revenue is None and len(session) >= 2:
            previous_revenue = session.latest_pair()[0].revenue
        data = ValuationInput.from_analysis(
            profile,
            statement,
            ratios,
            previous_revenue=previous_revenue,
            evaluation_date=statement.date.date(),
        )
        return self.valuation.run(data, health=health, quality=quality)
