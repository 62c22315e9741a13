"""Domain service layer providing financial calculations.

This module implements:
- Statement normalization from a raw business profile (fixed heuristics)
- A set of 17 profitability/liquidity/efficiency/leverage/growth ratios
- Trend and volatility classification over the statement history
- Cash flow estimates and a simple revenue/profit forecast with scenarios

Every division goes through :func:`safe_divide`, which returns ``0.0`` for a
zero denominator, so NaN or infinity never reaches a caller.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from bizhealth_report.domain.constants import DEFAULT_CONSTANTS, EstimationConstants
from bizhealth_report.domain.errors import (
    InsufficientHistoryError,
    NoCurrentStatementError,
    NoStatementError,
)
from bizhealth_report.domain.models.financials import (
    STATEMENT_METRICS,
    BusinessProfile,
    CashFlowAnalysis,
    CashFlowPredictability,
    FinancialForecast,
    FinancialRatios,
    FinancialStatement,
    ScenarioAnalysis,
    ScenarioOutcome,
    Trend,
    TrendAnalysis,
    Volatility,
    snake_key,
)
from bizhealth_report.domain.models.session import AnalysisSession

logger = logging.getLogger(__name__)


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide, returning 0.0 when the denominator is zero."""
    if denominator == 0:
        return 0.0
    return numerator / denominator


class StatementBuilder:
    """Turn a raw, possibly incomplete business profile into a full statement."""

    def __init__(self, constants: EstimationConstants = DEFAULT_CONSTANTS) -> None:
        self.constants = constants

    def build(self, profile: BusinessProfile, as_of: Optional[datetime] = None) -> FinancialStatement:
        c = self.constants
        revenue = float(profile.annual_revenue or 0.0)
        is_service = "service" in (profile.business_type or "").lower()
        gross_profit = revenue * (c.service_gross_margin if is_service else c.default_gross_margin)
        operating_expenses = revenue * c.operating_expense_ratio
        net_income = float(profile.monthly_profit * c.months_per_year) if profile.monthly_profit else 0.0
        total_assets = revenue * c.asset_to_revenue
        total_liabilities = total_assets * c.liability_to_asset

        return FinancialStatement(
            revenue=revenue,
            gross_profit=gross_profit,
            operating_income=gross_profit - operating_expenses,
            net_income=net_income,
            total_assets=total_assets,
            total_liabilities=total_liabilities,
            equity=total_assets - total_liabilities,
            cash_flow=net_income * c.cash_flow_to_net_income,
            operating_expenses=operating_expenses,
            cost_of_goods_sold=revenue - gross_profit,
            date=as_of or datetime.now(timezone.utc),
        )

    def import_profile(
        self,
        session: AnalysisSession,
        profile: BusinessProfile,
        as_of: Optional[datetime] = None,
    ) -> FinancialStatement:
        """Build a statement, append it to the session and make it current."""
        statement = session.append(self.build(profile, as_of=as_of))
        logger.debug(
            "Imported statement for %s (history=%d)",
            profile.business_name or session.business_id or "business",
            len(session),
        )
        return statement


class RatioCalculator:
    """Derive the ratio set used by the health scorer and the forecast."""

    def __init__(self, constants: EstimationConstants = DEFAULT_CONSTANTS) -> None:
        self.constants = constants

    def calculate(
        self,
        session: Optional[AnalysisSession] = None,
        statement: Optional[FinancialStatement] = None,
    ) -> FinancialRatios:
        statement = _resolve_statement(session, statement)
        c = self.constants
        s = statement

        # Balance sheet proxies; profiles never carry the split
        current_assets = s.total_assets * c.current_asset_ratio
        current_liabilities = s.total_liabilities * c.current_liability_ratio
        quick_assets = s.total_assets * c.quick_asset_ratio
        cash_on_hand = s.cash_flow * c.cash_on_hand_ratio
        inventory = s.total_assets * c.inventory_ratio
        receivables = s.total_assets * c.receivables_ratio
        interest_expense = s.total_liabilities * c.interest_rate

        return FinancialRatios(
            gross_profit_margin=safe_divide(s.gross_profit, s.revenue) * 100,
            operating_margin=safe_divide(s.operating_income, s.revenue) * 100,
            net_profit_margin=safe_divide(s.net_income, s.revenue) * 100,
            return_on_assets=safe_divide(s.net_income, s.total_assets) * 100,
            return_on_equity=safe_divide(s.net_income, s.equity) * 100,
            current_ratio=safe_divide(current_assets, current_liabilities),
            quick_ratio=safe_divide(quick_assets, current_liabilities),
            cash_ratio=safe_divide(cash_on_hand, current_liabilities),
            asset_turnover=safe_divide(s.revenue, s.total_assets),
            inventory_turnover=safe_divide(s.cost_of_goods_sold, inventory),
            receivables_turnover=safe_divide(s.revenue, receivables),
            debt_to_equity=safe_divide(s.total_liabilities, s.equity),
            debt_to_assets=safe_divide(s.total_liabilities, s.total_assets) * 100,
            interest_coverage=safe_divide(s.operating_income, interest_expense),
            revenue_growth_rate=growth_rate(session, "revenue"),
            profit_growth_rate=growth_rate(session, "net_income"),
            asset_growth_rate=growth_rate(session, "total_assets"),
        )


class TrendAnalyzer:
    """Compare the two latest statements and classify dispersion over history."""

    def __init__(self, constants: EstimationConstants = DEFAULT_CONSTANTS) -> None:
        self.constants = constants

    def analyze(self, session: AnalysisSession, metric: str) -> TrendAnalysis:
        if len(session) < 2:
            raise InsufficientHistoryError(available=len(session))
        key = _metric_key(metric)
        previous, latest = session.latest_pair()

        current_value = latest.metric(key)
        previous_value = previous.metric(key)
        change_amount = current_value - previous_value
        change_percent = safe_divide(change_amount, previous_value) * 100

        return TrendAnalysis(
            metric=key,
            current_value=current_value,
            previous_value=previous_value,
            change_amount=change_amount,
            change_percent=change_percent,
            trend=self.classify_trend(change_percent),
            volatility=self.volatility(session, key),
            projection=current_value * (1 + change_percent / 100),
            confidence=self.confidence(session, key),
        )

    def classify_trend(self, change_percent: float) -> Trend:
        if abs(change_percent) < self.constants.stable_change_percent:
            return Trend.STABLE
        return Trend.INCREASING if change_percent > 0 else Trend.DECREASING

    def volatility(self, session: AnalysisSession, metric: str) -> Volatility:
        """Coefficient-of-variation band over the whole history; 'medium' below 3 points."""
        if len(session) < 3:
            return Volatility.MEDIUM
        cov = _coefficient_of_variation(_history_values(session, _metric_key(metric)))
        if cov < self.constants.volatility_low:
            return Volatility.LOW
        if cov < self.constants.volatility_medium:
            return Volatility.MEDIUM
        return Volatility.HIGH

    def confidence(self, session: AnalysisSession, metric: str) -> int:
        volatility = self.volatility(session, metric)
        confidence = 50
        if len(session) >= 4:
            confidence += 20
        if volatility is Volatility.LOW:
            confidence += 20
        elif volatility is Volatility.HIGH:
            confidence -= 20
        return max(20, min(95, confidence))


class CashFlowAnalyzer:
    """Estimate the cash flow breakdown from a single statement."""

    def __init__(self, constants: EstimationConstants = DEFAULT_CONSTANTS) -> None:
        self.constants = constants

    def analyze(
        self,
        session: Optional[AnalysisSession] = None,
        statement: Optional[FinancialStatement] = None,
    ) -> CashFlowAnalysis:
        statement = _resolve_statement(session, statement)
        c = self.constants
        operating_cash_flow = statement.cash_flow

        return CashFlowAnalysis(
            operating_cash_flow=operating_cash_flow,
            investing_cash_flow=statement.revenue * c.investing_to_revenue,
            financing_cash_flow=statement.total_liabilities * c.financing_to_liabilities,
            free_cash_flow=operating_cash_flow * c.free_cash_flow_ratio,
            cash_flow_margin=safe_divide(operating_cash_flow, statement.revenue) * 100,
            cash_conversion_cycle=self.cash_conversion_cycle(statement),
            predictability=self.predictability(session),
            burn_rate=abs(operating_cash_flow) / c.months_per_year if operating_cash_flow < 0 else None,
        )

    def cash_conversion_cycle(self, statement: FinancialStatement) -> float:
        """Inventory days + receivable days - fixed payable days.

        A zero turnover contributes zero days instead of an infinite cycle.
        """
        c = self.constants
        inventory_turnover = safe_divide(statement.cost_of_goods_sold, statement.total_assets * c.inventory_ratio)
        receivables_turnover = safe_divide(statement.revenue, statement.total_assets * c.receivables_ratio)
        inventory_days = safe_divide(c.days_in_year, inventory_turnover)
        receivable_days = safe_divide(c.days_in_year, receivables_turnover)
        return inventory_days + receivable_days - c.payables_days

    def predictability(self, session: Optional[AnalysisSession]) -> CashFlowPredictability:
        if session is None or len(session) < 3:
            return CashFlowPredictability.VARIABLE
        cov = _coefficient_of_variation(_history_values(session, "cash_flow"))
        if cov < self.constants.predictability_stable:
            return CashFlowPredictability.STABLE
        if cov < self.constants.predictability_variable:
            return CashFlowPredictability.VARIABLE
        return CashFlowPredictability.VOLATILE


class ForecastEngine:
    """Project revenue, profit and cash flow with three scenario bands."""

    def __init__(
        self,
        constants: EstimationConstants = DEFAULT_CONSTANTS,
        ratio_calculator: Optional[RatioCalculator] = None,
        trend_analyzer: Optional[TrendAnalyzer] = None,
    ) -> None:
        self.constants = constants
        self.ratio_calculator = ratio_calculator or RatioCalculator(constants)
        self.trend_analyzer = trend_analyzer or TrendAnalyzer(constants)

    def forecast(self, session: AnalysisSession, months: int = 12) -> FinancialForecast:
        current = session.current
        if current is None:
            raise NoCurrentStatementError()
        c = self.constants

        ratios = self.ratio_calculator.calculate(session, current)
        growth = ratios.revenue_growth_rate / 100
        projected_revenue = current.revenue * (1 + growth * (months / 12))
        projected_profit = projected_revenue * (ratios.net_profit_margin / 100)

        return FinancialForecast(
            period=months,
            projected_revenue=projected_revenue,
            projected_profit=projected_profit,
            projected_cash_flow=projected_profit * c.forecast_cash_flow_ratio,
            confidence=self.confidence(session),
            assumptions=[
                f"Revenue growth rate: {ratios.revenue_growth_rate:.1f}%",
                f"Net profit margin: {ratios.net_profit_margin:.1f}%",
                "No major market disruptions",
                "Current operational efficiency maintained",
            ],
            scenario_analysis=ScenarioAnalysis(
                optimistic=ScenarioOutcome(
                    revenue=projected_revenue * c.optimistic_revenue,
                    profit=projected_profit * c.optimistic_profit,
                ),
                realistic=ScenarioOutcome(revenue=projected_revenue, profit=projected_profit),
                pessimistic=ScenarioOutcome(
                    revenue=projected_revenue * c.pessimistic_revenue,
                    profit=projected_profit * c.pessimistic_profit,
                ),
            ),
        )

    def confidence(self, session: AnalysisSession) -> int:
        data_quality = 80 if len(session) >= 3 else 60
        if len(session) >= 2:
            low = self.trend_analyzer.volatility(session, "revenue") is Volatility.LOW
            trend_consistency = 85 if low else 70
        else:
            trend_consistency = 70
        return round_half_up((data_quality + trend_consistency) / 2)


# ----------------------------
# Internal helpers
# ----------------------------

def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives, matching the scores published so far."""
    return int(math.floor(value + 0.5))


def growth_rate(session: Optional[AnalysisSession], metric: str) -> float:
    """Percent change between the two latest statements by date; 0 without history."""
    if session is None or len(session) < 2:
        return 0.0
    previous, latest = session.latest_pair()
    previous_value = previous.metric(metric)
    return safe_divide(latest.metric(metric) - previous_value, previous_value) * 100


def _resolve_statement(
    session: Optional[AnalysisSession], statement: Optional[FinancialStatement]
) -> FinancialStatement:
    if statement is not None:
        return statement
    if session is not None and session.current is not None:
        return session.current
    raise NoStatementError()


def _metric_key(metric: str) -> str:
    key = snake_key(metric)
    if key not in STATEMENT_METRICS:
        raise ValueError(f"Unknown statement metric: {metric}")
    return key


def _frame_from_statements(statements: Iterable[FinancialStatement], keys: Sequence[str]) -> pd.DataFrame:
    rows = [{**{k: s.metric(k) for k in keys}, "date": s.date} for s in statements]
    if not rows:
        return pd.DataFrame(columns=["date", *keys])
    # Stable sort keeps import order for statements sharing a timestamp
    return pd.DataFrame(rows).sort_values("date", kind="mergesort").reset_index(drop=True)


def _history_values(session: AnalysisSession, metric: str) -> List[float]:
    df = _frame_from_statements(session.history, [metric])
    return [float(v) for v in df[metric].tolist()]


def _coefficient_of_variation(values: Sequence[float]) -> float:
    """Population sigma over the signed mean.

    A negative mean yields a negative coefficient, which sits in the lowest
    band. A zero mean, all-zero series included, has no defined coefficient
    and is reported as infinite so it lands in the most dispersed band.
    """
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return math.inf
    mean = float(np.mean(arr))
    if mean == 0.0:
        return math.inf
    return float(np.std(arr)) / mean
