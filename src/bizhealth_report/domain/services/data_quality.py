"""Benchmark lookups and advisory data-quality checks for raw business profiles.

None of the functions here raise on incomplete input: missing figures simply
skip the corresponding check, and the outcome is a list of tags the caller
can show next to an otherwise successful analysis.
"""
from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date
from typing import Any, Dict, List, Optional

from bizhealth_report.domain.constants import (
    COMPLETENESS_FIELDS,
    CRITICAL_FINANCIAL_FIELDS,
    CRITICAL_OPERATIONAL_FIELDS,
    EMPLOYEE_EFFICIENCY_BENCHMARKS,
    GROSS_MARGIN_BENCHMARKS,
    GROWTH_RATE_MAX,
    MATURITY_THRESHOLDS,
    PROFIT_MARGIN_MAX,
    PROFIT_MARGIN_MIN,
    REVENUE_GROWTH_BENCHMARKS,
    REVENUE_OUTLIER_MULTIPLIER,
    Band,
)
from bizhealth_report.domain.models.financials import (
    BusinessFinancialData,
    BusinessOperationalData,
    BusinessProfile,
    DataQualityReport,
)

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365.25
MIN_DESCRIPTION_LENGTH = 100


def get_industry_benchmarks(category: Optional[str] = "OTHER") -> Dict[str, Band]:
    key = (category or "OTHER").upper()
    return {
        "gross_margin": GROSS_MARGIN_BENCHMARKS.get(key, GROSS_MARGIN_BENCHMARKS["OTHER"]),
        "employee_efficiency": EMPLOYEE_EFFICIENCY_BENCHMARKS.get(key, EMPLOYEE_EFFICIENCY_BENCHMARKS["OTHER"]),
    }


def business_age(established: Optional[date], today: Optional[date] = None) -> float:
    if established is None:
        return 0.0
    today = today or date.today()
    return (today - established).days / DAYS_PER_YEAR


def get_business_maturity(established: Optional[date], today: Optional[date] = None) -> str:
    """Map years in operation to NEW / GROWING / MATURE / ESTABLISHED."""
    if established is None:
        return "NEW"
    years = business_age(established, today)
    for label, limit in MATURITY_THRESHOLDS:
        if years <= limit:
            return label
    return "ESTABLISHED"


def get_growth_benchmarks(established: Optional[date], today: Optional[date] = None) -> Band:
    return REVENUE_GROWTH_BENCHMARKS[get_business_maturity(established, today)]


def detect_outliers(
    financial: BusinessFinancialData,
    category: Optional[str] = "OTHER",
    employees: Optional[int] = None,
) -> List[str]:
    outliers: List[str] = []
    benchmarks = get_industry_benchmarks(category)

    if financial.revenue:
        # Efficiency benchmarks are revenue per employee in thousands
        average_revenue = benchmarks["employee_efficiency"]["average"] * (employees or 1) * 1000
        if financial.revenue > average_revenue * REVENUE_OUTLIER_MULTIPLIER:
            outliers.append("revenue_unusually_high")

    if financial.revenue and financial.profit:
        margin = financial.profit / financial.revenue
        if margin > PROFIT_MARGIN_MAX:
            outliers.append("profit_margin_unusually_high")
        if margin < PROFIT_MARGIN_MIN:
            outliers.append("profit_margin_unusually_low")

    if financial.yearly_growth and abs(financial.yearly_growth) > GROWTH_RATE_MAX:
        outliers.append("growth_rate_extreme")

    return outliers


def validate_data_consistency(financial: BusinessFinancialData) -> List[str]:
    issues: List[str] = []
    revenue, profit = financial.revenue, financial.profit

    if revenue and profit and profit > revenue:
        issues.append("profit_exceeds_revenue")

    if financial.ebitda and profit and financial.ebitda < profit:
        issues.append("ebitda_less_than_profit")

    if financial.monthly_revenue and revenue:
        variance = abs(financial.monthly_revenue * 12 - revenue) / revenue
        if variance > 0.25:
            issues.append("monthly_annual_revenue_mismatch")

    if financial.cash_flow and profit:
        variance = abs(financial.cash_flow - profit) / abs(profit)
        if variance > 2.0:
            issues.append("cash_flow_profit_significant_variance")

    # Zero assets is treated as "not provided", only negatives are flagged
    if financial.total_assets and financial.total_assets <= 0:
        issues.append("negative_total_assets")

    return issues


def calculate_data_completeness(
    financial: BusinessFinancialData,
    operational: BusinessOperationalData,
    dimension: str,
) -> float:
    """Fraction of the dimension's fields that carry a value."""
    fields = COMPLETENESS_FIELDS[dimension]
    data = {**asdict(financial), **asdict(operational)}
    filled = sum(1 for name in fields if is_populated(data.get(name)))
    return filled / len(fields) if fields else 0.0


class DataQualityChecker:
    """Bundle completeness, outlier and consistency checks into one report."""

    def assess(self, profile: BusinessProfile, today: Optional[date] = None) -> DataQualityReport:
        financial = profile.financial_data()
        operational = profile.operational_data()
        category = operational.category or profile.industry

        completeness = {
            dimension: calculate_data_completeness(financial, operational, dimension)
            for dimension in COMPLETENESS_FIELDS
        }
        outliers = detect_outliers(financial, category, operational.employees)
        inconsistencies = validate_data_consistency(financial)

        factors: List[str] = []
        score = self._quality_score(inconsistencies, outliers, operational, factors, today)
        logger.debug(
            "Data quality %.1f (outliers=%s, inconsistencies=%s)", score, outliers, inconsistencies
        )

        return DataQualityReport(
            completeness=completeness,
            outliers=outliers,
            inconsistencies=inconsistencies,
            quality_score=score,
            factors=factors,
            recommendations=self._recommendations(financial, operational, inconsistencies, score),
            missing_critical=[f for f in CRITICAL_FINANCIAL_FIELDS if getattr(financial, f) is None],
        )

    def _quality_score(
        self,
        inconsistencies: List[str],
        outliers: List[str],
        operational: BusinessOperationalData,
        factors: List[str],
        today: Optional[date],
    ) -> float:
        score = 85.0
        if inconsistencies:
            score -= min(len(inconsistencies) * 40, 80)
            factors.append(f"Data consistency issues detected: {len(inconsistencies)}")
            for issue in inconsistencies[:2]:
                factors.append(f"• {issue.replace('_', ' ')}")
            if any("profit" in issue or "margin" in issue for issue in inconsistencies):
                score -= 30
                factors.append("• Critical financial inconsistencies detected")
            if len(inconsistencies) >= 3:
                score -= 15
                factors.append("• Multiple severe data inconsistencies found")
        else:
            factors.append("Data consistency validated successfully")

        if outliers:
            score -= min(len(outliers) * 10, 25)
            factors.append(f"Statistical outliers detected: {len(outliers)}")

        score = (score + self._age_alignment(operational.established, factors, today)) / 2
        return max(0.0, min(100.0, score))

    @staticmethod
    def _age_alignment(established: Optional[date], factors: List[str], today: Optional[date]) -> float:
        if established is None:
            factors.append("Business establishment date missing")
            return 60.0
        age = business_age(established, today)
        if age < 0:
            factors.append("Business establishment date appears to be in the future")
            return 20.0
        if age > 100:
            factors.append("Business establishment date appears unusually old")
            return 30.0
        if age < 0.25:
            factors.append("Very new business - limited historical data expected")
            return 75.0
        factors.append("Business age aligns with expected data availability")
        return 90.0

    @staticmethod
    def _recommendations(
        financial: BusinessFinancialData,
        operational: BusinessOperationalData,
        inconsistencies: List[str],
        score: float,
    ) -> List[str]:
        recs: List[str] = []
        if score < 50:
            recs.append(
                "Consider providing additional financial and operational data to improve score reliability"
            )

        missing_financial = [f for f in CRITICAL_FINANCIAL_FIELDS if getattr(financial, f) is None]
        if missing_financial:
            recs.append(f"Provide missing critical financial data: {', '.join(missing_financial)}")

        missing_operational = [
            f for f in CRITICAL_OPERATIONAL_FIELDS if getattr(operational, f) in (None, "")
        ]
        if missing_operational:
            recs.append(f"Provide missing operational information: {', '.join(missing_operational)}")

        if inconsistencies:
            recs.append("Review and correct financial data inconsistencies to improve accuracy")

        if not operational.description or len(operational.description) < MIN_DESCRIPTION_LENGTH:
            recs.append("Provide a detailed business description to enhance sale readiness scoring")
        return recs


def is_populated(value: Any) -> bool:
    if value is None or value == "":
        return False
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return True
