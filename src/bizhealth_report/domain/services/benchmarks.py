"""Benchmark-normalized dimension scoring for a raw business profile.

Every metric is mapped onto 0-100 against a four-point band (poor, average,
good, excellent) taken from the category and maturity tables in
:mod:`bizhealth_report.domain.constants`. Metrics the profile cannot supply are
left out of their weighted average instead of counting as zero, so a sparse
profile is scored on what it does carry.
"""
from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from bizhealth_report.domain.constants import (
    ASSET_EFFICIENCY_BAND,
    ASSET_TURNOVER_BAND,
    CASH_FLOW_RATIO_BAND,
    CATEGORY_GROWTH_POTENTIAL,
    COMPETITION_LEVELS,
    COMPLETENESS_FIELDS,
    CRITICAL_DIMENSION_FIELDS,
    CUSTOMER_BASE_BENCHMARKS,
    DIMENSION_WEIGHTS,
    EBITDA_MARGIN_SCALE,
    FINANCIAL_WEIGHTS,
    GROWTH_WEIGHTS,
    NET_MARGIN_SCALE,
    REVENUE_CONSISTENCY_BAND,
    SCALABILITY_BENCHMARKS,
    WORKING_CAPITAL_BAND,
    Band,
)
from bizhealth_report.domain.models.financials import (
    BenchmarkScores,
    BusinessFinancialData,
    BusinessOperationalData,
    BusinessProfile,
    DataQualityReport,
    DimensionScore,
    Trajectory,
)
from bizhealth_report.domain.services.calculations import round_half_up
from bizhealth_report.domain.services.data_quality import (
    DataQualityChecker,
    business_age,
    calculate_data_completeness,
    get_growth_benchmarks,
    get_industry_benchmarks,
    is_populated,
)

logger = logging.getLogger(__name__)

BAND_LEVELS = ("poor", "average", "good", "excellent")


def normalize_to_score(value: float, band: Band) -> float:
    """Piecewise-linear map onto 0-100: 25 points per band segment."""
    poor, average, good, excellent = (band[level] for level in BAND_LEVELS)
    if value <= poor:
        return 0.0
    if value <= average:
        return 25 + (value - poor) / (average - poor) * 25
    if value <= good:
        return 50 + (value - average) / (good - average) * 25
    if value <= excellent:
        return 75 + (value - good) / (excellent - good) * 25
    return 100.0


def weighted_average(scores: Mapping[str, float], weights: Mapping[str, float]) -> float:
    """Average over the keys carrying a positive weight and a real score."""
    total = 0.0
    total_weight = 0.0
    for key, score in scores.items():
        weight = weights.get(key, 0.0)
        if weight > 0 and not np.isnan(score):
            total += score * weight
            total_weight += weight
    return total / total_weight if total_weight > 0 else 0.0


def scale_band(band: Band, factors: Sequence[float]) -> Band:
    return {level: band[level] * factor for level, factor in zip(BAND_LEVELS, factors)}


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def _category_key(category: Optional[str]) -> str:
    return (category or "OTHER").upper()


class _Breakdown:
    """Accumulates weighted metrics for one sub-score."""

    def __init__(self) -> None:
        self.components: Dict[str, float] = {}
        self.factors: List[str] = []
        self._weights: Dict[str, float] = {}

    def add(self, name: str, score: float, weight: float, factor: Optional[str] = None) -> None:
        self.components[name] = score
        self._weights[name] = weight
        if factor:
            self.factors.append(factor)

    @property
    def score(self) -> float:
        return _clamp(weighted_average(self.components, self._weights))


def _combine(
    parts: Mapping[str, _Breakdown],
    weights: Mapping[str, float],
    advice: Mapping[str, str],
) -> DimensionScore:
    sub_scores = {name: part.score for name, part in parts.items()}
    # A sub-score of zero means nothing could be measured, not a failing grade
    available = {name: score for name, score in sub_scores.items() if score > 0}

    components: Dict[str, float] = dict(sub_scores)
    factors: List[str] = []
    for part in parts.values():
        components.update(part.components)
        factors.extend(part.factors)

    return DimensionScore(
        score=_clamp(weighted_average(available, weights)),
        components=components,
        factors=factors,
        recommendations=[advice[name] for name, score in sub_scores.items() if score < 50],
    )


def _tier_factor(score: float, messages: Sequence[str]) -> str:
    for threshold, message in zip((75, 50, 25), messages):
        if score >= threshold:
            return message
    return messages[-1]


# ----------------------------
# Financial dimension
# ----------------------------

FINANCIAL_ADVICE = {
    "profitability": "Focus on improving profit margins through cost management or pricing optimization",
    "liquidity": "Improve cash flow management and working capital efficiency",
    "efficiency": "Optimize operational efficiency and asset utilization",
}


def score_financial(financial: BusinessFinancialData, operational: BusinessOperationalData) -> DimensionScore:
    benchmarks = get_industry_benchmarks(operational.category)
    parts = {
        "profitability": _profitability(financial, benchmarks["gross_margin"]),
        "liquidity": _liquidity(financial),
        "efficiency": _efficiency(financial, operational, benchmarks["employee_efficiency"]),
    }
    return _combine(parts, FINANCIAL_WEIGHTS, FINANCIAL_ADVICE)


def _profitability(financial: BusinessFinancialData, gross_band: Band) -> _Breakdown:
    part = _Breakdown()
    revenue = financial.revenue
    profit_margin = (financial.profit or 0.0) / revenue if revenue and revenue > 0 else None
    # Form margins are entered as percentages
    gross_ratio = financial.gross_margin / 100 if financial.gross_margin else None
    net_ratio = financial.net_margin / 100 if financial.net_margin else None

    if gross_ratio is not None or (profit_margin is not None and revenue):
        gross = gross_ratio or profit_margin or 0.0
        part.add("gross_margin", normalize_to_score(gross, gross_band), 0.4, f"Gross margin: {gross * 100:.1f}%")

    if net_ratio is not None or profit_margin is not None:
        net = net_ratio or profit_margin or 0.0
        net_band = scale_band(gross_band, NET_MARGIN_SCALE)
        part.add("net_margin", normalize_to_score(net, net_band), 0.3, f"Net margin: {net * 100:.1f}%")

    if revenue and revenue > 0 and financial.ebitda:
        ebitda = financial.ebitda / revenue
        ebitda_band = scale_band(gross_band, EBITDA_MARGIN_SCALE)
        part.add("ebitda_margin", normalize_to_score(ebitda, ebitda_band), 0.3, f"EBITDA margin: {ebitda * 100:.1f}%")

    part.factors.append(
        _tier_factor(
            part.score,
            (
                "Strong profitability across metrics",
                "Moderate profitability performance",
                "Below-average profitability concerns",
                "Significant profitability challenges",
            ),
        )
    )
    return part


def _liquidity(financial: BusinessFinancialData) -> _Breakdown:
    part = _Breakdown()
    revenue = financial.revenue

    if financial.cash_flow is not None and revenue:
        ratio = financial.cash_flow / revenue
        part.add(
            "cash_flow_ratio",
            normalize_to_score(ratio, CASH_FLOW_RATIO_BAND),
            0.6,
            f"Cash flow ratio: {ratio * 100:.1f}%",
        )

    if financial.total_assets and financial.liabilities:
        working_capital = financial.total_assets - financial.liabilities
        ratio = working_capital / revenue if revenue else 0.0
        part.add(
            "working_capital",
            normalize_to_score(ratio, WORKING_CAPITAL_BAND),
            0.4,
            f"Working capital ratio: {ratio * 100:.1f}%",
        )

    part.factors.append(
        _tier_factor(
            part.score,
            (
                "Strong liquidity position",
                "Adequate liquidity management",
                "Liquidity concerns present",
                "Significant liquidity challenges",
            ),
        )
    )
    return part


def _efficiency(
    financial: BusinessFinancialData,
    operational: BusinessOperationalData,
    employee_band: Band,
) -> _Breakdown:
    part = _Breakdown()
    revenue = financial.revenue

    if revenue and operational.employees:
        per_employee_k = revenue / operational.employees / 1000
        part.add(
            "revenue_per_employee",
            normalize_to_score(per_employee_k, employee_band),
            0.5,
            f"Revenue per employee: ${round_half_up(per_employee_k)}K",
        )

    if revenue and financial.total_assets and financial.total_assets > 0:
        turnover = revenue / financial.total_assets
        part.add(
            "asset_turnover",
            normalize_to_score(turnover, ASSET_TURNOVER_BAND),
            0.5,
            f"Asset turnover: {turnover:.2f}x",
        )

    part.factors.append(
        _tier_factor(
            part.score,
            (
                "Highly efficient operations",
                "Moderate operational efficiency",
                "Efficiency improvements needed",
                "Significant efficiency challenges",
            ),
        )
    )
    return part


# ----------------------------
# Growth dimension
# ----------------------------

GROWTH_ADVICE = {
    "revenue_growth": "Focus on accelerating revenue growth through market expansion or product development",
    "market_expansion": "Explore new market opportunities and reduce competitive pressures",
    "scalability": "Improve operational scalability and asset efficiency for growth",
}


def score_growth(
    financial: BusinessFinancialData,
    operational: BusinessOperationalData,
    today: Optional[date] = None,
) -> DimensionScore:
    parts = {
        "revenue_growth": _revenue_growth(financial, operational, today),
        "market_expansion": _market_expansion(operational, today),
        "scalability": _scalability(financial, operational),
    }
    return _combine(parts, GROWTH_WEIGHTS, GROWTH_ADVICE)


def _revenue_growth(
    financial: BusinessFinancialData,
    operational: BusinessOperationalData,
    today: Optional[date],
) -> _Breakdown:
    part = _Breakdown()
    band = get_growth_benchmarks(operational.established, today)

    growth = financial.yearly_growth
    if growth is not None:
        part.add("yearly_growth", normalize_to_score(growth, band), 0.7, f"Annual growth rate: {growth * 100:.1f}%")
        if growth > band["excellent"]:
            part.factors.append("Exceptional growth performance")
        elif growth > band["good"]:
            part.factors.append("Strong growth trajectory")
        elif growth > band["average"]:
            part.factors.append("Moderate growth performance")
        elif growth > band["poor"]:
            part.factors.append("Modest growth achieved")
        else:
            part.factors.append("Growth challenges present")

    if financial.monthly_revenue and financial.revenue:
        consistency = 1 - abs(financial.monthly_revenue * 12 - financial.revenue) / financial.revenue
        part.add(
            "revenue_consistency",
            normalize_to_score(consistency, REVENUE_CONSISTENCY_BAND),
            0.3,
            f"Revenue consistency: {consistency * 100:.1f}%",
        )
    return part


def expected_customer_base(category: Optional[str], years: float) -> Band:
    """Category customer band scaled by age; five years is par, capped at 2x."""
    base = CUSTOMER_BASE_BENCHMARKS.get(_category_key(category), CUSTOMER_BASE_BENCHMARKS["OTHER"])
    multiplier = min(years / 5, 2)
    return {level: float(round_half_up(base[level] * multiplier)) for level in BAND_LEVELS}


def competition_score(competition: Optional[str]) -> Tuple[int, str]:
    if not competition:
        return 50, "Competition level not specified"
    text = competition.lower()
    score, level = 50, "moderate"
    for name, points, keywords in COMPETITION_LEVELS:
        if any(keyword in text for keyword in keywords):
            score, level = points, name
            break
    return score, f"Competition level assessed as {level}"


def _market_expansion(operational: BusinessOperationalData, today: Optional[date]) -> _Breakdown:
    part = _Breakdown()
    key = _category_key(operational.category)
    potential, outlook = CATEGORY_GROWTH_POTENTIAL.get(key, CATEGORY_GROWTH_POTENTIAL["OTHER"])
    part.add("category_potential", float(potential), 0.4, outlook)

    customers = operational.customer_base
    if customers is not None:
        expected = expected_customer_base(key, business_age(operational.established, today))
        if customers >= expected["excellent"]:
            customer_score = 90.0
        elif customers >= expected["good"]:
            customer_score = 75.0
        elif customers >= expected["average"]:
            customer_score = 60.0
        elif customers >= expected["poor"]:
            customer_score = 35.0
        else:
            customer_score = 15.0
        part.add("customer_base", customer_score, 0.35, f"Customer base: {customers:,}")

    points, factor = competition_score(operational.competition)
    part.add("competition_level", float(points), 0.25, factor)
    return part


def operational_flexibility(operational: BusinessOperationalData) -> Tuple[float, List[str]]:
    score = 50
    factors: List[str] = []

    hours = (operational.hours_of_operation or "").lower()
    if "24" in hours or "flexible" in hours:
        score += 15
        factors.append("Flexible operating hours advantage")
    elif "limited" in hours or "restricted" in hours:
        score -= 10
        factors.append("Limited hours may constrain growth")

    if operational.days_open:
        if len(operational.days_open) >= 6:
            score += 10
            factors.append("Operates most days of the week")
        elif len(operational.days_open) <= 4:
            score -= 5
            factors.append("Limited operating days may affect scalability")

    seasonality = (operational.seasonality or "").lower()
    if "year-round" in seasonality or "not seasonal" in seasonality:
        score += 10
        factors.append("Year-round operations support consistent growth")
    elif "seasonal" in seasonality:
        score -= 15
        factors.append("Seasonal nature may limit steady growth")

    return _clamp(float(score)), factors


def _scalability(financial: BusinessFinancialData, operational: BusinessOperationalData) -> _Breakdown:
    part = _Breakdown()
    revenue = financial.revenue

    if revenue and operational.employees:
        per_employee_k = revenue / operational.employees / 1000
        band = SCALABILITY_BENCHMARKS.get(_category_key(operational.category), SCALABILITY_BENCHMARKS["OTHER"])
        part.add(
            "employee_scalability",
            normalize_to_score(per_employee_k, band),
            0.4,
            f"Employee scalability: ${round_half_up(per_employee_k)}K per employee",
        )

    flexibility, factors = operational_flexibility(operational)
    part.add("operational_flexibility", flexibility, 0.35)
    part.factors.extend(factors)

    if financial.total_assets and revenue:
        efficiency = revenue / financial.total_assets
        part.add(
            "asset_efficiency",
            normalize_to_score(efficiency, ASSET_EFFICIENCY_BAND),
            0.25,
            f"Asset efficiency: {efficiency:.2f}x",
        )
    return part


# ----------------------------
# Confidence and trajectory
# ----------------------------

def critical_field_coverage(financial: BusinessFinancialData, operational: BusinessOperationalData) -> float:
    """Share of critical fields present, averaged over the four dimensions."""
    data = {**asdict(financial), **asdict(operational)}
    shares = [
        sum(1 for name in names if is_populated(data.get(name))) / len(names)
        for names in CRITICAL_DIMENSION_FIELDS.values()
    ]
    return sum(shares) / len(shares)


def score_consistency(scores: Sequence[float], factors: List[str]) -> float:
    present = [score for score in scores if score > 0]
    if not present:
        factors.append("No health scores available for consistency check")
        return 50.0
    if len(present) == 1:
        factors.append("Limited scores available for consistency assessment")
        return 70.0

    spread = float(np.std(present))
    if spread <= 10:
        factors.append("Health scores show high consistency across dimensions")
        return 95.0
    if spread <= 20:
        factors.append("Health scores show good consistency across dimensions")
        return 85.0
    if spread <= 30:
        factors.append("Health scores show moderate variation across dimensions")
        return 70.0
    factors.append("Health scores show significant variation - review individual dimensions")
    return 50.0


def determine_trajectory(yearly_growth: Optional[float], scores: Mapping[str, float]) -> Trajectory:
    """Growth rate decides first; otherwise the spread and level of the scores."""
    if yearly_growth is not None:
        if yearly_growth > 0.1:
            return Trajectory.IMPROVING
        if yearly_growth < -0.05:
            return Trajectory.DECLINING

    values = np.asarray(list(scores.values()), dtype=float)
    average = float(np.mean(values))
    if float(np.var(values)) > 400:
        return Trajectory.VOLATILE

    growth = scores.get("growth", 0.0)
    if average >= 70 and growth >= 60:
        return Trajectory.IMPROVING
    if average <= 40 or growth <= 30:
        return Trajectory.DECLINING
    return Trajectory.STABLE


class BenchmarkScorer:
    """Score a profile's financial and growth dimensions against benchmarks."""

    def __init__(self, quality_checker: Optional[DataQualityChecker] = None) -> None:
        self.quality_checker = quality_checker or DataQualityChecker()

    def score(
        self,
        profile: BusinessProfile,
        quality: Optional[DataQualityReport] = None,
        today: Optional[date] = None,
    ) -> BenchmarkScores:
        financial = profile.financial_data()
        operational = profile.operational_data()
        if not operational.category:
            operational.category = profile.industry

        financial_score = score_financial(financial, operational)
        growth_score = score_growth(financial, operational, today)
        dimensions = {"financial": financial_score.score, "growth": growth_score.score}
        overall = _clamp(weighted_average(dimensions, DIMENSION_WEIGHTS))

        if quality is None:
            quality = self.quality_checker.assess(profile, today=today)
        confidence_factors: List[str] = []
        confidence = self.confidence(financial, operational, quality, dimensions, confidence_factors)
        trajectory = determine_trajectory(financial.yearly_growth, dimensions)
        logger.debug(
            "Benchmark scores overall=%.1f financial=%.1f growth=%.1f (%s)",
            overall,
            financial_score.score,
            growth_score.score,
            trajectory.value,
        )

        return BenchmarkScores(
            overall=overall,
            financial=financial_score,
            growth=growth_score,
            confidence=confidence,
            trajectory=trajectory,
            confidence_factors=confidence_factors,
        )

    @staticmethod
    def confidence(
        financial: BusinessFinancialData,
        operational: BusinessOperationalData,
        quality: DataQualityReport,
        dimensions: Mapping[str, float],
        factors: List[str],
    ) -> float:
        """Blend completeness (40%), data quality (35%) and score consistency (25%)."""
        average = sum(
            calculate_data_completeness(financial, operational, name) for name in COMPLETENESS_FIELDS
        ) / len(COMPLETENESS_FIELDS)
        completeness = _clamp((average * 0.7 + critical_field_coverage(financial, operational) * 0.3) * 100)
        factors.append(f"Data completeness: {average * 100:.1f}%")

        consistency = score_consistency(list(dimensions.values()), factors)
        overall = _clamp(completeness * 0.4 + quality.quality_score * 0.35 + consistency * 0.25)

        if overall >= 90:
            factors.append("Very high confidence - comprehensive and reliable data")
        elif overall >= 75:
            factors.append("High confidence - good data quality with minor gaps")
        elif overall >= 50:
            factors.append("Medium confidence - adequate data with some limitations")
        else:
            factors.append("Low confidence - significant data gaps affect reliability")
        return overall
