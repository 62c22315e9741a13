"""Financial health scoring over the ratio record.

Each category is a step table: the first threshold a ratio clears awards its
points, and the category total is clamped to ``[0, 100]``. Narrative output
(strengths, weaknesses, recommendations) comes from ``HEALTH_RULES``, an
ordered rule table evaluated top to bottom.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from bizhealth_report.domain.models.financials import (
    CategoryScores,
    FinancialHealthScore,
    FinancialRatios,
    RiskLevel,
)
from bizhealth_report.domain.models.session import AnalysisSession
from bizhealth_report.domain.services.calculations import RatioCalculator, round_half_up

logger = logging.getLogger(__name__)

Steps = Tuple[Tuple[float, int], ...]
StepTable = Tuple[Tuple[str, Steps], ...]

PROFITABILITY_STEPS: StepTable = (
    ("gross_profit_margin", ((40, 25), (20, 15), (10, 5))),
    ("net_profit_margin", ((15, 25), (8, 15), (3, 5))),
    ("return_on_assets", ((10, 25), (5, 15), (2, 5))),
    ("return_on_equity", ((15, 25), (10, 15), (5, 5))),
)

LIQUIDITY_STEPS: StepTable = (
    ("current_ratio", ((2, 40), (1.5, 30), (1, 15))),
    ("quick_ratio", ((1.5, 30), (1, 20), (0.5, 10))),
    ("cash_ratio", ((0.5, 30), (0.2, 20), (0.1, 10))),
)

EFFICIENCY_STEPS: StepTable = (
    ("asset_turnover", ((2, 35), (1.5, 25), (1, 15))),
    ("inventory_turnover", ((10, 35), (6, 25), (3, 15))),
    ("receivables_turnover", ((12, 30), (8, 20), (4, 10))),
)

# Deductions from 100; a higher leverage score means less debt
LEVERAGE_ABOVE_STEPS: StepTable = (
    ("debt_to_equity", ((2, 40), (1.5, 25), (1, 10))),
    ("debt_to_assets", ((60, 30), (40, 15), (30, 5))),
)
LEVERAGE_BELOW_STEPS: StepTable = (
    ("interest_coverage", ((2, 30), (5, 15), (10, 5))),
)

GROWTH_STEPS: StepTable = (
    ("revenue_growth_rate", ((20, 40), (10, 30), (5, 20), (0, 10))),
    ("profit_growth_rate", ((15, 30), (8, 20), (0, 10))),
    ("asset_growth_rate", ((10, 30), (5, 20), (0, 10))),
)

RISK_THRESHOLDS: Tuple[Tuple[int, RiskLevel], ...] = (
    (80, RiskLevel.LOW),
    (60, RiskLevel.MEDIUM),
    (40, RiskLevel.HIGH),
)

STRENGTH = "strength"
WEAKNESS = "weakness"
RECOMMENDATION = "recommendation"

Predicate = Callable[[CategoryScores, FinancialRatios], bool]
HealthRule = Tuple[str, str, Predicate]

_DEBT_REDUCTION = "Consider debt reduction to improve financial stability"

HEALTH_RULES: Tuple[HealthRule, ...] = (
    # Strengths
    (STRENGTH, "Strong profitability metrics", lambda s, r: s.profitability > 75),
    (STRENGTH, "Excellent liquidity position", lambda s, r: s.liquidity > 75),
    (STRENGTH, "High operational efficiency", lambda s, r: s.efficiency > 75),
    (STRENGTH, "Conservative debt management", lambda s, r: s.leverage > 75),
    (STRENGTH, "Robust growth trajectory", lambda s, r: s.growth > 75),
    (STRENGTH, "High gross profit margins", lambda s, r: r.gross_profit_margin > 40),
    (STRENGTH, "Strong working capital position", lambda s, r: r.current_ratio > 2),
    (STRENGTH, "Excellent returns to shareholders", lambda s, r: r.return_on_equity > 15),
    # Weaknesses
    (WEAKNESS, "Low profitability metrics", lambda s, r: s.profitability < 40),
    (WEAKNESS, "Poor liquidity position", lambda s, r: s.liquidity < 40),
    (WEAKNESS, "Operational inefficiencies", lambda s, r: s.efficiency < 40),
    (WEAKNESS, "High debt burden", lambda s, r: s.leverage < 40),
    (WEAKNESS, "Weak growth performance", lambda s, r: s.growth < 40),
    (WEAKNESS, "Low net profit margins", lambda s, r: r.net_profit_margin < 5),
    (WEAKNESS, "Working capital concerns", lambda s, r: r.current_ratio < 1),
    (WEAKNESS, "High financial leverage", lambda s, r: r.debt_to_equity > 2),
    # Recommendations
    (
        RECOMMENDATION,
        "Focus on improving profit margins through cost optimization or pricing strategy",
        lambda s, r: s.profitability < 50,
    ),
    (
        RECOMMENDATION,
        "Improve cash management and working capital efficiency",
        lambda s, r: s.liquidity < 50,
    ),
    (
        RECOMMENDATION,
        "Optimize asset utilization and operational processes",
        lambda s, r: s.efficiency < 50,
    ),
    (RECOMMENDATION, _DEBT_REDUCTION, lambda s, r: s.leverage < 50),
    (
        RECOMMENDATION,
        "Develop growth strategies to improve market position",
        lambda s, r: s.growth < 50,
    ),
    (
        RECOMMENDATION,
        "Increase current assets or reduce short-term liabilities",
        lambda s, r: r.current_ratio < 1.2,
    ),
    (
        RECOMMENDATION,
        "Review pricing strategy and cost structure",
        lambda s, r: r.gross_profit_margin < 30,
    ),
    (RECOMMENDATION, _DEBT_REDUCTION, lambda s, r: r.debt_to_equity > 2),
)


class HealthScorer:
    """Score five categories and derive the overall score, risk level and narrative."""

    def __init__(
        self,
        ratio_calculator: Optional[RatioCalculator] = None,
        rules: Sequence[HealthRule] = HEALTH_RULES,
    ) -> None:
        self.ratio_calculator = ratio_calculator or RatioCalculator()
        self.rules = tuple(rules)

    def score(
        self,
        ratios: Optional[FinancialRatios] = None,
        session: Optional[AnalysisSession] = None,
    ) -> FinancialHealthScore:
        """Score the ratios and derive the risk level from the reported score.

        ``risk_level`` is read off the rounded ``overall_score``, not the raw
        category mean. Categories summing to 399 give a mean of 79.8, which
        rounds to 80 and reports Low risk; the raw mean would report Medium.
        """
        if ratios is None:
            ratios = self.ratio_calculator.calculate(session)
        scores = self.category_scores(ratios)
        overall = round_half_up(sum(scores.values()) / 5)
        strengths, weaknesses, recommendations = self.narrative(scores, ratios)
        logger.debug("Health score %s from categories %s", overall, scores)

        return FinancialHealthScore(
            overall_score=overall,
            category_scores=scores,
            strengths=strengths,
            weaknesses=weaknesses,
            recommendations=recommendations,
            risk_level=risk_level(overall),
        )

    def category_scores(self, ratios: FinancialRatios) -> CategoryScores:
        leverage = 100 - _sum_steps(ratios, LEVERAGE_ABOVE_STEPS) - _sum_steps(ratios, LEVERAGE_BELOW_STEPS, below=True)
        return CategoryScores(
            profitability=_clamp(_sum_steps(ratios, PROFITABILITY_STEPS)),
            liquidity=_clamp(_sum_steps(ratios, LIQUIDITY_STEPS)),
            efficiency=_clamp(_sum_steps(ratios, EFFICIENCY_STEPS)),
            leverage=_clamp(leverage),
            growth=_clamp(_sum_steps(ratios, GROWTH_STEPS)),
        )

    def narrative(
        self, scores: CategoryScores, ratios: FinancialRatios
    ) -> Tuple[List[str], List[str], List[str]]:
        buckets = {STRENGTH: [], WEAKNESS: [], RECOMMENDATION: []}
        for kind, message, predicate in self.rules:
            bucket = buckets[kind]
            if message not in bucket and predicate(scores, ratios):
                bucket.append(message)
        return buckets[STRENGTH], buckets[WEAKNESS], buckets[RECOMMENDATION]


def risk_level(overall_score: float) -> RiskLevel:
    """Map an overall score to a band; callers pass the rounded score."""
    for threshold, level in RISK_THRESHOLDS:
        if overall_score >= threshold:
            return level
    return RiskLevel.CRITICAL


# ----------------------------
# Internal helpers
# ----------------------------

def _step_points(value: float, steps: Steps, below: bool = False) -> int:
    for threshold, points in steps:
        if (value < threshold) if below else (value > threshold):
            return points
    return 0


def _sum_steps(ratios: FinancialRatios, table: StepTable, below: bool = False) -> int:
    return sum(_step_points(getattr(ratios, name), steps, below=below) for name, steps in table)


def _clamp(score: int) -> int:
    return max(0, min(100, score))
