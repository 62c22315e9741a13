"""Multi-method business valuation.

Five independent methods (revenue multiple, EBITDA multiple, P/E, asset-based
and a five-year DCF) are scored for confidence, scaled by the same set of
qualitative adjustment factors and blended into a confidence-weighted
estimate. Identical input always yields an identical result; the evaluation
date is read from the input rather than the clock.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from bizhealth_report.domain.constants import (
    INCONSISTENCY_PENALTY,
    MISSING_DATA_PENALTY,
    OUTLIER_PENALTY,
)
from bizhealth_report.domain.models.financials import (
    DataQualityReport,
    FinancialHealthScore,
    RiskLevel,
)
from bizhealth_report.domain.models.valuation import (
    ValuationInput,
    ValuationMethod,
    ValuationRange,
    ValuationResult,
)
from bizhealth_report.domain.services.calculations import safe_divide
from bizhealth_report.infrastructure.industry import IndustryMultipleService

logger = logging.getLogger(__name__)

DEFAULT_EBITDA_MULTIPLE = 10.0
DEFAULT_PE_RATIO = 15.0
EBITDA_FROM_GROSS_PROFIT = 0.8

ASSET_LIGHT_INDUSTRIES = ("Technology - Software", "Professional Services", "Media & Entertainment")
ASSET_LIGHT_MULTIPLIER = 1.5
ASSET_MULTIPLIER = 1.2

DCF_YEARS = 5
DEFAULT_GROWTH_RATE = 0.05
RISK_FREE_RATE = 0.04
BASE_RISK_PREMIUM = 0.06
TERMINAL_GROWTH = 0.03

STAGE_MULTIPLIERS: Dict[str, float] = {"startup": 1.2, "growth": 1.1, "mature": 1.0, "decline": 0.8}
POSITION_MULTIPLIERS: Dict[str, float] = {"leader": 1.2, "challenger": 1.1, "follower": 1.0, "niche": 0.95}
MARKET_SIZE_MULTIPLIERS: Dict[str, float] = {"massive": 1.1, "large": 1.05, "medium": 1.0, "small": 0.95}
CONCENTRATION_RISK: Dict[str, float] = {"high": 0.1, "medium": 0.05}
REGULATORY_RISK: Dict[str, float] = {"high": 0.08, "medium": 0.04}


class ValuationEngine:
    """Value a business from normalized financial and qualitative input."""

    def __init__(self, industry_service: Optional[IndustryMultipleService] = None) -> None:
        self.industry_service = industry_service or IndustryMultipleService()

    def run(
        self,
        data: ValuationInput,
        health: Optional[FinancialHealthScore] = None,
        quality: Optional[DataQualityReport] = None,
    ) -> ValuationResult:
        methods = self.methods(data)
        factors = self.adjustment_factors(data)
        combined = 1.0
        for value in factors.values():
            combined *= value

        adjusted = [
            ValuationMethod(
                name=m.name,
                value=m.value * combined,
                weight=0.0,
                confidence=m.confidence,
                description=m.description,
            )
            for m in methods
        ]
        total_confidence = sum(m.confidence for m in adjusted)
        for method in adjusted:
            method.weight = safe_divide(method.confidence, total_confidence) * 100

        estimate = safe_divide(sum(m.value * m.confidence for m in adjusted), total_confidence)
        confidence = safe_divide(total_confidence, len(adjusted)) * _quality_multiplier(quality)
        values = [m.value for m in adjusted]

        key_metrics = self.key_metrics(data, methods[0].value)
        risk_factors = list(data.risk_factors)
        if health is not None:
            key_metrics["health_score"] = float(health.overall_score)
            if health.risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL):
                risk_factors.append(f"Financial health risk level: {health.risk_level.value}")

        logger.debug("Valuation for %s: %.2f (confidence %.1f)", data.company_name or "business", estimate, confidence)
        return ValuationResult(
            company_name=data.company_name,
            evaluation_date=data.evaluation_date,
            estimated_value=estimate,
            range=ValuationRange(low=min(values), high=max(values)),
            confidence_score=confidence,
            methods=adjusted,
            adjustment_factors=factors,
            key_metrics=key_metrics,
            recommendations=self.recommendations(data),
            risk_factors=risk_factors,
        )

    # ------------------------------------------------------------------
    # Methods
    # ------------------------------------------------------------------
    def methods(self, data: ValuationInput) -> List[ValuationMethod]:
        return [
            self._revenue_multiple(data),
            self._ebitda_multiple(data),
            self._pe_ratio(data),
            self._asset_based(data),
            self._discounted_cash_flow(data),
        ]

    def revenue_multiple(self, industry: str) -> float:
        multiples = self.industry_service.multiples_for(industry)
        if multiples is not None:
            return multiples.revenue
        return self.industry_service.revenue_multiple(industry)

    def _revenue_multiple(self, data: ValuationInput) -> ValuationMethod:
        multiple = self.revenue_multiple(data.industry)
        return ValuationMethod(
            name="Revenue Multiple",
            value=data.annual_revenue * multiple,
            weight=0.0,
            confidence=self._method_confidence(data, data.annual_revenue, revenue_method=True),
            description=f"Based on {multiple:g}x revenue multiple for {data.industry} industry",
        )

    def _ebitda_multiple(self, data: ValuationInput) -> ValuationMethod:
        ebitda = data.gross_profit * EBITDA_FROM_GROSS_PROFIT
        multiples = self.industry_service.multiples_for(data.industry)
        multiple = multiples.ebitda if multiples is not None else DEFAULT_EBITDA_MULTIPLE
        return ValuationMethod(
            name="EBITDA Multiple",
            value=ebitda * multiple,
            weight=0.0,
            confidence=self._method_confidence(data, ebitda),
            description=f"Based on {multiple:g}x EBITDA multiple for {data.industry} industry",
        )

    def _pe_ratio(self, data: ValuationInput) -> ValuationMethod:
        multiples = self.industry_service.multiples_for(data.industry)
        pe = multiples.pe if multiples is not None else DEFAULT_PE_RATIO
        return ValuationMethod(
            name="P/E Ratio",
            value=data.net_income * pe,
            weight=0.0,
            confidence=self._method_confidence(data, data.net_income),
            description=f"Based on {pe:g}x P/E ratio for {data.industry} industry",
        )

    def _asset_based(self, data: ValuationInput) -> ValuationMethod:
        book_value = data.total_assets - data.total_liabilities
        multiplier = ASSET_LIGHT_MULTIPLIER if data.industry in ASSET_LIGHT_INDUSTRIES else ASSET_MULTIPLIER
        return ValuationMethod(
            name="Asset-Based",
            value=book_value * multiplier,
            weight=0.0,
            confidence=75.0,
            description="Based on adjusted book value of assets minus liabilities",
        )

    def _discounted_cash_flow(self, data: ValuationInput) -> ValuationMethod:
        growth = self.growth_rate(data)
        discount = self.discount_rate(data)
        value = 0.0
        projected = data.cash_flow
        for year in range(1, DCF_YEARS + 1):
            projected *= 1 + growth
            value += projected / (1 + discount) ** year
        terminal = projected * (1 + TERMINAL_GROWTH) / (discount - TERMINAL_GROWTH)
        value += terminal / (1 + discount) ** DCF_YEARS
        return ValuationMethod(
            name="Discounted Cash Flow",
            value=value,
            weight=0.0,
            confidence=80.0,
            description=f"Based on projected cash flows with {growth * 100:.1f}% growth rate",
        )

    def _method_confidence(self, data: ValuationInput, value: float, revenue_method: bool = False) -> float:
        confidence = 70
        if value > 0:
            confidence += 10
        if data.previous_year_revenue > 0:
            confidence += 10
        if self.industry_service.multiples_for(data.industry) is not None:
            confidence += 10
        if revenue_method and data.annual_revenue > 1_000_000:
            confidence += 5
        return float(min(95, confidence))

    # ------------------------------------------------------------------
    # Rates and adjustments
    # ------------------------------------------------------------------
    @staticmethod
    def growth_rate(data: ValuationInput) -> float:
        if data.previous_year_revenue > 0:
            return (data.annual_revenue - data.previous_year_revenue) / data.previous_year_revenue
        return DEFAULT_GROWTH_RATE

    @staticmethod
    def discount_rate(data: ValuationInput) -> float:
        premium = BASE_RISK_PREMIUM
        if data.annual_revenue < 1_000_000:
            premium += 0.04
        elif data.annual_revenue < 10_000_000:
            premium += 0.02
        premium += len(data.risk_factors) * 0.005
        return RISK_FREE_RATE + premium

    def adjustment_factors(self, data: ValuationInput) -> Dict[str, float]:
        return {
            "growth": self._growth_adjustment(data),
            "risk": self._risk_adjustment(data),
            "market_position": self._market_position_adjustment(data),
            "size": self._size_adjustment(data),
        }

    def _growth_adjustment(self, data: ValuationInput) -> float:
        growth = self.growth_rate(data)
        if growth > 0.3:
            base = 1.3
        elif growth > 0.15:
            base = 1.15
        elif growth > 0.05:
            base = 1.05
        else:
            base = 0.9
        return base * STAGE_MULTIPLIERS.get(data.growth_stage, 1.0)

    @staticmethod
    def _risk_adjustment(data: ValuationInput) -> float:
        risk = len(data.risk_factors) * 0.02
        risk += CONCENTRATION_RISK.get(data.customer_concentration, 0.0)
        risk += REGULATORY_RISK.get(data.regulatory_risk, 0.0)
        return max(0.7, 1 - risk)

    @staticmethod
    def _market_position_adjustment(data: ValuationInput) -> float:
        return POSITION_MULTIPLIERS.get(data.market_position, 1.0) * MARKET_SIZE_MULTIPLIERS.get(data.market_size, 1.0)

    @staticmethod
    def _size_adjustment(data: ValuationInput) -> float:
        revenue = data.annual_revenue
        if revenue > 100_000_000:
            return 1.1
        if revenue > 50_000_000:
            return 1.05
        if revenue > 10_000_000:
            return 1.0
        if revenue > 1_000_000:
            return 0.95
        return 0.9

    # ------------------------------------------------------------------
    # Narrative
    # ------------------------------------------------------------------
    def key_metrics(self, data: ValuationInput, revenue_method_value: float) -> Dict[str, float]:
        return {
            "revenue_multiple": safe_divide(revenue_method_value, data.annual_revenue),
            "profit_margin": safe_divide(data.net_income, data.annual_revenue) * 100,
            "return_on_assets": safe_divide(data.net_income, data.total_assets) * 100,
            "debt_to_equity": data.debt_to_equity,
            "growth_rate": self.growth_rate(data) * 100,
        }

    def recommendations(self, data: ValuationInput) -> List[str]:
        recs: List[str] = []
        if self.growth_rate(data) < 0.05:
            recs.append("Focus on growth initiatives to improve revenue trajectory")
        if safe_divide(data.net_income, data.annual_revenue) * 100 < 10:
            recs.append("Improve operational efficiency to increase profit margins")
        if data.debt_to_equity > 2:
            recs.append("Consider debt reduction to improve financial stability")
        if len(data.risk_factors) > 3:
            recs.append("Develop risk mitigation strategies to reduce business uncertainty")
        return recs


def _quality_multiplier(quality: Optional[DataQualityReport]) -> float:
    if quality is None:
        return 1.0
    penalty = (
        len(quality.outliers) * OUTLIER_PENALTY
        + len(quality.inconsistencies) * INCONSISTENCY_PENALTY
        + len(quality.missing_critical) * MISSING_DATA_PENALTY
    )
    return max(0.0, 1.0 - penalty)
