"""Valuation inputs and outputs."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from bizhealth_report.domain.models.financials import (
    BusinessProfile,
    FinancialRatios,
    FinancialStatement,
)


@dataclass
class ValuationInput:
    """Normalized business, financial and qualitative input for valuation."""

    company_name: str = ""
    industry: str = "Other"
    annual_revenue: float = 0.0
    gross_profit: float = 0.0
    net_income: float = 0.0
    total_assets: float = 0.0
    total_liabilities: float = 0.0
    cash_flow: float = 0.0
    previous_year_revenue: float = 0.0
    debt_to_equity: float = 0.0
    current_ratio: float = 0.0
    market_position: str = "follower"
    growth_stage: str = "mature"
    market_size: str = "medium"
    customer_concentration: str = "low"
    regulatory_risk: str = "low"
    risk_factors: List[str] = field(default_factory=list)
    competitive_advantages: List[str] = field(default_factory=list)
    evaluation_date: Optional[date] = None

    @classmethod
    def from_analysis(
        cls,
        profile: BusinessProfile,
        statement: FinancialStatement,
        ratios: FinancialRatios,
        *,
        previous_revenue: Optional[float] = None,
        evaluation_date: Optional[date] = None,
    ) -> "ValuationInput":
        """Combine the raw profile with the normalized statement and its ratios."""
        if previous_revenue is None:
            previous_revenue = profile.previous_year_revenue
        return cls(
            company_name=profile.business_name or "",
            industry=profile.industry or "Other",
            annual_revenue=statement.revenue,
            gross_profit=statement.gross_profit,
            net_income=statement.net_income,
            total_assets=statement.total_assets,
            total_liabilities=statement.total_liabilities,
            cash_flow=statement.cash_flow,
            previous_year_revenue=float(previous_revenue or 0.0),
            debt_to_equity=ratios.debt_to_equity,
            current_ratio=ratios.current_ratio,
            market_position=(profile.market_position or "follower").lower(),
            growth_stage=(profile.growth_stage or "mature").lower(),
            market_size=(profile.market_size or "medium").lower(),
            customer_concentration=(profile.customer_concentration or "low").lower(),
            regulatory_risk=(profile.regulatory_risk or "low").lower(),
            risk_factors=list(profile.risk_factors),
            competitive_advantages=list(profile.competitive_advantages),
            evaluation_date=evaluation_date,
        )


@dataclass
class ValuationMethod:
    name: str
    value: float
    weight: float  # percent of total confidence
    confidence: float
    description: str = ""


@dataclass
class ValuationRange:
    low: float
    high: float


@dataclass
class ValuationResult:
    company_name: str
    evaluation_date: Optional[date]
    estimated_value: float
    range: ValuationRange
    confidence_score: float
    methods: List[ValuationMethod]
    adjustment_factors: Dict[str, float]
    key_metrics: Dict[str, float]
    recommendations: List[str] = field(default_factory=list)
    risk_factors: List[str] = field(default_factory=list)
