"""Heuristic coefficients, benchmark tables and scoring constants.

Profiles coming from the listing form rarely carry a full balance sheet, so the
statement builder and the ratio calculator fill the gaps with fixed proportions.
Every such proportion lives in :class:`EstimationConstants` so the values stay
auditable in one place and can be swapped per analysis run. The defaults are
coarse approximations (equity in particular is only ``assets - 0.4 * assets``)
and are kept as-is so results stay comparable across releases.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class EstimationConstants:
    """Fixed proportions used where the raw profile leaves a figure blank."""

    # Statement builder
    service_gross_margin: float = 0.4
    default_gross_margin: float = 0.3
    operating_expense_ratio: float = 0.3
    months_per_year: int = 12
    asset_to_revenue: float = 1.0
    liability_to_asset: float = 0.4
    cash_flow_to_net_income: float = 1.2

    # Balance sheet proxies for ratios
    current_asset_ratio: float = 0.6
    current_liability_ratio: float = 0.7
    quick_asset_ratio: float = 0.4
    cash_on_hand_ratio: float = 0.2
    inventory_ratio: float = 0.2
    receivables_ratio: float = 0.15
    interest_rate: float = 0.05

    # Cash flow estimates
    free_cash_flow_ratio: float = 0.85
    investing_to_revenue: float = -0.05
    financing_to_liabilities: float = 0.1
    days_in_year: int = 365
    payables_days: int = 30

    # Forecast
    forecast_cash_flow_ratio: float = 1.2
    optimistic_revenue: float = 1.2
    optimistic_profit: float = 1.3
    pessimistic_revenue: float = 0.8
    pessimistic_profit: float = 0.6

    # Trend and dispersion bands
    stable_change_percent: float = 2.0
    volatility_low: float = 0.1
    volatility_medium: float = 0.3
    predictability_stable: float = 0.15
    predictability_variable: float = 0.35


DEFAULT_CONSTANTS = EstimationConstants()


Band = Dict[str, float]

# Gross margin thresholds by business category
GROSS_MARGIN_BENCHMARKS: Dict[str, Band] = {
    "RESTAURANT": {"poor": 0.15, "average": 0.25, "good": 0.35, "excellent": 0.45},
    "RETAIL": {"poor": 0.2, "average": 0.3, "good": 0.4, "excellent": 0.5},
    "ECOMMERCE": {"poor": 0.25, "average": 0.35, "good": 0.45, "excellent": 0.6},
    "TECHNOLOGY": {"poor": 0.4, "average": 0.6, "good": 0.75, "excellent": 0.85},
    "MANUFACTURING": {"poor": 0.15, "average": 0.25, "good": 0.35, "excellent": 0.45},
    "SERVICES": {"poor": 0.3, "average": 0.45, "good": 0.6, "excellent": 0.75},
    "HEALTHCARE": {"poor": 0.25, "average": 0.35, "good": 0.45, "excellent": 0.6},
    "REAL_ESTATE": {"poor": 0.2, "average": 0.3, "good": 0.45, "excellent": 0.6},
    "AUTOMOTIVE": {"poor": 0.15, "average": 0.2, "good": 0.3, "excellent": 0.4},
    "ENTERTAINMENT": {"poor": 0.2, "average": 0.35, "good": 0.5, "excellent": 0.65},
    "EDUCATION": {"poor": 0.25, "average": 0.4, "good": 0.55, "excellent": 0.7},
    "OTHER": {"poor": 0.2, "average": 0.3, "good": 0.4, "excellent": 0.55},
}

# Revenue per employee, in thousands
EMPLOYEE_EFFICIENCY_BENCHMARKS: Dict[str, Band] = {
    "RESTAURANT": {"poor": 30, "average": 50, "good": 70, "excellent": 100},
    "RETAIL": {"poor": 80, "average": 120, "good": 160, "excellent": 220},
    "ECOMMERCE": {"poor": 150, "average": 250, "good": 400, "excellent": 600},
    "TECHNOLOGY": {"poor": 100, "average": 200, "good": 350, "excellent": 500},
    "MANUFACTURING": {"poor": 80, "average": 150, "good": 250, "excellent": 400},
    "SERVICES": {"poor": 60, "average": 100, "good": 150, "excellent": 250},
    "HEALTHCARE": {"poor": 100, "average": 150, "good": 200, "excellent": 300},
    "REAL_ESTATE": {"poor": 200, "average": 350, "good": 500, "excellent": 750},
    "AUTOMOTIVE": {"poor": 100, "average": 180, "good": 280, "excellent": 400},
    "ENTERTAINMENT": {"poor": 50, "average": 100, "good": 200, "excellent": 350},
    "EDUCATION": {"poor": 40, "average": 70, "good": 120, "excellent": 200},
    "OTHER": {"poor": 60, "average": 120, "good": 200, "excellent": 300},
}

# Revenue growth expectations by business maturity
REVENUE_GROWTH_BENCHMARKS: Dict[str, Band] = {
    "NEW": {"poor": 0.1, "average": 0.25, "good": 0.5, "excellent": 1.0},
    "GROWING": {"poor": 0.05, "average": 0.15, "good": 0.3, "excellent": 0.5},
    "MATURE": {"poor": 0.02, "average": 0.05, "good": 0.15, "excellent": 0.25},
    "ESTABLISHED": {"poor": 0.0, "average": 0.03, "good": 0.08, "excellent": 0.15},
}

# Years in operation at which a business leaves each maturity band
MATURITY_THRESHOLDS: Tuple[Tuple[str, float], ...] = (
    ("NEW", 2),
    ("GROWING", 5),
    ("MATURE", 10),
)

REVENUE_OUTLIER_MULTIPLIER = 10
PROFIT_MARGIN_MAX = 0.95
PROFIT_MARGIN_MIN = -0.5
GROWTH_RATE_MAX = 5.0

MISSING_DATA_PENALTY = 0.1
INCONSISTENCY_PENALTY = 0.15
OUTLIER_PENALTY = 0.05

CRITICAL_FINANCIAL_FIELDS: Tuple[str, ...] = ("revenue", "profit")
CRITICAL_OPERATIONAL_FIELDS: Tuple[str, ...] = ("established", "employees")

COMPLETENESS_FIELDS: Dict[str, Tuple[str, ...]] = {
    "financial": (
        "revenue",
        "profit",
        "cash_flow",
        "ebitda",
        "gross_margin",
        "net_margin",
        "total_assets",
        "liabilities",
    ),
    "growth": ("revenue", "yearly_growth", "monthly_revenue", "customer_base", "category"),
    "operational": (
        "established",
        "employees",
        "hours_of_operation",
        "days_open",
        "seasonality",
        "competition",
    ),
    "saleReadiness": ("asking_price", "revenue", "profit", "description", "category"),
}

CRITICAL_DIMENSION_FIELDS: Dict[str, Tuple[str, ...]] = {
    "financial": ("revenue", "profit"),
    "growth": ("revenue", "yearly_growth"),
    "operational": ("established", "employees"),
    "saleReadiness": ("asking_price", "revenue"),
}

# Benchmark dimension scoring
DIMENSION_WEIGHTS: Dict[str, float] = {"financial": 0.4, "growth": 0.25}
FINANCIAL_WEIGHTS: Dict[str, float] = {"profitability": 0.4, "liquidity": 0.3, "efficiency": 0.3}
GROWTH_WEIGHTS: Dict[str, float] = {"revenue_growth": 0.5, "market_expansion": 0.3, "scalability": 0.2}

# Net and EBITDA margin bands are scaled from the category gross margin band
NET_MARGIN_SCALE: Tuple[float, float, float, float] = (0.3, 0.4, 0.5, 0.6)
EBITDA_MARGIN_SCALE: Tuple[float, float, float, float] = (0.6, 0.7, 0.8, 0.9)

CASH_FLOW_RATIO_BAND: Band = {"poor": -0.1, "average": 0.05, "good": 0.15, "excellent": 0.25}
WORKING_CAPITAL_BAND: Band = {"poor": -0.2, "average": 0.1, "good": 0.25, "excellent": 0.4}
ASSET_TURNOVER_BAND: Band = {"poor": 0.5, "average": 1.0, "good": 1.8, "excellent": 3.0}
REVENUE_CONSISTENCY_BAND: Band = {"poor": 0.5, "average": 0.7, "good": 0.85, "excellent": 0.95}
ASSET_EFFICIENCY_BAND: Band = {"poor": 0.3, "average": 0.8, "good": 1.5, "excellent": 2.5}

# Market growth potential (0-100) and outlook by category
CATEGORY_GROWTH_POTENTIAL: Dict[str, Tuple[int, str]] = {
    "TECHNOLOGY": (85, "High growth potential in tech sector"),
    "ECOMMERCE": (80, "Strong digital commerce growth"),
    "HEALTHCARE": (75, "Growing healthcare demand"),
    "SERVICES": (70, "Stable services market growth"),
    "EDUCATION": (65, "Moderate education sector expansion"),
    "ENTERTAINMENT": (60, "Entertainment market opportunities"),
    "RETAIL": (55, "Retail sector transformation ongoing"),
    "REAL_ESTATE": (50, "Variable real estate market conditions"),
    "MANUFACTURING": (45, "Manufacturing sector challenges"),
    "RESTAURANT": (40, "Competitive restaurant market"),
    "AUTOMOTIVE": (35, "Automotive industry disruption"),
    "OTHER": (50, "Market conditions vary by specific industry"),
}

# Expected customer counts for a five-year-old business
CUSTOMER_BASE_BENCHMARKS: Dict[str, Band] = {
    "RESTAURANT": {"poor": 100, "average": 300, "good": 800, "excellent": 2000},
    "RETAIL": {"poor": 200, "average": 500, "good": 1200, "excellent": 3000},
    "ECOMMERCE": {"poor": 500, "average": 2000, "good": 8000, "excellent": 25000},
    "TECHNOLOGY": {"poor": 50, "average": 200, "good": 800, "excellent": 3000},
    "SERVICES": {"poor": 75, "average": 200, "good": 500, "excellent": 1500},
    "OTHER": {"poor": 100, "average": 300, "good": 750, "excellent": 2000},
}

# Revenue per employee, in thousands, that a business can scale from
SCALABILITY_BENCHMARKS: Dict[str, Band] = {
    "TECHNOLOGY": {"poor": 100, "average": 200, "good": 350, "excellent": 500},
    "ECOMMERCE": {"poor": 150, "average": 250, "good": 400, "excellent": 600},
    "SERVICES": {"poor": 60, "average": 100, "good": 150, "excellent": 250},
    "RETAIL": {"poor": 80, "average": 120, "good": 160, "excellent": 220},
    "OTHER": {"poor": 60, "average": 120, "good": 200, "excellent": 300},
}

# Checked in order; the first level whose keyword appears wins
COMPETITION_LEVELS: Tuple[Tuple[str, int, Tuple[str, ...]], ...] = (
    ("high", 25, ("saturated", "intense", "fierce", "many competitors", "crowded", "difficult")),
    ("low", 80, ("limited", "little", "minimal", "niche", "unique", "first")),
    ("moderate", 55, ("moderate", "some", "few competitors", "competitive")),
)
