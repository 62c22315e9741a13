"""Domain models describing the financial data exchanged between services."""
from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from datetime import date, datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

if TYPE_CHECKING:
    from bizhealth_report.domain.models.valuation import ValuationResult


class Period(str, Enum):
    Q1 = "Q1"
    Q2 = "Q2"
    Q3 = "Q3"
    Q4 = "Q4"
    ANNUAL = "Annual"


class Trend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class Volatility(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class CashFlowPredictability(str, Enum):
    STABLE = "Stable"
    VARIABLE = "Variable"
    VOLATILE = "Volatile"


class Trajectory(str, Enum):
    IMPROVING = "IMPROVING"
    STABLE = "STABLE"
    DECLINING = "DECLINING"
    VOLATILE = "VOLATILE"


# Numeric statement fields that trend analysis can be asked about
STATEMENT_METRICS = (
    "revenue",
    "gross_profit",
    "operating_income",
    "net_income",
    "total_assets",
    "total_liabilities",
    "equity",
    "cash_flow",
    "operating_expenses",
    "cost_of_goods_sold",
)

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def snake_key(key: str) -> str:
    """Map ``grossProfit`` style keys to ``gross_profit``."""
    return _CAMEL_RE.sub("_", key).lower()


def _normalize_keys(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {snake_key(str(k)): v for k, v in data.items()}


def _as_utc_datetime(value: Any) -> datetime:
    """Coerce dates, naive datetimes and ISO strings into aware UTC datetimes."""
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    raise ValueError(f"Unsupported statement date: {value!r}")


def _as_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, int):
        return date(value, 1, 1)
    text = str(value).strip()
    if len(text) == 4 and text.isdigit():
        return date(int(text), 1, 1)
    return _as_utc_datetime(text).date()


@dataclass(frozen=True)
class FinancialStatement:
    """Normalized income/balance-sheet snapshot for one reporting period.

    ``equity`` falls back to ``total_assets - total_liabilities`` when omitted.
    The relationships between fields are advisory only and never enforced.
    """

    revenue: float = 0.0
    gross_profit: float = 0.0
    operating_income: float = 0.0
    net_income: float = 0.0
    total_assets: float = 0.0
    total_liabilities: float = 0.0
    equity: Optional[float] = None
    cash_flow: float = 0.0
    operating_expenses: float = 0.0
    cost_of_goods_sold: float = 0.0
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    period: Period = Period.ANNUAL

    def __post_init__(self) -> None:
        # Frozen dataclass: normalization has to go through object.__setattr__.
        if self.equity is None:
            object.__setattr__(self, "equity", self.total_assets - self.total_liabilities)
        object.__setattr__(self, "date", _as_utc_datetime(self.date))
        object.__setattr__(self, "period", Period(self.period))

    def metric(self, name: str) -> float:
        """Return a numeric field by snake_case or camelCase name."""
        key = snake_key(name)
        if key not in STATEMENT_METRICS:
            raise ValueError(f"Unknown statement metric: {name}")
        return float(getattr(self, key))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FinancialStatement":
        """Rebuild a statement from its JSON form (snake_case or camelCase keys)."""
        raw = _normalize_keys(data)
        kwargs: Dict[str, Any] = {}
        for name in STATEMENT_METRICS:
            if raw.get(name) is not None:
                kwargs[name] = float(raw[name])
        if raw.get("date") is not None:
            kwargs["date"] = raw["date"]
        if raw.get("period") is not None:
            kwargs["period"] = raw["period"]
        return cls(**kwargs)


@dataclass
class BusinessFinancialData:
    """Financial figures as entered on the listing form, all optional."""

    revenue: Optional[float] = None
    profit: Optional[float] = None
    cash_flow: Optional[float] = None
    ebitda: Optional[float] = None
    gross_margin: Optional[float] = None
    net_margin: Optional[float] = None
    monthly_revenue: Optional[float] = None
    yearly_growth: Optional[float] = None
    asking_price: Optional[float] = None
    total_assets: Optional[float] = None
    liabilities: Optional[float] = None


@dataclass
class BusinessOperationalData:
    """Operational facts as entered on the listing form, all optional."""

    established: Optional[date] = None
    employees: Optional[int] = None
    customer_base: Optional[int] = None
    hours_of_operation: Optional[str] = None
    days_open: List[str] = field(default_factory=list)
    seasonality: Optional[str] = None
    competition: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None


@dataclass
class BusinessProfile:
    """Raw business profile supplied by the form/persistence layer."""

    business_name: Optional[str] = None
    industry: Optional[str] = None
    category: Optional[str] = None
    business_type: Optional[str] = None
    annual_revenue: Optional[float] = None
    monthly_profit: Optional[float] = None
    monthly_revenue: Optional[float] = None
    annual_profit: Optional[float] = None
    yearly_growth: Optional[float] = None
    ebitda: Optional[float] = None
    cash_flow: Optional[float] = None
    gross_margin: Optional[float] = None
    net_margin: Optional[float] = None
    asking_price: Optional[float] = None
    assets: Optional[float] = None
    liabilities: Optional[float] = None
    previous_year_revenue: Optional[float] = None
    established: Optional[date] = None
    employees: Optional[int] = None
    customer_base: Optional[int] = None
    hours_of_operation: Optional[str] = None
    days_open: List[str] = field(default_factory=list)
    seasonality: Optional[str] = None
    competition: Optional[str] = None
    description: Optional[str] = None
    # Qualitative tags
    market_position: Optional[str] = None
    growth_stage: Optional[str] = None
    market_size: Optional[str] = None
    customer_concentration: Optional[str] = None
    regulatory_risk: Optional[str] = None
    risk_factors: List[str] = field(default_factory=list)
    competitive_advantages: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BusinessProfile":
        """Build a profile from form JSON, ignoring keys the core does not use."""
        raw = _normalize_keys(data)
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in raw.items() if k in known and v is not None}
        if "established" in kwargs:
            kwargs["established"] = _as_date(kwargs["established"])
        for list_key in ("days_open", "risk_factors", "competitive_advantages"):
            if list_key in kwargs:
                kwargs[list_key] = list(kwargs[list_key])
        return cls(**kwargs)

    def yearly_profit(self) -> Optional[float]:
        if self.annual_profit is not None:
            return self.annual_profit
        if self.monthly_profit is not None:
            return self.monthly_profit * 12
        return None

    def financial_data(self) -> BusinessFinancialData:
        return BusinessFinancialData(
            revenue=self.annual_revenue,
            profit=self.yearly_profit(),
            cash_flow=self.cash_flow,
            ebitda=self.ebitda,
            gross_margin=self.gross_margin,
            net_margin=self.net_margin,
            monthly_revenue=self.monthly_revenue,
            yearly_growth=self.yearly_growth,
            asking_price=self.asking_price,
            total_assets=self.assets,
            liabilities=self.liabilities,
        )

    def operational_data(self) -> BusinessOperationalData:
        return BusinessOperationalData(
            established=self.established,
            employees=self.employees,
            customer_base=self.customer_base,
            hours_of_operation=self.hours_of_operation,
            days_open=list(self.days_open),
            seasonality=self.seasonality,
            competition=self.competition,
            category=self.category,
            description=self.description,
        )


@dataclass(frozen=True)
class FinancialRatios:
    """Flat ratio record derived from exactly one statement (percentages where noted)."""

    # Profitability (percent)
    gross_profit_margin: float
    operating_margin: float
    net_profit_margin: float
    return_on_assets: float
    return_on_equity: float
    # Liquidity
    current_ratio: float
    quick_ratio: float
    cash_ratio: float
    # Efficiency
    asset_turnover: float
    inventory_turnover: float
    receivables_turnover: float
    # Leverage (debt_to_assets in percent)
    debt_to_equity: float
    debt_to_assets: float
    interest_coverage: float
    # Growth (percent)
    revenue_growth_rate: float
    profit_growth_rate: float
    asset_growth_rate: float


@dataclass
class TrendAnalysis:
    metric: str
    current_value: float
    previous_value: float
    change_amount: float
    change_percent: float
    trend: Trend
    volatility: Volatility
    projection: float
    confidence: int


@dataclass
class CategoryScores:
    profitability: int = 0
    liquidity: int = 0
    efficiency: int = 0
    leverage: int = 0
    growth: int = 0

    def values(self) -> List[int]:
        return [self.profitability, self.liquidity, self.efficiency, self.leverage, self.growth]


@dataclass
class FinancialHealthScore:
    """Composite 0-100 score plus the narrative produced by the rule table."""

    overall_score: int
    category_scores: CategoryScores
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    risk_level: RiskLevel = RiskLevel.CRITICAL


@dataclass
class CashFlowAnalysis:
    operating_cash_flow: float
    investing_cash_flow: float
    financing_cash_flow: float
    free_cash_flow: float
    cash_flow_margin: float
    cash_conversion_cycle: float
    predictability: CashFlowPredictability
    burn_rate: Optional[float] = None


@dataclass
class ScenarioOutcome:
    revenue: float
    profit: float


@dataclass
class ScenarioAnalysis:
    optimistic: ScenarioOutcome
    realistic: ScenarioOutcome
    pessimistic: ScenarioOutcome


@dataclass
class FinancialForecast:
    period: int  # months ahead
    projected_revenue: float
    projected_profit: float
    projected_cash_flow: float
    confidence: int
    assumptions: List[str]
    scenario_analysis: ScenarioAnalysis


@dataclass
class DataQualityReport:
    """Advisory data checks; never blocks an analysis."""

    completeness: Dict[str, float]
    outliers: List[str] = field(default_factory=list)
    inconsistencies: List[str] = field(default_factory=list)
    quality_score: float = 0.0
    factors: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    missing_critical: List[str] = field(default_factory=list)

    @property
    def overall_completeness(self) -> float:
        if not self.completeness:
            return 0.0
        return sum(self.completeness.values()) / len(self.completeness)


@dataclass
class DimensionScore:
    """One benchmark dimension: 0-100 score plus the sub-scores behind it."""

    score: float
    components: Dict[str, float] = field(default_factory=dict)
    factors: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


@dataclass
class BenchmarkScores:
    """Profile scored against industry and maturity benchmarks."""

    overall: float
    financial: DimensionScore
    growth: DimensionScore
    confidence: float
    trajectory: Trajectory
    confidence_factors: List[str] = field(default_factory=list)


@dataclass
class AnalysisReport:
    """All outputs of one analysis request, ready for JSON serialization."""

    statement: FinancialStatement
    ratios: FinancialRatios
    health_score: FinancialHealthScore
    cash_flow_analysis: CashFlowAnalysis
    forecast: Optional[FinancialForecast] = None
    trends: List[TrendAnalysis] = field(default_factory=list)
    data_quality: Optional[DataQualityReport] = None
    valuation: Optional["ValuationResult"] = None
    benchmarks: Optional[BenchmarkScores] = None
