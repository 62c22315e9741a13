from __future__ import annotations

from datetime import date

import pytest

from bizhealth_report.domain.models.financials import (
    CategoryScores,
    DataQualityReport,
    FinancialHealthScore,
    RiskLevel,
)
from bizhealth_report.domain.models.valuation import ValuationInput
from bizhealth_report.domain.services.valuation import ValuationEngine


def make_input(**overrides) -> ValuationInput:
    data = {
        "company_name": "Acme Software",
        "industry": "Technology - Software",
        "annual_revenue": 2_000_000.0,
        "gross_profit": 1_200_000.0,
        "net_income": 300_000.0,
        "total_assets": 2_000_000.0,
        "total_liabilities": 800_000.0,
        "cash_flow": 360_000.0,
        "previous_year_revenue": 1_600_000.0,
        "debt_to_equity": 0.67,
        "current_ratio": 1.5,
        "market_position": "leader",
        "growth_stage": "growth",
        "market_size": "large",
        "customer_concentration": "medium",
        "risk_factors": ["Key person dependency"],
        "evaluation_date": date(2024, 12, 31),
    }
    data.update(overrides)
    return ValuationInput(**data)


def test_adjustment_factors():
    factors = ValuationEngine().adjustment_factors(make_input())

    # 25% growth with a growth-stage company
    assert factors["growth"] == pytest.approx(1.15 * 1.1)
    # one risk factor plus medium customer concentration
    assert factors["risk"] == pytest.approx(0.93)
    assert factors["market_position"] == pytest.approx(1.2 * 1.05)
    assert factors["size"] == 0.95


def test_method_confidences_and_weights():
    result = ValuationEngine().run(make_input())

    assert [m.name for m in result.methods] == [
        "Revenue Multiple",
        "EBITDA Multiple",
        "P/E Ratio",
        "Asset-Based",
        "Discounted Cash Flow",
    ]
    assert [m.confidence for m in result.methods] == [95.0, 95.0, 95.0, 75.0, 80.0]
    assert sum(m.weight for m in result.methods) == pytest.approx(100.0)
    assert result.confidence_score == pytest.approx(88.0)
    assert result.key_metrics["revenue_multiple"] == pytest.approx(8.0)
    assert result.key_metrics["growth_rate"] == pytest.approx(25.0)
    assert result.evaluation_date == date(2024, 12, 31)


def test_methods_share_the_combined_adjustment():
    engine = ValuationEngine()
    data = make_input()
    raw = engine.methods(data)
    combined = 1.0
    for value in engine.adjustment_factors(data).values():
        combined *= value

    result = engine.run(data)
    for before, after in zip(raw, result.methods):
        assert after.value == pytest.approx(before.value * combined)
    values = [m.value for m in result.methods]
    assert result.range.low == min(values)
    assert result.range.high == max(values)
    assert result.range.low <= result.estimated_value <= result.range.high


def test_identical_input_gives_identical_result():
    engine = ValuationEngine()
    assert engine.run(make_input()) == engine.run(make_input())


def test_unknown_industry_uses_keyword_multiple_and_defaults():
    engine = ValuationEngine()
    data = make_input(
        industry="Boutique SaaS platform",
        previous_year_revenue=0.0,
        growth_stage="mature",
    )
    result = engine.run(data)

    assert engine.revenue_multiple("Boutique SaaS platform") == 6.0
    assert result.key_metrics["revenue_multiple"] == pytest.approx(6.0)
    # no prior revenue means the default 5% growth, which is not above 5%
    assert engine.growth_rate(data) == 0.05
    assert result.adjustment_factors["growth"] == pytest.approx(0.9)
    # no table hit and no prior revenue
    assert result.methods[0].confidence == 85.0
    assert "Focus on growth initiatives to improve revenue trajectory" not in result.recommendations


def test_unknown_qualitative_tags_are_neutral():
    factors = ValuationEngine().adjustment_factors(
        make_input(market_position="dominant", market_size="galactic", growth_stage="unicorn")
    )
    assert factors["market_position"] == 1.0
    assert factors["growth"] == pytest.approx(1.15)


def test_risk_adjustment_is_floored():
    factors = ValuationEngine().adjustment_factors(
        make_input(
            risk_factors=[f"risk {i}" for i in range(10)],
            customer_concentration="high",
            regulatory_risk="high",
        )
    )
    assert factors["risk"] == 0.7


def test_discount_rate_for_small_business():
    data = make_input(annual_revenue=500_000.0, risk_factors=["a", "b"])
    assert ValuationEngine.discount_rate(data) == pytest.approx(0.15)


def test_quality_issues_lower_confidence():
    quality = DataQualityReport(
        completeness={},
        outliers=["revenue_unusually_high"],
        inconsistencies=["profit_exceeds_revenue"],
        missing_critical=["profit"],
    )
    engine = ValuationEngine()
    baseline = engine.run(make_input()).confidence_score
    result = engine.run(make_input(), quality=quality)

    assert result.confidence_score == pytest.approx(baseline * 0.7)


def test_poor_health_adds_risk_factor():
    health = FinancialHealthScore(
        overall_score=20,
        category_scores=CategoryScores(),
        risk_level=RiskLevel.CRITICAL,
    )
    result = ValuationEngine().run(make_input(), health=health)

    assert result.key_metrics["health_score"] == 20.0
    assert result.risk_factors == ["Key person dependency", "Financial health risk level: Critical"]


def test_recommendations():
    result = ValuationEngine().run(
        make_input(
            previous_year_revenue=2_100_000.0,
            net_income=100_000.0,
            debt_to_equity=2.5,
            risk_factors=["a", "b", "c", "d"],
        )
    )
    assert result.recommendations == [
        "Focus on growth initiatives to improve revenue trajectory",
        "Improve operational efficiency to increase profit margins",
        "Consider debt reduction to improve financial stability",
        "Develop risk mitigation strategies to reduce business uncertainty",
    ]
