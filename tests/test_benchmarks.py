"""Tests for benchmark-normalized financial and growth dimension scoring."""
from __future__ import annotations

from datetime import date

import math

import pytest

from bizhealth_report.domain.models.financials import (
    BusinessFinancialData,
    BusinessOperationalData,
    BusinessProfile,
    Trajectory,
)
from bizhealth_report.domain.services.benchmarks import (
    FINANCIAL_ADVICE,
    GROWTH_ADVICE,
    BenchmarkScorer,
    competition_score,
    critical_field_coverage,
    determine_trajectory,
    expected_customer_base,
    normalize_to_score,
    operational_flexibility,
    score_consistency,
    score_financial,
    score_growth,
    weighted_average,
)

TODAY = date(2024, 1, 1)
OTHER_GROSS_BAND = {"poor": 0.2, "average": 0.3, "good": 0.4, "excellent": 0.55}


def make_restaurant():
    financial = BusinessFinancialData(
        revenue=500000.0,
        profit=60000.0,
        cash_flow=75000.0,
        gross_margin=35.0,
        total_assets=250000.0,
        liabilities=100000.0,
    )
    operational = BusinessOperationalData(employees=10, category="RESTAURANT")
    return financial, operational


def make_tech_startup():
    financial = BusinessFinancialData(revenue=500000.0, monthly_revenue=40000.0, yearly_growth=0.2)
    operational = BusinessOperationalData(
        established=date(2019, 1, 1),
        employees=4,
        customer_base=500,
        hours_of_operation="Flexible remote hours",
        days_open=["Mon", "Tue", "Wed", "Thu", "Fri"],
        seasonality="Year-round",
        competition="Niche offering",
        category="TECHNOLOGY",
    )
    return financial, operational


def test_normalize_to_score_segments():
    assert normalize_to_score(0.1, OTHER_GROSS_BAND) == 0.0
    assert normalize_to_score(0.2, OTHER_GROSS_BAND) == 0.0
    assert normalize_to_score(0.25, OTHER_GROSS_BAND) == pytest.approx(37.5)
    assert normalize_to_score(0.35, OTHER_GROSS_BAND) == pytest.approx(62.5)
    assert normalize_to_score(0.475, OTHER_GROSS_BAND) == pytest.approx(87.5)
    assert normalize_to_score(0.6, OTHER_GROSS_BAND) == 100.0


def test_weighted_average_skips_unweighted_and_nan():
    scores = {"a": 80.0, "b": 40.0, "c": math.nan, "d": 10.0}
    weights = {"a": 0.5, "b": 0.25, "c": 1.0}

    assert weighted_average(scores, weights) == pytest.approx(50.0 / 0.75)
    assert weighted_average({"a": 10.0}, {}) == 0.0


def test_financial_dimension_against_restaurant_benchmarks():
    financial, operational = make_restaurant()
    result = score_financial(financial, operational)

    assert result.components["gross_margin"] == pytest.approx(75.0)
    # 12% net margin against the scaled band 4.5 / 10 / 17.5 / 27
    assert result.components["net_margin"] == pytest.approx(50.0 + 2.0 / 7.5 * 25.0)
    assert result.components["profitability"] == pytest.approx(47.0 / 0.7)
    assert result.components["cash_flow_ratio"] == pytest.approx(75.0)
    assert result.components["working_capital"] == pytest.approx(75.0 + 25.0 / 3.0)
    assert result.components["liquidity"] == pytest.approx(45.0 + 100.0 / 3.0)
    assert result.components["revenue_per_employee"] == pytest.approx(50.0)
    assert result.components["asset_turnover"] == pytest.approx(75.0 + 0.2 / 1.2 * 25.0)
    assert result.score == pytest.approx(0.4 * 47.0 / 0.7 + 0.3 * (45.0 + 100.0 / 3.0) + 0.3 * (50.0 + 75.0 + 0.2 / 1.2 * 25.0) / 2)
    assert "Gross margin: 35.0%" in result.factors
    assert "Moderate profitability performance" in result.factors
    assert "Strong liquidity position" in result.factors
    assert "Moderate operational efficiency" in result.factors
    assert result.recommendations == []


def test_loss_making_profile_gets_profitability_advice():
    financial = BusinessFinancialData(revenue=100000.0, profit=-20000.0)
    result = score_financial(financial, BusinessOperationalData(category="RETAIL"))

    assert result.components["profitability"] == 0.0
    assert "Significant profitability challenges" in result.factors
    assert result.recommendations == list(FINANCIAL_ADVICE.values())
    assert result.score == 0.0


def test_growth_dimension_for_young_tech_business():
    financial, operational = make_tech_startup()
    result = score_growth(financial, operational, today=TODAY)

    # 20% growth against the GROWING band 5 / 15 / 30 / 50
    assert result.components["yearly_growth"] == pytest.approx(50.0 + 0.05 / 0.15 * 25.0)
    assert result.components["revenue_consistency"] == 100.0
    assert result.components["category_potential"] == 85.0
    assert result.components["customer_base"] == 60.0
    assert result.components["competition_level"] == 80.0
    assert result.components["market_expansion"] == pytest.approx(75.0)
    assert result.components["employee_scalability"] == pytest.approx(31.25)
    assert result.components["operational_flexibility"] == 75.0
    assert result.components["scalability"] == pytest.approx(38.75 / 0.75)
    assert result.score == pytest.approx(68.25)
    assert "Moderate growth performance" in result.factors
    assert "Revenue consistency: 96.0%" in result.factors
    assert result.recommendations == []


def test_competition_keywords():
    assert competition_score(None) == (50, "Competition level not specified")
    assert competition_score("Crowded downtown strip") == (25, "Competition level assessed as high")
    assert competition_score("Niche offering") == (80, "Competition level assessed as low")
    assert competition_score("Some local rivals") == (55, "Competition level assessed as moderate")
    assert competition_score("Regional players") == (50, "Competition level assessed as moderate")


def test_expected_customer_base_scales_with_age():
    assert expected_customer_base("restaurant", 10.0) == {
        "poor": 200.0,
        "average": 600.0,
        "good": 1600.0,
        "excellent": 4000.0,
    }
    assert expected_customer_base("Pet Grooming", 2.5)["good"] == 375.0
    assert expected_customer_base("RETAIL", 40.0)["poor"] == 400.0


def test_restricted_operations_reduce_flexibility():
    score, factors = operational_flexibility(
        BusinessOperationalData(
            hours_of_operation="Limited evening hours",
            days_open=["Sat", "Sun"],
            seasonality="Highly seasonal",
        )
    )

    assert score == 20.0
    assert len(factors) == 3
    assert operational_flexibility(BusinessOperationalData()) == (50.0, [])


def test_score_consistency_bands():
    factors = []
    assert score_consistency([], factors) == 50.0
    assert score_consistency([0.0, 40.0], factors) == 70.0
    assert score_consistency([60.0, 65.0], factors) == 95.0
    assert score_consistency([30.0, 80.0], factors) == 70.0
    assert score_consistency([10.0, 90.0], factors) == 50.0
    assert len(factors) == 5


def test_critical_field_coverage():
    financial = BusinessFinancialData(revenue=100000.0, profit=10000.0)
    operational = BusinessOperationalData(established=date(2015, 1, 1), employees=3)

    assert critical_field_coverage(financial, operational) == pytest.approx(0.75)
    assert critical_field_coverage(BusinessFinancialData(), BusinessOperationalData()) == 0.0


def test_trajectory_rules():
    assert determine_trajectory(-0.1, {"financial": 90.0, "growth": 90.0}) is Trajectory.DECLINING
    assert determine_trajectory(0.3, {"financial": 10.0, "growth": 10.0}) is Trajectory.IMPROVING
    assert determine_trajectory(0.05, {"financial": 80.0, "growth": 65.0}) is Trajectory.IMPROVING
    assert determine_trajectory(None, {"financial": 50.0, "growth": 50.0}) is Trajectory.STABLE
    assert determine_trajectory(None, {"financial": 45.0, "growth": 30.0}) is Trajectory.DECLINING
    assert determine_trajectory(None, {"financial": 90.0, "growth": 40.0}) is Trajectory.VOLATILE


def test_empty_profile_is_scored_on_what_it_carries():
    result = BenchmarkScorer().score(BusinessProfile(business_name="Blank"), today=TODAY)

    assert result.financial.score == 0.0
    assert result.growth.score == pytest.approx(50.0)
    assert result.overall == pytest.approx(12.5 / 0.65)
    assert result.trajectory is Trajectory.VOLATILE
    assert result.growth.recommendations == [GROWTH_ADVICE["revenue_growth"]]
    # completeness 0, data quality (85 + 60) / 2, one measurable dimension
    assert result.confidence == pytest.approx(72.5 * 0.35 + 70.0 * 0.25)
    assert result.confidence_factors[-1].startswith("Low confidence")


def test_scorer_falls_back_to_industry_for_category():
    profile = BusinessProfile(industry="technology", annual_revenue=500000.0, employees=4)
    result = BenchmarkScorer().score(profile, today=TODAY)

    assert result.growth.components["category_potential"] == 85.0
    assert result.growth.components["employee_scalability"] == pytest.approx(31.25)
