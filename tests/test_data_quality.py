"""Tests for benchmark lookups and advisory data-quality checks."""
from __future__ import annotations

from datetime import date

from bizhealth_report.domain.models.financials import (
    BusinessFinancialData,
    BusinessOperationalData,
    BusinessProfile,
)
from bizhealth_report.domain.services.data_quality import (
    DataQualityChecker,
    calculate_data_completeness,
    detect_outliers,
    get_business_maturity,
    get_growth_benchmarks,
    get_industry_benchmarks,
    validate_data_consistency,
)


def test_benchmarks_fall_back_to_other():
    assert get_industry_benchmarks("restaurant")["gross_margin"]["average"] == 0.25
    assert get_industry_benchmarks("Pet Grooming") == get_industry_benchmarks("OTHER")
    assert get_industry_benchmarks(None)["employee_efficiency"]["average"] == 120


def test_business_maturity_bands():
    today = date(2024, 1, 1)
    assert get_business_maturity(None, today) == "NEW"
    assert get_business_maturity(date(2023, 1, 1), today) == "NEW"
    assert get_business_maturity(date(2020, 1, 1), today) == "GROWING"
    assert get_business_maturity(date(2017, 1, 1), today) == "MATURE"
    assert get_business_maturity(date(1990, 1, 1), today) == "ESTABLISHED"
    assert get_growth_benchmarks(date(1990, 1, 1), today)["average"] == 0.03


def test_restaurant_revenue_far_above_benchmark_is_outlier():
    financial = BusinessFinancialData(revenue=5_000_000.0, profit=400_000.0)
    outliers = detect_outliers(financial, "RESTAURANT", employees=2)
    assert "revenue_unusually_high" in outliers
    # 50k per employee * 2 employees * 10 = 1M; below that is fine
    assert "revenue_unusually_high" not in detect_outliers(
        BusinessFinancialData(revenue=900_000.0), "RESTAURANT", employees=2
    )


def test_margin_and_growth_outliers():
    assert detect_outliers(BusinessFinancialData(revenue=100.0, profit=99.0)) == ["profit_margin_unusually_high"]
    assert detect_outliers(BusinessFinancialData(revenue=100.0, profit=-60.0)) == ["profit_margin_unusually_low"]
    assert detect_outliers(BusinessFinancialData(yearly_growth=-6.0)) == ["growth_rate_extreme"]
    assert detect_outliers(BusinessFinancialData()) == []


def test_profit_exceeding_revenue_is_flagged():
    issues = validate_data_consistency(BusinessFinancialData(revenue=100000.0, profit=120000.0))
    assert "profit_exceeds_revenue" in issues


def test_other_consistency_checks():
    issues = validate_data_consistency(
        BusinessFinancialData(
            revenue=100000.0,
            profit=10000.0,
            ebitda=5000.0,
            monthly_revenue=5000.0,
            cash_flow=100000.0,
            total_assets=-5.0,
        )
    )
    assert issues == [
        "ebitda_less_than_profit",
        "monthly_annual_revenue_mismatch",
        "cash_flow_profit_significant_variance",
        "negative_total_assets",
    ]
    # Zero assets reads as "not provided"
    assert validate_data_consistency(BusinessFinancialData(total_assets=0.0)) == []


def test_completeness_counts_populated_fields():
    financial = BusinessFinancialData(revenue=100000.0, profit=10000.0)
    operational = BusinessOperationalData(employees=3, days_open=[], description="", category="RETAIL")

    assert calculate_data_completeness(financial, operational, "financial") == 2 / 8
    assert calculate_data_completeness(financial, operational, "operational") == 1 / 6
    assert calculate_data_completeness(financial, operational, "saleReadiness") == 3 / 5


def test_assess_empty_profile_never_raises():
    report = DataQualityChecker().assess(BusinessProfile(), today=date(2024, 1, 1))

    assert report.outliers == []
    assert report.inconsistencies == []
    assert report.quality_score == 72.5
    assert report.overall_completeness == 0.0
    assert report.missing_critical == ["revenue", "profit"]
    assert "Provide missing critical financial data: revenue, profit" in report.recommendations
    assert "Provide missing operational information: established, employees" in report.recommendations
    assert "Business establishment date missing" in report.factors


def test_assess_penalizes_inconsistent_profile():
    profile = BusinessProfile(
        annual_revenue=100000.0,
        annual_profit=120000.0,
        established=date(2015, 1, 1),
        employees=4,
        description="x" * 150,
    )
    report = DataQualityChecker().assess(profile, today=date(2024, 1, 1))

    assert report.inconsistencies == ["profit_exceeds_revenue"]
    assert report.outliers == ["profit_margin_unusually_high"]
    # (85 - 40 - 30 - 10 + 90) / 2
    assert report.quality_score == 47.5
    assert report.recommendations == [
        "Consider providing additional financial and operational data to improve score reliability",
        "Review and correct financial data inconsistencies to improve accuracy",
    ]
