from __future__ import annotations

from datetime import datetime, timezone

import math

from bizhealth_report.domain.constants import EstimationConstants
from bizhealth_report.domain.models.financials import BusinessProfile, FinancialStatement, Period
from bizhealth_report.domain.models.session import AnalysisSession
from bizhealth_report.domain.services.calculations import StatementBuilder


def close(a: float, b: float, tol: float = 1e-6) -> bool:
    return math.isfinite(a) and abs(a - b) < tol


def make_profile(**overrides) -> BusinessProfile:
    data = {
        "business_name": "Harbor Consulting",
        "business_type": "Consulting Services",
        "annual_revenue": 100000.0,
        "monthly_profit": 2000.0,
    }
    data.update(overrides)
    return BusinessProfile(**data)


def test_service_business_uses_service_margin():
    builder = StatementBuilder()
    s = builder.build(make_profile(), as_of=datetime(2024, 1, 1, tzinfo=timezone.utc))

    assert close(s.revenue, 100000.0)
    assert close(s.gross_profit, 40000.0)
    assert close(s.operating_expenses, 30000.0)
    assert close(s.operating_income, 10000.0)
    assert close(s.net_income, 24000.0)
    assert close(s.total_assets, 100000.0)
    assert close(s.total_liabilities, 40000.0)
    assert close(s.equity, 60000.0)
    assert close(s.cash_flow, 28800.0)
    assert close(s.cost_of_goods_sold, 60000.0)
    assert s.period is Period.ANNUAL


def test_non_service_business_uses_default_margin():
    s = StatementBuilder().build(make_profile(business_type="Retail store"))
    assert close(s.gross_profit, 30000.0)
    assert close(s.operating_income, 0.0)


def test_missing_figures_default_to_zero():
    s = StatementBuilder().build(BusinessProfile())
    assert s.revenue == 0.0
    assert s.net_income == 0.0
    assert s.cash_flow == 0.0
    assert s.equity == 0.0
    assert s.date.tzinfo is not None


def test_constants_can_be_overridden():
    constants = EstimationConstants(default_gross_margin=0.5)
    s = StatementBuilder(constants).build(make_profile(business_type="Manufacturing"))
    assert close(s.gross_profit, 50000.0)


def test_import_profile_appends_and_moves_current():
    session = AnalysisSession(business_id="harbor")
    builder = StatementBuilder()
    first = builder.import_profile(session, make_profile(), as_of=datetime(2023, 1, 1, tzinfo=timezone.utc))
    second = builder.import_profile(
        session, make_profile(annual_revenue=120000.0), as_of=datetime(2024, 1, 1, tzinfo=timezone.utc)
    )

    assert len(session) == 2
    assert session.current is second
    assert session.history[0] is first


def test_session_trims_oldest_beyond_max_history():
    session = AnalysisSession(max_history=2)
    for year in (2021, 2022, 2023):
        session.append(FinancialStatement(revenue=float(year), date=datetime(year, 1, 1, tzinfo=timezone.utc)))

    assert len(session) == 2
    assert [s.revenue for s in session.history] == [2022.0, 2023.0]
    assert session.current.revenue == 2023.0


def test_session_trim_keeps_latest_period_when_backfilling():
    session = AnalysisSession(max_history=2)
    for year in (2023, 2022, 2021):
        session.append(FinancialStatement(revenue=float(year), date=datetime(year, 1, 1, tzinfo=timezone.utc)))

    assert [s.revenue for s in session.history] == [2023.0, 2021.0]
    assert session.current.revenue == 2021.0
    previous, latest = session.latest_pair()
    assert (previous.revenue, latest.revenue) == (2021.0, 2023.0)


def test_statement_from_dict_accepts_camel_case_and_iso_dates():
    s = FinancialStatement.from_dict(
        {
            "revenue": 1000,
            "grossProfit": 400,
            "totalAssets": 800,
            "totalLiabilities": 300,
            "date": "2023-12-31T00:00:00Z",
            "period": "Q4",
        }
    )
    assert close(s.gross_profit, 400.0)
    assert close(s.equity, 500.0)
    assert s.date == datetime(2023, 12, 31, tzinfo=timezone.utc)
    assert s.period is Period.Q4


def test_profile_from_dict_ignores_unknown_keys():
    profile = BusinessProfile.from_dict(
        {
            "businessName": "Corner Cafe",
            "annualRevenue": 250000,
            "established": "2015",
            "riskFactors": ["lease renewal"],
            "sellerNotes": "not used",
        }
    )
    assert profile.business_name == "Corner Cafe"
    assert profile.annual_revenue == 250000
    assert profile.established.year == 2015
    assert profile.risk_factors == ["lease renewal"]
