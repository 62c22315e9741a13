from __future__ import annotations

from datetime import datetime, timezone
from typing import List

import math

import pytest

from bizhealth_report.domain.errors import InsufficientHistoryError
from bizhealth_report.domain.models.financials import FinancialStatement, Trend, Volatility
from bizhealth_report.domain.models.session import AnalysisSession
from bizhealth_report.domain.services.calculations import TrendAnalyzer


def make_session(revenues: List[float], **fields) -> AnalysisSession:
    session = AnalysisSession(business_id="trend-test")
    for offset, revenue in enumerate(revenues):
        session.append(
            FinancialStatement(
                revenue=revenue,
                date=datetime(2020 + offset, 12, 31, tzinfo=timezone.utc),
                **{k: v[offset] for k, v in fields.items()},
            )
        )
    return session


def test_two_statements_one_year_apart_increase():
    t = TrendAnalyzer().analyze(make_session([100000.0, 120000.0]), "revenue")

    assert abs(t.change_percent - 20.0) < 1e-9
    assert t.change_amount == 20000.0
    assert t.trend is Trend.INCREASING
    assert t.volatility is Volatility.MEDIUM  # fewer than three points
    assert abs(t.projection - 144000.0) < 1e-6
    assert t.confidence == 50


def test_single_statement_raises():
    with pytest.raises(InsufficientHistoryError) as info:
        TrendAnalyzer().analyze(make_session([100000.0]), "revenue")
    assert info.value.available == 1


def test_small_change_is_stable():
    t = TrendAnalyzer().analyze(make_session([100000.0, 101000.0]), "revenue")
    assert t.trend is Trend.STABLE


def test_decrease_and_camel_case_metric():
    session = make_session([100000.0, 90000.0], net_income=[10000.0, 5000.0])
    t = TrendAnalyzer().analyze(session, "netIncome")

    assert t.metric == "net_income"
    assert t.trend is Trend.DECREASING
    assert abs(t.change_percent + 50.0) < 1e-9


def test_zero_previous_value_gives_zero_change():
    t = TrendAnalyzer().analyze(make_session([0.0, 5000.0]), "revenue")
    assert t.change_percent == 0.0
    assert t.trend is Trend.STABLE


def test_unknown_metric_rejected():
    with pytest.raises(ValueError):
        TrendAnalyzer().analyze(make_session([1.0, 2.0]), "ebitda")


def test_low_volatility_raises_confidence():
    t = TrendAnalyzer().analyze(make_session([100000.0, 101000.0, 102000.0, 103000.0]), "revenue")

    assert t.volatility is Volatility.LOW
    assert t.confidence == 90


def test_zero_mean_with_dispersion_is_high_volatility():
    session = make_session([1.0, 2.0, 3.0], cash_flow=[-1000.0, 1000.0, 0.0])
    analyzer = TrendAnalyzer()

    assert analyzer.volatility(session, "cash_flow") is Volatility.HIGH
    assert analyzer.confidence(session, "cash_flow") == 30


def test_all_zero_series_is_high_volatility():
    session = make_session([0.0, 0.0, 0.0])
    analyzer = TrendAnalyzer()

    assert analyzer.volatility(session, "revenue") is Volatility.HIGH
    assert analyzer.confidence(session, "revenue") == 30


def test_loss_making_series_uses_signed_mean():
    session = make_session([1.0, 1.0, 1.0], net_income=[-100.0, -300.0, -500.0])
    # sigma / mu = 163.3 / -300 is negative, below the low band
    assert TrendAnalyzer().volatility(session, "net_income") is Volatility.LOW
    assert TrendAnalyzer().confidence(session, "net_income") == 70
    assert math.isfinite(TrendAnalyzer().analyze(session, "net_income").projection)
