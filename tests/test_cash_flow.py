from __future__ import annotations

from datetime import datetime, timezone
from typing import List

import math

import pytest

from bizhealth_report.domain.errors import NoStatementError
from bizhealth_report.domain.models.financials import CashFlowPredictability, FinancialStatement
from bizhealth_report.domain.models.session import AnalysisSession
from bizhealth_report.domain.services.calculations import CashFlowAnalyzer


def close(a: float, b: float, tol: float = 1e-6) -> bool:
    return math.isfinite(a) and abs(a - b) < tol


def make_statement(cash_flow: float = 18000.0, year: int = 2023, **overrides) -> FinancialStatement:
    data = {
        "revenue": 100000.0,
        "gross_profit": 40000.0,
        "net_income": 15000.0,
        "total_assets": 100000.0,
        "total_liabilities": 40000.0,
        "cost_of_goods_sold": 60000.0,
        "cash_flow": cash_flow,
        "date": datetime(year, 12, 31, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return FinancialStatement(**data)


def make_session(cash_flows: List[float]) -> AnalysisSession:
    session = AnalysisSession()
    for offset, cf in enumerate(cash_flows):
        session.append(make_statement(cf, year=2020 + offset))
    return session


def test_cash_flow_breakdown():
    cf = CashFlowAnalyzer().analyze(make_session([18000.0]))

    assert close(cf.operating_cash_flow, 18000.0)
    assert close(cf.free_cash_flow, 15300.0)
    assert close(cf.investing_cash_flow, -5000.0)
    assert close(cf.financing_cash_flow, 4000.0)
    assert close(cf.cash_flow_margin, 18.0)
    # 365 / 3 + 365 / (100000 / 15000) - 30
    assert close(cf.cash_conversion_cycle, 365.0 / 3.0 + 54.75 - 30.0)
    assert cf.predictability is CashFlowPredictability.VARIABLE
    assert cf.burn_rate is None


def test_negative_operating_cash_flow_reports_burn_rate():
    cf = CashFlowAnalyzer().analyze(statement=make_statement(-24000.0))
    assert close(cf.burn_rate, 2000.0)


def test_zero_turnover_contributes_zero_days():
    cf = CashFlowAnalyzer().analyze(statement=make_statement(revenue=0.0, cost_of_goods_sold=0.0))

    assert cf.cash_flow_margin == 0.0
    assert close(cf.cash_conversion_cycle, -30.0)


def test_predictability_bands():
    analyzer = CashFlowAnalyzer()

    assert analyzer.analyze(make_session([100000.0, 102000.0, 98000.0])).predictability is CashFlowPredictability.STABLE
    assert analyzer.analyze(make_session([100000.0, 130000.0, 70000.0])).predictability is CashFlowPredictability.VARIABLE
    assert analyzer.analyze(make_session([100000.0, -100000.0, 50000.0])).predictability is CashFlowPredictability.VOLATILE


def test_predictability_uses_signed_mean():
    analyzer = CashFlowAnalyzer()

    assert analyzer.analyze(make_session([-100.0, -300.0, -500.0])).predictability is CashFlowPredictability.STABLE
    assert analyzer.analyze(make_session([0.0, 0.0, 0.0])).predictability is CashFlowPredictability.VOLATILE
    assert analyzer.analyze(make_session([-1000.0, 1000.0, 0.0])).predictability is CashFlowPredictability.VOLATILE


def test_requires_a_statement():
    with pytest.raises(NoStatementError):
        CashFlowAnalyzer().analyze(AnalysisSession())
