from __future__ import annotations

from bizhealth_report.infrastructure.entitlements import ADVANCED_ANALYSIS, StaticFeatureGate
from bizhealth_report.infrastructure.industry import IndustryMultiples, IndustryMultipleService


def test_keyword_lookup_first_match_wins():
    service = IndustryMultipleService()

    assert service.revenue_multiple("Enterprise SaaS") == 6.0
    assert service.revenue_multiple("Software development") == 5.0
    assert service.revenue_multiple("Technology software") == 4.5
    assert service.revenue_multiple("Dog walking") == 2.5
    assert service.revenue_multiple(None) == 2.5


def test_table_lookup_is_case_insensitive():
    service = IndustryMultipleService()

    assert service.multiples_for("technology - software") == IndustryMultiples(revenue=8.0, ebitda=25.0, pe=30.0)
    assert service.multiples_for("  RETAIL ").revenue == 1.2
    assert service.multiples_for("Pet grooming") is None
    assert service.multiples_for(None) is None


def test_custom_table_and_default():
    service = IndustryMultipleService(
        table={"Widgets": IndustryMultiples(revenue=1.0, ebitda=5.0, pe=7.0)},
        keywords=(),
        default=1.75,
    )
    assert service.multiples_for("widgets").pe == 7.0
    assert service.multiples_for("Retail") is None
    assert service.revenue_multiple("Software") == 1.75


def test_static_feature_gate():
    gate = StaticFeatureGate([ADVANCED_ANALYSIS.upper()])
    assert gate(ADVANCED_ANALYSIS)
    assert not gate("exports")
    assert not StaticFeatureGate(())(ADVANCED_ANALYSIS)
