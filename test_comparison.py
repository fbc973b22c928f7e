"""
Tests for scenario comparison.

Run with: pytest test_comparison.py -v
"""

import pytest
from compensation_analytics import (
    CallPayContext,
    CallTier,
    PaymentMethod,
    RawRates,
    ScenarioData,
    calculate_impact,
    compare_multiple_scenarios,
    compare_scenarios,
)
from compensation_analytics.comparison import format_variance


def _scenario(scenario_id, name, providers, rotation, tiers):
    context = CallPayContext(
        specialty="Cardiology",
        providers_on_call=providers,
        rotation_ratio=rotation,
        model_year=2025,
    )
    return ScenarioData(
        id=scenario_id,
        name=name,
        context=context,
        tiers=tiers,
        impact=calculate_impact(tiers, context),
    )


def _daily_tier(tier_id, rate, calls=10):
    return CallTier(
        id=tier_id,
        name=tier_id,
        rates=RawRates(weekday=rate),
        burden={"weekday_calls_per_month": calls},
    )


@pytest.fixture
def current():
    """60,000 total: 5 providers, 1-in-5, one 500/day tier."""
    return _scenario("S1", "Current", 5, 5, [_daily_tier("C1", 500)])


@pytest.fixture
def proposed():
    """144,000 total: 6 providers, 1-in-4, 600/day tier plus a 24,000 stipend tier."""
    stipend = CallTier(
        id="C2",
        name="C2",
        payment_method=PaymentMethod.ANNUAL_STIPEND,
        rates=RawRates(weekday=24_000),
    )
    return _scenario("S2", "Proposed", 6, 4, [_daily_tier("C1", 600), stipend])


class TestPairwise:
    """Test two-scenario comparison."""

    def test_headline_variances(self, current, proposed):
        comparison = compare_scenarios(current, proposed)

        assert comparison.total_budget_variance == pytest.approx(84_000)
        assert comparison.total_budget_variance_percent == pytest.approx(140.0)
        assert comparison.average_pay_variance == pytest.approx(12_000)
        assert comparison.average_pay_variance_percent == pytest.approx(100.0)

    def test_row_order(self, current, proposed):
        comparison = compare_scenarios(current, proposed)

        assert [v.field for v in comparison.variances] == [
            "Total Annual Call Budget",
            "Average Call Pay per Provider",
            "Call Pay per 1.0 FTE",
            "Tier C1 - Annual Pay per Provider",
            "Tier C2 - Annual Pay per Provider",
            "Providers on Call",
            "Rotation Ratio",
        ]

    def test_tier_rows(self, current, proposed):
        comparison = compare_scenarios(current, proposed)

        c1 = comparison.variance_for("Tier C1 - Annual Pay per Provider")
        assert c1.scenario1_value == pytest.approx(12_000)
        assert c1.scenario2_value == pytest.approx(18_000)
        assert c1.variance_percent == pytest.approx(50.0)

        c2 = comparison.variance_for("Tier C2 - Annual Pay per Provider")
        assert c2.scenario1_value == 0
        assert c2.variance == pytest.approx(6000)
        assert c2.variance_percent == 100.0

    def test_removed_tier(self, current, proposed):
        comparison = compare_scenarios(proposed, current)
        c2 = comparison.variance_for("Tier C2 - Annual Pay per Provider")
        assert c2.scenario2_value == 0
        assert c2.variance_percent == -100.0

    def test_context_rows(self, current, proposed):
        comparison = compare_scenarios(current, proposed)

        providers = comparison.variance_for("Providers on Call")
        assert providers.variance == pytest.approx(1)
        assert providers.variance_percent == pytest.approx(20.0)

        rotation = comparison.variance_for("Rotation Ratio")
        assert rotation.scenario1_value == "1-in-5"
        assert rotation.scenario2_value == "1-in-4"
        assert rotation.variance == pytest.approx(-1)

    def test_same_context_has_no_context_rows(self, current):
        comparison = compare_scenarios(current, current)

        assert comparison.variance_for("Providers on Call") is None
        assert comparison.variance_for("Rotation Ratio") is None
        assert len(comparison.variances) == 4
        assert all(v.variance == 0 for v in comparison.variances)

    def test_antisymmetric(self, current, proposed):
        forward = compare_scenarios(current, proposed)
        backward = compare_scenarios(proposed, current)

        assert forward.total_budget_variance == pytest.approx(-backward.total_budget_variance)
        assert forward.average_pay_variance == pytest.approx(-backward.average_pay_variance)

    def test_zero_base_percent(self, current):
        empty = _scenario("S0", "Empty", 5, 5, [])
        comparison = compare_scenarios(empty, current)
        assert comparison.total_budget_variance == pytest.approx(60_000)
        assert comparison.total_budget_variance_percent == 0.0

    def test_to_dataframe(self, current, proposed):
        df = compare_scenarios(current, proposed).to_dataframe()
        assert len(df) == 7
        assert list(df.columns) == ["field", "scenario1_value", "scenario2_value", "variance", "variance_percent"]


class TestMultiple:
    """Test comparing up to four scenarios against the first."""

    def test_budget_rows_against_first(self, current, proposed):
        lean = _scenario("S3", "Lean", 5, 5, [_daily_tier("C1", 400)])

        comparison = compare_multiple_scenarios([current, proposed, lean])

        assert [v.field for v in comparison.variances] == [
            "Total Annual Call Budget (vs Current)",
            "Total Annual Call Budget (vs Current)",
        ]
        assert comparison.variances[1].variance == pytest.approx(-12_000)

    def test_headline_is_budget_range(self, current, proposed):
        lean = _scenario("S3", "Lean", 5, 5, [_daily_tier("C1", 400)])

        comparison = compare_multiple_scenarios([current, proposed, lean])

        assert comparison.total_budget_variance == pytest.approx(96_000)
        assert comparison.total_budget_variance_percent == pytest.approx(200.0)

    def test_too_few(self, current):
        with pytest.raises(ValueError):
            compare_multiple_scenarios([current])

    def test_too_many(self, current):
        with pytest.raises(ValueError):
            compare_multiple_scenarios([current] * 5)

    def test_four_allowed(self, current, proposed):
        comparison = compare_multiple_scenarios([current, proposed, current, proposed])
        assert len(comparison.variances) == 3


def test_format_variance():
    assert format_variance(1234) == "+$1,234.00"
    assert format_variance(-50) == "-$50.00"
    assert format_variance(0) == "+$0.00"
    assert format_variance(3.456, is_percent=True) == "+3.5%"
    assert format_variance(-12.5, is_percent=True) == "-12.5%"
