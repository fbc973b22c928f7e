"""
Tests for the CompensationAnalyzer interface.

Run with: pytest test_analyzer.py -v
"""

from pathlib import Path

import pytest
from compensation_analytics import (
    BenchmarkSet,
    CallAssumptions,
    CallPayBenchmarks,
    CallPayContext,
    CallProvider,
    CallTier,
    CompensationAnalyzer,
    FMVBenchmarkTable,
    FMVEvaluationInput,
    FMVRiskLevel,
    ForecastAssumptions,
    MarketBenchmarks,
    ProviderScenario,
    RateType,
    RawRates,
    ScenarioData,
)


@pytest.fixture
def analyzer():
    return CompensationAnalyzer()


@pytest.fixture
def context():
    return CallPayContext(specialty="Pediatrics", providers_on_call=5, rotation_ratio=5, model_year=2025)


@pytest.fixture
def tier():
    return CallTier(
        id="C1",
        name="Primary",
        rates=RawRates(weekday=1200),
        burden={"weekday_calls_per_month": 10},
    )


def test_analyzer_initialization(analyzer):
    assert len(analyzer.benchmark_table) == 6
    assert analyzer.calculator is not None
    assert analyzer.fmv_evaluator.benchmark_table is analyzer.benchmark_table


def test_analyzer_with_data_directory():
    analyzer = CompensationAnalyzer(data_directory=Path(__file__).parent / "data")
    assert len(analyzer.benchmark_table) == 3
    assert analyzer.get_benchmark_info("Anesthesiology", "In-house")["source"] == "Gallagher"


def test_analyzer_with_empty_table():
    analyzer = CompensationAnalyzer(benchmark_table=FMVBenchmarkTable())
    assert len(analyzer.benchmark_table) == 0
    assert analyzer.get_benchmark_info("Cardiology", "In-house") is None


def test_calculate_impact(analyzer, tier, context):
    impact = analyzer.calculate_impact([tier], context)
    assert impact.total_annual_call_spend == pytest.approx(144_000)
    assert impact.tiers[0].effective_dollars_per_24h == pytest.approx(1200)


def test_evaluate_tier_fmv(analyzer, tier, context):
    """A 1200/day Pediatrics in-house tier sits at the survey median."""
    result = analyzer.evaluate_tier_fmv(tier, context)

    assert result.benchmark.id == "ped-inhouse-2024"
    assert result.percentile_estimate == 50
    assert result.risk_level == FMVRiskLevel.LOW


def test_evaluate_fmv(analyzer):
    result = analyzer.evaluate_fmv(FMVEvaluationInput(
        specialty="Pediatrics",
        coverage_type="In-house",
        effective_rate_per_24h=2000,
        burden_score=85,
    ))
    assert result.risk_level == FMVRiskLevel.MODERATE


def test_forecast_computes_base_impact(analyzer, tier, context):
    forecast = analyzer.forecast([tier], context, ForecastAssumptions(rate_increase_percent=5, years_to_forecast=1))
    assert forecast.base_budget == pytest.approx(144_000)
    assert forecast.forecasts[0].adjusted_budget == pytest.approx(151_200)


def test_refresh_overrides(analyzer, tier):
    benchmarks = CallPayBenchmarks(weekday=BenchmarkSet(p50=900, p90=1100))

    first = analyzer.refresh_overrides([tier], benchmarks, {})
    key = ("C1", RateType.WEEKDAY)
    assert list(first) == [key]

    annotated = {key: first[key].model_copy(update={"justification": "Recruitment shortage"})}
    raised = tier.model_copy(update={"rates": RawRates(weekday=1300)})
    second = analyzer.refresh_overrides([raised], benchmarks, annotated)

    assert second[key].rate == 1300
    assert second[key].justification == "Recruitment shortage"
    assert analyzer.detect_overrides([tier]) == []


def test_compare(analyzer, tier, context):
    def scenario(scenario_id, rate):
        tiers = [tier.model_copy(update={"rates": RawRates(weekday=rate)})]
        return ScenarioData(
            id=scenario_id,
            name=scenario_id,
            context=context,
            tiers=tiers,
            impact=analyzer.calculate_impact(tiers, context),
        )

    pairwise = analyzer.compare([scenario("A", 1000), scenario("B", 1200)])
    assert pairwise.variance_for("Call Pay per 1.0 FTE") is not None
    assert pairwise.total_budget_variance == pytest.approx(24_000)

    multiple = analyzer.compare([scenario("A", 1000), scenario("B", 1200), scenario("C", 900)])
    assert len(multiple.variances) == 2

    with pytest.raises(ValueError):
        analyzer.compare([scenario("A", 1000)])


def test_provider_percentiles(analyzer):
    scenario = ProviderScenario(
        id="S1",
        name="Median producer",
        annual_wrvus=5000,
        market_benchmarks=MarketBenchmarks(wrvu25=4000, wrvu50=5000, wrvu75=6000, wrvu90=7000),
    )
    percentiles = analyzer.provider_percentiles(scenario)
    assert percentiles.wrvu_percentile == 50
    # No TCC benchmarks published
    assert percentiles.tcc_percentile == 50


class TestRosterBurdenScore:
    """Test deriving the FMV burden score from a provider roster."""

    @pytest.fixture
    def high_rate_tier(self):
        """2000 per 24h against the 1800 Pediatrics p90 sits at the 98th percentile."""
        return CallTier(
            id="C1",
            name="Primary",
            rates=RawRates(weekday=2000),
            burden={"weekday_calls_per_month": 10},
        )

    def test_even_roster_downgrades_risk(self, analyzer, high_rate_tier, context):
        roster = [CallProvider(id=f"P{i}", fte=1.0) for i in range(5)]

        result = analyzer.evaluate_tier_fmv(high_rate_tier, context, providers=roster)

        assert result.percentile_estimate == 98
        assert result.risk_level == FMVRiskLevel.MODERATE
        assert "burden score: 100" in result.narrative_summary

    def test_uneven_roster_keeps_high_risk(self, analyzer, high_rate_tier, context):
        roster = [CallProvider(id="P1", fte=1.0), CallProvider(id="P2", fte=0.1)]

        result = analyzer.evaluate_tier_fmv(high_rate_tier, context, providers=roster)

        assert result.risk_level == FMVRiskLevel.HIGH
        assert "High rate with relatively low call burden" in result.notes

    def test_explicit_score_wins(self, analyzer, high_rate_tier, context):
        roster = [CallProvider(id="P1", fte=1.0), CallProvider(id="P2", fte=0.1)]
        result = analyzer.evaluate_tier_fmv(high_rate_tier, context, burden_score=85, providers=roster)
        assert result.risk_level == FMVRiskLevel.MODERATE

    def test_without_roster(self, analyzer, high_rate_tier, context):
        assert analyzer.evaluate_tier_fmv(high_rate_tier, context).risk_level == FMVRiskLevel.HIGH
        assert analyzer.evaluate_tier_fmv(high_rate_tier, context, providers=[]).risk_level == FMVRiskLevel.HIGH

    def test_call_fairness(self, analyzer):
        summary = analyzer.call_fairness(
            [CallProvider(id="P1", fte=1.0), CallProvider(id="P2", fte=0.5)],
            CallAssumptions(weekday_calls_per_month=10, weekend_calls_per_month=4, holidays_per_year=6),
        )
        assert summary.fairness_score == pytest.approx(33.3)
