"""
Tests for FMV override detection and justification tracking.

Run with: pytest test_overrides.py -v
"""

import pytest
from compensation_analytics import (
    BenchmarkSet,
    CallPayBenchmarks,
    CallTier,
    FMVOverride,
    RateType,
    RawRates,
    UpliftRates,
    detect_overrides,
    merge_overrides,
)
from compensation_analytics.overrides import index_overrides, unjustified_overrides


BENCHMARKS = CallPayBenchmarks(
    weekday=BenchmarkSet(p25=800, p50=1000, p75=1300, p90=1500),
    weekend=BenchmarkSet(p25=900, p50=1100, p75=1400, p90=1600),
    holiday=BenchmarkSet(p25=1000, p50=1200, p75=1500, p90=1800),
)


def _tier(tier_id="C1", enabled=True, **rates):
    return CallTier(id=tier_id, name=tier_id, rates=RawRates(**rates), enabled=enabled)


class TestDetection:
    """Test detection of rates above the 90th percentile."""

    def test_no_benchmarks(self):
        assert detect_overrides([_tier(weekday=99_999)], None) == []
        assert detect_overrides([_tier(weekday=99_999)]) == []

    def test_rate_above_p90(self):
        overrides = detect_overrides([_tier(weekday=1600, weekend=1400)], BENCHMARKS)

        assert len(overrides) == 1
        override = overrides[0]
        assert override.tier_id == "C1"
        assert override.rate_type == RateType.WEEKDAY
        assert override.rate == 1600
        assert override.benchmark_percentile == 90
        assert override.benchmark_value == 1500
        assert override.justification == ""
        assert not override.is_justified

    def test_rate_equal_to_p90_is_not_an_override(self):
        assert detect_overrides([_tier(weekday=1500)], BENCHMARKS) == []

    def test_every_rate_type(self):
        overrides = detect_overrides([_tier(weekday=2000, weekend=2000, holiday=2000)], BENCHMARKS)
        assert [o.rate_type for o in overrides] == [RateType.WEEKDAY, RateType.WEEKEND, RateType.HOLIDAY]

    def test_disabled_tier_skipped(self):
        tiers = [_tier("C1", weekday=2000), _tier("C2", enabled=False, weekday=2000)]
        overrides = detect_overrides(tiers, BENCHMARKS)
        assert [o.tier_id for o in overrides] == ["C1"]

    def test_missing_p90_skipped(self):
        benchmarks = CallPayBenchmarks(weekday=BenchmarkSet(p50=1000, p75=1300))
        assert detect_overrides([_tier(weekday=5000)], benchmarks) == []

    def test_uplift_rates_use_resolved_values(self):
        """A 60% weekend uplift on 1000 puts the weekend rate at 1600."""
        tier = CallTier(
            id="C1",
            name="C1",
            rates=UpliftRates(weekday=1000, weekend_uplift_percent=60, holiday_uplift_percent=50),
        )

        overrides = detect_overrides([tier], BENCHMARKS)

        assert len(overrides) == 1
        assert overrides[0].rate_type == RateType.WEEKEND
        assert overrides[0].rate == pytest.approx(1600)

    def test_one_entry_per_key(self):
        tiers = [_tier("C1", weekday=2000, weekend=2000), _tier("C2", weekday=1501)]
        overrides = detect_overrides(tiers, BENCHMARKS)
        keys = [o.key for o in overrides]
        assert len(keys) == len(set(keys)) == 3


class TestMerge:
    """Test merging re-detected overrides with entered justifications."""

    def test_justification_survives_redetection(self):
        existing = index_overrides([
            FMVOverride(
                tier_id="C1",
                rate_type=RateType.WEEKDAY,
                rate=1600,
                benchmark_value=1500,
                justification="Sole trauma surgeon coverage",
                approved_by="CMO",
                approved_date="2025-03-01",
            ),
        ])

        detected = detect_overrides([_tier(weekday=1700)], BENCHMARKS)
        merged = merge_overrides(existing, detected)

        override = merged[("C1", RateType.WEEKDAY)]
        assert override.rate == 1700
        assert override.justification == "Sole trauma surgeon coverage"
        assert override.approved_by == "CMO"
        assert override.approved_date == "2025-03-01"
        assert override.is_justified

    def test_cleared_override_dropped(self):
        existing = index_overrides([
            FMVOverride(tier_id="C1", rate_type=RateType.WEEKDAY, rate=1600,
                        benchmark_value=1500, justification="Shortage"),
            FMVOverride(tier_id="C2", rate_type=RateType.WEEKEND, rate=1700,
                        benchmark_value=1600, justification="Volume"),
        ])

        detected = detect_overrides([_tier("C1", weekday=1600, holiday=1900)], BENCHMARKS)
        merged = merge_overrides(existing, detected)

        assert set(merged) == {("C1", RateType.WEEKDAY), ("C1", RateType.HOLIDAY)}
        assert merged[("C1", RateType.HOLIDAY)].justification == ""

    def test_inputs_not_modified(self):
        original = FMVOverride(tier_id="C1", rate_type=RateType.WEEKDAY, rate=1600,
                               benchmark_value=1500, justification="Shortage")
        existing = index_overrides([original])
        detected = detect_overrides([_tier(weekday=1800)], BENCHMARKS)

        merge_overrides(existing, detected)

        assert existing[("C1", RateType.WEEKDAY)].rate == 1600
        assert detected[0].justification == ""
        assert len(existing) == 1

    def test_empty_detection_clears_all(self):
        existing = index_overrides([
            FMVOverride(tier_id="C1", rate_type=RateType.WEEKDAY, rate=1600, benchmark_value=1500),
        ])
        assert merge_overrides(existing, []) == {}


def test_unjustified_overrides():
    overrides = [
        FMVOverride(tier_id="C1", rate_type=RateType.WEEKDAY, rate=1600, benchmark_value=1500,
                    justification="Shortage"),
        FMVOverride(tier_id="C1", rate_type=RateType.WEEKEND, rate=1700, benchmark_value=1600,
                    justification="   "),
        FMVOverride(tier_id="C2", rate_type=RateType.HOLIDAY, rate=1900, benchmark_value=1800),
    ]
    assert [o.key for o in unjustified_overrides(overrides)] == [
        ("C1", RateType.WEEKEND),
        ("C2", RateType.HOLIDAY),
    ]
