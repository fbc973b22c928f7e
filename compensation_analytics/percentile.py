"""
Percentile estimation against sparse market benchmarks.

Values are placed on a piecewise-linear curve through the available
benchmark points (25th/50th/75th/90th):

- Below the lowest point: linear from (0, 0th percentile)
- Between points: linear between adjacent available points
- Above the highest point: linear up to 100th percentile at
  PERCENTILE_CEILING_MULTIPLIER x the highest point, clamped at 100
"""

import logging
from typing import Optional

import numpy as np

from .models import BenchmarkSet, ComputedPercentiles, MarketBenchmarks, ProviderScenario

logger = logging.getLogger(__name__)

# Returned when no benchmark point is available
DEFAULT_PERCENTILE = 50.0

# 100th percentile is assumed to sit at 1.3 x the highest published point
PERCENTILE_CEILING_MULTIPLIER = 1.3


def _interpolation_grid(benchmarks: BenchmarkSet):
    points = benchmarks.points()
    top_value = points[-1][1]
    values = [0.0] + [value for _, value in points] + [top_value * PERCENTILE_CEILING_MULTIPLIER]
    percentiles = [0.0] + [float(pct) for pct, _ in points] + [100.0]
    return np.asarray(values, dtype=float), np.asarray(percentiles, dtype=float)


def calculate_percentile(value: float, benchmarks: BenchmarkSet) -> float:
    """
    Estimate the percentile rank of a value within a benchmark distribution.

    Args:
        value: Compensation value (TCC, wRVUs, conversion factor or rate)
        benchmarks: Available benchmark points

    Returns:
        Percentile in [0, 100]. DEFAULT_PERCENTILE when no benchmark
        point is available. A value equal to a benchmark point returns
        that point's percentile exactly.
    """
    if benchmarks.is_empty():
        return DEFAULT_PERCENTILE

    # Values at or below zero fall on the (0, 0) anchor
    values, percentiles = _interpolation_grid(benchmarks)
    result = float(np.interp(value, values, percentiles))
    return min(max(result, 0.0), 100.0)


def value_at_percentile(percentile: float, benchmarks: BenchmarkSet) -> Optional[float]:
    """
    Inverse of calculate_percentile: the value sitting at a given percentile.

    Returns:
        Interpolated value, or None when no benchmark point is available
    """
    if benchmarks.is_empty():
        return None

    if percentile <= 0:
        return 0.0

    values, percentiles = _interpolation_grid(benchmarks)
    return float(np.interp(min(percentile, 100.0), percentiles, values))


def calculate_tcc_percentile(normalized_tcc: float, benchmarks: MarketBenchmarks) -> float:
    """Percentile of FTE-normalized total cash compensation."""
    return calculate_percentile(normalized_tcc, benchmarks.tcc())


def calculate_wrvu_percentile(normalized_wrvus: float, benchmarks: MarketBenchmarks) -> float:
    """Percentile of FTE-normalized wRVUs."""
    return calculate_percentile(normalized_wrvus, benchmarks.wrvu())


def calculate_cf_percentile(effective_cf: float, benchmarks: MarketBenchmarks) -> float:
    """Percentile of an effective conversion factor (dollars per wRVU)."""
    return calculate_percentile(effective_cf, benchmarks.cf())


def percentile_for_metric(value: float, metric: str, benchmarks: MarketBenchmarks) -> float:
    """
    Dispatch to the percentile calculation for a metric name.

    Args:
        value: Metric value
        metric: One of 'tcc', 'wrvu', 'cf'
        benchmarks: Market benchmarks for the specialty

    Raises:
        ValueError: If the metric name is unknown
    """
    metric = metric.lower()
    if metric == "tcc":
        return calculate_tcc_percentile(value, benchmarks)
    if metric == "wrvu":
        return calculate_wrvu_percentile(value, benchmarks)
    if metric == "cf":
        return calculate_cf_percentile(value, benchmarks)
    raise ValueError(f"Unknown benchmark metric: {metric}")


def normalize_to_fte(value: float, fte: float) -> float:
    """Scale a value to 1.0 FTE. Non-positive FTE yields 0."""
    if fte <= 0:
        return 0.0
    return value / fte


def calculate_effective_cf(normalized_tcc: float, normalized_wrvus: float) -> float:
    """Effective conversion factor: TCC dollars per wRVU."""
    if normalized_wrvus <= 0:
        return 0.0
    return normalized_tcc / normalized_wrvus


def compute_provider_percentiles(scenario: ProviderScenario) -> ComputedPercentiles:
    """
    Place a provider scenario's TCC, wRVUs and conversion factor in the market.

    Percentiles are left unset when the scenario carries no market benchmarks.
    """
    if scenario.market_benchmarks is None:
        logger.warning("Scenario %s has no market benchmarks", scenario.id)
        return ComputedPercentiles()

    normalized_tcc = normalize_to_fte(scenario.total_tcc, scenario.fte)
    normalized_wrvus = normalize_to_fte(scenario.annual_wrvus, scenario.fte)
    effective_cf = calculate_effective_cf(normalized_tcc, normalized_wrvus)

    benchmarks = scenario.market_benchmarks
    return ComputedPercentiles(
        tcc_percentile=calculate_tcc_percentile(normalized_tcc, benchmarks),
        wrvu_percentile=calculate_wrvu_percentile(normalized_wrvus, benchmarks),
        cf_percentile=calculate_cf_percentile(effective_cf, benchmarks),
    )
