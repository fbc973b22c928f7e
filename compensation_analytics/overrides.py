"""
FMV override detection.

A tier rate above the 90th percentile benchmark is an FMV override that
needs a documented justification. Overrides are re-detected on every
change and merged with previously entered justifications by
(tier id, rate type).
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .models import CallPayBenchmarks, CallTier, FMVOverride, RateType

logger = logging.getLogger(__name__)

OverrideKey = Tuple[str, RateType]

OVERRIDE_BENCHMARK_PERCENTILE = 90

# Fields entered by people rather than computed
ANNOTATION_FIELDS = ("justification", "approved_by", "approved_date", "supporting_documentation")


def detect_overrides(
    tiers: List[CallTier],
    benchmarks: Optional[CallPayBenchmarks] = None,
) -> List[FMVOverride]:
    """
    Find enabled tier rates that exceed their 90th percentile benchmark.

    Args:
        tiers: Call tiers
        benchmarks: Weekday/weekend/holiday benchmarks; None disables detection

    Returns:
        One override per (tier, rate type) whose positive rate is strictly
        above the p90 benchmark, with an empty justification
    """
    if benchmarks is None:
        return []

    overrides: List[FMVOverride] = []
    for tier in tiers:
        if not tier.enabled:
            continue

        for rate_type, rate in tier.resolved_rates().items():
            benchmark = benchmarks.for_rate_type(rate_type)
            if benchmark is None or not benchmark.p90:
                continue
            if rate > 0 and rate > benchmark.p90:
                overrides.append(FMVOverride(
                    tier_id=tier.id,
                    rate_type=rate_type,
                    rate=rate,
                    benchmark_percentile=OVERRIDE_BENCHMARK_PERCENTILE,
                    benchmark_value=benchmark.p90,
                ))

    if overrides:
        logger.info("Detected %d FMV overrides", len(overrides))
    return overrides


def index_overrides(overrides: Iterable[FMVOverride]) -> Dict[OverrideKey, FMVOverride]:
    """Key overrides by (tier id, rate type). Later entries win."""
    return {override.key: override for override in overrides}


def merge_overrides(
    existing: Mapping[OverrideKey, FMVOverride],
    detected: Iterable[FMVOverride],
) -> Dict[OverrideKey, FMVOverride]:
    """
    Merge freshly detected overrides with previously annotated ones.

    - A detected key that already exists keeps its justification and
      approval details, with the rate and benchmark value refreshed.
    - A new key is added as detected.
    - An existing key that was not detected again is dropped.

    Neither input is modified.

    Args:
        existing: Previously tracked overrides keyed by (tier id, rate type)
        detected: Output of detect_overrides

    Returns:
        New keyed mapping of current overrides
    """
    merged: Dict[OverrideKey, FMVOverride] = {}
    for override in detected:
        previous = existing.get(override.key)
        if previous is not None:
            annotations = {field: getattr(previous, field) for field in ANNOTATION_FIELDS}
            override = override.model_copy(update=annotations)
        merged[override.key] = override

    dropped = set(existing) - set(merged)
    if dropped:
        logger.debug("Cleared overrides no longer above benchmark: %s", sorted(dropped))
    return merged


def unjustified_overrides(overrides: Iterable[FMVOverride]) -> List[FMVOverride]:
    """Overrides still missing a justification."""
    return [override for override in overrides if not override.is_justified]
