"""
FMV risk evaluation for call pay arrangements.

Places an effective rate per 24h within the matching survey benchmark,
classifies regulatory risk and writes a justification narrative.
Missing data never raises: it degrades to MODERATE risk with notes.
"""

import logging
import math
from typing import List, NamedTuple, Optional, Tuple

from .benchmark_table import FMVBenchmarkTable, create_default_benchmark_table
from .fmv_models import (
    FMVBenchmark,
    FMVEvaluationInput,
    FMVEvaluationResult,
    FMVRiskLevel,
)

logger = logging.getLogger(__name__)

# The 75th-90th spread covers 15 percentile points; the 50th-75th covers 25
P90_EXTRAPOLATION_RATIO = 15 / 25

# Position of the 75th percentile between the median and the 90th
P75_INTERPOLATION_RATIO = 25 / 40


class BandPoints(NamedTuple):
    """Band edges of a benchmark; `estimated` lists the synthesised percentiles."""

    p25: Optional[float]
    median: float
    p75: Optional[float]
    p90: Optional[float]
    estimated: Tuple[int, ...]


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def _format_dollars(amount: float) -> str:
    if float(amount).is_integer():
        return f"${amount:,.0f}"
    return f"${amount:,.2f}"


class FMVEvaluator:
    """
    Evaluates call pay rates against Fair Market Value benchmarks.

    Percentile bands (rate per 24h):
    - below p25           -> 15
    - p25 to median       -> 37
    - median to p75       -> 50 or 62, whichever point the rate is nearer
    - p75 to p90          -> 82 or 87, whichever point the rate is nearer
    - at or above p90     -> 95 + 5 x (excess / p90 spread), capped at 99

    Risk:
    - < 25th: MODERATE (under-payment)
    - 25th - 75th: LOW
    - 75th - 90th: MODERATE
    - > 90th: HIGH, MODERATE when the burden score is high
    """

    def __init__(
        self,
        benchmark_table: Optional[FMVBenchmarkTable] = None,
        high_burden_threshold: float = 80,
        low_burden_threshold: float = 60,
    ):
        """
        Initialize the evaluator.

        Args:
            benchmark_table: Benchmark reference table. Defaults to the
                             sample survey table.
            high_burden_threshold: Burden score at or above which high rates
                                   are considered justified
            low_burden_threshold: Burden score below which high rates are
                                  flagged as unsupported
        """
        self.benchmark_table = benchmark_table if benchmark_table is not None else create_default_benchmark_table()
        self.high_burden_threshold = high_burden_threshold
        self.low_burden_threshold = low_burden_threshold

    def evaluate(self, evaluation_input: FMVEvaluationInput) -> FMVEvaluationResult:
        """
        Evaluate FMV compliance for a call pay arrangement.

        Args:
            evaluation_input: Specialty, coverage type, effective rate per 24h
                              and optional burden score

        Returns:
            FMVEvaluationResult with percentile, risk level, notes and narrative
        """
        benchmark = self.benchmark_table.find_best_match(
            evaluation_input.specialty, evaluation_input.coverage_type
        )

        if benchmark is None:
            logger.warning(
                "No FMV benchmark for %s / %s; defaulting to MODERATE risk",
                evaluation_input.specialty, evaluation_input.coverage_type
            )
            result = FMVEvaluationResult(
                risk_level=FMVRiskLevel.MODERATE,
                notes=[
                    "No direct benchmark data available for this specialty/coverage type combination",
                    "Professional judgment required",
                ],
            )
            return result.model_copy(
                update={"narrative_summary": self.build_narrative(result, evaluation_input)}
            )

        rate = evaluation_input.effective_rate_per_24h
        burden_score = evaluation_input.burden_score

        percentile = self.estimate_percentile(rate, benchmark)
        risk_level = self.determine_risk_level(percentile, burden_score)
        notes = self._generate_notes(percentile, benchmark, rate, burden_score)

        result = FMVEvaluationResult(
            benchmark=benchmark,
            percentile_estimate=percentile,
            risk_level=risk_level,
            notes=notes,
        )
        logger.debug(
            "FMV %s / %s at %.2f per 24h: %sth percentile, %s risk",
            evaluation_input.specialty, evaluation_input.coverage_type,
            rate, percentile, risk_level.value
        )
        return result.model_copy(
            update={"narrative_summary": self.build_narrative(result, evaluation_input)}
        )

    def _band_points(self, benchmark: FMVBenchmark) -> BandPoints:
        """
        Return the band edges, filling in p75/p90 when they can be
        extrapolated from the published spread.
        """
        p25 = benchmark.p25_rate_per_24h
        median = benchmark.median_rate_per_24h
        p75 = benchmark.p75_rate_per_24h
        p90 = benchmark.p90_rate_per_24h
        estimated: List[int] = []

        if p75 is None and p25 is not None:
            p75 = median + (median - p25)
            estimated.append(75)
        elif p75 is None and p90 is not None:
            p75 = median + (p90 - median) * P75_INTERPOLATION_RATIO
            estimated.append(75)
        if p90 is None and p75 is not None:
            p90 = p75 + (p75 - median) * P90_EXTRAPOLATION_RATIO
            estimated.append(90)
        return BandPoints(p25, median, p75, p90, tuple(estimated))

    def estimate_percentile(self, rate: float, benchmark: FMVBenchmark) -> int:
        """
        Estimate the percentile band of a rate per 24h.

        Args:
            rate: Effective rate per 24h
            benchmark: Matched survey benchmark

        Returns:
            Representative percentile of the band (0-99)
        """
        p25, median, p75, p90, _ = self._band_points(benchmark)

        if rate < median:
            if p25 is not None and rate < p25:
                return 15
            return 37

        if p75 is None or rate < p75:
            if p75 is not None:
                return 50 if abs(rate - median) < abs(rate - p75) else 62
            return 50

        if p90 is None or rate < p90:
            if p90 is not None:
                return 82 if abs(rate - p75) < abs(rate - p90) else 87
            return 82

        spread = p90 - (p75 if p75 is not None else median)
        if spread > 0:
            multiplier = (rate - p90) / spread
            return min(95 + math.floor(multiplier * 5), 99)
        return 95

    def determine_risk_level(self, percentile: float, burden_score: Optional[float] = None) -> FMVRiskLevel:
        """
        Classify regulatory risk from a percentile and optional burden score.

        A high burden score supports above-market pay: rates in the top
        decile are downgraded to MODERATE. A low burden score keeps them HIGH.
        """
        if burden_score is not None:
            if burden_score >= self.high_burden_threshold and 75 <= percentile < 90:
                return FMVRiskLevel.MODERATE
            if burden_score < self.low_burden_threshold and percentile >= 90:
                return FMVRiskLevel.HIGH
            if burden_score >= self.high_burden_threshold and percentile >= 90:
                return FMVRiskLevel.MODERATE

        if percentile < 25:
            return FMVRiskLevel.MODERATE
        if percentile <= 75:
            return FMVRiskLevel.LOW
        if percentile <= 90:
            return FMVRiskLevel.MODERATE
        return FMVRiskLevel.HIGH

    def _generate_notes(
        self,
        percentile: int,
        benchmark: FMVBenchmark,
        rate: float,
        burden_score: Optional[float],
    ) -> List[str]:
        notes: List[str] = []
        _, _, p75, p90, estimated = self._band_points(benchmark)

        if percentile < 25:
            notes.append("Below 25th percentile of market rates")
        elif percentile < 50:
            notes.append("Below median market rate")
        elif percentile <= 75:
            notes.append("Within typical market range (25th-75th percentile)")
        elif percentile <= 90:
            notes.append("Above 75th percentile of market rates")
            if p90 is not None:
                notes.append("Approaching 90th percentile")
        else:
            notes.append("Above 90th percentile of market rates")
            if p90 is not None and p75 is not None and p90 > p75 and rate > p90:
                multiplier = (rate - p90) / (p90 - p75)
                notes.append(
                    f"Exceeds 90th percentile by {multiplier:.1f}x the 75th-90th percentile spread"
                )
                if multiplier > 0.5:
                    notes.append("Significantly above market benchmarks")

        for point in estimated:
            notes.append(f"{_ordinal(point)} percentile not published; estimated from the published spread")

        if burden_score is not None:
            if burden_score >= self.high_burden_threshold and percentile >= 75:
                notes.append("High call burden supports above-median rate")
            elif burden_score < self.low_burden_threshold and percentile >= 90:
                notes.append("High rate with relatively low call burden")
            elif burden_score >= self.high_burden_threshold:
                notes.append("High call burden context considered")

        return notes

    def build_narrative(self, result: FMVEvaluationResult, evaluation_input: FMVEvaluationInput) -> str:
        """
        Build the FMV justification paragraph.

        Args:
            result: Evaluation result (benchmark, percentile and risk level)
            evaluation_input: The evaluated arrangement

        Returns:
            Narrative text
        """
        rate_text = _format_dollars(evaluation_input.effective_rate_per_24h)
        benchmark = result.benchmark

        if benchmark is None:
            return (
                f"No direct market benchmark data is available for {evaluation_input.specialty} "
                f"with {evaluation_input.coverage_type} coverage type. "
                "FMV determination requires professional judgment and may benefit from a formal valuation. "
                f"The effective rate of {rate_text} per 24-hour period should be evaluated against "
                "comparable arrangements and documented with appropriate justification."
            )

        parts = [
            f"Based on {benchmark.source_name} {benchmark.survey_year} survey data for "
            f"{benchmark.specialty} with {benchmark.coverage_type} coverage, "
        ]

        percentile = result.percentile_estimate
        lead = f"the effective rate of {rate_text} per 24-hour period"
        if percentile is None:
            parts.append(f"{lead} could not be placed within the survey range. ")
        elif percentile < 25:
            parts.append(f"{lead} falls below the 25th percentile (approximately {_ordinal(percentile)} percentile). ")
        elif percentile < 50:
            parts.append(f"{lead} falls below the median, approximately at the {_ordinal(percentile)} percentile. ")
        elif percentile <= 75:
            parts.append(f"{lead} falls within the typical market range, approximately at the {_ordinal(percentile)} percentile. ")
        elif percentile <= 90:
            parts.append(f"{lead} falls above the 75th percentile, approximately at the {_ordinal(percentile)} percentile. ")
        else:
            parts.append(f"{lead} falls above the 90th percentile (approximately {_ordinal(percentile)} percentile). ")

        burden_score = evaluation_input.burden_score
        if burden_score is not None:
            if burden_score >= self.high_burden_threshold:
                parts.append(
                    f"The arrangement includes high call burden (burden score: {burden_score:g}), "
                    "which supports the compensation level. "
                )
            elif burden_score < self.low_burden_threshold:
                parts.append(f"The arrangement includes relatively low call burden (burden score: {burden_score:g}). ")

        if result.risk_level == FMVRiskLevel.LOW:
            parts.append("This rate appears reasonable and consistent with market FMV ranges. ")
        elif result.risk_level == FMVRiskLevel.MODERATE:
            parts.append("This rate may warrant additional review or documentation to support FMV compliance. ")
        else:
            parts.append(
                "This rate may be considered above typical FMV and requires formal valuation "
                "and comprehensive documentation to support compliance. "
            )

        parts.append(
            f"The median market rate for this specialty and coverage type is "
            f"{_format_dollars(benchmark.median_rate_per_24h)} per 24-hour period."
        )
        return "".join(parts)


def evaluate_fmv(
    evaluation_input: FMVEvaluationInput,
    benchmark_table: Optional[FMVBenchmarkTable] = None,
) -> FMVEvaluationResult:
    """Evaluate an arrangement with a default-configured FMVEvaluator."""
    return FMVEvaluator(benchmark_table).evaluate(evaluation_input)
