"""
Main compensation analytics interface.

Provides the primary interface for call pay budgeting, FMV review and
scenario comparison.
"""

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .benchmark_table import FMVBenchmarkTable, create_default_benchmark_table
from .burden import (
    CallAssumptions,
    CallProvider,
    FairnessSummary,
    calculate_expected_burden,
    calculate_fairness_metrics,
)
from .calculator import CallPayCalculator
from .comparison import ScenarioComparison, compare_multiple_scenarios, compare_scenarios
from .fmv_evaluator import FMVEvaluator
from .fmv_models import FMVEvaluationInput, FMVEvaluationResult
from .forecasting import ForecastAssumptions, MultiYearForecast, generate_forecast
from .models import (
    CallPayBenchmarks,
    CallPayContext,
    CallPayImpact,
    CallTier,
    ComputedPercentiles,
    FMVOverride,
    ProviderScenario,
    ScenarioData,
)
from .overrides import OverrideKey, detect_overrides, merge_overrides
from .percentile import compute_provider_percentiles

logger = logging.getLogger(__name__)


class CompensationAnalyzer:
    """
    Main interface for compensation analytics.

    This class orchestrates:
    1. Loading FMV benchmark reference data
    2. Computing call pay impact from tiers and rotation context
    3. Evaluating tier rates against FMV benchmarks
    4. Tracking FMV overrides and their justifications
    5. Forecasting budgets and comparing scenarios
    6. Scoring how fairly a provider roster shares call

    Example:
        >>> analyzer = CompensationAnalyzer()
        >>> impact = analyzer.calculate_impact(tiers, context)
        >>> print(f"Total spend: ${impact.total_annual_call_spend:,.2f}")
    """

    def __init__(
        self,
        benchmark_table: Optional[FMVBenchmarkTable] = None,
        data_directory: Optional[Path] = None,
    ):
        """
        Initialize the analyzer.

        Args:
            benchmark_table: Optional pre-loaded benchmark table. If not
                             provided, uses default sample data.
            data_directory: Optional directory containing fmv_benchmarks.json.
                            If provided, loads benchmarks from this directory.
        """
        if benchmark_table is not None:
            self.benchmark_table = benchmark_table
        elif data_directory:
            self.benchmark_table = FMVBenchmarkTable()
            self.benchmark_table.load_from_directory(data_directory)
        else:
            self.benchmark_table = create_default_benchmark_table()

        self.calculator = CallPayCalculator()
        self.fmv_evaluator = FMVEvaluator(self.benchmark_table)

    def calculate_impact(
        self,
        tiers: List[CallTier],
        context: CallPayContext,
        tcc_reference: Optional[float] = None,
        total_fte: Optional[float] = None,
    ) -> CallPayImpact:
        """Calculate call pay cost for enabled tiers."""
        return self.calculator.calculate_impact(tiers, context, tcc_reference, total_fte)

    def evaluate_fmv(self, evaluation_input: FMVEvaluationInput) -> FMVEvaluationResult:
        """Evaluate an arrangement against FMV benchmarks."""
        return self.fmv_evaluator.evaluate(evaluation_input)

    def call_fairness(
        self,
        providers: List[CallProvider],
        assumptions: CallAssumptions,
    ) -> FairnessSummary:
        """Summarize how evenly a roster shares the group's call volume."""
        return calculate_fairness_metrics(calculate_expected_burden(providers, assumptions))

    def evaluate_tier_fmv(
        self,
        tier: CallTier,
        context: CallPayContext,
        burden_score: Optional[float] = None,
        providers: Optional[List[CallProvider]] = None,
    ) -> FMVEvaluationResult:
        """
        Evaluate one tier's effective rate per 24h against FMV benchmarks.

        Args:
            tier: Call tier
            context: Rotation context (specialty and rotation ratio)
            burden_score: Optional call burden score (0-100)
            providers: Optional provider roster. When no burden score is
                       given, the roster's fairness score over the tier's
                       call volume is used as the burden score.

        Returns:
            FMVEvaluationResult for the tier's specialty and coverage type
        """
        if burden_score is None and providers:
            burden_score = self.call_fairness(providers, CallAssumptions(
                weekday_calls_per_month=tier.burden.weekday_calls_per_month,
                weekend_calls_per_month=tier.burden.weekend_calls_per_month,
                holidays_per_year=tier.burden.holidays_per_year,
            )).fairness_score
            logger.debug("Burden score %.1f from a roster of %d providers", burden_score, len(providers))

        effective_rate = self.calculator.calculate_effective_dollars_per_24h(tier, context)
        return self.fmv_evaluator.evaluate(FMVEvaluationInput(
            specialty=context.specialty,
            coverage_type=tier.coverage_type.value,
            effective_rate_per_24h=effective_rate,
            burden_score=burden_score,
        ))

    def forecast(
        self,
        tiers: List[CallTier],
        context: CallPayContext,
        assumptions: ForecastAssumptions,
        base_impact: Optional[CallPayImpact] = None,
    ) -> MultiYearForecast:
        """Forecast a budget, computing the base impact when not supplied."""
        if base_impact is None:
            base_impact = self.calculate_impact(tiers, context)
        return generate_forecast(context, tiers, base_impact, assumptions)

    def detect_overrides(
        self,
        tiers: List[CallTier],
        benchmarks: Optional[CallPayBenchmarks] = None,
    ) -> List[FMVOverride]:
        """Find tier rates above their 90th percentile benchmark."""
        return detect_overrides(tiers, benchmarks)

    def refresh_overrides(
        self,
        tiers: List[CallTier],
        benchmarks: Optional[CallPayBenchmarks],
        existing: Mapping[OverrideKey, FMVOverride],
    ) -> Dict[OverrideKey, FMVOverride]:
        """Re-detect overrides and carry forward entered justifications."""
        return merge_overrides(existing, detect_overrides(tiers, benchmarks))

    def compare(self, scenarios: List[ScenarioData]) -> ScenarioComparison:
        """
        Compare saved scenarios.

        Two scenarios get the full field-by-field comparison; three or four
        get the budget-only comparison against the first.

        Raises:
            ValueError: If fewer than 2 or more than 4 scenarios are given
        """
        if len(scenarios) == 2:
            return compare_scenarios(scenarios[0], scenarios[1])
        return compare_multiple_scenarios(scenarios)

    def provider_percentiles(self, scenario: ProviderScenario) -> ComputedPercentiles:
        """Place a provider scenario's TCC, wRVUs and CF within market benchmarks."""
        return compute_provider_percentiles(scenario)

    def get_benchmark_info(self, specialty: str, coverage_type: str) -> Optional[dict]:
        """
        Get the benchmark record that would be used for an arrangement.

        Returns:
            Dictionary with benchmark details, or None when nothing matches
        """
        benchmark = self.benchmark_table.find_best_match(specialty, coverage_type)
        if benchmark is None:
            return None

        return {
            "id": benchmark.id,
            "source": benchmark.source_name,
            "survey_year": benchmark.survey_year,
            "specialty": benchmark.specialty,
            "coverage_type": benchmark.coverage_type,
            "p25": benchmark.p25_rate_per_24h,
            "p50": benchmark.median_rate_per_24h,
            "p75": benchmark.p75_rate_per_24h,
            "p90": benchmark.p90_rate_per_24h,
        }
