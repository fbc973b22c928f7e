"""
Compensation Analytics Engine

Calculation layer for healthcare compensation planning: percentile
placement against market surveys, FMV risk review, on-call coverage
budgeting, multi-year forecasting and scenario comparison.
"""

from .models import (
    BenchmarkSet,
    CallPayBenchmarks,
    CallPayContext,
    CallPayImpact,
    CallTier,
    CallTierBurden,
    CoverageType,
    FMVOverride,
    MarketBenchmarks,
    PaymentMethod,
    ProviderScenario,
    RateType,
    RawRates,
    ScenarioData,
    TierImpact,
    UpliftRates,
)
from .fmv_models import FMVBenchmark, FMVEvaluationInput, FMVEvaluationResult, FMVRiskLevel
from .percentile import calculate_percentile, value_at_percentile
from .benchmark_table import FMVBenchmarkTable, create_default_benchmark_table
from .fmv_evaluator import FMVEvaluator, evaluate_fmv
from .calculator import CallPayCalculator, calculate_impact
from .forecasting import ForecastAssumptions, MultiYearForecast, generate_forecast
from .overrides import detect_overrides, merge_overrides
from .comparison import ScenarioComparison, compare_multiple_scenarios, compare_scenarios
from .burden import CallAssumptions, CallProvider, FairnessSummary, calculate_expected_burden, calculate_fairness_metrics
from .analyzer import CompensationAnalyzer

__version__ = "1.0.0"
__all__ = [
    "BenchmarkSet",
    "CallPayBenchmarks",
    "CallPayContext",
    "CallPayImpact",
    "CallTier",
    "CallTierBurden",
    "CoverageType",
    "FMVOverride",
    "MarketBenchmarks",
    "PaymentMethod",
    "ProviderScenario",
    "RateType",
    "RawRates",
    "ScenarioData",
    "TierImpact",
    "UpliftRates",
    "FMVBenchmark",
    "FMVEvaluationInput",
    "FMVEvaluationResult",
    "FMVRiskLevel",
    "calculate_percentile",
    "value_at_percentile",
    "FMVBenchmarkTable",
    "create_default_benchmark_table",
    "FMVEvaluator",
    "evaluate_fmv",
    "CallPayCalculator",
    "calculate_impact",
    "ForecastAssumptions",
    "MultiYearForecast",
    "generate_forecast",
    "detect_overrides",
    "merge_overrides",
    "ScenarioComparison",
    "compare_multiple_scenarios",
    "compare_scenarios",
    "CallAssumptions",
    "CallProvider",
    "FairnessSummary",
    "calculate_expected_burden",
    "calculate_fairness_metrics",
    "CompensationAnalyzer",
]
