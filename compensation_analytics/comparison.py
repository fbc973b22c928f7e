"""
Side-by-side comparison of saved call pay scenarios.
"""

import logging
from typing import List, Optional, Union

import pandas as pd
from pydantic import BaseModel, Field

from .models import ScenarioData, TierImpact

logger = logging.getLogger(__name__)

MIN_COMPARISON_SCENARIOS = 2
MAX_COMPARISON_SCENARIOS = 4


class ComparisonVariance(BaseModel):
    """One compared field: both values and the change from the first to the second."""

    field: str
    scenario1_value: Union[float, str]
    scenario2_value: Union[float, str]
    variance: float
    variance_percent: float


class ScenarioComparison(BaseModel):
    scenarios: List[ScenarioData]
    variances: List[ComparisonVariance] = Field(default_factory=list)
    total_budget_variance: float
    total_budget_variance_percent: float
    average_pay_variance: float
    average_pay_variance_percent: float

    def variance_for(self, field: str) -> Optional[ComparisonVariance]:
        return next((v for v in self.variances if v.field == field), None)

    def to_dataframe(self) -> pd.DataFrame:
        """Variance rows as a table for spreadsheet export."""
        return pd.DataFrame(
            [v.model_dump() for v in self.variances],
            columns=["field", "scenario1_value", "scenario2_value", "variance", "variance_percent"],
        )


def _percent_change(variance: float, base: float) -> float:
    if base == 0:
        return 0.0
    return variance / base * 100


def _numeric_variance(field: str, value1: float, value2: float) -> ComparisonVariance:
    variance = value2 - value1
    return ComparisonVariance(
        field=field,
        scenario1_value=value1,
        scenario2_value=value2,
        variance=variance,
        variance_percent=_percent_change(variance, value1),
    )


def _tier_variance(tier1: Optional[TierImpact], tier2: Optional[TierImpact]) -> ComparisonVariance:
    tier_name = (tier1 or tier2).tier_name
    field = f"Tier {tier_name} - Annual Pay per Provider"

    if tier1 is not None and tier2 is not None:
        return _numeric_variance(field, tier1.annual_pay_per_provider, tier2.annual_pay_per_provider)

    if tier1 is not None:
        return ComparisonVariance(
            field=field,
            scenario1_value=tier1.annual_pay_per_provider,
            scenario2_value=0.0,
            variance=-tier1.annual_pay_per_provider,
            variance_percent=-100.0,
        )

    return ComparisonVariance(
        field=field,
        scenario1_value=0.0,
        scenario2_value=tier2.annual_pay_per_provider,
        variance=tier2.annual_pay_per_provider,
        variance_percent=100.0,
    )


def compare_scenarios(scenario1: ScenarioData, scenario2: ScenarioData) -> ScenarioComparison:
    """
    Compare two scenarios field by field.

    Rows, in order: total annual call budget, average call pay per
    provider, call pay per 1.0 FTE, one row per tier present in either
    scenario, then providers on call and rotation ratio when they differ.

    Args:
        scenario1: Baseline scenario
        scenario2: Scenario compared against the baseline

    Returns:
        ScenarioComparison with variances measured as scenario2 - scenario1
    """
    impact1, impact2 = scenario1.impact, scenario2.impact

    budget = _numeric_variance(
        "Total Annual Call Budget",
        impact1.total_annual_call_spend, impact2.total_annual_call_spend
    )
    average_pay = _numeric_variance(
        "Average Call Pay per Provider",
        impact1.average_call_pay_per_provider, impact2.average_call_pay_per_provider
    )
    per_fte = _numeric_variance(
        "Call Pay per 1.0 FTE",
        impact1.call_pay_per_1fte, impact2.call_pay_per_1fte
    )
    variances = [budget, average_pay, per_fte]

    tier_ids = list(dict.fromkeys(
        [t.tier_id for t in impact1.tiers] + [t.tier_id for t in impact2.tiers]
    ))
    for tier_id in tier_ids:
        variances.append(_tier_variance(impact1.tier(tier_id), impact2.tier(tier_id)))

    context1, context2 = scenario1.context, scenario2.context
    if context1.providers_on_call != context2.providers_on_call:
        variances.append(_numeric_variance(
            "Providers on Call",
            context1.providers_on_call, context2.providers_on_call
        ))

    if context1.rotation_ratio != context2.rotation_ratio:
        variance = context2.rotation_ratio - context1.rotation_ratio
        variances.append(ComparisonVariance(
            field="Rotation Ratio",
            scenario1_value=f"1-in-{context1.rotation_ratio:g}",
            scenario2_value=f"1-in-{context2.rotation_ratio:g}",
            variance=variance,
            variance_percent=_percent_change(variance, context1.rotation_ratio),
        ))

    return ScenarioComparison(
        scenarios=[scenario1, scenario2],
        variances=variances,
        total_budget_variance=budget.variance,
        total_budget_variance_percent=budget.variance_percent,
        average_pay_variance=average_pay.variance,
        average_pay_variance_percent=average_pay.variance_percent,
    )


def compare_multiple_scenarios(scenarios: List[ScenarioData]) -> ScenarioComparison:
    """
    Compare 2-4 scenarios against the first one.

    Only total budgets are compared. The headline budget variance is the
    spread between the highest and lowest budget.

    Raises:
        ValueError: If fewer than 2 or more than 4 scenarios are given
    """
    if len(scenarios) < MIN_COMPARISON_SCENARIOS:
        raise ValueError(f"At least {MIN_COMPARISON_SCENARIOS} scenarios required for comparison")
    if len(scenarios) > MAX_COMPARISON_SCENARIOS:
        raise ValueError(f"Maximum {MAX_COMPARISON_SCENARIOS} scenarios can be compared")

    base = scenarios[0]
    variances = [
        _numeric_variance(
            f"Total Annual Call Budget (vs {base.name})",
            base.impact.total_annual_call_spend,
            scenario.impact.total_annual_call_spend,
        )
        for scenario in scenarios[1:]
    ]

    budgets = [s.impact.total_annual_call_spend for s in scenarios]
    min_budget, max_budget = min(budgets), max(budgets)
    budget_range = max_budget - min_budget

    logger.debug("Compared %d scenarios, budget range %.2f", len(scenarios), budget_range)

    return ScenarioComparison(
        scenarios=list(scenarios),
        variances=variances,
        total_budget_variance=budget_range,
        total_budget_variance_percent=budget_range / min_budget * 100 if min_budget > 0 else 0.0,
        average_pay_variance=0.0,
        average_pay_variance_percent=0.0,
    )


def format_variance(variance: float, is_percent: bool = False) -> str:
    """Format a variance for display: '+$1,234.00', '-$50.00', '+3.5%'."""
    if is_percent:
        sign = "+" if variance >= 0 else ""
        return f"{sign}{variance:.1f}%"
    sign = "+" if variance >= 0 else "-"
    return f"{sign}${abs(variance):,.2f}"
