"""
Expected call burden per provider and group fairness metrics.
"""

import logging
from typing import List, Optional

import numpy as np
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class CallProvider(BaseModel):
    """Provider participating in a call program."""

    id: str
    name: Optional[str] = None
    fte: float = Field(1.0, description="FTE, 0.0 - 1.0")
    eligible_for_call: bool = True


class CallAssumptions(BaseModel):
    """Group-level call volume."""

    weekday_calls_per_month: float = 0.0
    weekend_calls_per_month: float = 0.0
    holidays_per_year: float = 0.0


class ProviderBurdenResult(BaseModel):
    provider_id: str
    provider_name: Optional[str] = None
    fte: float
    expected_weekday_calls: float
    expected_weekend_calls: float
    expected_holiday_calls: float
    total_expected_calls: float
    burden_index: float = Field(..., description="Percent deviation from the group average")


class FairnessSummary(BaseModel):
    group_average_calls: float
    min_calls: float
    max_calls: float
    standard_deviation: float
    fairness_score: float = Field(..., description="0-100, higher is more even")
    total_eligible_fte: float
    eligible_provider_count: int


def calculate_expected_burden(
    providers: List[CallProvider],
    assumptions: CallAssumptions,
) -> List[ProviderBurdenResult]:
    """
    Split the group's annual calls across eligible providers by FTE share.

    Args:
        providers: Providers in the call program
        assumptions: Group call volume

    Returns:
        One result per eligible provider. All zeros when eligible FTE is zero.
    """
    eligible = [p for p in providers if p.eligible_for_call]
    if not eligible:
        return []

    weekday_calls = assumptions.weekday_calls_per_month * 12
    weekend_calls = assumptions.weekend_calls_per_month * 12
    holiday_calls = assumptions.holidays_per_year
    total_calls = weekday_calls + weekend_calls + holiday_calls

    total_fte = sum(p.fte for p in eligible)
    if total_fte <= 0:
        logger.warning("Eligible providers have no FTE; burden is zero")
        return [
            ProviderBurdenResult(
                provider_id=p.id, provider_name=p.name, fte=p.fte,
                expected_weekday_calls=0.0, expected_weekend_calls=0.0,
                expected_holiday_calls=0.0, total_expected_calls=0.0, burden_index=0.0,
            )
            for p in eligible
        ]

    group_average = total_calls / len(eligible)

    results = []
    for provider in eligible:
        share = provider.fte / total_fte
        total_expected = total_calls * share
        burden_index = (total_expected - group_average) / group_average * 100 if group_average > 0 else 0.0
        results.append(ProviderBurdenResult(
            provider_id=provider.id,
            provider_name=provider.name,
            fte=provider.fte,
            expected_weekday_calls=weekday_calls * share,
            expected_weekend_calls=weekend_calls * share,
            expected_holiday_calls=holiday_calls * share,
            total_expected_calls=total_expected,
            burden_index=burden_index,
        ))
    return results


def calculate_fairness_metrics(results: List[ProviderBurdenResult]) -> FairnessSummary:
    """
    Summarize how evenly call is spread.

    fairness_score = 100 × (1 - 2 × coefficient of variation), clamped to
    [0, 100] and rounded to one decimal. An empty group scores 100.
    """
    if not results:
        return FairnessSummary(
            group_average_calls=0.0, min_calls=0.0, max_calls=0.0,
            standard_deviation=0.0, fairness_score=100.0,
            total_eligible_fte=0.0, eligible_provider_count=0,
        )

    calls = np.array([r.total_expected_calls for r in results], dtype=float)
    average = float(calls.mean())
    std = float(calls.std())

    fairness_score = 100.0
    if average > 0:
        fairness_score = float(np.clip(100 * (1 - (std / average) * 2), 0, 100))

    return FairnessSummary(
        group_average_calls=average,
        min_calls=float(calls.min()),
        max_calls=float(calls.max()),
        standard_deviation=std,
        fairness_score=round(fairness_score, 1),
        total_eligible_fte=sum(r.fte for r in results),
        eligible_provider_count=len(results),
    )
