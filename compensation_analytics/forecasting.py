"""
Multi-year call pay budget forecasting.
"""

import logging
from typing import List, Optional

import numpy as np
import pandas as pd
from pydantic import BaseModel, Field

from .models import CallPayContext, CallPayImpact, CallTier

logger = logging.getLogger(__name__)


class ForecastAssumptions(BaseModel):
    """Growth assumptions applied every forecast year."""

    rate_increase_percent: float = Field(0.0, description="Annual rate increase, e.g. 2.5 for 2.5%")
    provider_growth_percent: float = Field(
        0.0,
        description="Annual provider growth, e.g. 5 for 5%; negative for attrition"
    )
    years_to_forecast: int = Field(3, description="Number of years to project")


class YearlyForecast(BaseModel):
    year: int
    base_budget: float
    adjusted_budget: float
    rate_increase: float = Field(..., description="Cumulative rate increase since the base year, %")
    provider_growth: float = Field(..., description="Cumulative provider growth since the base year, %")
    total_providers: float
    average_pay_per_provider: float


class MultiYearForecast(BaseModel):
    base_year: int
    base_budget: float
    forecasts: List[YearlyForecast] = Field(default_factory=list)
    total_projected_spend: float
    assumptions: ForecastAssumptions

    def to_dataframe(self) -> pd.DataFrame:
        """One row per year, base year first."""
        rows = [{
            "year": self.base_year,
            "budget": self.base_budget,
            "rate_increase": 0.0,
            "provider_growth": 0.0,
            "total_providers": None,
            "average_pay_per_provider": None,
        }]
        rows.extend(
            {
                "year": f.year,
                "budget": f.adjusted_budget,
                "rate_increase": f.rate_increase,
                "provider_growth": f.provider_growth,
                "total_providers": f.total_providers,
                "average_pay_per_provider": f.average_pay_per_provider,
            }
            for f in self.forecasts
        )
        return pd.DataFrame(rows)


class BudgetVariance(BaseModel):
    variance: float
    variance_percent: float
    is_over_budget: bool


def generate_forecast(
    context: CallPayContext,
    tiers: List[CallTier],
    base_impact: CallPayImpact,
    assumptions: ForecastAssumptions,
) -> MultiYearForecast:
    """
    Project a call pay budget forward year by year.

    For forecast year k:
        adjusted_budget = base_budget × (1 + rate%)^k × (1 + growth%)^k
        total_providers = base_providers × (1 + growth%)^k
        average_pay     = base_average_pay × (1 + rate%)^k

    Provider counts are not rounded, so adjusted_budget equals
    total_providers × average_pay whenever the base impact does.

    Args:
        context: Call pay context (base year and provider count)
        tiers: Tiers the base impact was computed from
        base_impact: Base-year impact
        assumptions: Rate and provider growth assumptions

    Returns:
        MultiYearForecast; no forecast rows when years_to_forecast <= 0
    """
    base_year = context.model_year
    base_budget = base_impact.total_annual_call_spend
    base_providers = max(context.providers_on_call, 0.0)
    base_average_pay = base_impact.average_call_pay_per_provider

    years = max(int(assumptions.years_to_forecast), 0)
    offsets = np.arange(1, years + 1)
    rate_factors = np.power(1 + assumptions.rate_increase_percent / 100, offsets)
    growth_factors = np.power(1 + assumptions.provider_growth_percent / 100, offsets)

    forecasts: List[YearlyForecast] = []
    for offset, rate_factor, growth_factor in zip(offsets, rate_factors, growth_factors):
        forecasts.append(YearlyForecast(
            year=base_year + int(offset),
            base_budget=base_budget,
            adjusted_budget=float(base_budget * rate_factor * growth_factor),
            rate_increase=float((rate_factor - 1) * 100),
            provider_growth=float((growth_factor - 1) * 100),
            total_providers=float(base_providers * growth_factor),
            average_pay_per_provider=float(base_average_pay * rate_factor),
        ))

    total_projected_spend = base_budget + sum(f.adjusted_budget for f in forecasts)

    logger.debug(
        "Forecast %d tiers over %d years from %d: total %.2f",
        len(tiers), years, base_year, total_projected_spend
    )

    return MultiYearForecast(
        base_year=base_year,
        base_budget=base_budget,
        forecasts=forecasts,
        total_projected_spend=total_projected_spend,
        assumptions=assumptions,
    )


def calculate_budget_variance(actual: float, budgeted: float) -> BudgetVariance:
    """
    Compare actual spend to budget.

    variance_percent is 0 when the budget is zero or negative.
    """
    variance = actual - budgeted
    variance_percent = variance / budgeted * 100 if budgeted > 0 else 0.0
    return BudgetVariance(
        variance=variance,
        variance_percent=variance_percent,
        is_over_budget=variance > 0,
    )


def forecast_year(forecast: MultiYearForecast, year: int) -> Optional[YearlyForecast]:
    """Look up the forecast row for a calendar year."""
    return next((f for f in forecast.forecasts if f.year == year), None)
