"""
Call pay cost calculation engine.

Implements tiered on-call coverage budgeting:
- Annual pay per provider for each payment method
- Rotation ratio share of the service's call burden
- Group totals, average pay per provider and pay per 1.0 FTE
- Effective dollars per 24h and per call
"""

import logging
from typing import Dict, List, Optional

from .models import (
    CallPayBenchmarks,
    CallPayContext,
    CallPayImpact,
    CallTier,
    PaymentMethod,
    RateType,
    TierImpact,
)
from .percentile import DEFAULT_PERCENTILE, calculate_percentile

logger = logging.getLogger(__name__)

HOURS_PER_SHIFT = 24

MONTHS_PER_YEAR = 12


class CallPayCalculator:
    """
    Calculates annual call pay cost from coverage tiers and rotation context.

    Formula (daily / shift rate):
    Annual Pay per Provider = [(Weekday Rate × Weekday Calls/Month × 12)
                               + (Weekend Rate × Weekend Calls/Month × 12)
                               + (Holiday Rate × Holidays/Year)] ÷ Rotation Ratio

    Where the rotation ratio N of a 1-in-N rotation is the share of the
    service's call burden one provider carries. Group pay multiplies by the
    number of providers on call.

    Negative rates and call counts are clamped to zero; a rotation ratio or
    provider count of zero or less yields zero rather than Infinity/NaN.
    """

    def calculate_tier_annual_pay(self, tier: CallTier, context: CallPayContext) -> float:
        """
        Calculate annual call pay for one provider in a tier.

        Args:
            tier: Call tier with rates and burden
            context: Rotation context

        Returns:
            Annual pay per provider (0 for disabled tiers or a non-positive
            rotation ratio)
        """
        if not tier.enabled or context.rotation_ratio <= 0:
            return 0.0

        service_annual_pay = self._service_annual_pay(tier)

        trauma_uplift = tier.rates.trauma_uplift_percent
        if trauma_uplift and trauma_uplift > 0:
            service_annual_pay *= 1 + trauma_uplift / 100

        if tier.risk_adjustment is not None:
            service_annual_pay *= tier.risk_adjustment.combined_multiplier()

        return service_annual_pay / context.rotation_ratio

    def _service_annual_pay(self, tier: CallTier) -> float:
        """
        Annual pay to cover the whole service's call burden for a tier,
        before rotation sharing.
        """
        weekday_rate, weekend_rate, holiday_rate = (max(rate, 0.0) for rate in tier.rates.resolved())
        burden = tier.burden

        weekday_calls = max(burden.weekday_calls_per_month, 0.0) * MONTHS_PER_YEAR
        weekend_calls = max(burden.weekend_calls_per_month, 0.0) * MONTHS_PER_YEAR
        holiday_calls = max(burden.holidays_per_year, 0.0)

        method = tier.payment_method

        if method == PaymentMethod.ANNUAL_STIPEND:
            # Weekday rate holds the annual stipend
            return weekday_rate

        if method == PaymentMethod.MONTHLY_RETAINER:
            return weekday_rate * MONTHS_PER_YEAR

        if method == PaymentMethod.DAILY_SHIFT_RATE:
            return (
                weekday_calls * weekday_rate
                + weekend_calls * weekend_rate
                + holiday_calls * holiday_rate
            )

        if method == PaymentMethod.HOURLY_RATE:
            return HOURS_PER_SHIFT * (
                weekday_calls * weekday_rate
                + weekend_calls * weekend_rate
                + holiday_calls * holiday_rate
            )

        if method in (PaymentMethod.PER_PROCEDURE, PaymentMethod.PER_WRVU):
            # Weekend and holiday fall back to the weekday rate when unset
            cases_per_call = burden.cases_per_call()
            weekend_rate = weekend_rate if weekend_rate > 0 else weekday_rate
            holiday_rate = holiday_rate if holiday_rate > 0 else weekday_rate
            return cases_per_call * (
                weekday_calls * weekday_rate
                + weekend_calls * weekend_rate
                + holiday_calls * holiday_rate
            )

        return 0.0

    def _provider_call_periods(self, tier: CallTier, context: CallPayContext) -> float:
        """24-hour call periods per year carried by one provider."""
        if context.rotation_ratio <= 0:
            return 0.0
        return tier.burden.call_periods_per_year() / context.rotation_ratio

    def calculate_effective_dollars_per_24h(self, tier: CallTier, context: CallPayContext) -> float:
        """
        Effective pay per 24-hour call period for one provider.

        Annual pay per provider divided by the call periods that provider
        covers. Returns 0 when the tier has no call periods.
        """
        if not tier.enabled:
            return 0.0

        periods = self._provider_call_periods(tier, context)
        if periods <= 0:
            return 0.0
        return self.calculate_tier_annual_pay(tier, context) / periods

    def calculate_effective_dollars_per_call(self, tier: CallTier, context: CallPayContext) -> float:
        """
        Effective pay per call event for one provider.

        Per procedure and per wRVU tiers count cases (or callbacks) per 24h
        as call events; all other payment methods count call periods.
        """
        if not tier.enabled:
            return 0.0

        events = self._provider_call_periods(tier, context)
        if tier.payment_method in (PaymentMethod.PER_PROCEDURE, PaymentMethod.PER_WRVU):
            events *= tier.burden.cases_per_call()

        if events <= 0:
            return 0.0
        return self.calculate_tier_annual_pay(tier, context) / events

    def calculate_tier_impact(self, tier: CallTier, context: CallPayContext) -> TierImpact:
        """Calculate the cost of a single tier."""
        annual_pay_per_provider = self.calculate_tier_annual_pay(tier, context)
        providers = context.providers_on_call if context.providers_on_call > 0 else 0.0

        return TierImpact(
            tier_id=tier.id,
            tier_name=tier.name,
            annual_pay_per_provider=annual_pay_per_provider,
            annual_pay_for_group=annual_pay_per_provider * providers,
            effective_dollars_per_24h=self.calculate_effective_dollars_per_24h(tier, context),
            effective_dollars_per_call=self.calculate_effective_dollars_per_call(tier, context),
        )

    def calculate_impact(
        self,
        tiers: List[CallTier],
        context: CallPayContext,
        tcc_reference: Optional[float] = None,
        total_fte: Optional[float] = None,
    ) -> CallPayImpact:
        """
        Calculate the cost of a call pay model across all enabled tiers.

        Args:
            tiers: Call tiers; disabled tiers are skipped
            context: Providers on call and rotation ratio
            tcc_reference: Optional total cash compensation to express
                           call pay as a percentage of
            total_fte: Optional combined FTE of the providers on call

        Returns:
            CallPayImpact with per-tier and aggregate figures
        """
        if not context.is_configured():
            logger.warning(
                "Call pay context not configured (providers_on_call=%s, rotation_ratio=%s)",
                context.providers_on_call, context.rotation_ratio
            )

        tier_impacts = [self.calculate_tier_impact(tier, context) for tier in tiers if tier.enabled]

        total_annual_call_spend = sum(impact.annual_pay_for_group for impact in tier_impacts)

        if context.providers_on_call > 0:
            average_call_pay_per_provider = total_annual_call_spend / context.providers_on_call
        else:
            average_call_pay_per_provider = 0.0

        if total_fte is not None and total_fte > 0:
            call_pay_per_1fte = total_annual_call_spend / total_fte
        elif context.rotation_ratio > 0:
            # Full-rotation equivalent: what a 1-in-1 provider would earn
            call_pay_per_1fte = average_call_pay_per_provider * context.rotation_ratio
        else:
            call_pay_per_1fte = 0.0

        call_pay_as_percent_of_tcc = None
        if tcc_reference is not None and tcc_reference > 0:
            call_pay_as_percent_of_tcc = average_call_pay_per_provider / tcc_reference * 100

        impact = CallPayImpact(
            tiers=tier_impacts,
            total_annual_call_spend=total_annual_call_spend,
            average_call_pay_per_provider=average_call_pay_per_provider,
            call_pay_per_1fte=call_pay_per_1fte,
            call_pay_as_percent_of_tcc=call_pay_as_percent_of_tcc,
        )
        logger.debug(
            "Call pay impact for %s: %d tiers, total %.2f",
            context.specialty, len(tier_impacts), total_annual_call_spend
        )
        return impact

    def calculate_rate_percentiles(
        self,
        tier: CallTier,
        benchmarks: Optional[CallPayBenchmarks],
    ) -> Dict[RateType, float]:
        """
        Place a tier's weekday, weekend and holiday rates in their benchmarks.

        Rate types without benchmarks get DEFAULT_PERCENTILE.
        """
        percentiles: Dict[RateType, float] = {}
        for rate_type, rate in tier.resolved_rates().items():
            benchmark = benchmarks.for_rate_type(rate_type) if benchmarks is not None else None
            if benchmark is None:
                percentiles[rate_type] = DEFAULT_PERCENTILE
            else:
                percentiles[rate_type] = calculate_percentile(rate, benchmark)
        return percentiles


def calculate_impact(
    tiers: List[CallTier],
    context: CallPayContext,
    tcc_reference: Optional[float] = None,
    total_fte: Optional[float] = None,
) -> CallPayImpact:
    """Calculate call pay impact with a default CallPayCalculator."""
    return CallPayCalculator().calculate_impact(tiers, context, tcc_reference, total_fte)
