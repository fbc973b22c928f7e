#!/usr/bin/env python
"""
Command-line interface for compensation analytics.

Quick tool for call pay budgets, FMV checks and percentile lookups.
"""

import argparse
import logging
import sys
from pathlib import Path

from compensation_analytics import (
    BenchmarkSet,
    CallPayContext,
    CallTier,
    CompensationAnalyzer,
    FMVEvaluationInput,
    ForecastAssumptions,
    PaymentMethod,
    calculate_percentile,
)

LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )


def _build_analyzer(args) -> CompensationAnalyzer:
    if getattr(args, "data_dir", None):
        return CompensationAnalyzer(data_directory=Path(args.data_dir))
    return CompensationAnalyzer()


def _build_tier_and_context(args):
    tier = CallTier(
        id="C1",
        name="C1",
        coverage_type=args.coverage,
        payment_method=PaymentMethod(args.method),
        rates={
            "weekday": args.weekday_rate,
            "weekend": args.weekend_rate,
            "holiday": args.holiday_rate,
        },
        burden={
            "weekday_calls_per_month": args.weekday_calls,
            "weekend_calls_per_month": args.weekend_calls,
            "holidays_per_year": args.holidays,
        },
    )
    context = CallPayContext(
        specialty=args.specialty,
        providers_on_call=args.providers,
        rotation_ratio=args.rotation,
        model_year=args.year,
    )
    return tier, context


def call_pay_impact(args):
    """Calculate the annual cost of a single call tier."""
    analyzer = _build_analyzer(args)
    tier, context = _build_tier_and_context(args)

    impact = analyzer.calculate_impact([tier], context)
    tier_impact = impact.tiers[0]

    print("\n" + "=" * 60)
    print("CALL PAY IMPACT")
    print("=" * 60)
    print(f"Specialty:         {context.specialty}")
    print(f"Payment Method:    {tier.payment_method.value}")
    print(f"Rotation:          1-in-{context.rotation_ratio:g}")
    print(f"Providers on Call: {context.providers_on_call:g}")
    print()
    print(f"Annual Pay per Provider:   ${tier_impact.annual_pay_per_provider:,.2f}")
    print(f"Annual Pay for Group:      ${tier_impact.annual_pay_for_group:,.2f}")
    print(f"Effective $/24h:           ${tier_impact.effective_dollars_per_24h:,.2f}")
    print(f"Effective $/Call:          ${tier_impact.effective_dollars_per_call:,.2f}")
    print()
    print(f"TOTAL ANNUAL CALL SPEND:   ${impact.total_annual_call_spend:,.2f}")
    print(f"Call Pay per 1.0 FTE:      ${impact.call_pay_per_1fte:,.2f}")
    print("=" * 60)
    print()


def fmv_check(args):
    """Evaluate a rate per 24h against FMV benchmarks."""
    analyzer = _build_analyzer(args)

    result = analyzer.evaluate_fmv(FMVEvaluationInput(
        specialty=args.specialty,
        coverage_type=args.coverage,
        effective_rate_per_24h=args.rate,
        burden_score=args.burden_score,
    ))

    print("\n" + "=" * 60)
    print("FMV EVALUATION")
    print("=" * 60)
    if result.benchmark is not None:
        print(f"Benchmark:   {result.benchmark.source_name} {result.benchmark.survey_year} "
              f"({result.benchmark.specialty}, {result.benchmark.coverage_type})")
        print(f"Percentile:  ~{result.percentile_estimate}")
    else:
        print("Benchmark:   none matched")
    print(f"Risk Level:  {result.risk_level.value}")
    print()
    for note in result.notes:
        print(f"  - {note}")
    print()
    print(result.narrative_summary)
    print("=" * 60)
    print()


def percentile_lookup(args):
    """Place a value within benchmark points."""
    benchmarks = BenchmarkSet(p25=args.p25, p50=args.p50, p75=args.p75, p90=args.p90)
    if not benchmarks.is_ordered():
        print("WARNING: benchmark points are not in ascending order", file=sys.stderr)

    percentile = calculate_percentile(args.value, benchmarks)
    print(f"\nValue {args.value:,.2f} is at the {percentile:.1f} percentile\n")


def budget_forecast(args):
    """Project a single-tier call budget forward."""
    analyzer = _build_analyzer(args)
    tier, context = _build_tier_and_context(args)

    forecast = analyzer.forecast([tier], context, ForecastAssumptions(
        rate_increase_percent=args.rate_increase,
        provider_growth_percent=args.provider_growth,
        years_to_forecast=args.years,
    ))

    print("\n" + "=" * 60)
    print("BUDGET FORECAST")
    print("=" * 60)
    print(f"{forecast.base_year}:  ${forecast.base_budget:>14,.2f}  (base)")
    for row in forecast.forecasts:
        print(f"{row.year}:  ${row.adjusted_budget:>14,.2f}  "
              f"(rate +{row.rate_increase:.1f}%, providers {row.total_providers:.1f})")
    print()
    print(f"TOTAL PROJECTED SPEND: ${forecast.total_projected_spend:,.2f}")
    print("=" * 60)
    print()


def list_benchmarks(args):
    """List the FMV benchmark reference table."""
    analyzer = _build_analyzer(args)
    df = analyzer.benchmark_table.to_dataframe()
    if df.empty:
        print("\nNo benchmarks loaded\n")
        return
    print()
    print(df.to_string(index=False))
    print()


def _add_tier_arguments(parser):
    parser.add_argument('--specialty', default='Cardiology', help='Specialty (default: Cardiology)')
    parser.add_argument('--coverage', default='In-house', help='Coverage type (default: In-house)')
    parser.add_argument('--method', default=PaymentMethod.DAILY_SHIFT_RATE.value,
                        choices=[m.value for m in PaymentMethod], help='Payment method')
    parser.add_argument('--weekday-rate', type=float, required=True, help='Weekday rate')
    parser.add_argument('--weekend-rate', type=float, default=0.0, help='Weekend rate')
    parser.add_argument('--holiday-rate', type=float, default=0.0, help='Holiday rate')
    parser.add_argument('--weekday-calls', type=float, default=0.0, help='Weekday calls per month')
    parser.add_argument('--weekend-calls', type=float, default=0.0, help='Weekend calls per month')
    parser.add_argument('--holidays', type=float, default=0.0, help='Holidays per year')
    parser.add_argument('--providers', type=float, required=True, help='Providers on call')
    parser.add_argument('--rotation', type=float, required=True, help='Rotation ratio N (1-in-N)')
    parser.add_argument('--year', type=int, default=2025, help='Model year (default: 2025)')


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Compensation Analytics CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Annual cost of a weekday call tier, 1-in-5 rotation, 5 providers
  %(prog)s impact --weekday-rate 500 --weekday-calls 10 --providers 5 --rotation 5

  # FMV check of a rate per 24h
  %(prog)s fmv --specialty Pediatrics --coverage In-house --rate 1600 --burden-score 85

  # Percentile of a TCC value
  %(prog)s percentile 320000 --p25 250000 --p50 300000 --p75 360000 --p90 420000

  # Three-year forecast with 3%% rate increases
  %(prog)s forecast --weekday-rate 500 --weekday-calls 10 --providers 5 --rotation 5 --rate-increase 3
        """
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    parser.add_argument('--data-dir', help='Directory containing fmv_benchmarks.json')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    impact_parser = subparsers.add_parser('impact', help='Calculate call pay impact for one tier')
    _add_tier_arguments(impact_parser)
    impact_parser.set_defaults(func=call_pay_impact)

    fmv_parser = subparsers.add_parser('fmv', help='Evaluate a rate against FMV benchmarks')
    fmv_parser.add_argument('--specialty', required=True, help='Specialty')
    fmv_parser.add_argument('--coverage', default='In-house', help='Coverage type (default: In-house)')
    fmv_parser.add_argument('--rate', type=float, required=True, help='Effective rate per 24h')
    fmv_parser.add_argument('--burden-score', type=float, help='Call burden score (0-100)')
    fmv_parser.set_defaults(func=fmv_check)

    pct_parser = subparsers.add_parser('percentile', help='Place a value within benchmark points')
    pct_parser.add_argument('value', type=float, help='Value to place')
    pct_parser.add_argument('--p25', type=float, help='25th percentile')
    pct_parser.add_argument('--p50', type=float, help='50th percentile')
    pct_parser.add_argument('--p75', type=float, help='75th percentile')
    pct_parser.add_argument('--p90', type=float, help='90th percentile')
    pct_parser.set_defaults(func=percentile_lookup)

    forecast_parser = subparsers.add_parser('forecast', help='Forecast a one-tier budget')
    _add_tier_arguments(forecast_parser)
    forecast_parser.add_argument('--rate-increase', type=float, default=0.0, help='Annual rate increase %%')
    forecast_parser.add_argument('--provider-growth', type=float, default=0.0, help='Annual provider growth %%')
    forecast_parser.add_argument('--years', type=int, default=3, help='Years to forecast (default: 3)')
    forecast_parser.set_defaults(func=budget_forecast)

    bench_parser = subparsers.add_parser('benchmarks', help='List FMV benchmarks')
    bench_parser.set_defaults(func=list_benchmarks)

    args = parser.parse_args()
    setup_logging(args.verbose)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except ValueError as e:
        print(f"\nERROR: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
