"""
Data models for call pay modeling, market benchmarks and provider scenarios.
"""

from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CoverageType(str, Enum):
    """Kind of on-call coverage a tier provides."""

    IN_HOUSE = "In-house"
    RESTRICTED_HOME = "Restricted home"
    UNRESTRICTED_HOME = "Unrestricted home"
    BACKUP_ONLY = "Backup only"


class PaymentMethod(str, Enum):
    """How a tier's rates are paid out."""

    ANNUAL_STIPEND = "Annual stipend"
    DAILY_SHIFT_RATE = "Daily / shift rate"
    HOURLY_RATE = "Hourly rate"
    MONTHLY_RETAINER = "Monthly retainer"
    PER_PROCEDURE = "Per procedure"
    PER_WRVU = "Per wRVU"


class RateType(str, Enum):
    """Day type a call rate applies to."""

    WEEKDAY = "weekday"
    WEEKEND = "weekend"
    HOLIDAY = "holiday"


class BenchmarkSet(BaseModel):
    """
    Sparse set of market percentile points for one metric.

    Any point may be missing. A value of zero is treated the same as a
    missing point. Ordering (p25 <= p50 <= p75 <= p90) is assumed by the
    calculations but not enforced; use is_ordered() at the data-entry
    boundary.
    """

    model_config = ConfigDict(frozen=True)

    p25: Optional[float] = Field(None, description="25th percentile value")
    p50: Optional[float] = Field(None, description="50th percentile (median) value")
    p75: Optional[float] = Field(None, description="75th percentile value")
    p90: Optional[float] = Field(None, description="90th percentile value")

    def points(self) -> List[Tuple[int, float]]:
        """Return (percentile, value) pairs for the points that are present."""
        candidates = [(25, self.p25), (50, self.p50), (75, self.p75), (90, self.p90)]
        return [(pct, float(value)) for pct, value in candidates if value is not None and value > 0]

    def is_empty(self) -> bool:
        return not self.points()

    def is_ordered(self) -> bool:
        """Check that the present points never decrease as the percentile rises."""
        values = [value for _, value in self.points()]
        return all(lower <= upper for lower, upper in zip(values, values[1:]))


class MarketBenchmarks(BaseModel):
    """TCC, wRVU and conversion factor survey benchmarks for one specialty."""

    model_config = ConfigDict(frozen=True)

    tcc25: Optional[float] = None
    tcc50: Optional[float] = None
    tcc75: Optional[float] = None
    tcc90: Optional[float] = None
    wrvu25: Optional[float] = None
    wrvu50: Optional[float] = None
    wrvu75: Optional[float] = None
    wrvu90: Optional[float] = None
    cf25: Optional[float] = None
    cf50: Optional[float] = None
    cf75: Optional[float] = None
    cf90: Optional[float] = None

    def tcc(self) -> BenchmarkSet:
        return BenchmarkSet(p25=self.tcc25, p50=self.tcc50, p75=self.tcc75, p90=self.tcc90)

    def wrvu(self) -> BenchmarkSet:
        return BenchmarkSet(p25=self.wrvu25, p50=self.wrvu50, p75=self.wrvu75, p90=self.wrvu90)

    def cf(self) -> BenchmarkSet:
        return BenchmarkSet(p25=self.cf25, p50=self.cf50, p75=self.cf75, p90=self.cf90)


class CallPayBenchmarks(BaseModel):
    """Per-day-type call rate benchmarks (dollars per call or per 24h)."""

    model_config = ConfigDict(frozen=True)

    weekday: Optional[BenchmarkSet] = None
    weekend: Optional[BenchmarkSet] = None
    holiday: Optional[BenchmarkSet] = None

    def for_rate_type(self, rate_type: RateType) -> Optional[BenchmarkSet]:
        return getattr(self, RateType(rate_type).value)


class RawRates(BaseModel):
    """Weekday, weekend and holiday rates entered directly."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["raw"] = "raw"
    weekday: float = Field(0.0, description="Weekday rate")
    weekend: float = Field(0.0, description="Weekend rate")
    holiday: float = Field(0.0, description="Holiday rate")
    trauma_uplift_percent: Optional[float] = Field(
        None,
        description="Percentage uplift for trauma/high-acuity coverage"
    )

    def resolved(self) -> Tuple[float, float, float]:
        return self.weekday, self.weekend, self.holiday


class UpliftRates(BaseModel):
    """Weekend and holiday rates derived from the weekday rate by percentage uplift."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["uplift"] = "uplift"
    weekday: float = Field(0.0, description="Weekday rate")
    weekend_uplift_percent: float = Field(0.0, description="Weekend uplift over weekday rate")
    holiday_uplift_percent: float = Field(0.0, description="Holiday uplift over weekday rate")
    trauma_uplift_percent: Optional[float] = Field(
        None,
        description="Percentage uplift for trauma/high-acuity coverage"
    )

    def resolved(self) -> Tuple[float, float, float]:
        weekend = self.weekday * (1 + self.weekend_uplift_percent / 100)
        holiday = self.weekday * (1 + self.holiday_uplift_percent / 100)
        return self.weekday, weekend, holiday


CallTierRate = Annotated[Union[RawRates, UpliftRates], Field(discriminator="mode")]


class CallTierBurden(BaseModel):
    """Call volume a tier has to cover."""

    model_config = ConfigDict(frozen=True)

    weekday_calls_per_month: float = 0.0
    weekend_calls_per_month: float = 0.0
    holidays_per_year: float = 0.0
    avg_callbacks_per_24h: float = 0.0
    avg_cases_per_24h: Optional[float] = Field(
        None,
        description="Cases per 24h for procedural specialties"
    )

    def call_periods_per_year(self) -> float:
        """Total 24-hour call periods per year for the whole service."""
        return (
            max(self.weekday_calls_per_month, 0.0) * 12
            + max(self.weekend_calls_per_month, 0.0) * 12
            + max(self.holidays_per_year, 0.0)
        )

    def cases_per_call(self) -> float:
        """Average cases per call, falling back to callbacks when cases are not tracked."""
        return max(self.avg_cases_per_24h or self.avg_callbacks_per_24h or 0.0, 0.0)


class RiskAdjustmentFactors(BaseModel):
    """Optional multipliers applied to a tier's annual pay."""

    model_config = ConfigDict(frozen=True)

    patient_complexity_multiplier: Optional[float] = Field(None, description="Typically 0.8 - 1.5")
    acuity_level_modifier: Optional[float] = Field(None, description="Typically 0.9 - 1.3")
    trauma_center_adjustment: Optional[float] = Field(None, description="Typically 1.0 - 1.25")
    case_mix_adjustment: Optional[float] = Field(None, description="Typically 0.85 - 1.15")

    def combined_multiplier(self) -> float:
        multiplier = 1.0
        for factor in (
            self.patient_complexity_multiplier,
            self.acuity_level_modifier,
            self.trauma_center_adjustment,
            self.case_mix_adjustment,
        ):
            if factor is not None and factor > 0:
                multiplier *= factor
        return multiplier


class CallTier(BaseModel):
    """One on-call coverage tier (e.g. C1)."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Tier identifier, e.g. 'C1'")
    name: str = Field(..., description="Display name")
    coverage_type: CoverageType = CoverageType.IN_HOUSE
    payment_method: PaymentMethod = PaymentMethod.DAILY_SHIFT_RATE
    rates: CallTierRate = Field(default_factory=RawRates)
    burden: CallTierBurden = Field(default_factory=CallTierBurden)
    enabled: bool = True
    risk_adjustment: Optional[RiskAdjustmentFactors] = None

    @model_validator(mode="before")
    @classmethod
    def convert_flat_rates(cls, data):
        """Accept the flat rate record with a use_percentage_based_rates toggle."""
        if not isinstance(data, dict):
            return data
        rates = data.get("rates")
        if not isinstance(rates, dict) or "mode" in rates:
            return data

        rates = dict(rates)
        use_percentage = rates.pop("use_percentage_based_rates", False)
        trauma = rates.get("trauma_uplift_percent")
        if use_percentage:
            converted = {
                "mode": "uplift",
                "weekday": rates.get("weekday", 0.0),
                "weekend_uplift_percent": rates.get("weekend_uplift_percent") or 0.0,
                "holiday_uplift_percent": rates.get("holiday_uplift_percent") or 0.0,
                "trauma_uplift_percent": trauma,
            }
        else:
            converted = {
                "mode": "raw",
                "weekday": rates.get("weekday", 0.0),
                "weekend": rates.get("weekend", 0.0),
                "holiday": rates.get("holiday", 0.0),
                "trauma_uplift_percent": trauma,
            }
        return {**data, "rates": converted}

    def resolved_rates(self) -> Dict[RateType, float]:
        weekday, weekend, holiday = self.rates.resolved()
        return {
            RateType.WEEKDAY: weekday,
            RateType.WEEKEND: weekend,
            RateType.HOLIDAY: holiday,
        }


class CallPayContext(BaseModel):
    """Group-level setup of a call pay model."""

    model_config = ConfigDict(frozen=True)

    specialty: str = Field(..., description="Specialty, e.g. 'Cardiology'")
    service_line: str = Field("", description="Service line")
    providers_on_call: float = Field(0, description="Number of providers sharing call")
    rotation_ratio: float = Field(0, description="Rotation ratio N in a 1-in-N rotation")
    model_year: int = Field(..., description="Base year of the model")

    def is_configured(self) -> bool:
        """Both the provider count and the rotation ratio are usable."""
        return self.providers_on_call > 0 and self.rotation_ratio > 0


class TierImpact(BaseModel):
    """Computed annual cost of one tier."""

    tier_id: str
    tier_name: str
    annual_pay_per_provider: float
    annual_pay_for_group: float
    effective_dollars_per_24h: float
    effective_dollars_per_call: float


class CallPayImpact(BaseModel):
    """Computed cost of a call pay model across all enabled tiers."""

    tiers: List[TierImpact] = Field(default_factory=list)
    total_annual_call_spend: float = 0.0
    average_call_pay_per_provider: float = 0.0
    call_pay_per_1fte: float = 0.0
    call_pay_as_percent_of_tcc: Optional[float] = Field(
        None,
        description="Average call pay as a percentage of a TCC reference"
    )

    def tier(self, tier_id: str) -> Optional[TierImpact]:
        return next((t for t in self.tiers if t.tier_id == tier_id), None)


class FMVOverride(BaseModel):
    """A tier rate above the 90th percentile benchmark, with its compliance justification."""

    tier_id: str
    rate_type: RateType
    rate: float
    benchmark_percentile: int = 90
    benchmark_value: float
    justification: str = ""
    approved_by: Optional[str] = None
    approved_date: Optional[str] = None
    supporting_documentation: Optional[str] = None

    @property
    def key(self) -> Tuple[str, RateType]:
        return self.tier_id, self.rate_type

    @property
    def is_justified(self) -> bool:
        return bool(self.justification and self.justification.strip())


class TCCComponent(BaseModel):
    """One line of total cash compensation."""

    id: str
    label: str
    type: str = Field("Other", description="e.g. 'Base Salary', 'Call Pay'")
    amount: float = Field(0.0, description="Annual dollar amount")


class ComputedPercentiles(BaseModel):
    tcc_percentile: Optional[float] = None
    wrvu_percentile: Optional[float] = None
    cf_percentile: Optional[float] = None


class ProviderScenario(BaseModel):
    """Provider productivity/pay scenario as stored by the persistence layer."""

    id: str
    name: str
    scenario_type: Optional[str] = None
    provider_name: Optional[str] = None
    specialty: Optional[str] = None
    fte: float = Field(1.0, description="FTE, 0.0 - 1.0")
    annual_wrvus: float = 0.0
    tcc_components: List[TCCComponent] = Field(default_factory=list)
    market_benchmarks: Optional[MarketBenchmarks] = None
    computed_percentiles: Optional[ComputedPercentiles] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def total_tcc(self) -> float:
        return sum(component.amount for component in self.tcc_components)


class ScenarioData(BaseModel):
    """Saved call pay scenario: context, tiers and the impact computed from them."""

    id: str
    name: str
    context: CallPayContext
    tiers: List[CallTier] = Field(default_factory=list)
    impact: CallPayImpact
