"""
Fair Market Value (FMV) Data Models

Market survey benchmarks for call pay rates and the result of
evaluating an arrangement against them.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import BenchmarkSet, CallPayBenchmarks


class FMVSource(str, Enum):
    """Compensation survey publisher."""

    SC = "SC"
    MGMA = "MGMA"
    ECG = "ECG"
    GALLAGHER = "Gallagher"
    OTHER = "Other"


SOURCE_DISPLAY_NAMES = {
    FMVSource.SC: "SullivanCotter",
    FMVSource.MGMA: "MGMA",
    FMVSource.ECG: "ECG",
    FMVSource.GALLAGHER: "Gallagher",
    FMVSource.OTHER: "Other",
}


class FMVRiskLevel(str, Enum):
    """Regulatory risk tier of a compensation arrangement."""

    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"


class FMVBenchmark(BaseModel):
    """
    Survey benchmark for call pay rate per 24-hour period.

    Reference data: one record per (source, survey year, specialty,
    coverage type).
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Record identifier, e.g. 'ped-inhouse-2024'")
    specialty: str = Field(
        ...,
        description="Specialty, or 'All Specialties' for the generic fallback"
    )
    coverage_type: str = Field(..., description="e.g. 'In-house', 'Unrestricted home'")
    source: FMVSource = Field(..., description="Survey publisher")
    survey_year: int = Field(..., description="Survey year")

    median_rate_per_24h: float = Field(..., gt=0, description="50th percentile rate per 24h")
    p25_rate_per_24h: Optional[float] = Field(None, description="25th percentile rate per 24h")
    p75_rate_per_24h: Optional[float] = Field(None, description="75th percentile rate per 24h")
    p90_rate_per_24h: Optional[float] = Field(None, description="90th percentile rate per 24h")

    day_type_benchmarks: Optional[CallPayBenchmarks] = Field(
        default=None,
        description="Weekday/weekend/holiday rate benchmarks, when the survey publishes them"
    )

    @field_validator("p25_rate_per_24h", "p75_rate_per_24h", "p90_rate_per_24h")
    @classmethod
    def drop_empty_points(cls, v: Optional[float]) -> Optional[float]:
        """Treat zero or negative survey points as not published."""
        if v is None or v <= 0:
            return None
        return v

    @property
    def source_name(self) -> str:
        return SOURCE_DISPLAY_NAMES.get(self.source, str(self.source.value))

    def rate_benchmarks(self) -> BenchmarkSet:
        return BenchmarkSet(
            p25=self.p25_rate_per_24h,
            p50=self.median_rate_per_24h,
            p75=self.p75_rate_per_24h,
            p90=self.p90_rate_per_24h,
        )


class FMVEvaluationInput(BaseModel):
    """Arrangement to evaluate against FMV benchmarks."""

    specialty: str = Field(..., description="Specialty of the call arrangement")
    coverage_type: str = Field(..., description="Coverage type of the call arrangement")
    effective_rate_per_24h: float = Field(
        ...,
        description="Effective dollars per 24h, from the call pay calculator"
    )
    burden_score: Optional[float] = Field(
        default=None,
        description="Call burden score (0-100) when available"
    )


class FMVEvaluationResult(BaseModel):
    """
    Outcome of an FMV evaluation.

    benchmark and percentile_estimate are unset when no benchmark matched.
    """
    benchmark: Optional[FMVBenchmark] = None
    percentile_estimate: Optional[int] = Field(
        default=None,
        description="Approximate percentile position (0-99)"
    )
    risk_level: FMVRiskLevel
    notes: List[str] = Field(default_factory=list, description="Bullet-style flags")
    narrative_summary: str = Field("", description="Justification paragraph")

    @property
    def has_benchmark(self) -> bool:
        return self.benchmark is not None
