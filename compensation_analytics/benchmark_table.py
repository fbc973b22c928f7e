"""
FMV benchmark reference table.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .fmv_models import FMVBenchmark, FMVSource

logger = logging.getLogger(__name__)

GENERIC_SPECIALTY = "All Specialties"

BENCHMARK_FILE_NAME = "fmv_benchmarks.json"

# Spreadsheet column -> FMVBenchmark field
CSV_COLUMN_MAP = {
    "id": "id",
    "source": "source",
    "survey_year": "survey_year",
    "specialty": "specialty",
    "coverage_type": "coverage_type",
    "p25": "p25_rate_per_24h",
    "p50": "median_rate_per_24h",
    "median": "median_rate_per_24h",
    "p75": "p75_rate_per_24h",
    "p90": "p90_rate_per_24h",
}


class FMVBenchmarkTable:
    """
    Read-only lookup of call pay FMV benchmarks.

    Records keep their insertion order; lookups return the first record
    that satisfies a matching rule.
    """

    def __init__(self, benchmarks: Optional[Iterable[FMVBenchmark]] = None):
        """
        Initialize the table.

        Args:
            benchmarks: Optional initial benchmark records
        """
        self.benchmarks: Dict[str, FMVBenchmark] = {}
        for benchmark in benchmarks or []:
            self.add(benchmark)

    def __len__(self) -> int:
        return len(self.benchmarks)

    def __iter__(self):
        return iter(self.benchmarks.values())

    def add(self, benchmark: FMVBenchmark) -> None:
        """Add a benchmark record, replacing any record with the same id."""
        self.benchmarks[benchmark.id] = benchmark

    def get(self, benchmark_id: str) -> Optional[FMVBenchmark]:
        return self.benchmarks.get(benchmark_id)

    def find_best_match(self, specialty: str, coverage_type: str) -> Optional[FMVBenchmark]:
        """
        Find the best matching benchmark for a specialty and coverage type.

        Matching priority:
        1. Exact match on specialty and coverage type
        2. Specialty match with any coverage type
        3. "All Specialties" with the same coverage type
        4. "All Specialties" with any coverage type

        Args:
            specialty: Specialty name
            coverage_type: Coverage type name

        Returns:
            FMVBenchmark if any rule matched, None otherwise
        """
        records = list(self.benchmarks.values())
        rules = [
            lambda b: b.specialty == specialty and b.coverage_type == coverage_type,
            lambda b: b.specialty == specialty,
            lambda b: b.specialty == GENERIC_SPECIALTY and b.coverage_type == coverage_type,
            lambda b: b.specialty == GENERIC_SPECIALTY,
        ]
        for rule in rules:
            match = next((b for b in records if rule(b)), None)
            if match is not None:
                return match

        logger.debug("No FMV benchmark for %s / %s", specialty, coverage_type)
        return None

    def load_from_directory(self, directory: Path) -> None:
        """
        Load benchmark records from a JSON file in a directory.

        Expected files:
        - fmv_benchmarks.json: list of benchmark records

        Args:
            directory: Path to directory containing the data file

        Raises:
            ValueError: If a record is malformed
        """
        benchmark_file = Path(directory) / BENCHMARK_FILE_NAME
        if not benchmark_file.exists():
            logger.warning("Benchmark file not found: %s", benchmark_file)
            return

        with open(benchmark_file, 'r') as f:
            records = json.load(f)

        for record in records:
            self.add(FMVBenchmark(**record))
        logger.info("Loaded %d FMV benchmarks from %s", len(records), benchmark_file)

    def load_from_csv(self, file_path: Path) -> None:
        """
        Load benchmark records from a survey spreadsheet export.

        One row per survey record with columns source, survey_year,
        specialty, coverage_type and p25/p50/p75/p90 (p50 may be named
        'median'). An id column is optional.

        Args:
            file_path: CSV file path

        Raises:
            ValueError: If required columns are missing or a row is malformed
        """
        df = pd.read_csv(file_path)
        df.columns = [str(c).strip().lower().replace(" ", "_") for c in df.columns]

        required = {"source", "survey_year", "specialty", "coverage_type"}
        missing = required - set(df.columns)
        if missing:
            raise ValueError(f"Benchmark file is missing columns: {sorted(missing)}")

        df = df.rename(columns={c: CSV_COLUMN_MAP[c] for c in df.columns if c in CSV_COLUMN_MAP})
        df = df.astype(object).where(pd.notna(df), None)

        for index, row in df.iterrows():
            record = {k: v for k, v in row.items() if k in CSV_COLUMN_MAP.values() and v is not None}
            record["source"] = str(record["source"]).strip()
            record["survey_year"] = int(record["survey_year"])
            record.setdefault(
                "id",
                f"{record['specialty']}-{record['coverage_type']}-{record['survey_year']}".lower().replace(" ", "-")
            )
            try:
                self.add(FMVBenchmark(**record))
            except ValueError as e:
                raise ValueError(f"Invalid benchmark row {index + 2}: {e}") from e

        logger.info("Loaded %d FMV benchmarks from %s", len(df), file_path)

    def to_dataframe(self) -> pd.DataFrame:
        """Tabular view of the table, one row per record."""
        rows = [
            {
                "id": b.id,
                "source": b.source.value,
                "survey_year": b.survey_year,
                "specialty": b.specialty,
                "coverage_type": b.coverage_type,
                "p25": b.p25_rate_per_24h,
                "p50": b.median_rate_per_24h,
                "p75": b.p75_rate_per_24h,
                "p90": b.p90_rate_per_24h,
            }
            for b in self.benchmarks.values()
        ]
        return pd.DataFrame(rows, columns=["id", "source", "survey_year", "specialty",
                                           "coverage_type", "p25", "p50", "p75", "p90"])


def create_default_benchmark_table() -> FMVBenchmarkTable:
    """
    Create a benchmark table with sample survey data.

    These are illustrative values; production tables are loaded from
    licensed survey data with load_from_directory or load_from_csv.

    Returns:
        FMVBenchmarkTable with sample records loaded
    """
    sample_benchmarks: List[FMVBenchmark] = [
        FMVBenchmark(id="ped-inhouse-2024", specialty="Pediatrics", coverage_type="In-house",
                     source=FMVSource.MGMA, survey_year=2024, median_rate_per_24h=1200,
                     p25_rate_per_24h=950, p75_rate_per_24h=1500, p90_rate_per_24h=1800),
        FMVBenchmark(id="cardio-inhouse-2024", specialty="Cardiology", coverage_type="In-house",
                     source=FMVSource.SC, survey_year=2024, median_rate_per_24h=1800,
                     p25_rate_per_24h=1400, p75_rate_per_24h=2200, p90_rate_per_24h=2800),
        FMVBenchmark(id="hospitalist-inhouse-2024", specialty="Hospitalist", coverage_type="In-house",
                     source=FMVSource.MGMA, survey_year=2024, median_rate_per_24h=1000,
                     p25_rate_per_24h=800, p75_rate_per_24h=1250, p90_rate_per_24h=1600),
        FMVBenchmark(id="surgery-inhouse-2024", specialty="General Surgery", coverage_type="In-house",
                     source=FMVSource.ECG, survey_year=2024, median_rate_per_24h=2000,
                     p25_rate_per_24h=1600, p75_rate_per_24h=2500, p90_rate_per_24h=3200),
        FMVBenchmark(id="ped-homecall-2024", specialty="Pediatrics", coverage_type="Unrestricted home",
                     source=FMVSource.MGMA, survey_year=2024, median_rate_per_24h=800,
                     p25_rate_per_24h=600, p75_rate_per_24h=1000, p90_rate_per_24h=1300),
        FMVBenchmark(id="generic-inhouse-2024", specialty=GENERIC_SPECIALTY, coverage_type="In-house",
                     source=FMVSource.MGMA, survey_year=2024, median_rate_per_24h=1400,
                     p25_rate_per_24h=1100, p75_rate_per_24h=1800, p90_rate_per_24h=2300),
    ]
    return FMVBenchmarkTable(sample_benchmarks)
