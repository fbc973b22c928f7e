"""
Tests for the FMV benchmark reference table.

Run with: pytest test_benchmark_table.py -v
"""

from pathlib import Path

import pytest
from compensation_analytics import FMVBenchmark, FMVBenchmarkTable, RateType, create_default_benchmark_table
from compensation_analytics.fmv_models import FMVSource


DATA_DIR = Path(__file__).parent / "data"


def test_default_table():
    table = create_default_benchmark_table()
    assert len(table) == 6
    assert table.get("cardio-inhouse-2024").source_name == "SullivanCotter"


def test_load_from_directory():
    """Test loading the bundled JSON benchmark file."""
    table = FMVBenchmarkTable()
    table.load_from_directory(DATA_DIR)

    assert len(table) == 3

    anes = table.get("anes-inhouse-2024")
    assert anes.source == FMVSource.GALLAGHER
    assert anes.median_rate_per_24h == 2100

    ortho = table.get("ortho-restricted-2024")
    assert ortho.p90_rate_per_24h is None
    assert ortho.day_type_benchmarks.for_rate_type(RateType.WEEKDAY).p90 == 2200
    assert ortho.day_type_benchmarks.holiday is None


def test_missing_directory_file(tmp_path):
    table = FMVBenchmarkTable()
    table.load_from_directory(tmp_path)
    assert len(table) == 0


def test_find_best_match_with_loaded_data():
    table = FMVBenchmarkTable()
    table.load_from_directory(DATA_DIR)

    assert table.find_best_match("Orthopedic Surgery", "Restricted home").id == "ortho-restricted-2024"
    assert table.find_best_match("Neurology", "Unrestricted home").id == "generic-unrestricted-2024"
    assert table.find_best_match("Neurology", "In-house").id == "generic-unrestricted-2024"


def test_find_best_match_empty_table():
    assert FMVBenchmarkTable().find_best_match("Cardiology", "In-house") is None


def test_add_replaces_same_id():
    table = create_default_benchmark_table()
    table.add(FMVBenchmark(id="cardio-inhouse-2024", specialty="Cardiology", coverage_type="In-house",
                           source=FMVSource.ECG, survey_year=2025, median_rate_per_24h=1900))
    assert len(table) == 6
    assert table.get("cardio-inhouse-2024").survey_year == 2025


class TestCsvImport:
    """Test importing a survey spreadsheet export."""

    def test_load_from_csv(self, tmp_path):
        csv_file = tmp_path / "survey.csv"
        csv_file.write_text(
            "Source,Survey Year,Specialty,Coverage Type,P25,Median,P75,P90\n"
            "MGMA,2024,Neurology,In-house,900,1100,1400,\n"
            "SC,2023,Urology,Restricted home,700,850,1050,1300\n"
        )

        table = FMVBenchmarkTable()
        table.load_from_csv(csv_file)

        assert len(table) == 2
        neuro = table.get("neurology-in-house-2024")
        assert neuro.median_rate_per_24h == 1100
        assert neuro.p90_rate_per_24h is None
        assert table.find_best_match("Urology", "Restricted home").source == FMVSource.SC

    def test_explicit_id_column(self, tmp_path):
        csv_file = tmp_path / "survey.csv"
        csv_file.write_text(
            "id,source,survey_year,specialty,coverage_type,p50\n"
            "neuro-1,ECG,2024,Neurology,In-house,1000\n"
        )
        table = FMVBenchmarkTable()
        table.load_from_csv(csv_file)
        assert table.get("neuro-1").source == FMVSource.ECG

    def test_missing_columns(self, tmp_path):
        csv_file = tmp_path / "survey.csv"
        csv_file.write_text("specialty,p50\nNeurology,1000\n")

        with pytest.raises(ValueError, match="missing columns"):
            FMVBenchmarkTable().load_from_csv(csv_file)

    def test_invalid_row(self, tmp_path):
        csv_file = tmp_path / "survey.csv"
        csv_file.write_text(
            "source,survey_year,specialty,coverage_type,p50\n"
            "MGMA,2024,Neurology,In-house,0\n"
        )

        with pytest.raises(ValueError, match="row 2"):
            FMVBenchmarkTable().load_from_csv(csv_file)


def test_to_dataframe():
    df = create_default_benchmark_table().to_dataframe()
    assert len(df) == 6
    assert list(df.columns) == ["id", "source", "survey_year", "specialty",
                                "coverage_type", "p25", "p50", "p75", "p90"]
    assert df.loc[df["id"] == "ped-inhouse-2024", "p50"].iloc[0] == 1200
