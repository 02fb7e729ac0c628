"""Tests for occupancy CSV parsing."""

from datetime import date
from pathlib import Path

import pytest

from src.utils.readings import Reading, load_readings, parse_occupancy_csv

VALID_CSV = """Date,Day,Time,Occupancy
15.03.2024,Friday,14:30,25
15.03.2024,Friday,14:45,30
16.03.2024,Saturday,09:15,15"""


class TestParseOccupancyCsv:
    """Tests for the parse_occupancy_csv function."""

    def test_parse_valid_csv(self) -> None:
        readings = parse_occupancy_csv(VALID_CSV)
        assert len(readings) == 3
        assert readings[0] == Reading(
            date=date(2024, 3, 15), day="Friday", time="14:30", occupancy=25, hour=14
        )
        assert readings[2].day == "Saturday"
        assert readings[2].hour == 9

    def test_preserves_row_order(self) -> None:
        readings = parse_occupancy_csv(VALID_CSV)
        assert [r.occupancy for r in readings] == [25, 30, 15]

    def test_header_only(self) -> None:
        assert parse_occupancy_csv("Date,Day,Time,Occupancy") == []

    def test_whitespace_only(self) -> None:
        assert parse_occupancy_csv("   ") == []

    def test_fractional_occupancy_truncated(self) -> None:
        readings = parse_occupancy_csv("Date,Day,Time,Occupancy\n15.03.2024,Friday,14:30,25.5")
        assert readings[0].occupancy == 25

    def test_malformed_rows_skipped(self) -> None:
        """Rows with bad dates, times or counts are dropped."""
        csv_text = (
            "Date,Day,Time,Occupancy\n"
            "15.03.2024,Friday,14:30,25\n"
            "not-a-date,Friday,14:45,30\n"
            "15.03.2024,Friday,xx:45,30\n"
            "15.03.2024,Friday,14:50,many\n"
        )
        readings = parse_occupancy_csv(csv_text)
        assert len(readings) == 1

    def test_non_finite_occupancy_skipped(self) -> None:
        """Infinite or NaN counts are skipped instead of aborting the parse."""
        csv_text = (
            "Date,Day,Time,Occupancy\n"
            "11.03.2024,Monday,09:00,inf\n"
            "11.03.2024,Monday,09:15,-inf\n"
            "11.03.2024,Monday,09:20,nan\n"
            "11.03.2024,Monday,09:30,5\n"
        )
        readings = parse_occupancy_csv(csv_text)
        assert len(readings) == 1
        assert readings[0].occupancy == 5

    def test_from_values_derives_hour(self) -> None:
        reading = Reading.from_values(date(2024, 3, 15), "Friday", "07:45", 3)
        assert reading.hour == 7


class TestLoadReadings:
    """Tests for the load_readings function."""

    def test_load_file(self, tmp_path: Path) -> None:
        path = tmp_path / "readings.csv"
        path.write_text(VALID_CSV)
        assert len(load_readings(str(path))) == 3

    def test_missing_file(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_readings("/nonexistent/readings.csv")
