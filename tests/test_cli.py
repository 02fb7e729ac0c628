"""Tests for the Click CLI module."""

import json
from pathlib import Path

import pandas as pd
import pytest
import yaml
from click.testing import CliRunner

from src.cli import cli, main

READINGS_CSV = """Date,Day,Time,Occupancy
11.03.2024,Monday,09:00,20
11.03.2024,Monday,09:30,40
11.03.2024,Monday,10:00,60
12.03.2024,Tuesday,14:15,10
18.03.2024,Monday,09:00,50
18.03.2024,Monday,09:45,30
"""


@pytest.fixture
def readings_file(tmp_path: Path) -> Path:
    path = tmp_path / "readings.csv"
    path.write_text(READINGS_CSV)
    return path


@pytest.fixture
def facilities_file(tmp_path: Path) -> Path:
    path = tmp_path / "facilities.yaml"
    path.write_text(
        yaml.dump(
            {
                "facilities": [
                    {"name": "outdoor", "maximum_capacity": 200},
                    {"name": "indoor", "maximum_capacity": 100},
                ]
            }
        )
    )
    return path


class TestCliGroup:
    """Tests for the CLI group and basic options."""

    def test_cli_help(self) -> None:
        """CLI shows help text."""
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Occupancy Heatmap CLI" in result.output

    def test_cli_version(self) -> None:
        """CLI shows version."""
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_main_is_callable(self) -> None:
        """main entry point is callable."""
        assert callable(main)


class TestProcessCommand:
    """Tests for the process command."""

    def test_process_help(self) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["process", "--help"])
        assert result.exit_code == 0
        assert "--input" in result.output
        assert "--capacity" in result.output

    def test_process_missing_input(self) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["process"])
        assert result.exit_code != 0

    def test_process_readings(self, readings_file: Path, tmp_path: Path) -> None:
        """Process writes weekly and overall maps to results.json."""
        output_dir = tmp_path / "output"
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["process", "-i", str(readings_file), "--capacity", "100", "-o", str(output_dir)],
        )
        assert result.exit_code == 0, result.output
        assert "Processing:" in result.output
        assert "Weeks: 2" in result.output

        data = json.loads((output_dir / "results.json").read_text())
        assert data["maximum_capacity"] == 100
        assert data["readings"] == 6
        assert data["weeks"] == ["2024-03-11", "2024-03-18"]
        monday_9 = data["weekly"]["2024-03-11"]["days"]["Monday"]["9"]
        assert monday_9["averageOccupancy"] == 30
        assert monday_9["utilizationRate"] == 30
        overall_9 = data["overall"]["days"]["Monday"]["9"]
        assert overall_9["averageUtilizationRate"] == 35
        assert overall_9["medianUtilizationRate"] == 35

    def test_process_with_facility(
        self, readings_file: Path, facilities_file: Path, tmp_path: Path
    ) -> None:
        """A named facility supplies the maximum capacity."""
        output_dir = tmp_path / "output"
        runner = CliRunner()
        result = runner.invoke(
            cli,
            [
                "process", "-i", str(readings_file), "-f", str(facilities_file),
                "-n", "outdoor", "-o", str(output_dir),
            ],
        )
        assert result.exit_code == 0, result.output
        data = json.loads((output_dir / "results.json").read_text())
        assert data["facility"] == "outdoor"
        assert data["maximum_capacity"] == 200

    def test_process_skips_hidden_default(
        self, readings_file: Path, tmp_path: Path
    ) -> None:
        """Without --facility the first viewable facility is used."""
        facilities_path = tmp_path / "hidden.yaml"
        facilities_path.write_text(
            yaml.dump(
                {
                    "facilities": [
                        {"name": "staff", "maximum_capacity": 10, "view_stats": False},
                        {"name": "public", "maximum_capacity": 100},
                    ]
                }
            )
        )
        output_dir = tmp_path / "output"
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["process", "-i", str(readings_file), "-f", str(facilities_path), "-o", str(output_dir)],
        )
        assert result.exit_code == 0, result.output
        data = json.loads((output_dir / "results.json").read_text())
        assert data["facility"] == "public"

    def test_process_reads_facility_csv_file(
        self, readings_file: Path, tmp_path: Path
    ) -> None:
        """A facility's csv_file is used when --input is omitted."""
        facilities_path = tmp_path / "own_csv.yaml"
        facilities_path.write_text(
            yaml.dump(
                {
                    "facilities": [
                        {
                            "name": "pool",
                            "maximum_capacity": 100,
                            "csv_file": str(readings_file),
                        }
                    ]
                }
            )
        )
        output_dir = tmp_path / "output"
        runner = CliRunner()
        result = runner.invoke(
            cli, ["process", "-f", str(facilities_path), "-o", str(output_dir)]
        )
        assert result.exit_code == 0, result.output
        assert json.loads((output_dir / "results.json").read_text())["readings"] == 6

    def test_process_without_any_input(self, facilities_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["process", "-f", str(facilities_file)])
        assert result.exit_code == 1

    def test_closure_notice_on_stderr(self, readings_file: Path, tmp_path: Path) -> None:
        facilities_path = tmp_path / "closed.yaml"
        facilities_path.write_text(
            yaml.dump(
                {
                    "facilities": [
                        {
                            "name": "pool",
                            "maximum_capacity": 100,
                            "temporarily_closed": "Winter season",
                        }
                    ]
                }
            )
        )
        runner = CliRunner()
        result = runner.invoke(
            cli,
            [
                "process", "-i", str(readings_file), "-f", str(facilities_path),
                "-o", str(tmp_path / "output"),
            ],
        )
        assert result.exit_code == 0
        assert "temporarily closed (Winter season)" in result.stderr
        assert "temporarily closed" not in result.stdout

    def test_process_unknown_facility(
        self, readings_file: Path, facilities_file: Path, tmp_path: Path
    ) -> None:
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["process", "-i", str(readings_file), "-f", str(facilities_file), "-n", "sauna"],
        )
        assert result.exit_code == 1

    def test_process_without_capacity(self, readings_file: Path) -> None:
        """Process fails when neither capacity nor facilities are given."""
        runner = CliRunner()
        result = runner.invoke(cli, ["process", "-i", str(readings_file)])
        assert result.exit_code == 1

    def test_process_non_positive_capacity(self, readings_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            cli, ["process", "-i", str(readings_file), "--capacity", "0"]
        )
        assert result.exit_code == 1


class TestReportCommand:
    """Tests for the report command."""

    @pytest.fixture
    def results_file(self, readings_file: Path, tmp_path: Path) -> Path:
        output_dir = tmp_path / "output"
        runner = CliRunner()
        runner.invoke(
            cli,
            ["process", "-i", str(readings_file), "--capacity", "100", "-o", str(output_dir)],
        )
        return output_dir / "results.json"

    def test_report_json(self, results_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "report.json"
        runner = CliRunner()
        result = runner.invoke(
            cli, ["report", "-r", str(results_file), "-o", str(output), "-f", "json"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert "report_generated_at" in data
        assert "overall" in data

    def test_report_csv(self, results_file: Path, tmp_path: Path) -> None:
        """CSV report has one row per hourly summary."""
        output = tmp_path / "report.csv"
        runner = CliRunner()
        result = runner.invoke(
            cli, ["report", "-r", str(results_file), "-o", str(output), "-f", "csv"]
        )
        assert result.exit_code == 0, result.output
        df = pd.read_csv(output)
        assert len(df) == 4
        assert list(df.columns)[:4] == ["weekId", "date", "day", "hour"]
        assert set(df["weekId"]) == {"2024-03-11", "2024-03-18"}

    def test_report_invalid_results(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"facility": "x"}))
        runner = CliRunner()
        result = runner.invoke(cli, ["report", "-r", str(bad)])
        assert result.exit_code == 1


class TestHeatmapCommand:
    """Tests for the heatmap command."""

    def test_heatmap_help(self) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["heatmap", "--help"])
        assert result.exit_code == 0
        assert "--view" in result.output
        assert "--animated" in result.output

    def test_static_heatmap(self, readings_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "heatmap.png"
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["heatmap", "-i", str(readings_file), "--capacity", "100", "-o", str(output)],
        )
        assert result.exit_code == 0, result.output
        assert "Heatmap saved to:" in result.output
        assert output.exists()

    def test_weekly_heatmap(self, readings_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "week.png"
        runner = CliRunner()
        result = runner.invoke(
            cli,
            [
                "heatmap", "-i", str(readings_file), "--capacity", "100",
                "-o", str(output), "--view", "weekly-min-max", "--week", "2024-03-11",
            ],
        )
        assert result.exit_code == 0, result.output
        assert output.exists()

    def test_animated_heatmap(self, readings_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "weeks.gif"
        runner = CliRunner()
        result = runner.invoke(
            cli,
            [
                "heatmap", "-i", str(readings_file), "--capacity", "100",
                "-o", str(output), "--animated",
            ],
        )
        assert result.exit_code == 0, result.output
        assert output.exists()

    def test_invalid_threshold(self, readings_file: Path, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            cli,
            [
                "heatmap", "-i", str(readings_file), "--capacity", "100",
                "-o", str(tmp_path / "x.png"), "--threshold", "0",
            ],
        )
        assert result.exit_code == 1
