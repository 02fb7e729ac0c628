"""Click CLI for occupancy aggregation, report generation, and heatmap export.

Provides three commands:
- ``process``: Aggregate a readings CSV into weekly and overall maps.
- ``report``: Generate a JSON or CSV report from processing results.
- ``heatmap``: Export a static PNG or per-week animated GIF heatmap.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import click

from src.analytics.heatmap import HeatmapRenderer
from src.analytics.heatmap_data import (
    TOOLTIP_KEYS,
    VIEWS,
    HeatmapDataProcessor,
    is_weekly_view,
)
from src.analytics.occupancy_processor import (
    OverallOccupancyMap,
    WeeklyOccupancyMap,
    process_all_occupancy_data,
)
from src.utils.config import (
    AppConfig,
    FacilityConfig,
    default_facility,
    find_facility,
    load_config,
    load_facilities,
)
from src.utils.date_utils import DAYS_OF_WEEK
from src.utils.i18n import load_messages, make_translator
from src.utils.logger import setup_logging_from_config
from src.utils.readings import Reading, load_readings

logger = logging.getLogger(__name__)


def _fail(message: str) -> None:
    click.echo(message, err=True)
    raise SystemExit(1)


def _load_app_config(config_path: Optional[str]) -> AppConfig:
    return load_config(config_path) if config_path else AppConfig()


def _resolve_facility(
    capacity: Optional[int],
    facilities_path: Optional[str],
    facility_name: Optional[str],
) -> FacilityConfig:
    """Build the facility of a run from ``--capacity`` or a facilities file."""
    if facilities_path:
        facilities = load_facilities(facilities_path)
        if facility_name:
            try:
                facility = find_facility(facilities, facility_name)
            except KeyError as exc:
                _fail(str(exc.args[0]))
        else:
            try:
                facility = default_facility(facilities)
            except ValueError as exc:
                _fail(f"{exc} in {facilities_path}")
        if capacity is not None:
            facility.maximum_capacity = capacity
        if facility.temporarily_closed:
            click.echo(
                f"Note: {facility.display_name} is temporarily closed "
                f"({facility.temporarily_closed})",
                err=True,
            )
        return facility
    if capacity is None:
        _fail("Provide --capacity or --facilities")
    return FacilityConfig(name="facility", maximum_capacity=capacity)


def _load_facility_readings(
    input_path: Optional[str], facility: FacilityConfig
) -> tuple[str, list[Reading]]:
    """Load readings from ``--input`` or the facility's own CSV file."""
    path = input_path or facility.csv_file
    if not path:
        _fail(f"Provide --input or set csv_file for facility '{facility.name}'")
    try:
        return path, load_readings(path)
    except FileNotFoundError as exc:
        _fail(str(exc))


def _aggregate(
    readings: list[Reading], facility: FacilityConfig
) -> tuple[WeeklyOccupancyMap, OverallOccupancyMap]:
    try:
        return process_all_occupancy_data(readings, facility.maximum_capacity)
    except ValueError as exc:
        _fail(f"Invalid facility configuration: {exc}")


@click.group()
@click.version_option(version="1.0.0")
def cli() -> None:
    """Occupancy Heatmap CLI - Weekly and overall facility utilization."""


@cli.command()
@click.option(
    "--input",
    "-i",
    "input_path",
    type=click.Path(exists=True),
    help="Readings CSV file (defaults to the facility's csv_file)",
)
@click.option(
    "--facilities",
    "-f",
    "facilities_path",
    type=click.Path(exists=True),
    help="Facilities configuration YAML",
)
@click.option("--facility", "-n", "facility_name", help="Facility name")
@click.option("--capacity", type=int, help="Maximum capacity (overrides facility)")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True),
    help="Application configuration YAML",
)
@click.option(
    "--output",
    "-o",
    "output_dir",
    type=click.Path(),
    help="Output directory for results",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def process(
    input_path: Optional[str],
    facilities_path: Optional[str],
    facility_name: Optional[str],
    capacity: Optional[int],
    config_path: Optional[str],
    output_dir: Optional[str],
    verbose: bool,
) -> None:
    """Aggregate occupancy readings into weekly and overall statistics.

    Example:
        occupancy-heatmap process -i readings.csv --capacity 120 -o output/
    """
    config = _load_app_config(config_path)
    setup_logging_from_config(config.logging, verbose=verbose)

    facility = _resolve_facility(capacity, facilities_path, facility_name)
    input_path, readings = _load_facility_readings(input_path, facility)
    click.echo(f"Processing: {input_path}")
    click.echo(
        f"  Facility: {facility.display_name} | "
        f"Capacity: {facility.maximum_capacity} | Readings: {len(readings)}"
    )

    weekly_map, overall_map = _aggregate(readings, facility)

    out = Path(output_dir) if output_dir else Path(input_path).parent / "output"
    out.mkdir(parents=True, exist_ok=True)
    results_path = out / "results.json"
    serializable = {
        "facility": facility.name,
        "maximum_capacity": facility.maximum_capacity,
        "readings": len(readings),
        "weeks": weekly_map.week_ids(),
        "generated_at": datetime.now().isoformat(),
        "weekly": weekly_map.to_dict(),
        "overall": overall_map.to_dict(),
    }
    with open(results_path, "w") as f:
        json.dump(serializable, f, indent=2)

    max_values = overall_map.max_overall_values
    click.echo(f"\nResults saved to: {out}")
    click.echo(f"  Weeks: {len(weekly_map)}")
    click.echo(f"  Peak average utilization: {max_values.average_utilization_rate}%")
    click.echo(f"  Peak median utilization: {max_values.median_utilization_rate}%")


@cli.command()
@click.option(
    "--results",
    "-r",
    required=True,
    type=click.Path(exists=True),
    help="Results JSON file",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    help="Output file path",
)
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(["json", "csv"]),
    default="json",
    help="Output format",
)
def report(results: str, output: Optional[str], fmt: str) -> None:
    """Generate a utilization report from processing results.

    Example:
        occupancy-heatmap report -r output/results.json -o report.csv -f csv
    """
    with open(results) as f:
        report_data = json.load(f)

    if "weekly" not in report_data:
        _fail(f"Invalid results file: missing 'weekly' key in {results}")

    output_path = Path(output) if output else Path(f"report.{fmt}")

    if fmt == "json":
        report_data["report_generated_at"] = datetime.now().isoformat()
        with open(output_path, "w") as f:
            json.dump(report_data, f, indent=2)
    elif fmt == "csv":
        import pandas as pd

        rows = []
        for week_id, week in report_data["weekly"].items():
            for day, day_data in week["days"].items():
                for hour, summary in day_data.items():
                    if hour == "maxDayValues":
                        continue
                    rows.append({"weekId": week_id, **summary})
        columns = [
            "weekId", "date", "day", "hour", "minOccupancy", "maxOccupancy",
            "averageOccupancy", "maximumCapacity", "utilizationRate",
            "remainingCapacity",
        ]
        df = pd.DataFrame(rows, columns=columns)
        df.to_csv(output_path, index=False)

    click.echo(f"Report saved to: {output_path}")


@cli.command()
@click.option(
    "--input",
    "-i",
    "input_path",
    type=click.Path(exists=True),
    help="Readings CSV file (defaults to the facility's csv_file)",
)
@click.option(
    "--output",
    "-o",
    "output_path",
    required=True,
    type=click.Path(),
    help="Output heatmap path (PNG/GIF)",
)
@click.option(
    "--facilities",
    "-f",
    "facilities_path",
    type=click.Path(exists=True),
    help="Facilities configuration YAML",
)
@click.option("--facility", "-n", "facility_name", help="Facility name")
@click.option("--capacity", type=int, help="Maximum capacity (overrides facility)")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True),
    help="Application configuration YAML",
)
@click.option(
    "--view",
    type=click.Choice(VIEWS),
    default="overall-average",
    help="Heatmap view",
)
@click.option("--week", "week_id", help="Week id (Monday, YYYY-MM-DD) for weekly views")
@click.option("--threshold", type=float, help="Utilization rendered as very high")
@click.option(
    "--animated/--static",
    default=False,
    help="Generate animated GIF with one frame per week",
)
def heatmap(
    input_path: Optional[str],
    output_path: str,
    facilities_path: Optional[str],
    facility_name: Optional[str],
    capacity: Optional[int],
    config_path: Optional[str],
    view: str,
    week_id: Optional[str],
    threshold: Optional[float],
    animated: bool,
) -> None:
    """Generate a day-by-hour heatmap from a readings file.

    Example:
        occupancy-heatmap heatmap -i readings.csv --capacity 120 -o heatmap.png
        occupancy-heatmap heatmap -i readings.csv --capacity 120 -o weeks.gif --animated
    """
    config = _load_app_config(config_path)
    setup_logging_from_config(config.logging)
    facility = _resolve_facility(capacity, facilities_path, facility_name)
    input_path, readings = _load_facility_readings(input_path, facility)
    click.echo(f"Generating heatmap from: {input_path}")
    weekly_map, overall_map = _aggregate(readings, facility)

    messages = (
        load_messages(config.locale.messages_file)
        if config.locale.messages_file
        else None
    )
    if animated:
        view = "weekly-percentage"
    try:
        processor = HeatmapDataProcessor(
            weekly_map,
            overall_map,
            threshold if threshold is not None else config.heatmap.high_threshold,
            TOOLTIP_KEYS[view],
            make_translator(messages),
            timezone=config.locale.timezone,
        )
    except ValueError as exc:
        _fail(str(exc))

    renderer = HeatmapRenderer(
        DAYS_OF_WEEK,
        facility.display_hours(),
        cell_width=config.heatmap.cell_width,
        cell_height=config.heatmap.cell_height,
        uniform_bar_height=config.heatmap.uniform_bar_height,
    )

    if animated:
        frames = [
            renderer.render(
                lambda day, hour, wid=wid: processor.cell(view, day, hour, wid)
            )
            for wid in weekly_map.week_ids()
        ]
        renderer.export_animated_gif(output_path, frames)
        if not frames:
            click.echo("No weeks to render", err=True)
            return
    else:
        if is_weekly_view(view) and week_id is None:
            week_ids = weekly_map.week_ids()
            if not week_ids:
                _fail("No weekly data to render")
            week_id = week_ids[-1]
        image = renderer.render(
            lambda day, hour: processor.cell(view, day, hour, week_id)
        )
        renderer.export_png(output_path, image)

    click.echo(f"Heatmap saved to: {output_path}")


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
