"""Occupancy reading records and CSV parsing.

Parses the ``Date,Day,Time,Occupancy`` export of a facility's headcount
feed into ordered :class:`Reading` records for the aggregation engine.
"""

import io
import logging
import math
from dataclasses import dataclass
from datetime import date
from pathlib import Path

import pandas as pd

from .date_utils import get_hour_from_time, parse_date

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["Date", "Day", "Time", "Occupancy"]


@dataclass(frozen=True)
class Reading:
    """One timestamped headcount observation.

    Attributes:
        date: Calendar date of the reading.
        day: Weekday name as exported by the feed.
        time: Time of day, ``HH:MM``.
        occupancy: Headcount at that time.
        hour: Hour of day derived from ``time``.
    """

    date: date
    day: str
    time: str
    occupancy: int
    hour: int

    @classmethod
    def from_values(
        cls, reading_date: date, day: str, time: str, occupancy: int
    ) -> "Reading":
        """Create a Reading, deriving the hour from ``time``."""
        return cls(
            date=reading_date,
            day=day,
            time=time,
            occupancy=occupancy,
            hour=get_hour_from_time(time),
        )


def _parse_occupancy(value: str) -> int:
    occupancy = float(value)
    if not math.isfinite(occupancy):
        raise ValueError(f"Occupancy is not a finite number: {value}")
    return int(occupancy)


def parse_occupancy_csv(csv_text: str) -> list[Reading]:
    """Parse occupancy CSV text into readings, preserving row order.

    Rows with an unparseable date, time or occupancy are skipped.

    Args:
        csv_text: CSV content with a header row.

    Returns:
        List of readings, empty if the text holds no data rows.
    """
    if not csv_text.strip():
        return []

    df = pd.read_csv(
        io.StringIO(csv_text.strip()),
        dtype=str,
        skipinitialspace=True,
        keep_default_na=False,
    )
    if df.empty:
        return []
    df = df.iloc[:, : len(CSV_COLUMNS)]
    df.columns = CSV_COLUMNS[: len(df.columns)]

    readings: list[Reading] = []
    skipped = 0
    for row in df.itertuples(index=False):
        try:
            readings.append(
                Reading.from_values(
                    parse_date(row.Date),
                    row.Day.strip(),
                    row.Time.strip(),
                    _parse_occupancy(row.Occupancy),
                )
            )
        except (ValueError, AttributeError):
            skipped += 1

    if skipped:
        logger.warning("Skipped %d malformed occupancy rows", skipped)
    logger.info("Parsed %d occupancy readings", len(readings))
    return readings


def load_readings(csv_path: str) -> list[Reading]:
    """Load readings from a CSV file.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"Readings file not found: {csv_path}")
    return parse_occupancy_csv(path.read_text(encoding="utf-8"))
