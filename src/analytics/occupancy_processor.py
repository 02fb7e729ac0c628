"""Single-pass aggregation of occupancy readings into heatmap maps.

Groups an ordered stream of readings by (calendar week, weekday, hour),
finalizes each group when the stream moves on, and derives two views:
a per-week summary and a cross-week overall summary. Finalization is an
explicit second phase that closes the tail group and computes medians and
maxima.
"""

import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, NamedTuple, Optional

from ..utils.date_utils import get_week_id
from ..utils.readings import Reading
from .accumulators import OverallAccumulator, WeeklyAccumulator

logger = logging.getLogger(__name__)


@dataclass
class HourlySummary:
    """Finalized statistics for one (week, day, hour) group."""

    date: date
    day: str
    hour: int
    week_id: str = ""
    min_occupancy: float = 0
    max_occupancy: float = 0
    average_occupancy: float = 0
    maximum_capacity: float = 0
    utilization_rate: float = 0
    remaining_capacity: float = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "day": self.day,
            "hour": self.hour,
            "minOccupancy": self.min_occupancy,
            "maxOccupancy": self.max_occupancy,
            "averageOccupancy": self.average_occupancy,
            "maximumCapacity": self.maximum_capacity,
            "utilizationRate": self.utilization_rate,
            "remainingCapacity": self.remaining_capacity,
        }


@dataclass
class WeeklyMaxValues:
    utilization_rate: float = 0


@dataclass
class DayOccupancy:
    """Hourly summaries of one weekday within one week."""

    max_day_values: WeeklyMaxValues = field(default_factory=WeeklyMaxValues)
    hours: dict[int, HourlySummary] = field(default_factory=dict)


@dataclass
class WeekOccupancy:
    """All weekdays of one Monday-aligned calendar week."""

    max_week_values: WeeklyMaxValues = field(default_factory=WeeklyMaxValues)
    days: dict[str, DayOccupancy] = field(default_factory=dict)


class WeeklyOccupancyMap:
    """Per-week occupancy summaries keyed by week id, day and hour.

    Lookups of absent keys return ``None`` instead of raising.
    """

    def __init__(self) -> None:
        self.weeks: dict[str, WeekOccupancy] = {}

    def __len__(self) -> int:
        return len(self.weeks)

    def __contains__(self, week_id: object) -> bool:
        return week_id in self.weeks

    def week_ids(self) -> list[str]:
        """Return week ids in ascending order."""
        return sorted(self.weeks)

    def ensure_hour(
        self, week_id: str, day: str, hour: int, reading_date: date
    ) -> HourlySummary:
        """Return the summary for a group, creating a zeroed stub if needed."""
        week = self.weeks.setdefault(week_id, WeekOccupancy())
        day_data = week.days.setdefault(day, DayOccupancy())
        if hour not in day_data.hours:
            day_data.hours[hour] = HourlySummary(
                date=reading_date, day=day, hour=hour, week_id=week_id
            )
        return day_data.hours[hour]

    def get_week(self, week_id: str) -> Optional[WeekOccupancy]:
        return self.weeks.get(week_id)

    def get_day(self, week_id: str, day: str) -> Optional[DayOccupancy]:
        week = self.weeks.get(week_id)
        return week.days.get(day) if week else None

    def get_hour(self, week_id: str, day: str, hour: int) -> Optional[HourlySummary]:
        day_data = self.get_day(week_id, day)
        return day_data.hours.get(hour) if day_data else None

    def iter_summaries(self) -> Iterable[HourlySummary]:
        """Yield every hourly summary, ordered by week, then insertion."""
        for week_id in self.week_ids():
            for day_data in self.weeks[week_id].days.values():
                yield from day_data.hours.values()

    def to_dict(self) -> dict[str, Any]:
        """Render the map as JSON-compatible nested dictionaries."""
        result: dict[str, Any] = {}
        for week_id in self.week_ids():
            week = self.weeks[week_id]
            days: dict[str, Any] = {}
            for day, day_data in week.days.items():
                days[day] = {
                    "maxDayValues": {
                        "utilizationRate": day_data.max_day_values.utilization_rate
                    },
                    **{
                        str(hour): summary.to_dict()
                        for hour, summary in sorted(day_data.hours.items())
                    },
                }
            result[week_id] = {
                "maxWeekValues": {
                    "utilizationRate": week.max_week_values.utilization_rate
                },
                "days": days,
            }
        return result


@dataclass
class OverallUtilizationValues:
    """Cross-week utilization rates of one (day, hour) key or a maximum."""

    average_utilization_rate: float = 0
    weighted_average_utilization_rate: float = 0
    median_utilization_rate: float = 0

    def raise_to(self, other: "OverallUtilizationValues") -> None:
        """Update each field to the maximum of itself and ``other``."""
        self.average_utilization_rate = max(
            self.average_utilization_rate, other.average_utilization_rate
        )
        self.weighted_average_utilization_rate = max(
            self.weighted_average_utilization_rate,
            other.weighted_average_utilization_rate,
        )
        self.median_utilization_rate = max(
            self.median_utilization_rate, other.median_utilization_rate
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "averageUtilizationRate": self.average_utilization_rate,
            "weightedAverageUtilizationRate": self.weighted_average_utilization_rate,
            "medianUtilizationRate": self.median_utilization_rate,
        }


@dataclass
class OverallDayOccupancy:
    max_day_values: OverallUtilizationValues = field(
        default_factory=OverallUtilizationValues
    )
    hours: dict[int, OverallUtilizationValues] = field(default_factory=dict)


class OverallOccupancyMap:
    """Cross-week utilization values keyed by day and hour."""

    def __init__(self) -> None:
        self.max_overall_values = OverallUtilizationValues()
        self.days: dict[str, OverallDayOccupancy] = {}

    def __len__(self) -> int:
        return len(self.days)

    def ensure_hour(self, day: str, hour: int) -> OverallUtilizationValues:
        day_data = self.days.setdefault(day, OverallDayOccupancy())
        return day_data.hours.setdefault(hour, OverallUtilizationValues())

    def get_day(self, day: str) -> Optional[OverallDayOccupancy]:
        return self.days.get(day)

    def get_hour(self, day: str, hour: int) -> Optional[OverallUtilizationValues]:
        day_data = self.days.get(day)
        return day_data.hours.get(hour) if day_data else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "maxOverallValues": self.max_overall_values.to_dict(),
            "days": {
                day: {
                    "maxDayValues": day_data.max_day_values.to_dict(),
                    **{
                        str(hour): values.to_dict()
                        for hour, values in sorted(day_data.hours.items())
                    },
                }
                for day, day_data in self.days.items()
            },
        }


class GroupCursor(NamedTuple):
    """The (week, day, hour) group currently being accumulated."""

    week_id: str
    day: str
    hour: int
    maximum_capacity: float

    def same_group(self, week_id: str, day: str, hour: int) -> bool:
        return (self.week_id, self.day, self.hour) == (week_id, day, hour)


class OccupancyDataProcessor:
    """Aggregates an ordered reading stream into weekly and overall maps.

    Call :meth:`ingest` once per reading in time order, then
    :meth:`finalize` once. One instance processes exactly one dataset.
    """

    def __init__(self) -> None:
        self.weekly_accumulator = WeeklyAccumulator()
        self.overall_accumulator = OverallAccumulator()
        self.weekly_occupancy_map = WeeklyOccupancyMap()
        self.overall_occupancy_map = OverallOccupancyMap()
        self.cursor: Optional[GroupCursor] = None
        self.finalized = False
        self.readings_ingested = 0

    def ingest(self, reading: Reading, maximum_capacity: float) -> None:
        """Feed one reading into the aggregation.

        Args:
            reading: The next reading in time order.
            maximum_capacity: Facility capacity for this reading's group.

        Raises:
            RuntimeError: If the processor has already been finalized.
        """
        if self.finalized:
            raise RuntimeError("Cannot ingest readings after finalize()")

        week_id = get_week_id(reading.date)
        day, hour = reading.day, reading.hour
        self.weekly_occupancy_map.ensure_hour(week_id, day, hour, reading.date)
        self.overall_occupancy_map.ensure_hour(day, hour)
        self.overall_accumulator.initialize(day, hour)

        if self.cursor is not None and not self.cursor.same_group(week_id, day, hour):
            self._flush()
            self.weekly_accumulator = self.weekly_accumulator.reset()

        self.cursor = GroupCursor(week_id, day, hour, maximum_capacity)
        self.weekly_accumulator.update(reading.occupancy)
        self.readings_ingested += 1

    def finalize(self) -> None:
        """Close the tail group and compute medians and maxima.

        A second call is a no-op.
        """
        if self.finalized:
            logger.debug("Processor already finalized")
            return
        self._flush()
        self._update_overall_max_values()
        self.finalized = True
        logger.info(
            "Aggregated %d readings into %d weeks, %d weekdays",
            self.readings_ingested,
            len(self.weekly_occupancy_map),
            len(self.overall_occupancy_map),
        )

    def _flush(self) -> None:
        """Finalize the cursor's group into both maps."""
        if self.cursor is None:
            return
        week_id, day, hour, maximum_capacity = self.cursor
        summary = self.weekly_occupancy_map.get_hour(week_id, day, hour)
        if summary is None:
            return

        stats = self.weekly_accumulator.finalize(maximum_capacity)
        summary.min_occupancy = stats.min_occupancy
        summary.max_occupancy = stats.max_occupancy
        summary.average_occupancy = stats.average_occupancy
        summary.utilization_rate = stats.utilization_rate
        summary.remaining_capacity = stats.remaining_capacity
        summary.maximum_capacity = maximum_capacity
        self._update_weekly_max_values(week_id, day, stats.utilization_rate)

        if stats.utilization_rate > 0:
            average, weighted_average = self.overall_accumulator.record_week(
                day, hour, stats.utilization_rate
            )
            values = self.overall_occupancy_map.ensure_hour(day, hour)
            values.average_utilization_rate = average
            values.weighted_average_utilization_rate = weighted_average

        logger.debug(
            "Flushed %s %s %02d:00 utilization=%s",
            week_id,
            day,
            hour,
            stats.utilization_rate,
        )

    def _update_weekly_max_values(
        self, week_id: str, day: str, utilization_rate: float
    ) -> None:
        week = self.weekly_occupancy_map.weeks[week_id]
        day_max = week.days[day].max_day_values
        day_max.utilization_rate = max(day_max.utilization_rate, utilization_rate)
        week.max_week_values.utilization_rate = max(
            week.max_week_values.utilization_rate, utilization_rate
        )

    def _update_overall_max_values(self) -> None:
        max_overall = self.overall_occupancy_map.max_overall_values
        for day, day_data in self.overall_occupancy_map.days.items():
            for hour, values in day_data.hours.items():
                values.median_utilization_rate = (
                    self.overall_accumulator.compute_median(day, hour)
                )
                day_data.max_day_values.raise_to(values)
                max_overall.raise_to(values)


def process_all_occupancy_data(
    readings: Iterable[Reading], maximum_capacity: float
) -> tuple[WeeklyOccupancyMap, OverallOccupancyMap]:
    """Run the full two-phase aggregation over a batch of readings.

    Args:
        readings: Readings ordered by time.
        maximum_capacity: Facility capacity, constant for the run.

    Returns:
        Tuple of ``(weekly_occupancy_map, overall_occupancy_map)``.

    Raises:
        ValueError: If ``maximum_capacity`` is not positive.
    """
    if maximum_capacity <= 0:
        raise ValueError(
            f"Maximum capacity must be positive, got {maximum_capacity}"
        )

    processor = OccupancyDataProcessor()
    for reading in readings:
        processor.ingest(reading, maximum_capacity)
    processor.finalize()
    return processor.weekly_occupancy_map, processor.overall_occupancy_map


def summaries_to_records(weekly_map: WeeklyOccupancyMap) -> list[dict[str, Any]]:
    """Flatten the weekly map into one record per hourly summary."""
    records = []
    for summary in weekly_map.iter_summaries():
        record = asdict(summary)
        record["date"] = summary.date.isoformat()
        records.append(record)
    return records
