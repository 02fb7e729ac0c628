"""Running statistics for occupancy aggregation.

Provides the per-group weekly accumulator (sum/count/min/max of raw
headcounts) and the cross-week overall accumulator (plain average,
weighted average and median of weekly utilization rates).
"""

import logging
import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

import numpy as np

logger = logging.getLogger(__name__)

# (upper limit, weight) pairs, checked in order
WEIGHT_THRESHOLDS: list[tuple[float, float]] = [
    (1, 0.1),
    (10, 0.5),
    (100, 1.0),
]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounded up.

    Args:
        value: Number to round.

    Returns:
        Rounded integer.
    """
    return int(math.floor(value + 0.5))


def format_number(value: float) -> float:
    """Format a statistic for display and storage.

    Values below 1 keep a single decimal digit so that very quiet hours
    (e.g. ``0.1``) do not collapse to zero. Everything else is rounded
    to an integer.

    Args:
        value: Raw statistic.

    Returns:
        Formatted number.
    """
    if value < 1:
        # exact binary value, so 0.15 (stored as 0.1499...) becomes 0.1
        return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
    return round_half_up(value)


def weight_for(utilization_rate: float) -> float:
    """Return the weighted-average weight of a weekly utilization rate.

    Args:
        utilization_rate: Weekly utilization in percent.

    Returns:
        ``0`` for zero, ``0.1`` below 1%, ``0.5`` below 10%, else ``1``.
    """
    if utilization_rate == 0:
        return 0.0
    for limit, weight in WEIGHT_THRESHOLDS:
        if utilization_rate < limit:
            return weight
    return 1.0


@dataclass
class GroupStatistics:
    """Finalized statistics of one (week, day, hour) group."""

    min_occupancy: float
    max_occupancy: float
    average_occupancy: float
    utilization_rate: float
    remaining_capacity: float


@dataclass
class WeeklyAccumulator:
    """Running totals for the group currently being accumulated.

    Zero readings are "no data" ticks: they take part in min/max but are
    excluded from the mean.

    Attributes:
        sum: Sum of positive readings.
        count: Number of positive readings.
        min: Smallest reading seen, ``inf`` when empty.
        max: Largest reading seen, ``-inf`` when empty.
    """

    sum: float = 0
    count: int = 0
    min: float = math.inf
    max: float = -math.inf

    def update(self, occupancy: float) -> None:
        """Feed one headcount reading into the accumulator.

        Args:
            occupancy: Headcount of the reading.
        """
        if occupancy > 0:
            self.sum += occupancy
            self.count += 1
        self.min = min(self.min, occupancy)
        self.max = max(self.max, occupancy)

    def reset(self) -> "WeeklyAccumulator":
        """Return a fresh, empty accumulator."""
        return WeeklyAccumulator()

    def is_empty(self) -> bool:
        return self.min == math.inf

    def finalize(self, maximum_capacity: float) -> GroupStatistics:
        """Convert the running totals into group statistics.

        Args:
            maximum_capacity: Capacity of the facility for this group.

        Returns:
            GroupStatistics for the group. Utilization is ``0`` when the
            capacity is not positive.
        """
        average_occupancy = format_number(
            self.sum / self.count if self.count > 0 else 0
        )
        utilization_rate = (
            format_number(average_occupancy / maximum_capacity * 100)
            if maximum_capacity > 0
            else 0
        )
        return GroupStatistics(
            min_occupancy=self.min if not self.is_empty() else 0,
            max_occupancy=self.max if not self.is_empty() else 0,
            average_occupancy=average_occupancy,
            utilization_rate=utilization_rate,
            remaining_capacity=maximum_capacity - average_occupancy,
        )


@dataclass
class RunningMean:
    """Sum and (possibly fractional) count of a running mean."""

    sum: float = 0
    count: float = 0

    def add(self, value: float, weight: float = 1.0) -> None:
        self.sum += value * weight
        self.count += weight

    def value(self) -> float:
        return format_number(self.sum / self.count) if self.count > 0 else 0


@dataclass
class OverallEntry:
    """Cross-week accumulator state for one (day, hour) key."""

    average: RunningMean = field(default_factory=RunningMean)
    weighted_average: RunningMean = field(default_factory=RunningMean)
    weekly_items: list[float] = field(default_factory=list)


class OverallAccumulator:
    """Accumulates weekly utilization rates per (day, hour) across weeks.

    Entries are created lazily by :meth:`initialize` and are never reset,
    since a day/hour pair recurs once per week.
    """

    def __init__(self) -> None:
        self.entries: dict[tuple[str, int], OverallEntry] = {}

    def initialize(self, day: str, hour: int) -> OverallEntry:
        """Create the entry for ``(day, hour)`` if it does not exist yet.

        Args:
            day: Weekday name.
            hour: Hour of day (0-23).

        Returns:
            The existing or newly created entry.
        """
        key = (day, hour)
        if key not in self.entries:
            self.entries[key] = OverallEntry()
        return self.entries[key]

    def record_week(
        self, day: str, hour: int, utilization_rate: float
    ) -> tuple[float, float]:
        """Record one week's finalized utilization rate.

        Args:
            day: Weekday name.
            hour: Hour of day.
            utilization_rate: Finalized weekly utilization rate (> 0).

        Returns:
            Tuple of ``(average_utilization_rate,
            weighted_average_utilization_rate)`` over all recorded weeks.
        """
        entry = self.initialize(day, hour)
        entry.weekly_items.append(utilization_rate)
        entry.average.add(utilization_rate)
        entry.weighted_average.add(utilization_rate, weight_for(utilization_rate))
        return entry.average.value(), entry.weighted_average.value()

    def compute_median(self, day: str, hour: int) -> float:
        """Compute the median weekly utilization rate for ``(day, hour)``.

        Requires every week to have been recorded, so it is only called
        during finalization.

        Args:
            day: Weekday name.
            hour: Hour of day.

        Returns:
            Median rounded to an integer, or ``0`` with no recorded weeks.
        """
        entry = self.entries.get((day, hour))
        if entry is None or not entry.weekly_items:
            return 0
        entry.weekly_items.sort()
        return round_half_up(float(np.median(entry.weekly_items)))
