"""Heatmap cell data built from finalized occupancy maps.

Each lookup reads one (week, day, hour) or (day, hour) value from the
weekly or overall map and turns it into a colored, labelled cell. Display
strings beyond numeric formatting are produced by a translation callback.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..utils.date_utils import DEFAULT_TIMEZONE, get_week_id, is_day_today, now_in_timezone
from .heatmap_colors import HeatmapColorMapper, LegendItem, UtilizationColor
from .occupancy_processor import HourlySummary, OverallOccupancyMap, WeeklyOccupancyMap

logger = logging.getLogger(__name__)

TranslationFunction = Callable[[str, Mapping[str, object]], str]

OVERALL_FIELDS = {
    "average": "average_utilization_rate",
    "weighted_average": "weighted_average_utilization_rate",
    "median": "median_utilization_rate",
}

# view name -> (cell method, tooltip key), in display order
VIEW_HANDLERS: dict[str, tuple[str, str]] = {
    "overall-average": ("overall_average_cell", "heatmap.overall.average.tooltip"),
    "overall-weighted-average": (
        "overall_weighted_average_cell",
        "heatmap.overall.weightedAverage.tooltip",
    ),
    "overall-median": ("overall_median_cell", "heatmap.overall.median.tooltip"),
    "weekly-percentage": ("weekly_percentage_cell", "heatmap.weekly.percentage.tooltip"),
    "weekly-min-max": ("weekly_min_max_cell", "heatmap.weekly.minMax.tooltip"),
    "weekly-average": ("weekly_raw_average_cell", "heatmap.weekly.average.tooltip"),
}
VIEWS = list(VIEW_HANDLERS)
TOOLTIP_KEYS = {view: key for view, (_, key) in VIEW_HANDLERS.items()}


def is_weekly_view(view: str) -> bool:
    return view.startswith("weekly-")


@dataclass
class CellData:
    """Everything the presentation layer needs to draw one cell."""

    color: UtilizationColor
    color_fill_ratio: float
    display_text: str
    title: str
    is_current_hour: bool = False

    @classmethod
    def empty(cls) -> "CellData":
        return cls(
            color=UtilizationColor.EMPTY,
            color_fill_ratio=0,
            display_text="",
            title="",
        )


def format_value(value: float) -> str:
    """Format a statistic without a trailing ``.0`` for whole numbers."""
    return f"{value:g}"


class HeatmapDataProcessor:
    """Builds heatmap cells for overall and weekly views.

    Args:
        weekly_map: Finalized weekly occupancy map.
        overall_map: Finalized overall occupancy map.
        high_threshold: Utilization rate rendered as very high.
        tooltip_key: Translation key of the cell tooltip.
        translate: Callback ``(key, params) -> str``.
        clock: Returns the current wall-clock time. Defaults to now in
            ``timezone``.
        timezone: IANA timezone of the facility.
    """

    def __init__(
        self,
        weekly_map: WeeklyOccupancyMap,
        overall_map: OverallOccupancyMap,
        high_threshold: float,
        tooltip_key: str,
        translate: TranslationFunction,
        clock: Optional[Callable[[], datetime]] = None,
        timezone: str = DEFAULT_TIMEZONE,
    ) -> None:
        self.weekly_map = weekly_map
        self.overall_map = overall_map
        self.tooltip_key = tooltip_key
        self.translate = translate
        self.clock = clock or (lambda: now_in_timezone(timezone))
        self.color_mapper = HeatmapColorMapper(high_threshold)

    def legend_items(self) -> list[LegendItem]:
        return self.color_mapper.legend_items()

    def is_current_hour(self, day: str, hour: int) -> bool:
        """Check whether ``(day, hour)`` is the present wall-clock hour."""
        now = self.clock()
        return is_day_today(day, now) and hour == now.hour

    def _is_current_week(self, week_id: str) -> bool:
        return week_id == get_week_id(self.clock())

    def _day_name(self, day: str) -> str:
        return self.translate(f"common.days.{day.lower()}", {})

    def _tooltip(self, day: str, hour: int, **values: object) -> str:
        return self.translate(
            self.tooltip_key, {"day": self._day_name(day), "hour": hour, **values}
        )

    def _cell(
        self,
        utilization_rate: float,
        context_max: float,
        display_text: str,
        title: str,
        day: str,
        hour: int,
    ) -> CellData:
        return CellData(
            color=self.color_mapper.color_for(utilization_rate),
            color_fill_ratio=self.color_mapper.fill_ratio(utilization_rate, context_max),
            display_text=display_text,
            title=title,
            is_current_hour=self.is_current_hour(day, hour),
        )

    def _utilization_cell(
        self, utilization_rate: float, context_max: float, day: str, hour: int
    ) -> CellData:
        return self._cell(
            utilization_rate,
            context_max,
            f"{format_value(utilization_rate)}%" if utilization_rate > 0 else "",
            self._tooltip(day, hour, utilization=utilization_rate),
            day,
            hour,
        )

    def week_context_max(self, week_id: str) -> float:
        """Return the maximum weekly cells of ``week_id`` are scaled against.

        The current week is also compared against the overall average
        maximum, so a partial week does not look artificially full.
        """
        week = self.weekly_map.get_week(week_id)
        week_max = week.max_week_values.utilization_rate if week else 0
        if self._is_current_week(week_id):
            overall_max = self.overall_map.max_overall_values.average_utilization_rate
            return max(week_max, overall_max)
        return week_max

    def overall_cell(self, day: str, hour: int, metric: str) -> CellData:
        """Return a cell of an overall view.

        Args:
            day: Weekday name.
            hour: Hour of day.
            metric: One of ``average``, ``weighted_average``, ``median``.

        Raises:
            KeyError: If ``metric`` is unknown.
        """
        field_name = OVERALL_FIELDS[metric]
        values = self.overall_map.get_hour(day, hour)
        if values is None:
            return CellData.empty()
        context_max = getattr(self.overall_map.max_overall_values, field_name)
        return self._utilization_cell(getattr(values, field_name), context_max, day, hour)

    def overall_average_cell(self, day: str, hour: int) -> CellData:
        return self.overall_cell(day, hour, "average")

    def overall_weighted_average_cell(self, day: str, hour: int) -> CellData:
        return self.overall_cell(day, hour, "weighted_average")

    def overall_median_cell(self, day: str, hour: int) -> CellData:
        return self.overall_cell(day, hour, "median")

    def weekly_summary(self, week_id: str, day: str, hour: int) -> Optional[HourlySummary]:
        """Return the hourly summary shown for a weekly cell.

        For the present hour of the current week, which may not have a
        reading yet, the previous hour's summary is used instead. ``None``
        when neither exists.
        """
        summary = self.weekly_map.get_hour(week_id, day, hour)
        if summary is None and self._is_current_week(week_id) and self.is_current_hour(day, hour):
            return self.weekly_map.get_hour(week_id, day, hour - 1)
        return summary

    def weekly_percentage_cell(self, week_id: str, day: str, hour: int) -> CellData:
        summary = self.weekly_summary(week_id, day, hour)
        if summary is None:
            return CellData.empty()
        return self._utilization_cell(
            summary.utilization_rate, self.week_context_max(week_id), day, hour
        )

    def weekly_min_max_cell(self, week_id: str, day: str, hour: int) -> CellData:
        summary = self.weekly_summary(week_id, day, hour)
        if summary is None:
            return CellData.empty()
        if summary.min_occupancy == summary.max_occupancy:
            display_text = format_value(summary.min_occupancy)
        else:
            display_text = (
                f"{format_value(summary.min_occupancy)}-"
                f"{format_value(summary.max_occupancy)}"
            )
        return self._cell(
            summary.utilization_rate,
            self.week_context_max(week_id),
            display_text,
            self._tooltip(
                day, hour, min=summary.min_occupancy, max=summary.max_occupancy
            ),
            day,
            hour,
        )

    def weekly_raw_average_cell(self, week_id: str, day: str, hour: int) -> CellData:
        summary = self.weekly_summary(week_id, day, hour)
        if summary is None:
            return CellData.empty()
        return self._cell(
            summary.utilization_rate,
            self.week_context_max(week_id),
            format_value(summary.average_occupancy),
            self._tooltip(day, hour, average=summary.average_occupancy),
            day,
            hour,
        )

    def cell(self, view: str, day: str, hour: int, week_id: Optional[str] = None) -> CellData:
        """Dispatch a cell lookup by view name.

        Args:
            view: One of :data:`VIEWS`.
            day: Weekday name.
            hour: Hour of day.
            week_id: Week id, required by weekly views.

        Raises:
            ValueError: If the view is unknown or a weekly view has no week.
        """
        if view not in VIEW_HANDLERS:
            raise ValueError(f"Unknown heatmap view: {view}")
        handler = getattr(self, VIEW_HANDLERS[view][0])
        if not is_weekly_view(view):
            return handler(day, hour)
        if week_id is None:
            raise ValueError(f"View '{view}' requires a week id")
        return handler(week_id, day, hour)

