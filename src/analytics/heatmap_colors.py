"""Utilization color bands for occupancy heatmaps.

Maps a utilization rate to one of five bands scaled to a configurable
"high" threshold, computes fill ratios against a context maximum and
builds legend entries.
"""

from dataclasses import dataclass
from enum import Enum

from .accumulators import round_half_up


class UtilizationColor(str, Enum):
    """Heatmap color bands, ordered from empty to very high."""

    EMPTY = "empty"
    VERY_LOW = "very_low"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


# Band upper limits in percent of the high threshold
UTILIZATION_THRESHOLDS = {
    UtilizationColor.VERY_LOW: 25,
    UtilizationColor.LOW: 50,
    UtilizationColor.MEDIUM: 75,
}

COLOR_HEX = {
    UtilizationColor.EMPTY: "#f3f4f6",
    UtilizationColor.VERY_LOW: "#dbeafe",
    UtilizationColor.LOW: "#93c5fd",
    UtilizationColor.MEDIUM: "#5eead4",
    UtilizationColor.HIGH: "#fdba74",
    UtilizationColor.VERY_HIGH: "#f87171",
}


def _hex_to_bgr(value: str) -> tuple[int, int, int]:
    r, g, b = (int(value[i : i + 2], 16) for i in (1, 3, 5))
    return b, g, r


COLOR_BGR = {color: _hex_to_bgr(value) for color, value in COLOR_HEX.items()}


@dataclass(frozen=True)
class LegendItem:
    color: UtilizationColor
    label: str


class HeatmapColorMapper:
    """Translates utilization rates into color bands and fill ratios.

    Args:
        high_threshold: Utilization rate (percent) rendered as very high.

    Raises:
        ValueError: If ``high_threshold`` is outside ``(0, 100]``.
    """

    def __init__(self, high_threshold: float = 60) -> None:
        if not 0 < high_threshold <= 100:
            raise ValueError(
                f"High threshold must be in (0, 100], got {high_threshold}"
            )
        self.high_threshold = high_threshold

    def scaled_threshold(self, percent: float) -> int:
        """Scale a band limit given in percent of the high threshold."""
        return round_half_up(self.high_threshold * percent / 100)

    def color_for(self, rate: float) -> UtilizationColor:
        """Return the color band of a utilization rate.

        Args:
            rate: Utilization rate in percent.

        Returns:
            ``EMPTY`` for zero, otherwise the band the rate falls into.
        """
        if rate == 0:
            return UtilizationColor.EMPTY
        for color, percent in UTILIZATION_THRESHOLDS.items():
            if rate < self.scaled_threshold(percent):
                return color
        if rate < self.high_threshold:
            return UtilizationColor.HIGH
        return UtilizationColor.VERY_HIGH

    @staticmethod
    def fill_ratio(rate: float, context_max: float) -> float:
        """Return ``rate`` relative to ``context_max``, or 0 without a maximum."""
        return rate / context_max if context_max > 0 else 0

    @staticmethod
    def bar_height(fill_ratio: float, uniform: bool = False) -> float:
        """Return the bar height of a cell in percent.

        Args:
            fill_ratio: Cell fill ratio.
            uniform: Draw every non-empty cell at full height.
        """
        if fill_ratio <= 0:
            return 0
        return 100 if uniform else fill_ratio * 100

    def legend_items(self) -> list[LegendItem]:
        """Return the six legend entries, empty band first."""
        items = [LegendItem(UtilizationColor.EMPTY, "0%")]
        for color, percent in UTILIZATION_THRESHOLDS.items():
            items.append(LegendItem(color, f"<{self.scaled_threshold(percent)}%"))
        items.append(LegendItem(UtilizationColor.HIGH, f"<{self.high_threshold:g}%"))
        items.append(LegendItem(UtilizationColor.VERY_HIGH, "<100%"))
        return items
