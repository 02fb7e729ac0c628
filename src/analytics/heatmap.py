"""Raster rendering of day-by-hour occupancy heatmaps.

Draws one bar per (day, hour) cell in its utilization color band, filled
to the cell's fill ratio, and exports static PNGs or animated GIFs with
one frame per week.
"""

import logging
from collections.abc import Callable, Sequence

import cv2
import imageio
import numpy as np

from .heatmap_colors import COLOR_BGR, HeatmapColorMapper, UtilizationColor
from .heatmap_data import CellData

logger = logging.getLogger(__name__)

CellFunction = Callable[[str, int], CellData]

LABEL_WIDTH = 90
HEADER_HEIGHT = 20
CURRENT_HOUR_OUTLINE = (0, 0, 0)
TEXT_COLOR = (40, 40, 40)


class HeatmapRenderer:
    """Renders heatmap cells into BGR images.

    Args:
        days: Row labels, top to bottom.
        hours: Column hours, left to right.
        cell_width: Cell width in pixels.
        cell_height: Cell height in pixels.
        uniform_bar_height: Fill every non-empty cell to full height.
    """

    def __init__(
        self,
        days: Sequence[str],
        hours: Sequence[int],
        cell_width: int = 40,
        cell_height: int = 24,
        uniform_bar_height: bool = False,
    ) -> None:
        self.days = list(days)
        self.hours = list(hours)
        self.cell_width = cell_width
        self.cell_height = cell_height
        self.uniform_bar_height = uniform_bar_height

    @property
    def width(self) -> int:
        return LABEL_WIDTH + self.cell_width * len(self.hours)

    @property
    def height(self) -> int:
        return HEADER_HEIGHT + self.cell_height * len(self.days)

    def collect_cells(self, cell_fn: CellFunction) -> list[list[CellData]]:
        """Evaluate ``cell_fn`` for every (day, hour) of the grid."""
        return [[cell_fn(day, hour) for hour in self.hours] for day in self.days]

    def fill_ratio_matrix(self, cell_fn: CellFunction) -> np.ndarray:
        """Return a ``(days, hours)`` array of cell fill ratios."""
        cells = self.collect_cells(cell_fn)
        return np.array(
            [[cell.color_fill_ratio for cell in row] for row in cells],
            dtype=np.float32,
        ).reshape(len(self.days), len(self.hours))

    def render(self, cell_fn: CellFunction) -> np.ndarray:
        """Render the grid as a BGR image.

        Args:
            cell_fn: Returns the cell of a ``(day, hour)`` pair.

        Returns:
            BGR image as a ``(H, W, 3)`` uint8 numpy array.
        """
        image = np.full((self.height, self.width, 3), 255, dtype=np.uint8)
        font = cv2.FONT_HERSHEY_SIMPLEX

        for col, hour in enumerate(self.hours):
            x = LABEL_WIDTH + col * self.cell_width
            cv2.putText(image, str(hour), (x + 4, HEADER_HEIGHT - 6), font, 0.35, TEXT_COLOR, 1)

        for row, day in enumerate(self.days):
            y = HEADER_HEIGHT + row * self.cell_height
            cv2.putText(image, day[:9], (4, y + self.cell_height - 8), font, 0.4, TEXT_COLOR, 1)
            for col, hour in enumerate(self.hours):
                x = LABEL_WIDTH + col * self.cell_width
                self._draw_cell(image, x, y, cell_fn(day, hour))

        return image

    def _draw_cell(self, image: np.ndarray, x: int, y: int, cell: CellData) -> None:
        x2, y2 = x + self.cell_width - 2, y + self.cell_height - 2
        cv2.rectangle(image, (x, y), (x2, y2), COLOR_BGR[UtilizationColor.EMPTY], -1)

        bar_height = HeatmapColorMapper.bar_height(
            cell.color_fill_ratio, self.uniform_bar_height
        )
        bar_pixels = int(round((y2 - y) * min(bar_height, 100) / 100))
        if bar_pixels > 0:
            cv2.rectangle(image, (x, y2 - bar_pixels), (x2, y2), COLOR_BGR[cell.color], -1)
        if cell.display_text:
            cv2.putText(
                image, cell.display_text, (x + 2, y2 - 4),
                cv2.FONT_HERSHEY_SIMPLEX, 0.3, TEXT_COLOR, 1,
            )
        if cell.is_current_hour:
            cv2.rectangle(image, (x, y), (x2, y2), CURRENT_HOUR_OUTLINE, 1)

    def export_png(self, output_path: str, image: np.ndarray) -> None:
        """Export a rendered heatmap as a PNG image.

        Raises:
            RuntimeError: If OpenCV cannot write the file.
        """
        if not cv2.imwrite(output_path, image):
            raise RuntimeError(f"Failed to write heatmap image: {output_path}")
        logger.info("Heatmap exported to %s", output_path)

    def export_animated_gif(
        self, output_path: str, frames: list[np.ndarray], fps: int = 1
    ) -> None:
        """Export rendered frames, e.g. one per week, as an animated GIF.

        No file is written when ``frames`` is empty.

        Args:
            output_path: File path for the output GIF.
            frames: BGR images of identical shape.
            fps: Frames per second for the animation.
        """
        if not frames:
            logger.warning("No heatmap frames to export")
            return
        rgb_frames = [cv2.cvtColor(frame, cv2.COLOR_BGR2RGB) for frame in frames]
        imageio.mimsave(output_path, rgb_frames, duration=1000 / fps, loop=0)
        logger.info(
            "Animated heatmap exported to %s (%d frames)", output_path, len(frames)
        )
