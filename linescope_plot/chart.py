from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from linescope_core.config import AxisRange
from linescope_core.sinks import CLEAR_SCREEN, ByteSink
from linescope_plot.history import SeriesSnapshot
from linescope_plot.raster import HPos, TextAnchor, TextGrid, VPos
from linescope_plot.scales import (
    CellRect,
    DataLimits,
    build_transform,
    format_ticks_for_axis,
    generate_nice_ticks,
    map_to_cells,
)


Y_LABEL_ANCHOR = TextAnchor(h_pos=HPos.RIGHT, v_pos=VPos.TOP)
X_LABEL_ANCHOR = TextAnchor(h_pos=HPos.CENTER, v_pos=VPos.TOP)
X_EDGE_LABEL_ANCHOR = TextAnchor(h_pos=HPos.RIGHT, v_pos=VPos.TOP)


@dataclass(frozen=True)
class ChartLayout:
    plot: CellRect
    y_ticks: list[tuple[float, str]]
    x_ticks: list[tuple[float, str]]


class ChartComposer:
    """Lays out axes and labels on a TextGrid and draws one polyline per series."""

    def __init__(self, axis: AxisRange, *, margin: int = 1, mark_latest: bool = False) -> None:
        if margin < 0:
            raise ValueError("margin must be >= 0")
        self.axis = axis
        self.margin = margin
        self.mark_latest = mark_latest

    def layout(self, width: int, height: int, window: float) -> ChartLayout:
        if window <= 0:
            raise ValueError("window must be > 0")
        x_area = max(2, height * 10 // 100)
        plot_rows = height - 2 * self.margin - x_area
        y_values = _ticks_or_bounds(self.axis.min, self.axis.max, max(2, plot_rows // 5))
        y_labels = format_ticks_for_axis(y_values)
        widest = max((len(label) for label in y_labels), default=0)
        y_area = max(width * 5 // 100, widest + 1, 1)

        plot = CellRect(
            left=self.margin + y_area,
            top=self.margin,
            right=width - self.margin - 1,
            bottom=height - self.margin - x_area - 1,
        )
        if plot.width <= 1 or plot.height <= 1:
            raise ValueError(f"grid {width}x{height} is too small for a chart")

        x_values = _ticks_or_bounds(-window, 0.0, max(2, plot.width // 12))
        x_labels = format_ticks_for_axis(x_values)
        return ChartLayout(
            plot=plot,
            y_ticks=list(zip(y_values.tolist(), y_labels)),
            x_ticks=list(zip(x_values.tolist(), x_labels)),
        )

    def render(self, grid: TextGrid, snapshots: Sequence[SeriesSnapshot], window: float, sink: ByteSink) -> None:
        """Clear the terminal, draw a full frame and present it."""
        sink.write(CLEAR_SCREEN)
        self.draw(grid, snapshots, window)
        grid.present(sink)

    def draw(self, grid: TextGrid, snapshots: Sequence[SeriesSnapshot], window: float) -> None:
        width, height = grid.size()
        layout = self.layout(width, height, window)
        plot = layout.plot
        transform = build_transform(
            DataLimits(xmin=-window, xmax=0.0, ymin=self.axis.min, ymax=self.axis.max),
            plot,
        )
        self._draw_axes(grid, layout)

        for value, label in layout.y_ticks:
            row = int(round(value * transform.sy + transform.ty))
            row = min(max(row, plot.top), plot.bottom)
            grid.draw_line((plot.left - 1, row), (plot.left, row))
            grid.draw_text(label, (plot.left - 1, row), Y_LABEL_ANCHOR)

        label_row = plot.bottom + 2
        for value, label in layout.x_ticks:
            col = int(round(value * transform.sx + transform.tx))
            col = min(max(col, plot.left), plot.right)
            grid.draw_line((col, plot.bottom + 1), (col, plot.bottom + 2))
            if col - len(label) // 2 + len(label) > width:
                grid.draw_text(label, (width, label_row), X_EDGE_LABEL_ANCHOR)
            else:
                grid.draw_text(label, (col, label_row), X_LABEL_ANCHOR)

        for snap in snapshots:
            if snap.x.size == 0:
                continue
            cols, rows = map_to_cells(snap.x, snap.y, transform)
            points = list(zip(cols.tolist(), rows.tolist()))
            if len(points) == 1:
                grid.set_pixel(points[0][0], points[0][1], 1.0)
            for start, end in zip(points, points[1:]):
                grid.draw_line(start, end)
            if self.mark_latest:
                grid.draw_circle(points[-1], filled=True)

    def _draw_axes(self, grid: TextGrid, layout: ChartLayout) -> None:
        plot = layout.plot
        grid.draw_line((plot.left, plot.top), (plot.left, plot.bottom + 1))
        grid.draw_line((plot.left, plot.bottom), (plot.right + 1, plot.bottom))


def _ticks_or_bounds(vmin: float, vmax: float, target: int) -> np.ndarray:
    ticks = generate_nice_ticks(vmin, vmax, target)
    # A step wider than the span leaves no tick inside it; label the ends instead.
    if ticks.size == 0:
        return np.asarray([vmin, vmax], dtype=np.float64)
    return ticks
