from __future__ import annotations

import math

from linescope_core.config import AxisRange
from linescope_core.sinks import ByteSink
from linescope_plot.scales import format_value


BAR_FILL = "="
BAR_PAD = "."
OUT_OF_RANGE_MARK = "X"


def bar_width(x: float, min_value: float, max_value: float, capacity: int) -> int:
    """Filled cells for x on a bar of ``capacity`` cells; 0 below the range."""
    y = (x - min_value) / (max_value - min_value) * capacity
    if y < 0.0 or math.isnan(y):
        return 0
    return int(y)


def render_bar(x: float, axis: AxisRange, capacity: int) -> str:
    if x < axis.min:
        bar = OUT_OF_RANGE_MARK + BAR_PAD * (capacity - 1)
    elif x > axis.max:
        bar = BAR_FILL * (capacity - 1) + OUT_OF_RANGE_MARK
    else:
        filled = min(bar_width(x, axis.min, axis.max, capacity), capacity)
        bar = BAR_FILL * filled + BAR_PAD * (capacity - filled)
    return f"{bar} {format_value(x)}"


class BarPlotter:
    """Writes one bar line per sample straight to its sink; keeps no history."""

    def __init__(self, capacity: int, axis: AxisRange, sink: ByteSink) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self.capacity = capacity
        self.axis = axis
        self._sink = sink

    def update(self, x: float) -> None:
        self._sink.write(render_bar(x, self.axis, self.capacity).encode("utf-8") + b"\n")
        self._sink.flush()
