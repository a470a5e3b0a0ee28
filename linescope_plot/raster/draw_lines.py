from __future__ import annotations

import math
from typing import Callable


PixelWriter = Callable[[int, int, float], None]


def draw_antialiased_line(set_pixel: PixelWriter, start: tuple[int, int], end: tuple[int, int]) -> None:
    """Walk the major axis and split each step's coverage across two cells."""
    x0, y0 = start
    x1, y1 = end
    steep = abs(y1 - y0) > abs(x1 - x0)
    if steep:
        x0, y0, x1, y1 = y0, x0, y1, x1
    if x0 > x1:
        x0, y0, x1, y1 = x1, y1, x0, y0
    slope = (y1 - y0) / (x1 - x0) if x1 != x0 else 0.0

    for major in range(x0, x1 + 1):
        minor = y0 + (major - x0) * slope
        base = math.floor(minor)
        frac = minor - base
        _plot(set_pixel, steep, major, base, 1.0 - frac)
        _plot(set_pixel, steep, major, base + 1, frac)


def _plot(set_pixel: PixelWriter, steep: bool, major: int, minor: int, coverage: float) -> None:
    if steep:
        set_pixel(minor, major, coverage)
    else:
        set_pixel(major, minor, coverage)
