from __future__ import annotations

from enum import IntEnum

import numpy as np

from linescope_core.sinks import ByteSink
from linescope_plot.errors import GridBoundsError
from linescope_plot.raster.draw_lines import draw_antialiased_line
from linescope_plot.raster.draw_text import DEFAULT_ANCHOR, TextAnchor, anchor_origin


DEFAULT_GRID_HEIGHT = 30
PIXEL_COVERAGE_THRESHOLD = 0.3


class CellKind(IntEnum):
    EMPTY = 0
    HLINE = 1
    VLINE = 2
    CROSS = 3
    PIXEL = 4
    TEXT = 5
    CIRCLE_FILLED = 6
    CIRCLE_OPEN = 7


# Indexed by CellKind; TEXT cells render their own glyph.
_PALETTE = np.asarray([" ", "-", "|", "+", ".", " ", "@", "O"], dtype="<U1")
_CIRCLES = (CellKind.CIRCLE_FILLED, CellKind.CIRCLE_OPEN)


def merge_cell(current: CellKind, incoming: CellKind) -> CellKind:
    """Combine a cell's state with a new write. Order of the checks matters."""
    if (current, incoming) in ((CellKind.HLINE, CellKind.VLINE), (CellKind.VLINE, CellKind.HLINE)):
        return CellKind.CROSS
    if incoming in _CIRCLES:
        return incoming
    if current in _CIRCLES:
        return current
    if incoming == CellKind.PIXEL or current == CellKind.PIXEL:
        return CellKind.PIXEL
    return incoming


class TextGrid:
    """Fixed-size character grid with merge-on-write drawing primitives."""

    def __init__(self, width: int, height: int = DEFAULT_GRID_HEIGHT) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be > 0")
        self.width = width
        self.height = height
        self._kinds = np.zeros((height, width), dtype=np.uint8)
        self._glyphs = np.full((height, width), " ", dtype="<U1")

    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def kind_at(self, x: int, y: int) -> CellKind:
        self._check_bounds(x, y)
        return CellKind(int(self._kinds[y, x]))

    def set_pixel(self, x: int, y: int, coverage: float) -> None:
        if coverage > PIXEL_COVERAGE_THRESHOLD:
            self._write(x, y, CellKind.PIXEL)

    def draw_line(self, start: tuple[int, int], end: tuple[int, int]) -> None:
        (x0, y0), (x1, y1) = start, end
        if x0 == x1:
            for y in range(min(y0, y1), max(y0, y1)):
                self._write(x0, y, CellKind.VLINE)
            return
        if y0 == y1:
            for x in range(min(x0, x1), max(x0, x1)):
                self._write(x, y0, CellKind.HLINE)
            return
        draw_antialiased_line(self.set_pixel, start, end)

    def draw_circle(self, center: tuple[int, int], filled: bool = True) -> None:
        self._write(center[0], center[1], CellKind.CIRCLE_FILLED if filled else CellKind.CIRCLE_OPEN)

    def draw_text(self, text: str, pos: tuple[int, int], anchor: TextAnchor = DEFAULT_ANCHOR) -> None:
        x, y = anchor_origin(text, anchor, pos)
        # Glyphs run on in row-major order, so long text continues on the next row.
        offset = y * self.width + x
        for idx, glyph in enumerate(text):
            row, col = divmod(offset + idx, self.width)
            self._write(col, row, CellKind.TEXT, glyph)

    def rows(self) -> list[str]:
        chars = _PALETTE[self._kinds]
        chars = np.where(self._kinds == CellKind.TEXT, self._glyphs, chars)
        return ["".join(row) for row in chars.tolist()]

    def clear(self) -> None:
        self._kinds[:, :] = CellKind.EMPTY
        self._glyphs[:, :] = " "

    def present(self, sink: ByteSink) -> None:
        frame = "".join(row + "\n" for row in self.rows())
        sink.write(frame.encode("utf-8"))
        sink.flush()
        self.clear()

    def _write(self, x: int, y: int, kind: CellKind, glyph: str = " ") -> None:
        self._check_bounds(x, y)
        current = CellKind(int(self._kinds[y, x]))
        merged = merge_cell(current, kind)
        self._kinds[y, x] = merged
        if merged == CellKind.TEXT and kind == CellKind.TEXT:
            self._glyphs[y, x] = glyph

    def _check_bounds(self, x: int, y: int) -> None:
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            raise GridBoundsError(f"cell ({x}, {y}) is outside the {self.width}x{self.height} grid")
