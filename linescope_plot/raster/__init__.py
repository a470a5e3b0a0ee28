from .draw_lines import draw_antialiased_line
from .draw_text import HPos, TextAnchor, VPos, anchor_origin, text_size
from .grid import DEFAULT_GRID_HEIGHT, PIXEL_COVERAGE_THRESHOLD, CellKind, TextGrid, merge_cell

__all__ = [
    "CellKind",
    "DEFAULT_GRID_HEIGHT",
    "HPos",
    "PIXEL_COVERAGE_THRESHOLD",
    "TextAnchor",
    "TextGrid",
    "VPos",
    "anchor_origin",
    "draw_antialiased_line",
    "merge_cell",
    "text_size",
]
