from __future__ import annotations

import unittest

from linescope_core.sinks import BufferSink
from linescope_plot.errors import GridBoundsError
from linescope_plot.raster import CellKind, HPos, TextAnchor, TextGrid, VPos, merge_cell


class TextGridTests(unittest.TestCase):
    def test_rejects_empty_grid(self) -> None:
        with self.assertRaises(ValueError):
            TextGrid(width=0, height=3)

    def test_present_empty_grid_writes_blank_rows(self) -> None:
        grid = TextGrid(width=5, height=3)
        sink = BufferSink()
        grid.present(sink)
        self.assertEqual(sink.text(), "     \n" * 3)
        self.assertEqual(sink.flushes, 1)

    def test_present_clears_grid(self) -> None:
        grid = TextGrid(width=4, height=2)
        grid.draw_text("ab", (0, 0))
        sink = BufferSink()
        grid.present(sink)
        self.assertEqual(sink.text(), "ab  \n    \n")
        self.assertEqual(grid.rows(), ["    ", "    "])

    def test_horizontal_line_is_half_open(self) -> None:
        grid = TextGrid(width=5, height=2)
        grid.draw_line((1, 1), (4, 1))
        self.assertEqual(grid.rows()[1], " --- ")
        grid.clear()
        grid.draw_line((4, 1), (1, 1))
        self.assertEqual(grid.rows()[1], " --- ")

    def test_vertical_line_is_half_open(self) -> None:
        grid = TextGrid(width=2, height=4)
        grid.draw_line((0, 3), (0, 0))
        self.assertEqual(grid.rows(), ["| ", "| ", "| ", "  "])

    def test_crossing_lines_merge_to_cross_in_either_order(self) -> None:
        for horizontal_first in (True, False):
            grid = TextGrid(width=5, height=5)
            hline = ((0, 2), (5, 2))
            vline = ((2, 0), (2, 5))
            first, second = (hline, vline) if horizontal_first else (vline, hline)
            grid.draw_line(*first)
            grid.draw_line(*second)
            self.assertEqual(grid.kind_at(2, 2), CellKind.CROSS)
            self.assertEqual(grid.rows()[2], "--+--")

    def test_pixel_respects_coverage_threshold(self) -> None:
        grid = TextGrid(width=2, height=1)
        grid.set_pixel(0, 0, 0.3)
        self.assertEqual(grid.kind_at(0, 0), CellKind.EMPTY)
        grid.set_pixel(0, 0, 0.31)
        self.assertEqual(grid.kind_at(0, 0), CellKind.PIXEL)

    def test_sub_threshold_pixel_outside_grid_is_a_noop(self) -> None:
        grid = TextGrid(width=2, height=1)
        grid.set_pixel(-1, 5, 0.2)
        self.assertEqual(grid.rows(), ["  "])

    def test_out_of_bounds_write_raises(self) -> None:
        grid = TextGrid(width=3, height=2)
        with self.assertRaises(GridBoundsError):
            grid.set_pixel(3, 0, 1.0)
        with self.assertRaises(IndexError):
            grid.set_pixel(-1, 0, 1.0)
        with self.assertRaises(GridBoundsError):
            grid.draw_line((0, 0), (0, 3))

    def test_pixel_dominates_later_lines_and_text(self) -> None:
        grid = TextGrid(width=3, height=1)
        grid.set_pixel(1, 0, 1.0)
        grid.draw_line((0, 0), (3, 0))
        grid.draw_text("abc", (0, 0))
        self.assertEqual(grid.rows(), ["a.c"])

    def test_circle_dominates_everything(self) -> None:
        grid = TextGrid(width=2, height=1)
        grid.set_pixel(0, 0, 1.0)
        grid.draw_circle((0, 0), filled=True)
        grid.draw_circle((1, 0), filled=False)
        grid.set_pixel(1, 0, 1.0)
        grid.draw_text("xy", (0, 0))
        self.assertEqual(grid.rows(), ["@O"])

    def test_merge_rule_table(self) -> None:
        self.assertEqual(merge_cell(CellKind.HLINE, CellKind.VLINE), CellKind.CROSS)
        self.assertEqual(merge_cell(CellKind.VLINE, CellKind.HLINE), CellKind.CROSS)
        self.assertEqual(merge_cell(CellKind.CROSS, CellKind.HLINE), CellKind.HLINE)
        self.assertEqual(merge_cell(CellKind.TEXT, CellKind.PIXEL), CellKind.PIXEL)
        self.assertEqual(merge_cell(CellKind.EMPTY, CellKind.TEXT), CellKind.TEXT)
        self.assertEqual(merge_cell(CellKind.CIRCLE_OPEN, CellKind.CIRCLE_FILLED), CellKind.CIRCLE_FILLED)

    def test_text_anchoring(self) -> None:
        grid = TextGrid(width=10, height=3)
        grid.draw_text("abc", (5, 0), TextAnchor(h_pos=HPos.CENTER))
        grid.draw_text("abc", (5, 1), TextAnchor(h_pos=HPos.RIGHT))
        grid.draw_text("z", (9, 3), TextAnchor(h_pos=HPos.LEFT, v_pos=VPos.BOTTOM))
        self.assertEqual(grid.rows(), ["    abc   ", "  abc     ", "         z"])

    def test_text_origin_clamps_negative_offsets(self) -> None:
        grid = TextGrid(width=6, height=1)
        grid.draw_text("abc", (1, 0), TextAnchor(h_pos=HPos.RIGHT, v_pos=VPos.BOTTOM))
        self.assertEqual(grid.rows(), ["abc   "])

    def test_text_continues_row_major(self) -> None:
        grid = TextGrid(width=4, height=2)
        grid.draw_text("abcdef", (2, 0))
        self.assertEqual(grid.rows(), ["  ab", "cdef"])
        with self.assertRaises(GridBoundsError):
            grid.draw_text("overflow", (2, 1))

    def test_diagonal_line_uses_coverage_split(self) -> None:
        grid = TextGrid(width=5, height=2)
        grid.draw_line((0, 0), (4, 1))
        self.assertEqual(grid.rows(), ["...  ", "  ..."])

    def test_steep_line_walks_rows(self) -> None:
        grid = TextGrid(width=2, height=5)
        grid.draw_line((0, 0), (1, 4))
        self.assertEqual(grid.rows(), [". ", ". ", "..", " .", " ."])


if __name__ == "__main__":
    unittest.main()
