from linescope_plot.bar import BarPlotter, bar_width, render_bar
from linescope_plot.chart import ChartComposer, ChartLayout
from linescope_plot.errors import GridBoundsError
from linescope_plot.history import HistoryStore, OrdinalHistory, SeriesSnapshot, TimedHistory
from linescope_plot.raster import CellKind, TextGrid

__all__ = [
    "BarPlotter",
    "CellKind",
    "ChartComposer",
    "ChartLayout",
    "GridBoundsError",
    "HistoryStore",
    "OrdinalHistory",
    "SeriesSnapshot",
    "TextGrid",
    "TimedHistory",
    "bar_width",
    "render_bar",
]
