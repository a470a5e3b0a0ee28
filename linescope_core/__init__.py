from .config import AxisRange, PlotterConfig, RendererKind, load_config_file, parse_bind
from .frame_throttle import FrameThrottle
from .lines import FramingError, parse_sample, read_lines
from .sinks import CLEAR_SCREEN, BufferSink, ByteSink, terminal_sink

# render_worker, plotters and server import linescope_plot, which imports this
# package; they are imported by module path to keep the import graph acyclic.

__all__ = [
    "AxisRange",
    "BufferSink",
    "ByteSink",
    "CLEAR_SCREEN",
    "FrameThrottle",
    "FramingError",
    "PlotterConfig",
    "RendererKind",
    "load_config_file",
    "parse_bind",
    "parse_sample",
    "read_lines",
    "terminal_sink",
]
