from __future__ import annotations

from dataclasses import dataclass, field, replace
import math
from pathlib import Path
import tomllib
from typing import Any, Literal


RendererKind = Literal["bar", "chart"]
RENDERER_KINDS: tuple[RendererKind, ...] = ("bar", "chart")

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9999
DEFAULT_MAX_LINE_LENGTH = 1024
DEFAULT_FRAME_INTERVAL_S = 0.04
MIN_CHART_WIDTH = 20
MIN_CHART_HEIGHT = 8


@dataclass(frozen=True)
class AxisRange:
    min: float = 0.0
    max: float = 100.0

    def __post_init__(self) -> None:
        if not (math.isfinite(self.min) and math.isfinite(self.max)):
            raise ValueError("axis min/max must be finite")
        if self.max <= self.min:
            raise ValueError("axis max must be > axis min")


@dataclass(frozen=True)
class PlotterConfig:
    """Plain values consumed by the renderers, the render worker and the server."""

    axis: AxisRange = field(default_factory=AxisRange)
    width: int = 100
    height: int = 30
    capacity: int = 100
    max_age: float | None = None
    frame_interval: float = DEFAULT_FRAME_INTERVAL_S
    multiple_connections: bool = False
    renderer: RendererKind = "bar"
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    lazy_offsets: bool = False
    mark_latest: bool = False

    def __post_init__(self) -> None:
        if self.renderer not in RENDERER_KINDS:
            raise ValueError(f"renderer must be one of {', '.join(RENDERER_KINDS)}")
        if self.capacity <= 0:
            raise ValueError("capacity must be > 0")
        if self.max_age is not None and self.max_age <= 0:
            raise ValueError("max_age must be > 0 when provided")
        if self.frame_interval < 0:
            raise ValueError("frame_interval must be >= 0")
        if self.max_line_length <= 0:
            raise ValueError("max_line_length must be > 0")
        if not 0 <= self.port <= 65535:
            raise ValueError("port must be within 0..65535")
        if self.renderer == "chart":
            if self.width < MIN_CHART_WIDTH:
                raise ValueError(f"width must be >= {MIN_CHART_WIDTH} for the chart renderer")
            if self.height < MIN_CHART_HEIGHT:
                raise ValueError(f"height must be >= {MIN_CHART_HEIGHT} for the chart renderer")
        elif self.width <= 0 or self.height <= 0:
            raise ValueError("width and height must be > 0")

    def with_overrides(self, **overrides: Any) -> "PlotterConfig":
        """Copy with every non-None override applied."""
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values)


def parse_bind(value: str) -> tuple[str, int]:
    host, sep, port = value.rpartition(":")
    if not sep or not host:
        raise ValueError(f"bind address must be HOST:PORT, got {value!r}")
    try:
        return host.strip("[]"), int(port)
    except ValueError as exc:
        raise ValueError(f"bind port must be an integer, got {port!r}") from exc


def load_config_file(path: str | Path) -> PlotterConfig:
    """Read a TOML file with optional [plot] and [server] tables."""
    with Path(path).open("rb") as f:
        raw = tomllib.load(f)
    plot = _table(raw, "plot")
    server = _table(raw, "server")
    try:
        axis = AxisRange(
            min=float(plot.get("min", AxisRange.min)),
            max=float(plot.get("max", AxisRange.max)),
        )
        max_age = plot.get("max_age")
        values: dict[str, Any] = {
            "axis": axis,
            "width": int(plot.get("width", PlotterConfig.width)),
            "height": int(plot.get("height", PlotterConfig.height)),
            "capacity": int(plot.get("capacity", PlotterConfig.capacity)),
            "max_age": None if max_age is None else float(max_age),
            "frame_interval": float(plot.get("frame_interval", PlotterConfig.frame_interval)),
            "renderer": str(plot.get("renderer", PlotterConfig.renderer)),
            "lazy_offsets": bool(plot.get("lazy_offsets", False)),
            "mark_latest": bool(plot.get("mark_latest", False)),
            "multiple_connections": bool(server.get("multiple_connections", False)),
            "max_line_length": int(server.get("max_line_length", PlotterConfig.max_line_length)),
        }
        if "bind" in server:
            values["host"], values["port"] = parse_bind(str(server["bind"]))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid config file {path}: {exc}") from exc
    return PlotterConfig(**values)


def _table(raw: dict[str, Any], name: str) -> dict[str, Any]:
    table = raw.get(name, {})
    if not isinstance(table, dict):
        raise ValueError(f"config section [{name}] must be a table")
    return table
