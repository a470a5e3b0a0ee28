from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import math

import numpy as np


@dataclass(frozen=True)
class DataLimits:
    xmin: float
    xmax: float
    ymin: float
    ymax: float


@dataclass(frozen=True)
class CellRect:
    """Inclusive cell rectangle: columns left..right, rows top..bottom."""

    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left + 1

    @property
    def height(self) -> int:
        return self.bottom - self.top + 1


@dataclass(frozen=True)
class CellTransform:
    sx: float
    tx: float
    sy: float
    ty: float
    rect: CellRect


def build_transform(limits: DataLimits, rect: CellRect) -> CellTransform:
    if rect.width <= 1 or rect.height <= 1:
        raise ValueError("plot rect width/height must be > 1")
    if limits.xmax <= limits.xmin or limits.ymax <= limits.ymin:
        raise ValueError("data limits must have max > min")
    sx = (rect.width - 1) / (limits.xmax - limits.xmin)
    tx = rect.left - limits.xmin * sx
    # Rows grow downward, so larger y lands on a smaller row index.
    sy = -(rect.height - 1) / (limits.ymax - limits.ymin)
    ty = rect.bottom - limits.ymin * sy
    return CellTransform(sx=sx, tx=tx, sy=sy, ty=ty, rect=rect)


def map_to_cells(x: np.ndarray, y: np.ndarray, transform: CellTransform) -> tuple[np.ndarray, np.ndarray]:
    rect = transform.rect
    # Clip in float space; far out-of-range values would overflow the int cast.
    cx = np.clip(np.rint(x * transform.sx + transform.tx), rect.left, rect.right)
    cy = np.clip(np.rint(y * transform.sy + transform.ty), rect.top, rect.bottom)
    return cx.astype(np.int32), cy.astype(np.int32)


def generate_nice_ticks(vmin: float, vmax: float, target: int) -> np.ndarray:
    """Ticks on a 1/2/5 x 10^k step that fall inside [vmin, vmax]."""
    if target <= 0:
        raise ValueError("target must be > 0")
    if vmin == vmax:
        return np.asarray([vmin], dtype=np.float64)

    span = _nice_number(vmax - vmin, round_result=False)
    step = _nice_number(span / max(target - 1, 1), round_result=True)
    tick_min = math.ceil(vmin / step) * step
    tick_max = math.floor(vmax / step) * step

    ticks = np.arange(tick_min, tick_max + 0.5 * step, step, dtype=np.float64)
    # Normalize floating-point drift so values like -4.44e-16 become 0.
    ticks = np.rint(ticks / step) * step
    ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=step * 1e-9)] = 0.0
    return ticks


def format_tick(value: float, *, step: float | None = None) -> str:
    if not np.isfinite(value):
        return str(value)
    decimals = _decimals_from_step(step) if step is not None else 6
    d = Decimal(str(value))
    try:
        q = d.quantize(Decimal("1").scaleb(-decimals))
    except InvalidOperation:
        q = d
    out = format(q, "f")
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_ticks_for_axis(ticks: np.ndarray) -> list[str]:
    if ticks.size == 0:
        return []
    if ticks.size == 1:
        return [format_tick(float(ticks[0]))]
    step = float(abs(ticks[1] - ticks[0]))
    return [format_tick(float(v), step=step) for v in ticks]


def format_value(value: float) -> str:
    """Shortest round-trip digits in positional notation, without a trailing '.0'."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return np.format_float_positional(float(value), unique=True, trim="-")


def _nice_number(value: float, *, round_result: bool) -> float:
    exp = math.floor(math.log10(value))
    frac = value / (10**exp)

    if round_result:
        if frac < 1.5:
            nice_frac = 1.0
        elif frac < 3.0:
            nice_frac = 2.0
        elif frac < 7.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0
    else:
        if frac <= 1.0:
            nice_frac = 1.0
        elif frac <= 2.0:
            nice_frac = 2.0
        elif frac <= 5.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0

    return float(nice_frac * (10**exp))


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not np.isfinite(step):
        return 6
    exp = Decimal(str(step)).normalize().as_tuple().exponent
    return min(12, max(0, -int(exp)))
