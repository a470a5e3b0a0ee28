from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class HPos(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class VPos(Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"


@dataclass(frozen=True)
class TextAnchor:
    h_pos: HPos = HPos.LEFT
    v_pos: VPos = VPos.TOP


DEFAULT_ANCHOR = TextAnchor()


def text_size(text: str) -> tuple[int, int]:
    """Every glyph occupies exactly one cell."""
    return (len(text), 1)


def anchor_origin(text: str, anchor: TextAnchor, pos: tuple[int, int]) -> tuple[int, int]:
    width, height = text_size(text)
    if anchor.h_pos is HPos.RIGHT:
        dx = -width
    elif anchor.h_pos is HPos.CENTER:
        dx = -(width // 2)
    else:
        dx = 0
    if anchor.v_pos is VPos.BOTTOM:
        dy = -height
    elif anchor.v_pos is VPos.CENTER:
        dy = -(height // 2)
    else:
        dy = 0
    return (max(0, pos[0] + dx), max(0, pos[1] + dy))
