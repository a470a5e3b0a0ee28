from __future__ import annotations

from dataclasses import dataclass


@dataclass
class FrameThrottle:
    """Fixed minimum interval between two frames, measured from the last drawn frame."""

    frame_interval: float
    _next_draw_at: float | None = None
    frames_drawn: int = 0
    frames_skipped: int = 0

    def __post_init__(self) -> None:
        if self.frame_interval < 0:
            raise ValueError("frame_interval must be >= 0")

    @property
    def next_draw_at(self) -> float | None:
        return self._next_draw_at

    def should_draw(self, now: float) -> bool:
        if self._next_draw_at is not None and now < self._next_draw_at:
            self.frames_skipped += 1
            return False
        # A stall never queues catch-up frames: the next deadline restarts from now.
        self._next_draw_at = now + self.frame_interval
        self.frames_drawn += 1
        return True

    def reset(self) -> None:
        self._next_draw_at = None
