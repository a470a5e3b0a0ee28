from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Protocol

import numpy as np


@dataclass(frozen=True)
class SeriesSnapshot:
    """One series' samples as offsets from "now" (x <= 0), oldest first."""

    series_id: int
    x: np.ndarray
    y: np.ndarray


class SeriesHistory(Protocol):
    def append(self, value: float, ts: float) -> None:
        ...

    def evict(self, now: float) -> None:
        ...

    def offsets(self, now: float) -> tuple[np.ndarray, np.ndarray]:
        ...

    def __len__(self) -> int:
        ...


class OrdinalHistory:
    """Count-bounded history whose x values are ordinal offsets from the newest sample.

    With ``lazy=False`` every append rewrites the stored offsets (each older
    sample moves one unit further into the past). With ``lazy=True`` the
    history keeps absolute sequence numbers and derives the same offsets when
    a snapshot is taken.
    """

    def __init__(self, capacity: int, *, lazy: bool = False) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self.capacity = capacity
        self.lazy = lazy
        self._samples: deque[tuple[float, float]] = deque()
        self._seq = -1

    def append(self, value: float, ts: float = 0.0) -> None:
        self._seq += 1
        if self.lazy:
            self._samples.append((float(self._seq), float(value)))
        else:
            self._samples = deque((x - 1.0, y) for x, y in self._samples)
            self._samples.append((0.0, float(value)))
        self.evict(ts)

    def evict(self, now: float = 0.0) -> None:
        while len(self._samples) > self.capacity:
            self._samples.popleft()

    def records(self) -> list[tuple[float, float]]:
        """Stored (x, y) pairs as kept internally."""
        return list(self._samples)

    def offsets(self, now: float = 0.0) -> tuple[np.ndarray, np.ndarray]:
        if not self._samples:
            return np.empty(0, dtype=np.float64), np.empty(0, dtype=np.float64)
        data = np.asarray(self._samples, dtype=np.float64)
        x = data[:, 0]
        if self.lazy:
            x = x - float(self._seq)
        return x, data[:, 1]

    def __len__(self) -> int:
        return len(self._samples)


class TimedHistory:
    """Age-bounded history keyed by absolute timestamps."""

    def __init__(self, max_age: float) -> None:
        if max_age <= 0:
            raise ValueError("max_age must be > 0")
        self.max_age = max_age
        self._samples: deque[tuple[float, float]] = deque()

    def append(self, value: float, ts: float) -> None:
        self._samples.append((float(ts), float(value)))
        self.evict(ts)

    def evict(self, now: float) -> None:
        # Samples arrive in time order, so only a leading run can be stale.
        while self._samples and now - self._samples[0][0] > self.max_age:
            self._samples.popleft()

    def records(self) -> list[tuple[float, float]]:
        return list(self._samples)

    def offsets(self, now: float) -> tuple[np.ndarray, np.ndarray]:
        if not self._samples:
            return np.empty(0, dtype=np.float64), np.empty(0, dtype=np.float64)
        data = np.asarray(self._samples, dtype=np.float64)
        return data[:, 0] - float(now), data[:, 1]

    def __len__(self) -> int:
        return len(self._samples)


class HistoryStore:
    """Registry of per-series histories; iteration follows registration order."""

    def __init__(self, *, capacity: int = 100, max_age: float | None = None, lazy_offsets: bool = False) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        if max_age is not None and max_age <= 0:
            raise ValueError("max_age must be > 0 when provided")
        self.capacity = capacity
        self.max_age = max_age
        self.lazy_offsets = lazy_offsets
        self._histories: dict[int, SeriesHistory] = {}

    @property
    def time_mode(self) -> bool:
        return self.max_age is not None

    def window(self) -> float:
        """Width of the x window ending at 0: max_age in time mode, capacity otherwise."""
        if self.max_age is not None:
            return float(self.max_age)
        return float(self.capacity)

    def register(self, series_id: int) -> SeriesHistory:
        history = self._histories.get(series_id)
        if history is None:
            history = self._new_history()
            self._histories[series_id] = history
        return history

    def append(self, series_id: int, value: float, ts: float) -> None:
        self.register(series_id).append(value, ts)

    def evict_all(self, now: float) -> None:
        for history in self._histories.values():
            history.evict(now)

    def get(self, series_id: int) -> SeriesHistory | None:
        return self._histories.get(series_id)

    def series_ids(self) -> list[int]:
        return list(self._histories)

    def lengths(self) -> dict[int, int]:
        return {series_id: len(history) for series_id, history in self._histories.items()}

    def snapshot(self, now: float) -> list[SeriesSnapshot]:
        out: list[SeriesSnapshot] = []
        for series_id, history in self._histories.items():
            x, y = history.offsets(now)
            out.append(SeriesSnapshot(series_id=series_id, x=x, y=y))
        return out

    def __len__(self) -> int:
        return len(self._histories)

    def _new_history(self) -> SeriesHistory:
        if self.max_age is not None:
            return TimedHistory(self.max_age)
        return OrdinalHistory(self.capacity, lazy=self.lazy_offsets)
