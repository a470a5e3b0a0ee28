from __future__ import annotations

import asyncio
from concurrent.futures import Future
from dataclasses import dataclass
import logging
import queue
import threading
import time
from typing import Callable, TypeAlias

from linescope_core.config import PlotterConfig
from linescope_core.frame_throttle import FrameThrottle
from linescope_core.sinks import ByteSink
from linescope_plot.chart import ChartComposer
from linescope_plot.history import HistoryStore
from linescope_plot.raster import TextGrid

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SampleMessage:
    series_id: int
    value: float
    ts: float


@dataclass(frozen=True)
class SpawnRequest:
    reply: "Future[int]"


@dataclass(frozen=True)
class LengthsRequest:
    reply: "Future[dict[int, int]]"


@dataclass(frozen=True)
class CloseMessage:
    pass


WorkerMessage: TypeAlias = SampleMessage | SpawnRequest | LengthsRequest | CloseMessage


class RenderWorker:
    """Single owner of the grid, the chart composer and the history store.

    Connection tasks talk to it only through an unbounded inbox; nothing
    inside is shared, so none of it is locked.
    """

    def __init__(
        self,
        config: PlotterConfig,
        sink: ByteSink,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._grid = TextGrid(config.width, config.height)
        self._composer = ChartComposer(config.axis, mark_latest=config.mark_latest)
        self._store = HistoryStore(
            capacity=config.capacity,
            max_age=config.max_age,
            lazy_offsets=config.lazy_offsets,
        )
        self._throttle = FrameThrottle(config.frame_interval)
        self._sink = sink
        self._clock = clock
        self._inbox: "queue.SimpleQueue[WorkerMessage]" = queue.SimpleQueue()
        self._next_series_id = 1
        self._thread: threading.Thread | None = None
        self._closed = False
        self._last_error: Exception | None = None

    @property
    def last_error(self) -> Exception | None:
        return self._last_error

    @property
    def frames_drawn(self) -> int:
        return self._throttle.frames_drawn

    def now(self) -> float:
        return self._clock()

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._run, name="linescope-render", daemon=True)
        self._thread.start()

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def join(self, timeout: float | None = None) -> None:
        if self._thread:
            self._thread.join(timeout=timeout)

    def close(self) -> None:
        """Ask the loop to finish once every message queued before this one is applied."""
        self._inbox.put(CloseMessage())

    def send(self, message: WorkerMessage) -> None:
        if self._last_error is not None:
            raise RuntimeError("render worker has stopped") from self._last_error
        self._inbox.put(message)
        if self._last_error is not None:
            self._fail_pending(self._last_error)

    def submit_sample(self, series_id: int, value: float, ts: float | None = None) -> None:
        self.send(SampleMessage(series_id=series_id, value=float(value), ts=self._clock() if ts is None else ts))

    def spawn(self, timeout: float | None = None) -> int:
        reply: "Future[int]" = Future()
        self.send(SpawnRequest(reply))
        return reply.result(timeout=timeout)

    async def spawn_async(self) -> int:
        reply: "Future[int]" = Future()
        self.send(SpawnRequest(reply))
        return await asyncio.wrap_future(reply)

    def history_lengths(self, timeout: float | None = None) -> dict[int, int]:
        reply: "Future[dict[int, int]]" = Future()
        self.send(LengthsRequest(reply))
        return reply.result(timeout=timeout)

    def run_once(self, timeout: float | None = None) -> bool:
        """Apply one inbound message; returns False once the inbox is closed."""
        try:
            message = self._inbox.get(timeout=timeout)
        except queue.Empty:
            return not self._closed
        return self.handle(message)

    def handle(self, message: WorkerMessage) -> bool:
        if isinstance(message, SampleMessage):
            self._store.append(message.series_id, message.value, message.ts)
            now = self._clock()
            if self._throttle.should_draw(now):
                self.draw(now)
            return True
        if isinstance(message, SpawnRequest):
            if message.reply.set_running_or_notify_cancel():
                series_id = self._next_series_id
                self._next_series_id += 1
                self._store.register(series_id)
                LOGGER.debug("registered series %d", series_id)
                message.reply.set_result(series_id)
            return True
        if isinstance(message, LengthsRequest):
            if message.reply.set_running_or_notify_cancel():
                message.reply.set_result(self._store.lengths())
            return True
        if isinstance(message, CloseMessage):
            self._closed = True
            return False
        raise TypeError(f"unsupported worker message: {type(message).__name__}")

    def draw(self, now: float) -> None:
        self._store.evict_all(now)
        self._composer.render(self._grid, self._store.snapshot(now), self._store.window(), self._sink)

    def _run(self) -> None:
        try:
            while self.run_once():
                pass
        except Exception as exc:  # noqa: BLE001
            self._last_error = exc
            LOGGER.exception("RenderWorker loop failed: %s", exc)
            self._fail_pending(exc)
        else:
            LOGGER.debug("render worker inbox closed")

    def _fail_pending(self, exc: Exception) -> None:
        while True:
            try:
                message = self._inbox.get_nowait()
            except queue.Empty:
                return
            if isinstance(message, (SpawnRequest, LengthsRequest)) and message.reply.set_running_or_notify_cancel():
                message.reply.set_exception(RuntimeError("render worker has stopped"))
