from __future__ import annotations

import asyncio
from dataclasses import dataclass
import time
from typing import Callable, Protocol, TypeAlias

from linescope_core.config import PlotterConfig
from linescope_core.render_worker import RenderWorker
from linescope_core.sinks import ByteSink
from linescope_plot.bar import BarPlotter


WORKER_POLL_INTERVAL_S = 0.1


class PlotterHandle(Protocol):
    def update(self, x: float) -> None:
        ...


@dataclass(frozen=True)
class ChartSeriesHandle:
    worker: RenderWorker
    series_id: int

    def update(self, x: float) -> None:
        self.worker.submit_sample(self.series_id, x)


class BarPlotterFactory:
    """Each connection gets its own stateless bar printer on the shared sink."""

    kind = "bar"

    def __init__(self, config: PlotterConfig, sink: ByteSink) -> None:
        self.config = config
        self._sink = sink
        self._closed = asyncio.Event()

    def start(self) -> None:
        return

    def close(self) -> None:
        self._closed.set()

    def spawn(self) -> BarPlotter:
        return BarPlotter(self.config.capacity, self.config.axis, self._sink)

    async def spawn_async(self) -> BarPlotter:
        return self.spawn()

    async def wait_stopped(self) -> Exception | None:
        await self._closed.wait()
        return None


class ChartPlotterFactory:
    """Registers one series per connection with a shared render worker."""

    kind = "chart"

    def __init__(
        self,
        config: PlotterConfig,
        sink: ByteSink,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.worker = RenderWorker(config, sink, clock=clock)

    def start(self) -> None:
        self.worker.start()

    def close(self) -> None:
        self.worker.close()

    def spawn(self) -> ChartSeriesHandle:
        return ChartSeriesHandle(self.worker, self.worker.spawn())

    async def spawn_async(self) -> ChartSeriesHandle:
        return ChartSeriesHandle(self.worker, await self.worker.spawn_async())

    async def wait_stopped(self) -> Exception | None:
        while self.worker.is_alive():
            await asyncio.sleep(WORKER_POLL_INTERVAL_S)
        return self.worker.last_error


PlotterFactory: TypeAlias = BarPlotterFactory | ChartPlotterFactory


def create_plotter_factory(config: PlotterConfig, sink: ByteSink) -> PlotterFactory:
    if config.renderer == "chart":
        return ChartPlotterFactory(config, sink)
    return BarPlotterFactory(config, sink)
