from __future__ import annotations

from concurrent.futures import Future
import threading
import unittest
from unittest import mock

from linescope_core.config import PlotterConfig
from linescope_core.render_worker import (
    CloseMessage,
    LengthsRequest,
    RenderWorker,
    SampleMessage,
    SpawnRequest,
)
from linescope_core.sinks import CLEAR_SCREEN, BufferSink
from linescope_plot.errors import GridBoundsError


class _FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _chart_config(**overrides) -> PlotterConfig:
    return PlotterConfig(renderer="chart", **overrides)


def _spawn_inline(worker: RenderWorker) -> int:
    reply: Future[int] = Future()
    worker.handle(SpawnRequest(reply))
    return reply.result(timeout=0)


def _lengths_inline(worker: RenderWorker) -> dict[int, int]:
    reply: Future[dict[int, int]] = Future()
    worker.handle(LengthsRequest(reply))
    return reply.result(timeout=0)


class RenderWorkerInlineTests(unittest.TestCase):
    def test_series_ids_start_at_one_and_increase(self) -> None:
        worker = RenderWorker(_chart_config(), BufferSink(), clock=_FakeClock())
        self.assertEqual([_spawn_inline(worker) for _ in range(3)], [1, 2, 3])
        self.assertEqual(_lengths_inline(worker), {1: 0, 2: 0, 3: 0})

    def test_throttle_limits_frames(self) -> None:
        clock = _FakeClock()
        sink = BufferSink()
        worker = RenderWorker(_chart_config(frame_interval=0.04), sink, clock=clock)
        series_id = _spawn_inline(worker)

        worker.handle(SampleMessage(series_id, 10.0, clock.now))
        self.assertEqual(worker.frames_drawn, 1)
        clock.now = 0.01
        worker.handle(SampleMessage(series_id, 20.0, clock.now))
        self.assertEqual(worker.frames_drawn, 1)
        clock.now = 0.05
        worker.handle(SampleMessage(series_id, 30.0, clock.now))
        self.assertEqual(worker.frames_drawn, 2)

        self.assertEqual(sink.chunks.count(CLEAR_SCREEN), 2)
        # Skipped frames still record their samples.
        self.assertEqual(_lengths_inline(worker), {series_id: 3})

    def test_time_mode_evicts_idle_series_on_draw(self) -> None:
        clock = _FakeClock()
        worker = RenderWorker(_chart_config(max_age=1.0, frame_interval=0.0), BufferSink(), clock=clock)
        first = _spawn_inline(worker)
        second = _spawn_inline(worker)
        worker.handle(SampleMessage(first, 1.0, 0.0))
        worker.handle(SampleMessage(second, 2.0, 0.0))

        clock.now = 5.0
        worker.handle(SampleMessage(second, 3.0, 5.0))
        self.assertEqual(_lengths_inline(worker), {first: 0, second: 1})

    def test_count_mode_keeps_capacity_samples(self) -> None:
        worker = RenderWorker(_chart_config(capacity=4, frame_interval=0.0), BufferSink(), clock=_FakeClock())
        series_id = _spawn_inline(worker)
        for value in range(10):
            worker.handle(SampleMessage(series_id, float(value), 0.0))
        self.assertEqual(_lengths_inline(worker), {series_id: 4})

    def test_close_message_ends_the_loop(self) -> None:
        worker = RenderWorker(_chart_config(), BufferSink(), clock=_FakeClock())
        self.assertFalse(worker.handle(CloseMessage()))
        self.assertFalse(worker.run_once(timeout=0.01))

    def test_unknown_message_is_rejected(self) -> None:
        worker = RenderWorker(_chart_config(), BufferSink(), clock=_FakeClock())
        with self.assertRaises(TypeError):
            worker.handle("not a message")  # type: ignore[arg-type]


class RenderWorkerThreadTests(unittest.TestCase):
    def test_spawn_round_trips_through_the_thread(self) -> None:
        worker = RenderWorker(_chart_config(), BufferSink())
        worker.start()
        try:
            self.assertEqual(worker.spawn(timeout=2.0), 1)
            self.assertEqual(worker.spawn(timeout=2.0), 2)
        finally:
            worker.close()
            worker.join(timeout=2.0)
        self.assertFalse(worker.is_alive())
        self.assertIsNone(worker.last_error)

    def test_concurrent_producers_keep_every_sample(self) -> None:
        worker = RenderWorker(_chart_config(), BufferSink())
        worker.start()

        def produce() -> None:
            series_id = worker.spawn(timeout=2.0)
            for i in range(100):
                worker.submit_sample(series_id, float(i))

        threads = [threading.Thread(target=produce) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5.0)
        try:
            self.assertEqual(worker.history_lengths(timeout=2.0), {1: 100, 2: 100})
        finally:
            worker.close()
            worker.join(timeout=2.0)

    def test_render_failure_stops_worker_and_rejects_requests(self) -> None:
        worker = RenderWorker(_chart_config(), BufferSink())
        worker.start()
        series_id = worker.spawn(timeout=2.0)
        with mock.patch.object(worker._composer, "render", side_effect=GridBoundsError("cell (0, 99) is outside")):
            with self.assertLogs("linescope_core.render_worker", "ERROR"):
                worker.submit_sample(series_id, 5.0)
                worker.join(timeout=2.0)
        self.assertFalse(worker.is_alive())
        self.assertIsInstance(worker.last_error, GridBoundsError)
        with self.assertRaises(RuntimeError):
            worker.spawn(timeout=1.0)


if __name__ == "__main__":
    unittest.main()
