from __future__ import annotations

import asyncio
from dataclasses import dataclass, fields
import logging

from linescope_core.config import PlotterConfig
from linescope_core.lines import FramingError, parse_sample, read_lines, stream_limit
from linescope_core.plotters import PlotterFactory

LOGGER = logging.getLogger(__name__)


@dataclass
class IngestStats:
    connections: int = 0
    lines: int = 0
    samples: int = 0
    dropped_lines: int = 0
    framing_errors: int = 0

    def add(self, other: "IngestStats") -> None:
        for f in fields(self):
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))


class PlotServer:
    """Accepts TCP producers and feeds every parsed sample to a plotter handle."""

    def __init__(self, config: PlotterConfig, factory: PlotterFactory) -> None:
        self.config = config
        self.factory = factory
        self.stats = IngestStats()
        self._server: asyncio.Server | None = None
        self._writers: set[asyncio.StreamWriter] = set()
        # Single-connection mode serves producers one at a time, in accept order.
        self._single = asyncio.Lock()

    @property
    def address(self) -> tuple[str, int]:
        if self._server is None or not self._server.sockets:
            raise RuntimeError("server is not listening")
        host, port = self._server.sockets[0].getsockname()[:2]
        return host, port

    async def start(self) -> None:
        if self._server is not None:
            return
        self.factory.start()
        self._server = await asyncio.start_server(
            self._handle_connection,
            self.config.host,
            self.config.port,
            limit=stream_limit(self.config.max_line_length),
        )
        host, port = self.address
        LOGGER.info(
            "listening on %s:%d renderer=%s multiple_connections=%s",
            host,
            port,
            self.factory.kind,
            self.config.multiple_connections,
        )

    async def serve_forever(self) -> None:
        """Serve until cancelled or until the renderer stops; a renderer failure is re-raised."""
        await self.start()
        assert self._server is not None
        serving = asyncio.ensure_future(self._server.serve_forever())
        stopped = asyncio.ensure_future(self.factory.wait_stopped())
        try:
            done, _ = await asyncio.wait({serving, stopped}, return_when=asyncio.FIRST_COMPLETED)
            if stopped in done:
                error = stopped.result()
                if error is not None:
                    raise RuntimeError("render worker failed") from error
        finally:
            for task in (serving, stopped):
                task.cancel()
            await self.close()
            await asyncio.gather(serving, stopped, return_exceptions=True)

    async def close(self) -> None:
        if self._server is not None:
            self._server.close()
            for writer in list(self._writers):
                writer.close()
            await self._server.wait_closed()
            self._server = None
        self.factory.close()
        LOGGER.info(
            "server closed: connections=%d samples=%d dropped_lines=%d framing_errors=%d",
            self.stats.connections,
            self.stats.samples,
            self.stats.dropped_lines,
            self.stats.framing_errors,
        )

    async def _handle_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._writers.add(writer)
        try:
            if self.config.multiple_connections:
                await self._process(reader, writer)
            else:
                async with self._single:
                    await self._process(reader, writer)
        finally:
            self._writers.discard(writer)
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError as exc:
                LOGGER.debug("connection close raised: %s", exc)

    async def _process(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        peer = writer.get_extra_info("peername")
        conn = IngestStats(connections=1)
        LOGGER.info("connection opened: %s", peer)
        try:
            plotter = await self.factory.spawn_async()
            async for line in read_lines(reader, self.config.max_line_length):
                conn.lines += 1
                value = parse_sample(line)
                if value is None:
                    conn.dropped_lines += 1
                    continue
                plotter.update(value)
                conn.samples += 1
        except FramingError as exc:
            conn.framing_errors += 1
            LOGGER.warning("dropping connection %s: %s", peer, exc)
        except ConnectionError as exc:
            LOGGER.info("connection %s lost: %s", peer, exc)
        except RuntimeError as exc:
            # The renderer stopped; serve_forever reports the cause.
            LOGGER.warning("dropping connection %s: %s", peer, exc)
        finally:
            self.stats.add(conn)
            LOGGER.info("connection closed: %s", peer)
            LOGGER.debug(
                "connection %s stats: lines=%d samples=%d dropped_lines=%d",
                peer,
                conn.lines,
                conn.samples,
                conn.dropped_lines,
            )
