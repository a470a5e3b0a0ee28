from __future__ import annotations

import sys
from typing import Protocol


CLEAR_SCREEN = b"\x1b[2J\x1b[1;1H"


class ByteSink(Protocol):
    def write(self, data: bytes) -> object:
        ...

    def flush(self) -> None:
        ...


class BufferSink:
    """In-memory sink that records every write; used headless and in tests."""

    def __init__(self) -> None:
        self.chunks: list[bytes] = []
        self.flushes = 0

    def write(self, data: bytes) -> int:
        self.chunks.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        self.flushes += 1

    def getvalue(self) -> bytes:
        return b"".join(self.chunks)

    def text(self) -> str:
        return self.getvalue().decode("utf-8")


def terminal_sink() -> ByteSink:
    return sys.stdout.buffer
