from __future__ import annotations

import asyncio
import math
from typing import AsyncIterator

from linescope_core.config import DEFAULT_MAX_LINE_LENGTH


class FramingError(ValueError):
    """A line could not be framed: too long, or not valid UTF-8."""


def stream_limit(max_length: int) -> int:
    """StreamReader buffer limit that still finds the separator of a max-length CRLF line."""
    return max_length + 2


async def read_lines(reader: asyncio.StreamReader, max_length: int = DEFAULT_MAX_LINE_LENGTH) -> AsyncIterator[str]:
    """Yield newline-delimited lines until EOF; a trailing unterminated line is still yielded."""
    if max_length <= 0:
        raise ValueError("max_length must be > 0")
    while True:
        try:
            raw = await reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as exc:
            if exc.partial:
                yield _decode(exc.partial, max_length)
            return
        except asyncio.LimitOverrunError as exc:
            raise FramingError(f"line exceeds {max_length} bytes") from exc
        yield _decode(raw[:-1], max_length)


def parse_sample(line: str) -> float | None:
    """Parse one payload line; None for anything that is not a finite number."""
    try:
        value = float(line)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def _decode(raw: bytes, max_length: int) -> str:
    if raw.endswith(b"\r"):
        raw = raw[:-1]
    if len(raw) > max_length:
        raise FramingError(f"line exceeds {max_length} bytes")
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FramingError(f"line is not valid UTF-8: {exc.reason}") from exc
