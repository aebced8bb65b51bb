"""Outbound sinks the stream bridge writes frames into."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import AsyncIterator, Protocol

logger = logging.getLogger(__name__)


class SinkState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class SinkClosedError(RuntimeError):
    """Raised when writing to or closing a sink that is already closed."""


class EventSink(Protocol):
    """Destination for framed downstream events."""

    @property
    def state(self) -> SinkState: ...

    def write(self, frame: str) -> None: ...

    def close(self) -> None: ...


_CLOSE = object()


class QueueSink:
    """
    Sink backed by an unbounded asyncio queue.

    The HTTP response iterates the sink while the bridge writes into it.
    When the consumer stops iterating early (client disconnect) the sink
    transitions to CLOSED, so later writes raise ``SinkClosedError``.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._state = SinkState.OPEN

    @property
    def state(self) -> SinkState:
        return self._state

    def write(self, frame: str) -> None:
        if self._state is SinkState.CLOSED:
            raise SinkClosedError("Cannot write to a closed sink")
        self._queue.put_nowait(frame)

    def close(self) -> None:
        if self._state is SinkState.CLOSED:
            raise SinkClosedError("Sink is already closed")
        self._state = SinkState.CLOSED
        self._queue.put_nowait(_CLOSE)

    async def __aiter__(self) -> AsyncIterator[str]:
        try:
            while True:
                frame = await self._queue.get()
                if frame is _CLOSE:
                    return
                yield frame
        finally:
            if self._state is SinkState.OPEN:
                logger.info("Stream consumer disconnected before the stream closed")
                self._state = SinkState.CLOSED
