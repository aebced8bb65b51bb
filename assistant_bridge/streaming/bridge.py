"""Bridges an upstream event sequence into a single downstream SSE stream."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, AsyncIterable

from assistant_bridge.streaming.error_unwrap import extract_error_message
from assistant_bridge.streaming.event_transformer import transform_item
from assistant_bridge.streaming.sink import EventSink, SinkClosedError, SinkState
from assistant_bridge.streaming.sse_events import SSEEvent, SSEEventType, error_event

logger = logging.getLogger(__name__)


class StreamPhase(str, Enum):
    """Lifecycle of one bridged response."""

    STREAMING = "streaming"  # forwarding upstream events
    TERMINATED = "terminated"  # terminal frame produced; nothing more to forward
    CLOSED = "closed"  # sink close attempted; bridge is done


class StreamBridge:
    """
    Owns one outbound sink for the lifetime of one response.

    Consumes the upstream events in order, forwards each transformed event
    as one frame, and closes the sink exactly once: after the first
    ``message_end`` frame, after an ``error`` frame, or when the upstream
    sequence runs out.

    A sink that is already closed is tolerated once the stream has
    terminated (the consumer simply hung up). A sink that closes while the
    stream is still running is a failure and goes through the error path.
    """

    def __init__(self, sink: EventSink) -> None:
        self.sink = sink
        self.phase = StreamPhase.STREAMING
        self.frames_written = 0

    async def run(self, events: AsyncIterable[Any]) -> None:
        """Forward ``events`` to the sink until a terminal condition."""
        try:
            async for item in events:
                event = transform_item(item)
                if event is None:
                    continue

                if event.event_type == SSEEventType.MESSAGE_END.value:
                    self.phase = StreamPhase.TERMINATED

                if not self._write(event) or self.phase is StreamPhase.TERMINATED:
                    break
            else:
                logger.info("Upstream stream ended without message_end; closing")

        except asyncio.CancelledError:
            logger.info("Stream bridge cancelled")
            self.phase = StreamPhase.TERMINATED
            self._close()
            await _release(events)
            raise

        except Exception as e:
            logger.error(f"Stream error: {e}", exc_info=True)
            self.phase = StreamPhase.TERMINATED
            self._write(error_event(extract_error_message(e)))

        self._close()
        await _release(events)

    def _write(self, event: SSEEvent) -> bool:
        """
        Write one frame.

        Returns:
            False if the sink was already closed after termination and the
            frame was dropped, True otherwise.

        Raises:
            SinkClosedError: if the sink closed before the stream terminated
        """
        if self.sink.state is SinkState.CLOSED:
            if self.phase is StreamPhase.STREAMING:
                raise SinkClosedError("Sink closed before the stream terminated")
            logger.debug("Sink already closed; dropping frame after termination")
            return False

        try:
            self.sink.write(event.to_sse_string())
        except SinkClosedError:
            if self.phase is StreamPhase.STREAMING:
                raise
            logger.debug("Sink closed during write after termination")
            return False

        self.frames_written += 1
        return True

    def _close(self) -> None:
        """Close the sink; later calls and already-closed sinks are no-ops."""
        if self.phase is StreamPhase.CLOSED:
            return
        self.phase = StreamPhase.CLOSED
        if self.sink.state is SinkState.CLOSED:
            return
        try:
            self.sink.close()
        except SinkClosedError:
            logger.debug("Sink was closed concurrently")


async def bridge(events: AsyncIterable[Any], sink: EventSink) -> None:
    """Run a :class:`StreamBridge` over ``events`` writing into ``sink``."""
    await StreamBridge(sink).run(events)


async def _release(events: AsyncIterable[Any]) -> None:
    """Close an upstream async generator left unfinished by an early stop."""
    aclose = getattr(events, "aclose", None)
    if aclose is None:
        return
    try:
        await aclose()
    except Exception as e:
        logger.warning(f"Failed to close upstream stream: {e}")
