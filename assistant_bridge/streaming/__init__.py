"""SSE streaming utilities for the assistant bridge."""

from assistant_bridge.streaming.bridge import StreamBridge, StreamPhase, bridge
from assistant_bridge.streaming.consumer import AssistantMessageBuilder, parse_sse_frames
from assistant_bridge.streaming.error_unwrap import extract_error_message
from assistant_bridge.streaming.event_transformer import transform_item
from assistant_bridge.streaming.sink import EventSink, QueueSink, SinkClosedError, SinkState
from assistant_bridge.streaming.sse_events import (
    SSE_HEADERS,
    SSE_MEDIA_TYPE,
    ErrorData,
    SSEEvent,
    SSEEventType,
)

__all__ = [
    "SSE_HEADERS",
    "SSE_MEDIA_TYPE",
    "AssistantMessageBuilder",
    "ErrorData",
    "EventSink",
    "QueueSink",
    "SSEEvent",
    "SSEEventType",
    "SinkClosedError",
    "SinkState",
    "StreamBridge",
    "StreamPhase",
    "bridge",
    "extract_error_message",
    "parse_sse_frames",
    "transform_item",
]
