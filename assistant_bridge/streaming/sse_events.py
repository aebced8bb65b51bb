"""SSE Event models for the normalized downstream stream."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}
SSE_MEDIA_TYPE = "text/event-stream"


class SSEEventType(str, Enum):
    """Types of SSE events emitted by the streaming endpoint."""

    MESSAGE_START = "message_start"
    CONTENT_CHUNK = "content_chunk"
    CITATION = "citation"
    MESSAGE_END = "message_end"
    ERROR = "error"


TERMINAL_EVENT_TYPES = frozenset({SSEEventType.MESSAGE_END.value, SSEEventType.ERROR.value})


class ErrorData(BaseModel):
    """Data for error events."""

    type: SSEEventType = SSEEventType.ERROR
    message: str


class SSEEvent(BaseModel):
    """
    One downstream frame.

    ``data`` is the event object itself, including its ``type`` field; the
    frame carries no separate ``event:`` line.
    """

    data: Any

    def to_dict(self) -> dict[str, Any]:
        if hasattr(self.data, "model_dump"):
            return self.data.model_dump(mode="json")
        if isinstance(self.data, dict):
            return self.data
        return {"value": self.data}

    def to_sse_string(self) -> str:
        """Format as SSE string for streaming response."""
        data_str = json.dumps(self.to_dict())
        return f"data: {data_str}\n\n"

    @property
    def event_type(self) -> Any:
        """The event's ``type``, read without serializing the payload."""
        if isinstance(self.data, dict):
            kind = self.data.get("type")
        else:
            kind = getattr(self.data, "type", None)
        return kind.value if isinstance(kind, Enum) else kind


def error_event(message: str) -> SSEEvent:
    """Create an error event."""
    return SSEEvent(data=ErrorData(message=message))
