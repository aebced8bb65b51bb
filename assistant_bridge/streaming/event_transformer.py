"""Maps upstream assistant events to normalized downstream events."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from pydantic import ValidationError

from assistant_bridge.streaming.sse_events import SSEEvent, SSEEventType
from assistant_bridge.streaming.upstream_events import (
    CitationEvent,
    ContentChunk,
    MessageEnd,
    MessageStart,
    UnknownEvent,
    UpstreamEvent,
    parse_upstream_event,
)

logger = logging.getLogger(__name__)

_FRAME_LABEL_RE = re.compile(r"^data:\s*")


class MalformedEventError(ValueError):
    """An upstream item could not be decoded into an event object."""


def decode_upstream_item(item: Any) -> Optional[dict[str, Any]]:
    """
    Decode one upstream item into a plain event dict.

    Items arrive either as pre-serialized text (optionally prefixed with the
    ``data:`` framing label) or as already-structured objects.

    Returns:
        The event dict, or None for empty items that carry nothing.

    Raises:
        MalformedEventError: if the item cannot be decoded
    """
    if not item:
        return None

    if isinstance(item, bytes):
        item = item.decode("utf-8")

    if isinstance(item, str):
        text = _FRAME_LABEL_RE.sub("", item).strip()
        if not text:
            return None
        try:
            data = json.loads(text)
        except ValueError as e:
            raise MalformedEventError(f"Invalid JSON in upstream item: {e}") from e
    elif isinstance(item, dict):
        data = item
    elif hasattr(item, "model_dump"):
        data = item.model_dump()
    elif hasattr(item, "to_dict"):
        data = item.to_dict()
    else:
        raise MalformedEventError(f"Unsupported upstream item type: {type(item).__name__}")

    if not data:
        return None
    if not isinstance(data, dict):
        raise MalformedEventError(f"Upstream item is not an object: {data!r}")
    return data


def to_downstream(event: UpstreamEvent) -> SSEEvent:
    """Map a typed upstream event to its downstream SSE event."""
    if isinstance(event, MessageStart):
        return SSEEvent(data=event.model_dump(include={"type", "id", "model", "role"}))
    if isinstance(event, ContentChunk):
        return SSEEvent(
            data={
                "type": SSEEventType.CONTENT_CHUNK.value,
                "delta": {"content": event.text},
            }
        )
    if isinstance(event, CitationEvent):
        return SSEEvent(
            data={"type": SSEEventType.CITATION.value, "citation": event.citation}
        )
    if isinstance(event, MessageEnd):
        return SSEEvent(data=event.model_dump(include={"type", "finish_reason", "usage"}))
    if isinstance(event, UnknownEvent):
        return SSEEvent(data=event.payload)
    raise TypeError(f"Unhandled upstream event: {type(event).__name__}")


def transform_item(item: Any) -> Optional[SSEEvent]:
    """
    Transform one upstream item into zero or one downstream events.

    Malformed items are logged and skipped so a single bad chunk does not
    abort the stream.
    """
    try:
        data = decode_upstream_item(item)
        if data is None:
            return None
        return to_downstream(parse_upstream_event(data))
    except (MalformedEventError, ValidationError) as e:
        logger.warning(f"Skipping malformed upstream item: {e}", extra={"item": repr(item)[:500]})
        return None
