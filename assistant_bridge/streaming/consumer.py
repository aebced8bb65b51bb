"""Consumes the downstream stream into conversation messages."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Iterator, Optional

from pydantic import ValidationError

from assistant_bridge.models.chat import ChatMessage, ChatRole, Citation
from assistant_bridge.streaming.error_unwrap import DEFAULT_ERROR_MESSAGE
from assistant_bridge.streaming.sse_events import SSEEventType, TERMINAL_EVENT_TYPES

logger = logging.getLogger(__name__)


def parse_sse_frames(body: str | Iterable[str]) -> Iterator[dict[str, Any]]:
    """
    Yield the event objects carried by ``data:`` frames.

    Accepts a whole event-stream body or an iterable of already-split lines.
    Lines that are not data frames, and frames that are not JSON objects,
    are skipped.
    """
    lines = body.splitlines() if isinstance(body, str) else body
    for line in lines:
        line = line.strip()
        if not line.startswith("data:"):
            continue
        payload = line[len("data:"):].strip()
        try:
            event = json.loads(payload)
        except ValueError:
            logger.warning(f"Skipping undecodable frame: {payload[:200]}")
            continue
        if isinstance(event, dict):
            yield event


class AssistantMessageBuilder:
    """
    Builds the in-progress assistant message from downstream events.

    Content deltas and citations are appended as they arrive until a
    terminal event; afterwards the message is frozen and further events are
    ignored. An ``error`` event produces a separate error message.
    """

    def __init__(self) -> None:
        self.message = ChatMessage(role=ChatRole.ASSISTANT)
        self.message_id: Optional[str] = None
        self.finish_reason: Optional[str] = None
        self.usage: Optional[dict[str, Any]] = None
        self.error: Optional[ChatMessage] = None
        self.finished = False

    def apply(self, event: dict[str, Any]) -> None:
        if self.finished:
            return

        kind = event.get("type")
        if kind == SSEEventType.MESSAGE_START.value:
            self.message_id = event.get("id")
        elif kind == SSEEventType.CONTENT_CHUNK.value:
            delta = event.get("delta")
            if isinstance(delta, dict):
                self.message.content += delta.get("content") or ""
        elif kind == SSEEventType.CITATION.value:
            self._add_citation(event.get("citation"))
        elif kind == SSEEventType.MESSAGE_END.value:
            self.finish_reason = event.get("finish_reason")
            self.usage = event.get("usage")
        elif kind == SSEEventType.ERROR.value:
            self.error = ChatMessage(
                role=ChatRole.ERROR,
                content=event.get("message") or DEFAULT_ERROR_MESSAGE,
            )

        if kind in TERMINAL_EVENT_TYPES:
            self.finished = True

    def apply_all(self, events: Iterable[dict[str, Any]]) -> "AssistantMessageBuilder":
        for event in events:
            self.apply(event)
        return self

    def _add_citation(self, payload: Any) -> None:
        if payload is None:
            return
        try:
            self.message.citations.append(Citation.model_validate(payload))
        except ValidationError as e:
            logger.warning(f"Ignoring malformed citation: {e}")

    def messages(self) -> list[ChatMessage]:
        """Messages to append to the conversation for this response."""
        result: list[ChatMessage] = []
        if self.message.content or self.message.citations or self.error is None:
            result.append(self.message)
        if self.error is not None:
            result.append(self.error)
        return result
