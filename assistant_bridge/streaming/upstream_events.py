"""Typed view of the events emitted by the upstream assistant service."""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class MessageStart(BaseModel):
    """First event of a response."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["message_start"] = "message_start"
    id: Optional[str] = None
    model: Optional[str] = None
    role: Optional[str] = None


class ChunkDelta(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: Optional[str] = None


class ContentChunk(BaseModel):
    """
    A piece of response text.

    The text normally lives in ``delta.content``. Some upstream payloads carry
    it in a top-level ``content`` field instead; that fallback is observed
    behaviour, not a documented upstream contract.
    """

    model_config = ConfigDict(extra="ignore")

    type: Literal["content_chunk"] = "content_chunk"
    delta: Optional[ChunkDelta] = None
    content: Optional[str] = None

    @property
    def text(self) -> str:
        return (self.delta.content if self.delta else None) or self.content or ""


class CitationEvent(BaseModel):
    """A citation for the response being streamed."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["citation"] = "citation"
    citation: Any = None


class MessageEnd(BaseModel):
    """Terminal event of a response."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["message_end"] = "message_end"
    finish_reason: Optional[str] = None
    usage: Optional[dict[str, Any]] = None


class UnknownEvent(BaseModel):
    """Any event kind not listed above; forwarded verbatim."""

    payload: dict[str, Any] = Field(default_factory=dict)

    @property
    def type(self) -> Any:
        return self.payload.get("type")


UpstreamEvent = Union[MessageStart, ContentChunk, CitationEvent, MessageEnd, UnknownEvent]

_EVENT_MODELS: dict[str, type[BaseModel]] = {
    "message_start": MessageStart,
    "content_chunk": ContentChunk,
    "citation": CitationEvent,
    "message_end": MessageEnd,
}


def parse_upstream_event(data: dict[str, Any]) -> UpstreamEvent:
    """
    Build the typed event for a decoded upstream payload.

    Raises:
        pydantic.ValidationError: if a known event kind has malformed fields
    """
    kind = data.get("type")
    model = _EVENT_MODELS.get(kind) if isinstance(kind, str) else None
    if model is None:
        return UnknownEvent(payload=data)
    return model.model_validate(data)
