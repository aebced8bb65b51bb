"""Pydantic models."""

from assistant_bridge.models.chat import (
    ChatMessage,
    ChatRequest,
    ChatRole,
    Citation,
    Highlight,
    InboundMessage,
    Reference,
    ReferenceFile,
)

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ChatRole",
    "Citation",
    "Highlight",
    "InboundMessage",
    "Reference",
    "ReferenceFile",
]
