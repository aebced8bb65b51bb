"""Request and domain models for chat endpoints."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatRole(str, Enum):
    """Roles a rendered conversation turn can have."""

    USER = "user"
    ASSISTANT = "assistant"
    ERROR = "error"


# =============================================================================
# CITATIONS
# =============================================================================


class ReferenceFile(BaseModel):
    """Source file a reference points at."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = Field(default=None, description="Stable file identifier")
    name: str = Field(default="", description="Display name of the file")
    signed_url: Optional[str] = Field(
        default=None, description="Direct, time-limited download link"
    )


class Highlight(BaseModel):
    """Excerpt of the source that supports a citation."""

    model_config = ConfigDict(extra="ignore")

    type: Optional[str] = None
    content: str = ""


class Reference(BaseModel):
    """One piece of supporting evidence for a citation."""

    model_config = ConfigDict(extra="ignore")

    file: ReferenceFile
    pages: list[int] = Field(default_factory=list)
    highlight: Optional[Highlight] = None

    @property
    def sorted_pages(self) -> list[int]:
        return sorted(set(self.pages))


class Citation(BaseModel):
    """A pointer from a character offset in the response to its sources."""

    model_config = ConfigDict(extra="ignore")

    position: int = Field(..., description="Character offset into the final content")
    references: list[Reference] = Field(default_factory=list)


class ChatMessage(BaseModel):
    """A single conversation turn as shown to the user."""

    role: ChatRole
    content: str = ""
    citations: list[Citation] = Field(default_factory=list)


# =============================================================================
# REQUESTS
# =============================================================================


class InboundMessage(BaseModel):
    """
    A message as posted by the client.

    Clients send back whole conversation turns, including fields such as
    ``citations`` that the upstream service rejects, so extras are accepted
    here and dropped by ``to_upstream``.
    """

    model_config = ConfigDict(extra="allow")

    role: str
    content: str = ""

    def to_upstream(self) -> dict[str, Any]:
        """Return only the fields the upstream service accepts."""
        return {"role": self.role, "content": self.content}


class ChatRequest(BaseModel):
    """Request model for the streaming chat endpoint."""

    messages: list[InboundMessage] = Field(
        ..., description="Conversation history, oldest first"
    )

    def upstream_messages(self) -> list[dict[str, Any]]:
        """Conversation history stripped down to ``{role, content}``."""
        return [message.to_upstream() for message in self.messages]
