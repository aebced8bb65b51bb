"""Shared fixtures for assistant-bridge tests."""

from __future__ import annotations

from typing import Any, AsyncIterator, Iterable, Optional

import pytest
from fastapi.testclient import TestClient

from assistant_bridge.config import Settings
from assistant_bridge.models import Citation, Highlight, Reference, ReferenceFile
from assistant_bridge.streaming import SinkClosedError, SinkState, parse_sse_frames


def make_settings(**overrides: Any) -> Settings:
    """Settings that never read the developer's .env file."""
    values: dict[str, Any] = {
        "pinecone_api_key": "test-key",
        "pinecone_assistant_name": "test-assistant",
        "pinecone_assistant_host": "https://assistant.test",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_citation(
    position: int,
    file_id: Optional[str] = "file-1",
    name: str = "handbook.pdf",
    pages: Iterable[int] = (1,),
    highlight: Optional[str] = None,
    signed_url: Optional[str] = None,
) -> Citation:
    return Citation(
        position=position,
        references=[
            Reference(
                file=ReferenceFile(id=file_id, name=name, signed_url=signed_url),
                pages=list(pages),
                highlight=Highlight(type="text", content=highlight) if highlight else None,
            )
        ],
    )


async def agen(items: Iterable[Any], error: Optional[BaseException] = None) -> AsyncIterator[Any]:
    """Async generator over ``items`` that optionally raises at the end."""
    for item in items:
        yield item
    if error is not None:
        raise error


class RecordingSink:
    """In-memory sink that records frames and close calls."""

    def __init__(self, hang_up_after: Optional[int] = None, closed: bool = False) -> None:
        self.frames: list[str] = []
        self.close_calls = 0
        self.hang_up_after = hang_up_after
        self._state = SinkState.CLOSED if closed else SinkState.OPEN

    @property
    def state(self) -> SinkState:
        return self._state

    def write(self, frame: str) -> None:
        if self._state is SinkState.CLOSED:
            raise SinkClosedError("closed")
        self.frames.append(frame)
        if self.hang_up_after is not None and len(self.frames) >= self.hang_up_after:
            self._state = SinkState.CLOSED

    def close(self) -> None:
        self.close_calls += 1
        if self._state is SinkState.CLOSED:
            raise SinkClosedError("closed")
        self._state = SinkState.CLOSED

    @property
    def events(self) -> list[dict[str, Any]]:
        return list(parse_sse_frames("".join(self.frames)))


class FakeAssistantClient:
    """Stands in for AssistantClient in route tests."""

    def __init__(
        self,
        items: Iterable[Any] = (),
        error: Optional[BaseException] = None,
        files: Optional[dict[str, Any]] = None,
    ) -> None:
        self.items = list(items)
        self.error = error
        self.files = files or {}
        self.received: list[list[dict[str, Any]]] = []

    async def chat_stream(self, messages, model=None):
        self.received.append(messages)
        async for item in agen(self.items, self.error):
            yield item

    async def describe_file(self, file_id: str) -> dict[str, Any]:
        result = self.files[file_id]
        if isinstance(result, BaseException):
            raise result
        return result


STANDARD_EVENTS = [
    {"type": "message_start", "id": "msg-1", "model": "gpt-4.1", "role": "assistant"},
    {"type": "content_chunk", "id": "msg-1", "delta": {"content": "Hello"}},
    {"type": "content_chunk", "id": "msg-1", "delta": {"content": " world"}},
    {
        "type": "citation",
        "id": "msg-1",
        "citation": {
            "position": 11,
            "references": [{"file": {"id": "file-1", "name": "handbook.pdf"}, "pages": [2]}],
        },
    },
    {
        "type": "message_end",
        "id": "msg-1",
        "finish_reason": "stop",
        "usage": {"prompt_tokens": 10, "completion_tokens": 2, "total_tokens": 12},
    },
]


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def app_client():
    """Build a TestClient with settings and upstream client overridden."""
    from assistant_bridge.api.dependencies import get_assistant_client
    from assistant_bridge.config import get_settings
    from assistant_bridge.main import app

    def _build(settings: Settings, assistant: Optional[FakeAssistantClient] = None) -> TestClient:
        app.dependency_overrides[get_settings] = lambda: settings
        if assistant is not None:
            app.dependency_overrides[get_assistant_client] = lambda: assistant
        return TestClient(app)

    yield _build
    app.dependency_overrides.clear()
