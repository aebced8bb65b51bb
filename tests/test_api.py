"""Tests for the HTTP endpoints."""

import asyncio

import httpx

from assistant_bridge.api.routes.chat_stream import stream_frames
from assistant_bridge.streaming import QueueSink, StreamBridge, StreamPhase, parse_sse_frames
from assistant_bridge.upstream import UpstreamError
from conftest import STANDARD_EVENTS, FakeAssistantClient, make_settings


def _chat(client, body):
    response = client.post("/chat", json=body)
    return response, list(parse_sse_frames(response.text))


class TestChatEndpoint:
    def test_missing_assistant_name_returns_500(self, app_client):
        client = app_client(make_settings(pinecone_assistant_name=None))

        response = client.post("/chat", json={"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 500
        assert response.json() == {"error": "Missing PINECONE_ASSISTANT_NAME"}

    def test_streams_normalized_events(self, app_client, settings):
        assistant = FakeAssistantClient(STANDARD_EVENTS)
        client = app_client(settings, assistant)

        response, events = _chat(client, {"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert [e["type"] for e in events] == [
            "message_start",
            "content_chunk",
            "content_chunk",
            "citation",
            "message_end",
        ]
        assert events[1] == {"type": "content_chunk", "delta": {"content": "Hello"}}
        assert events[-1]["usage"]["total_tokens"] == 12

    def test_forwards_only_role_and_content(self, app_client, settings):
        assistant = FakeAssistantClient(STANDARD_EVENTS)
        client = app_client(settings, assistant)

        body = {
            "messages": [
                {"role": "user", "content": "first"},
                {
                    "role": "assistant",
                    "content": "reply",
                    "citations": [{"position": 1, "references": []}],
                    "id": "msg-0",
                },
            ]
        }
        _chat(client, body)

        assert assistant.received == [
            [
                {"role": "user", "content": "first"},
                {"role": "assistant", "content": "reply"},
            ]
        ]

    def test_upstream_failure_becomes_error_frame(self, app_client, settings):
        error = UpstreamError('{"error": {"message": "Rate limited"}}', status_code=429)
        assistant = FakeAssistantClient(STANDARD_EVENTS[:2], error=error)
        client = app_client(settings, assistant)

        response, events = _chat(client, {"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 200
        assert [e["type"] for e in events] == ["message_start", "content_chunk", "error"]
        assert events[-1]["message"] == "Rate limited"

    def test_missing_messages_is_rejected(self, app_client, settings):
        client = app_client(settings, FakeAssistantClient())

        response = client.post("/chat", json={"conversation": []})

        assert response.status_code == 400
        assert "error" in response.json()

    def test_invalid_json_body_returns_500(self, app_client, settings):
        client = app_client(settings, FakeAssistantClient())

        response = client.post(
            "/chat", content=b"{not json", headers={"content-type": "application/json"}
        )

        assert response.status_code == 500
        assert "error" in response.json()


class TestFileDownload:
    def test_redirects_to_signed_url(self, app_client, settings):
        assistant = FakeAssistantClient(
            files={"file-1": {"id": "file-1", "signed_url": "https://storage.test/f?sig=1"}}
        )
        client = app_client(settings, assistant)

        response = client.get("/files/file-1/download", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "https://storage.test/f?sig=1"

    def test_unknown_file_returns_404(self, app_client, settings):
        error = UpstreamError('{"error": {"message": "File not found"}}', status_code=404)
        client = app_client(settings, FakeAssistantClient(files={"gone": error}))

        response = client.get("/files/gone/download", follow_redirects=False)

        assert response.status_code == 404
        assert response.json() == {"error": "File not found"}

    def test_file_without_signed_url_returns_404(self, app_client, settings):
        client = app_client(settings, FakeAssistantClient(files={"f": {"id": "f"}}))

        response = client.get("/files/f/download", follow_redirects=False)

        assert response.status_code == 404

    def test_upstream_error_returns_502(self, app_client, settings):
        error = UpstreamError("service unavailable", status_code=503)
        client = app_client(settings, FakeAssistantClient(files={"f": error}))

        response = client.get("/files/f/download", follow_redirects=False)

        assert response.status_code == 502
        assert response.json() == {"error": "service unavailable"}

    def test_transport_error_returns_502(self, app_client, settings):
        error = httpx.ConnectError("connection refused")
        client = app_client(settings, FakeAssistantClient(files={"f": error}))

        response = client.get("/files/f/download", follow_redirects=False)

        assert response.status_code == 502

    def test_missing_config_returns_500(self, app_client):
        client = app_client(make_settings(pinecone_assistant_name=None))

        response = client.get("/files/f/download", follow_redirects=False)

        assert response.status_code == 500
        assert response.json() == {"error": "Missing PINECONE_ASSISTANT_NAME"}


class TestServiceEndpoints:
    def test_root(self, app_client, settings):
        response = app_client(settings).get("/")
        assert response.status_code == 200
        assert response.json()["service"] == "assistant-bridge"

    def test_health_and_live(self, app_client, settings):
        client = app_client(settings)
        assert client.get("/health").json() == {"status": "healthy"}
        assert client.get("/live").json() == {"status": "alive"}

    def test_ready_when_configured(self, app_client, settings):
        assert app_client(settings).get("/ready").json() == {"status": "ready"}

    def test_not_ready_without_assistant_name(self, app_client):
        client = app_client(make_settings(pinecone_assistant_name=None))
        body = client.get("/ready").json()
        assert body["status"] == "not_ready"
        assert body["reason"] == "Missing PINECONE_ASSISTANT_NAME"


class TestStreamFrames:
    async def test_upstream_is_not_opened_before_iteration(self):
        assistant = FakeAssistantClient(STANDARD_EVENTS)
        sink = QueueSink()
        frames = stream_frames(StreamBridge(sink), sink, assistant.chat_stream([]))

        await asyncio.sleep(0)
        assert assistant.received == []
        await frames.aclose()
        assert assistant.received == []

    async def test_yields_all_frames(self):
        assistant = FakeAssistantClient(STANDARD_EVENTS)
        sink = QueueSink()
        frames = stream_frames(StreamBridge(sink), sink, assistant.chat_stream([]))

        body = "".join([frame async for frame in frames])

        assert [e["type"] for e in parse_sse_frames(body)][-1] == "message_end"
        assert assistant.received == [[]]

    async def test_disconnect_cancels_bridge_and_releases_upstream(self):
        released = []

        async def upstream():
            try:
                yield STANDARD_EVENTS[0]
                await asyncio.Event().wait()
            finally:
                released.append(True)

        sink = QueueSink()
        bridge = StreamBridge(sink)
        frames = stream_frames(bridge, sink, upstream())

        assert '"message_start"' in await frames.__anext__()
        await frames.aclose()
        for _ in range(5):
            await asyncio.sleep(0)

        assert released == [True]
        assert bridge.phase is StreamPhase.CLOSED
