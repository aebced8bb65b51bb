"""Streaming chat endpoint with SSE for normalized assistant responses."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncGenerator, AsyncIterable

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError

from assistant_bridge.api.dependencies import AssistantClientDep, SettingsDep
from assistant_bridge.models.chat import ChatRequest
from assistant_bridge.streaming import SSE_HEADERS, SSE_MEDIA_TYPE, QueueSink, StreamBridge

logger = logging.getLogger(__name__)
router = APIRouter(tags=["chat"])


def error_response(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def stream_frames(
    bridge: StreamBridge, sink: QueueSink, events: AsyncIterable[Any]
) -> AsyncGenerator[str, None]:
    """
    Run ``bridge`` over ``events`` and yield the frames it writes to ``sink``.

    The bridge task starts only once the response body is being sent, so a
    client that leaves earlier never opens the upstream stream. If the
    client disconnects mid-stream, the sink is marked closed and the bridge
    task is cancelled.
    """
    task = asyncio.create_task(bridge.run(events))
    try:
        async for frame in sink:
            yield frame
    finally:
        if not task.done():
            logger.info("Cancelling stream bridge after consumer disconnect")
            task.cancel()


@router.post("/chat")
async def chat_stream(
    req: Request,
    settings: SettingsDep,
    client: AssistantClientDep,
):
    """
    Stream an assistant response via Server-Sent Events.

    The request body carries the conversation as ``messages``; only
    ``role`` and ``content`` of each message are forwarded upstream.

    ## Event Types

    - `message_start`: response metadata (`id`, `model`, `role`)
    - `content_chunk`: partial response text in `delta.content`
    - `citation`: a citation with its position and references
    - `message_end`: terminal event with `finish_reason` and `usage`
    - `error`: terminal event with a readable `message`

    Unknown upstream event types are forwarded unchanged.
    """
    try:
        request = ChatRequest.model_validate(await req.json())
    except ValidationError as e:
        logger.warning(f"Invalid chat request: {e}")
        return error_response(str(e), status_code=400)
    except Exception as e:
        logger.error(f"API error: {e}", exc_info=True)
        return error_response(str(e) or "Internal server error")

    missing = settings.missing_config_message()
    if missing or client is None:
        logger.error(f"Chat request rejected: {missing}")
        return error_response(missing or "Assistant client unavailable")

    sink = QueueSink()
    bridge = StreamBridge(sink)
    events = client.chat_stream(request.upstream_messages(), model=settings.assistant_model)
    logger.info(f"Chat stream opened ({len(request.messages)} messages)")
    return StreamingResponse(
        stream_frames(bridge, sink, events),
        media_type=SSE_MEDIA_TYPE,
        headers=SSE_HEADERS,
    )
