"""Client for the upstream assistant service's chat and file endpoints."""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Optional
from urllib.parse import quote

import httpx

from assistant_bridge.config import Settings

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """
    The assistant service answered with an error status.

    ``message`` is the raw response body. It is usually a JSON error
    envelope, which ``extract_error_message`` reduces to readable text.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AssistantClient:
    """Talks to one named assistant over its REST API."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        if not settings.pinecone_assistant_name:
            raise ValueError("pinecone_assistant_name is required")
        self.settings = settings
        self.http_client = http_client
        self.assistant_name = settings.pinecone_assistant_name
        self.base_url = settings.pinecone_assistant_host.rstrip("/")

    def _headers(self) -> dict[str, str]:
        headers = {
            "X-Pinecone-API-Version": self.settings.pinecone_api_version,
        }
        if self.settings.pinecone_api_key:
            headers["Api-Key"] = self.settings.pinecone_api_key
        return headers

    @property
    def chat_url(self) -> str:
        return f"{self.base_url}/assistant/chat/{quote(self.assistant_name, safe='')}"

    def file_url(self, file_id: str) -> str:
        return (
            f"{self.base_url}/assistant/files/"
            f"{quote(self.assistant_name, safe='')}/{quote(file_id, safe='')}"
        )

    async def chat_stream(
        self,
        messages: list[dict[str, Any]],
        model: Optional[str] = None,
    ) -> AsyncIterator[str]:
        """
        Send the conversation and stream back the raw response lines.

        Each yielded item is one non-empty line of the event stream, usually
        ``data: {...}``; decoding is left to the event transformer.

        Raises:
            UpstreamError: if the service answers with an error status
            httpx.HTTPError: on transport failures
        """
        payload = {
            "messages": messages,
            "stream": True,
            "model": model or self.settings.assistant_model,
        }
        logger.info(
            f"Opening upstream chat stream ({len(messages)} messages)",
            extra={"assistant": self.assistant_name, "model": payload["model"]},
        )

        async with self.http_client.stream(
            "POST", self.chat_url, json=payload, headers=self._headers()
        ) as response:
            if response.is_error:
                body = (await response.aread()).decode("utf-8", errors="replace")
                raise UpstreamError(body or response.reason_phrase, response.status_code)

            async for line in response.aiter_lines():
                if line.strip():
                    yield line

    async def describe_file(self, file_id: str) -> dict[str, Any]:
        """
        Fetch a file's description, including a freshly signed download URL.

        Raises:
            UpstreamError: if the service answers with an error status
        """
        response = await self.http_client.get(
            self.file_url(file_id),
            params={"include_url": "true"},
            headers=self._headers(),
        )
        if response.is_error:
            raise UpstreamError(response.text or response.reason_phrase, response.status_code)
        return response.json()
