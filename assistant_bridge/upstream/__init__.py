"""Upstream assistant service access."""

from assistant_bridge.upstream.client import AssistantClient, UpstreamError
from assistant_bridge.upstream.http_client import close_http_client, get_http_client

__all__ = [
    "AssistantClient",
    "UpstreamError",
    "close_http_client",
    "get_http_client",
]
