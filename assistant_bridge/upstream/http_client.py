"""
HTTP Client Factory - shared HTTP/1.1 client for upstream assistant calls.

Chat responses are long-lived streams, so the client uses a long read
timeout and a short keepalive expiry. HTTP/2 stays disabled; proxies in
front of the assistant service drop idle HTTP/2 connections mid-stream.

Usage:
    from assistant_bridge.upstream.http_client import get_http_client

    client = AssistantClient(settings, http_client=get_http_client())
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from assistant_bridge.config import get_settings

logger = logging.getLogger(__name__)

# Module-level client instance (lazy initialization)
_http_client: Optional[httpx.AsyncClient] = None


def get_connection_limits() -> httpx.Limits:
    """Connection pool limits for concurrent chat streams."""
    return httpx.Limits(
        max_keepalive_connections=20,
        max_connections=100,
        keepalive_expiry=30.0,  # Force-close idle connections
    )


def get_http_client() -> httpx.AsyncClient:
    """
    Get the shared async HTTP client.

    Returns:
        Shared httpx.AsyncClient instance
    """
    global _http_client

    if _http_client is None:
        settings = get_settings()
        logger.info("Creating HTTP/1.1 client for upstream assistant calls")
        _http_client = httpx.AsyncClient(
            http2=False,
            limits=get_connection_limits(),
            timeout=httpx.Timeout(
                connect=settings.upstream_connect_timeout,
                read=settings.upstream_read_timeout,
                write=30.0,
                pool=30.0,
            ),
        )
        logger.info(
            f"HTTP client configured: http2=False, max_connections=100, "
            f"read_timeout={settings.upstream_read_timeout}s"
        )

    return _http_client


async def close_http_client() -> None:
    """
    Close the shared HTTP client.

    Call this during application shutdown to cleanly release connections.
    """
    global _http_client

    if _http_client is not None:
        logger.info("Closing shared HTTP client")
        await _http_client.aclose()
        _http_client = None
