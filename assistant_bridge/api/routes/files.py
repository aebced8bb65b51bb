"""File download endpoint used by citation references.

Citation references link here by stable file id rather than embedding the
upstream signed URL, which expires. Each request asks the assistant
service for a freshly signed URL and redirects to it.
"""

from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter
from fastapi.responses import JSONResponse, RedirectResponse

from assistant_bridge.api.dependencies import AssistantClientDep, SettingsDep
from assistant_bridge.streaming import extract_error_message
from assistant_bridge.upstream import UpstreamError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/files", tags=["files"])


@router.get("/{file_id}/download")
async def download_file(file_id: str, settings: SettingsDep, client: AssistantClientDep):
    """Redirect to a freshly signed download URL for ``file_id``."""
    missing = settings.missing_config_message()
    if missing or client is None:
        return JSONResponse(status_code=500, content={"error": missing})

    try:
        description = await client.describe_file(file_id)
    except UpstreamError as e:
        message = extract_error_message(e)
        if e.status_code == 404:
            return JSONResponse(status_code=404, content={"error": message})
        logger.error(f"File lookup failed for {file_id}: {message}")
        return JSONResponse(status_code=502, content={"error": message})
    except httpx.HTTPError as e:
        logger.error(f"File lookup failed for {file_id}: {e}")
        return JSONResponse(status_code=502, content={"error": str(e) or "Upstream unavailable"})

    signed_url = description.get("signed_url")
    if not signed_url:
        return JSONResponse(
            status_code=404, content={"error": f"No download available for file {file_id}"}
        )

    return RedirectResponse(url=signed_url, status_code=307)
