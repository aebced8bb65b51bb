"""API dependencies for configuration and upstream access."""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends

from assistant_bridge.config import Settings, get_settings
from assistant_bridge.upstream import AssistantClient, get_http_client


def get_assistant_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Optional[AssistantClient]:
    """
    Build the upstream client for this request.

    Returns None when required configuration is missing, so routes can
    answer with their own configuration error instead of a validation error.
    """
    if settings.missing_config_message():
        return None
    return AssistantClient(settings, http_client=get_http_client())


SettingsDep = Annotated[Settings, Depends(get_settings)]
AssistantClientDep = Annotated[Optional[AssistantClient], Depends(get_assistant_client)]
