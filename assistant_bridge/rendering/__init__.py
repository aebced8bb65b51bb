"""HTML rendering of conversation messages with inline citations."""

from assistant_bridge.rendering.message_block import (
    format_markdown,
    render_content,
    render_message,
    role_display_name,
)
from assistant_bridge.rendering.resolver import (
    LITERAL_TAGS,
    build_citation_tag,
    download_href,
    resolve_markers,
)

__all__ = [
    "LITERAL_TAGS",
    "build_citation_tag",
    "download_href",
    "format_markdown",
    "render_content",
    "render_message",
    "resolve_markers",
    "role_display_name",
]
