"""Renders conversation messages to HTML fragments."""

from __future__ import annotations

import logging
from functools import partial
from typing import Optional

import markdown
from bs4 import BeautifulSoup

from assistant_bridge.citations import citation_map, insert_citation_markers
from assistant_bridge.config import get_settings
from assistant_bridge.models.chat import ChatMessage, ChatRole
from assistant_bridge.rendering.extensions import CitationMarkerExtension, EscapeHtmlExtension
from assistant_bridge.rendering.resolver import build_citation_tag, resolve_markers

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = [
    "tables",
    "fenced_code",
    "pymdownx.tilde",
    "pymdownx.magiclink",
    "pymdownx.tasklist",
    "pymdownx.arithmatex",
]
MARKDOWN_EXTENSION_CONFIGS = {
    # ~~strike~~ only; a single tilde is plain text
    "pymdownx.tilde": {"subscript": False},
    # $$ display blocks only, left as TeX for a client-side renderer
    "pymdownx.arithmatex": {"generic": True, "inline_syntax": [], "block_syntax": ["dollar"]},
}


def format_markdown(text: str) -> BeautifulSoup:
    """
    Format markdown text into an HTML node tree.

    Supports tables, fenced code, strikethrough, bare URL autolinks, task
    lists and $$ math blocks. Raw HTML is escaped, and citation markers
    come through as literal text.
    """
    md = markdown.Markdown(
        extensions=[*MARKDOWN_EXTENSIONS, EscapeHtmlExtension(), CitationMarkerExtension()],
        extension_configs=MARKDOWN_EXTENSION_CONFIGS,
    )
    return BeautifulSoup(md.convert(text), "html.parser")


def role_display_name(role: ChatRole, assistant_name: str = "Pinecone") -> str:
    if role is ChatRole.USER:
        return "You"
    if role is ChatRole.ERROR:
        return "Error"
    return assistant_name


def render_content(
    message: ChatMessage,
    download_path: Optional[str] = None,
) -> BeautifulSoup:
    """
    Render a message body, resolving citation markers for assistant replies.

    Markers are inserted into the raw content, the annotated text is
    formatted, and the markers are then resolved against a citation map
    built from the same content and citations.
    """
    download_path = download_path or get_settings().file_download_path
    annotate = message.role is ChatRole.ASSISTANT and bool(message.citations)
    text = insert_citation_markers(message.content, message.citations) if annotate else message.content

    soup = format_markdown(text)

    for link in soup.find_all("a"):
        link["target"] = "_blank"
        link["rel"] = "noreferrer"

    if annotate:
        build = partial(build_citation_tag, soup, download_path=download_path)
        resolved = resolve_markers(soup, citation_map(message.content, message.citations), build)
        logger.debug(f"Resolved {resolved} citation markers")

    return soup


def render_message(
    message: ChatMessage,
    assistant_name: Optional[str] = None,
    download_path: Optional[str] = None,
) -> str:
    """
    Render one conversation turn as an HTML fragment.

    The assistant name and download path default to the configured
    ``assistant_display_name`` and ``file_download_path``.
    """
    settings = get_settings()
    assistant_name = assistant_name or settings.assistant_display_name
    download_path = download_path or settings.file_download_path

    soup = BeautifulSoup("", "html.parser")

    classes = ["chat-message", f"chat-message--{message.role.value}"]
    root = soup.new_tag("div", attrs={"class": " ".join(classes)})
    soup.append(root)

    name = soup.new_tag("div", attrs={"class": "chat-message__name"})
    name.string = role_display_name(message.role, assistant_name)
    root.append(name)

    body = soup.new_tag(
        "div", attrs={"class": "chat-message__content", "data-testid": "message-content"}
    )
    if message.role is ChatRole.ASSISTANT and message.content == "":
        body.append(soup.new_tag("span", attrs={"class": "chat-message__loading"}))

    content = render_content(message, download_path=download_path)
    for node in list(content.contents):
        body.append(node.extract())
    root.append(body)

    return str(soup)
