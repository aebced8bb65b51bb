"""
Python-Markdown extensions used when formatting chat messages.

Message text comes from users and from the assistant, so raw HTML in it is
shown as text instead of being passed through. Citation markers are taken
out of inline parsing before link syntax sees them; otherwise a marker
followed by ``(`` would be read as a link.
"""

from __future__ import annotations

from markdown import Markdown
from markdown.extensions import Extension
from markdown.inlinepatterns import InlineProcessor

from assistant_bridge.citations.markers import MARKER_RE

# Above "reference" (170) and "link" (160), below "backtick" (190) so markers
# inside inline code stay part of the code span.
CITATION_MARKER_PRIORITY = 175


class EscapeHtmlExtension(Extension):
    """Render raw HTML blocks and inline tags as escaped text."""

    def extendMarkdown(self, md: Markdown) -> None:
        md.preprocessors.deregister("html_block")
        md.inlinePatterns.deregister("html")


class CitationMarkerInlineProcessor(InlineProcessor):
    """Keep ``[CITATION_<i>]`` as literal text that no later pattern rewrites."""

    def handleMatch(self, m, data: str) -> tuple[str, int, int]:
        # Strings returned here are stashed and restored verbatim
        return m.group(0), m.start(0), m.end(0)


class CitationMarkerExtension(Extension):
    def extendMarkdown(self, md: Markdown) -> None:
        md.inlinePatterns.register(
            CitationMarkerInlineProcessor(MARKER_RE.pattern, md),
            "citation_marker",
            CITATION_MARKER_PRIORITY,
        )
