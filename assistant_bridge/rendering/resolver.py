"""
Resolves citation markers inside a rendered HTML tree.

The walker visits every text node below a root element and replaces each
known ``[CITATION_<i>]`` marker with an inline citation reference element.
Literal regions (inline code, code blocks and math blocks) are rendered
as-is, so a marker inside them is never replaced. A marker inside a link
becomes a reference without its own anchor, since anchors cannot nest.
"""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Optional, Union

from bs4 import BeautifulSoup, NavigableString, Tag

from assistant_bridge.citations.indexer import IndexedCitation
from assistant_bridge.citations.markers import (
    MARKER_RE,
    CitationReference,
    Segment,
    TextSegment,
    split_markers,
)
from assistant_bridge.models.chat import Reference

logger = logging.getLogger(__name__)

LITERAL_TAGS = frozenset({"code", "pre", "script", "style"})
# Math blocks hold TeX source for the client-side renderer
LITERAL_CLASSES = frozenset({"arithmatex"})
DOWNLOAD_HINT = "Click citation to download files"

ReferenceBuilder = Callable[..., Tag]


def download_href(reference: Reference, download_path: str) -> Optional[str]:
    """
    Link target for a reference's source file.

    The stable file id goes through the download endpoint, which signs a
    fresh URL on every request. The embedded signed URL may already have
    expired, so it is used only when there is no id.
    """
    if reference.file.id:
        return download_path.format(file_id=reference.file.id)
    return reference.file.signed_url


def first_downloadable(ref: CitationReference) -> Optional[Reference]:
    """The first reference that has a file id or a signed URL."""
    for reference in ref.references:
        if reference.file.id or reference.file.signed_url:
            return reference
    return None


def build_citation_tag(
    soup: BeautifulSoup,
    ref: CitationReference,
    download_path: str = "/files/{file_id}/download",
    inside_link: bool = False,
) -> Tag:
    """
    Build the inline ``[n]`` element with a tooltip listing every reference.

    Inside an existing link the reference cannot be an anchor itself, so the
    target goes on the wrapper as ``data-href`` instead.
    """
    wrapper = soup.new_tag(
        "span", attrs={"class": "inline-citation", "data-citation": str(ref.number)}
    )

    label = f"[{ref.number}]"
    target = first_downloadable(ref)
    href = download_href(target, download_path) if target else None
    if href and inside_link:
        wrapper["data-href"] = href
        wrapper.append(label)
    elif href:
        link = soup.new_tag("a", href=href, target="_blank", rel="noreferrer")
        link.string = label
        wrapper.append(link)
    else:
        wrapper.append(label)

    tooltip = soup.new_tag("span", attrs={"class": "citation-tooltip", "role": "tooltip"})
    for reference in ref.references:
        entry = soup.new_tag("span", attrs={"class": "citation-reference"})
        name = soup.new_tag("span", attrs={"class": "citation-file"})
        name.string = reference.file.name
        entry.append(name)

        pages = reference.sorted_pages
        highlight = reference.highlight.content if reference.highlight else ""
        if pages or highlight:
            meta = soup.new_tag("span", attrs={"class": "citation-meta"})
            if pages:
                page_tag = soup.new_tag("span", attrs={"class": "citation-pages"})
                page_tag.string = "Pages: " + ", ".join(str(p) for p in pages)
                meta.append(page_tag)
            if highlight:
                quote = soup.new_tag("span", attrs={"class": "citation-highlight"})
                quote.string = f'"{highlight}"'
                meta.append(quote)
            entry.append(meta)
        tooltip.append(entry)

    if any(reference.file.signed_url for reference in ref.references):
        hint = soup.new_tag("span", attrs={"class": "citation-hint"})
        hint.string = DOWNLOAD_HINT
        tooltip.append(hint)

    wrapper.append(tooltip)
    return wrapper


def _segment_node(
    segment: Segment, build: ReferenceBuilder, inside_link: bool
) -> Union[NavigableString, Tag]:
    if isinstance(segment, TextSegment):
        return NavigableString(segment.text)
    if isinstance(segment, CitationReference):
        return build(segment, inside_link=inside_link)
    raise TypeError(f"Unknown segment type: {type(segment).__name__}")


def _is_literal(tag: Tag) -> bool:
    return tag.name in LITERAL_TAGS or bool(LITERAL_CLASSES.intersection(tag.get("class") or []))


def resolve_markers(
    root: Tag,
    citations_by_index: Mapping[int, IndexedCitation],
    build: ReferenceBuilder,
    inside_link: bool = False,
) -> int:
    """
    Replace known markers below ``root`` in place.

    ``build`` is called as ``build(ref, inside_link=...)``; ``inside_link``
    is true for markers that sit within an ``<a>`` element.

    Returns:
        Number of citation references inserted.
    """
    replaced = 0
    for child in list(root.children):
        if isinstance(child, Tag):
            if not _is_literal(child):
                replaced += resolve_markers(
                    child, citations_by_index, build, inside_link or child.name == "a"
                )
            continue

        # Comments, CDATA and doctypes are NavigableString subclasses; skip them
        if type(child) is not NavigableString or not MARKER_RE.search(child):
            continue

        segments = split_markers(str(child), citations_by_index)
        found = sum(1 for s in segments if isinstance(s, CitationReference))
        if not found:
            continue
        child.replace_with(*(_segment_node(s, build, inside_link) for s in segments))
        replaced += found

    return replaced
