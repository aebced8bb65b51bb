"""Embedding citation markers into text and finding them again."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Union

from assistant_bridge.citations.indexer import (
    MARKER_PREFIX,
    IndexedCitation,
    index_citations,
)
from assistant_bridge.models.chat import Citation

MARKER_RE = re.compile(r"\[" + MARKER_PREFIX + r"(\d+)\]")


@dataclass(frozen=True)
class TextSegment:
    text: str


@dataclass(frozen=True)
class CitationReference:
    """A resolved marker: the citation to show at this point in the text."""

    number: int
    citation: Citation

    @property
    def references(self):
        return self.citation.references


Segment = Union[TextSegment, CitationReference]


def insert_markers(content: str, indexed: Sequence[IndexedCitation]) -> str:
    """
    Splice ``[CITATION_<i>]`` into ``content`` at each citation's position.

    Markers go in from the last position to the first so that earlier
    offsets are not shifted by markers already inserted after them.
    """
    result = content
    for ic in sorted(indexed, key=lambda ic: (ic.position, ic.marker_index), reverse=True):
        result = result[: ic.position] + ic.marker + result[ic.position :]
    return result


def insert_citation_markers(content: str, citations: Optional[Sequence[Citation]]) -> str:
    """Index ``citations`` and insert their markers; unchanged if none are valid."""
    indexed = index_citations(content, citations)
    if not indexed:
        return content
    return insert_markers(content, indexed)


def split_markers(text: str, citations_by_index: Mapping[int, IndexedCitation]) -> list[Segment]:
    """
    Split ``text`` around markers.

    Markers whose index is not in ``citations_by_index`` (stale or corrupted)
    stay in the text literally.
    """
    segments: list[Segment] = []
    buffer = ""
    last = 0

    for match in MARKER_RE.finditer(text):
        buffer += text[last : match.start()]
        last = match.end()

        indexed = citations_by_index.get(int(match.group(1)))
        if indexed is None:
            buffer += match.group(0)
            continue

        if buffer:
            segments.append(TextSegment(buffer))
            buffer = ""
        segments.append(CitationReference(number=indexed.number, citation=indexed.citation))

    buffer += text[last:]
    if buffer:
        segments.append(TextSegment(buffer))
    return segments
