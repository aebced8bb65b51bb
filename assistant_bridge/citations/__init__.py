"""Citation numbering and inline markers."""

from assistant_bridge.citations.indexer import (
    IndexedCitation,
    citation_map,
    index_citations,
)
from assistant_bridge.citations.markers import (
    MARKER_RE,
    CitationReference,
    Segment,
    TextSegment,
    insert_citation_markers,
    insert_markers,
    split_markers,
)

__all__ = [
    "MARKER_RE",
    "CitationReference",
    "IndexedCitation",
    "Segment",
    "TextSegment",
    "citation_map",
    "index_citations",
    "insert_citation_markers",
    "insert_markers",
    "split_markers",
]
