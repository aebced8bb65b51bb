"""
Deterministic numbering of a message's citations.

Marker insertion and marker resolution run independently of each other
(one rewrites raw text, the other walks the rendered tree) and share no
state. They agree on marker numbers only because both call
``index_citations`` with the same content and citations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from assistant_bridge.models.chat import Citation

MARKER_PREFIX = "CITATION_"


@dataclass(frozen=True)
class IndexedCitation:
    """A valid citation together with its marker index."""

    marker_index: int
    citation: Citation

    @property
    def number(self) -> int:
        """1-based number shown to the user."""
        return self.marker_index + 1

    @property
    def position(self) -> int:
        return self.citation.position

    @property
    def marker(self) -> str:
        return f"[{MARKER_PREFIX}{self.marker_index}]"


def is_valid_position(content: str, citation: Citation) -> bool:
    return 0 <= citation.position <= len(content)


def index_citations(
    content: str, citations: Optional[Sequence[Citation]]
) -> list[IndexedCitation]:
    """
    Assign marker indexes to the valid citations of ``content``.

    Citations outside ``[0, len(content)]`` are dropped. The rest are ordered
    by position (ties keep their original order) and numbered from 0.
    """
    if not citations:
        return []
    valid = [c for c in citations if is_valid_position(content, c)]
    valid.sort(key=lambda c: c.position)
    return [IndexedCitation(marker_index=i, citation=c) for i, c in enumerate(valid)]


def citation_map(
    content: str, citations: Optional[Sequence[Citation]]
) -> dict[int, IndexedCitation]:
    """Marker index -> indexed citation, for resolving markers."""
    return {ic.marker_index: ic for ic in index_citations(content, citations)}
