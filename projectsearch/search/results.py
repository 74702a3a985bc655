"""Search result types and response parsing."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class FacetValue:
    """Individual facet value with count."""

    value: str
    count: int
    selected: bool = False

    def __str__(self) -> str:
        return f"{self.value} ({self.count})"


@dataclass
class Facet:
    """Facet buckets for a field."""

    field: str
    display_name: str
    values: list[FacetValue] = field(default_factory=list)

    def get_value_count(self, value: str) -> int:
        """Get count for a specific facet value."""
        for facet_value in self.values:
            if facet_value.value == value:
                return facet_value.count
        return 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "display_name": self.display_name,
            "values": [
                {"value": v.value, "count": v.count, "selected": v.selected}
                for v in self.values
            ],
        }


@dataclass
class SearchHit:
    """A single ranked document."""

    id: str
    score: float | None
    source: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str | None:
        return self.source.get("name")

    @property
    def platform(self) -> str | None:
        return self.source.get("platform")


@dataclass
class SearchResponse:
    """Parsed engine response.

    A plain value: cache layers serialize it (or its ``to_dict()``)
    directly.
    """

    query: str
    hits: list[SearchHit]
    total: int
    page: int = 1
    per_page: int = 30
    facets: dict[str, Facet] = field(default_factory=dict)
    suggestion: str | None = None
    took_ms: int | None = None

    @property
    def has_results(self) -> bool:
        return len(self.hits) > 0

    @property
    def total_pages(self) -> int:
        if self.per_page <= 0:
            return 0
        return (self.total + self.per_page - 1) // self.per_page

    @property
    def has_more(self) -> bool:
        return self.page < self.total_pages

    def get_facet(self, name: str) -> Facet | None:
        return self.facets.get(name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "total": self.total,
            "page": self.page,
            "per_page": self.per_page,
            "hits": [
                {"id": hit.id, "score": hit.score, "source": hit.source}
                for hit in self.hits
            ],
            "facets": {name: facet.to_dict() for name, facet in self.facets.items()},
            "suggestion": self.suggestion,
            "took_ms": self.took_ms,
        }


def parse_hits(raw: dict[str, Any]) -> tuple[list[SearchHit], int]:
    """Extract hits and the total count from a raw response."""
    hits_section = raw.get("hits", {})
    total = hits_section.get("total", 0)
    if isinstance(total, dict):
        total = total.get("value", 0)

    hits = [
        SearchHit(
            id=str(hit.get("_id")),
            score=hit.get("_score"),
            source=hit.get("_source", {}),
        )
        for hit in hits_section.get("hits", [])
    ]
    return hits, int(total)


def parse_suggestion(raw: dict[str, Any], query: str, name: str) -> str | None:
    """Rewrite the query with the best option for each suggested term.

    Returns:
        The corrected query, or None when the engine had nothing better
    """
    entries = raw.get("suggest", {}).get(name, [])
    if not entries:
        return None

    corrected = query
    changed = False
    # Replace from the end so earlier offsets stay valid.
    for entry in sorted(entries, key=lambda e: e.get("offset", 0), reverse=True):
        options = entry.get("options") or []
        if not options:
            continue
        start = entry.get("offset", 0)
        end = start + entry.get("length", len(entry.get("text", "")))
        corrected = corrected[:start] + options[0]["text"] + corrected[end:]
        changed = True

    return corrected if changed and corrected != query else None
