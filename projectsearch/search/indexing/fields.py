"""Field configuration for the projects search index."""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any


class FieldType(Enum):
    """Types of indexed fields."""

    TEXT = "text"
    KEYWORD = "keyword"
    NUMERIC = "numeric"
    DATE = "date"


@dataclass(frozen=True)
class FieldDefinition:
    """Definition of an indexed field.

    ``scored`` fields take part in free-text relevance; ``boost`` is only
    applied to them.
    """

    name: str
    field_type: FieldType
    analyzer: str | None = None
    boost: float = 1.0
    scored: bool = False
    facet: bool = False

    @property
    def weighted_name(self) -> str:
        """Field reference with its boost suffix, e.g. ``name^2``."""
        if self.boost == 1:
            return self.name
        boost = int(self.boost) if float(self.boost).is_integer() else self.boost
        return f"{self.name}^{boost}"


class FieldConfiguration:
    """Read-only schema of the projects index."""

    DEFAULT_FIELDS = (
        FieldDefinition("name", FieldType.TEXT, "stemming", boost=2, scored=True),
        FieldDefinition("exact_name", FieldType.KEYWORD, "exact", boost=2, scored=True),
        FieldDefinition(
            "extra_searchable_names", FieldType.KEYWORD, "exact", boost=2, scored=True
        ),
        FieldDefinition("repo_name", FieldType.TEXT, "standard", scored=True),
        FieldDefinition("description", FieldType.TEXT, "stemming", scored=True),
        FieldDefinition("homepage", FieldType.TEXT, "standard", scored=True),
        FieldDefinition(
            "language", FieldType.KEYWORD, "keyword", scored=True, facet=True
        ),
        FieldDefinition(
            "keywords_array", FieldType.KEYWORD, "keyword", scored=True, facet=True
        ),
        FieldDefinition(
            "normalized_licenses", FieldType.KEYWORD, "keyword", scored=True, facet=True
        ),
        FieldDefinition(
            "platform", FieldType.KEYWORD, "keyword", scored=True, facet=True
        ),
        FieldDefinition("status", FieldType.KEYWORD, "exact"),
        FieldDefinition("repository_url", FieldType.TEXT, "standard"),
        FieldDefinition("latest_release_number", FieldType.KEYWORD, "keyword"),
        FieldDefinition("created_at", FieldType.DATE),
        FieldDefinition("updated_at", FieldType.DATE),
        FieldDefinition("latest_release_published_at", FieldType.DATE),
        FieldDefinition("rank", FieldType.NUMERIC),
        FieldDefinition("stars", FieldType.NUMERIC),
        FieldDefinition("dependents_count", FieldType.NUMERIC),
        FieldDefinition("dependent_repos_count", FieldType.NUMERIC),
        FieldDefinition("contributions_count", FieldType.NUMERIC),
    )

    def __init__(self, fields: tuple[FieldDefinition, ...] = DEFAULT_FIELDS):
        self.fields = MappingProxyType({f.name: f for f in fields})

    def __contains__(self, name: str) -> bool:
        return name in self.fields

    def get_field(self, name: str) -> FieldDefinition | None:
        """Get field definition by name, None for unindexed names."""
        return self.fields.get(name)

    def get_analyzer(self, name: str) -> str | None:
        field = self.fields.get(name)
        return field.analyzer if field else None

    def scored_fields(self) -> list[str]:
        """Fields that take part in free-text relevance scoring."""
        return [name for name, field in self.fields.items() if field.scored]

    def weighted_fields(self) -> list[str]:
        """Scored fields with their boost suffixes, in schema order."""
        return [field.weighted_name for field in self.fields.values() if field.scored]

    def facet_fields(self) -> list[str]:
        """Categorical fields usable both as filters and facets."""
        return [name for name, field in self.fields.items() if field.facet]

    def numeric_fields(self) -> list[str]:
        return [
            name
            for name, field in self.fields.items()
            if field.field_type == FieldType.NUMERIC
        ]

    def date_fields(self) -> list[str]:
        return [
            name
            for name, field in self.fields.items()
            if field.field_type == FieldType.DATE
        ]

    def mapping(self) -> dict[str, Any]:
        """Index mapping document for the index-management collaborator.

        Returns:
            Dictionary with one ``properties`` entry per field
        """
        properties: dict[str, Any] = {}
        for name, field in self.fields.items():
            if field.field_type == FieldType.TEXT:
                spec: dict[str, Any] = {"type": "text"}
                if field.analyzer == "stemming":
                    spec["analyzer"] = "snowball"
            elif field.field_type == FieldType.KEYWORD:
                spec = {"type": "keyword"}
            elif field.field_type == FieldType.DATE:
                spec = {"type": "date"}
            else:
                spec = {"type": "integer"}
            properties[name] = spec
        return {"properties": properties}


PROJECT_SCHEMA = FieldConfiguration()
