"""Faceted search support for projects.

Facets let users narrow results by platform, language, keyword and
license. Each facet is computed by the engine as a terms aggregation;
this module names the facets and turns the returned buckets into
``Facet`` values.
"""

from collections.abc import Iterator, Mapping
from typing import Any

from .results import Facet, FacetValue


class FacetConfiguration:
    """Configuration for faceted search.

    Maps each aggregation name to the categorical field it counts.
    """

    DEFAULT_FACETS = {
        "platforms": "platform",
        "languages": "language",
        "keywords": "keywords_array",
        "licenses": "normalized_licenses",
    }

    DISPLAY_NAMES = {
        "platforms": "Platform",
        "languages": "Language",
        "keywords": "Keywords",
        "licenses": "License",
    }

    def __init__(self, custom_config: Mapping[str, str] | None = None):
        """Initialize facet configuration.

        Args:
            custom_config: Aggregation name to field, replacing the defaults
        """
        self.config = dict(custom_config or self.DEFAULT_FACETS)

    def items(self) -> Iterator[tuple[str, str]]:
        """Aggregation names and fields, in configuration order."""
        return iter(self.config.items())

    def get_facet_fields(self) -> list[str]:
        return list(self.config.values())

    def get_field(self, name: str) -> str | None:
        return self.config.get(name)

    def get_display_name(self, name: str) -> str:
        return self.DISPLAY_NAMES.get(name, name.replace("_", " ").title())


class FacetParser:
    """Turns raw aggregation responses into facets."""

    def __init__(self, config: FacetConfiguration | None = None):
        self.config = config or FacetConfiguration()

    def parse(
        self,
        aggregations: Mapping[str, Any] | None,
        selected: Mapping[str, tuple[str, ...]] | None = None,
    ) -> dict[str, Facet]:
        """Parse aggregation buckets.

        Args:
            aggregations: ``aggregations`` section of an engine response
            selected: Normalized active filters, used to flag selected values

        Returns:
            Facets keyed by aggregation name, in configuration order
        """
        if not aggregations:
            return {}

        selected = selected or {}
        facets = {}
        for name, field in self.config.items():
            aggregation = aggregations.get(name)
            if aggregation is None:
                continue

            # Facet buckets sit under the field-named sub-aggregation of the
            # filter aggregation.
            terms = aggregation.get(field, aggregation)
            chosen = set(selected.get(field, ()))
            values = [
                FacetValue(
                    value=str(bucket["key"]),
                    count=int(bucket["doc_count"]),
                    selected=str(bucket["key"]) in chosen,
                )
                for bucket in terms.get("buckets", [])
            ]
            facets[name] = Facet(
                field=field,
                display_name=self.config.get_display_name(name),
                values=values,
            )
        return facets
