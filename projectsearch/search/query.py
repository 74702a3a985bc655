"""Search request construction for the projects index.

The builder turns free text plus ``SearchOptions`` into a complete request
body for the document-search engine. Each part (inner query, exclusions,
user filters, aggregations, suggestion, sort, pagination) is built on its
own and the request is assembled once, so every branch produces a whole
request and equal inputs always produce equal output.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import msgspec

from .facets import FacetConfiguration
from .indexing.fields import PROJECT_SCHEMA, FieldConfiguration
from .options import SearchOptions, normalize_filters

logger = logging.getLogger(__name__)

# Platforms that are no longer supported but may still have documents in
# the index; they are filtered out until that data is purged.
RETIRED_PLATFORMS = (
    "Sublime",
    "Wordpress",
    "Atom",
    "PlatformIO",
    "Shards",
    "Emacs",
    "Jam",
)

EXCLUDED_STATUSES = ("Hidden", "Removed")

SUGGESTION_NAME = "did_you_mean"


@dataclass(frozen=True)
class MatchAll:
    """Matches every document (browse mode)."""

    def to_dict(self) -> dict[str, Any]:
        return {"match_all": {}}


@dataclass(frozen=True)
class MultiFieldMatch:
    """Cross-fields full-text match over the weighted scored fields."""

    text: str
    fields: tuple[str, ...]
    fuzziness: float = 1.2
    slop: int = 2
    type: str = "cross_fields"
    operator: str = "and"

    def to_dict(self) -> dict[str, Any]:
        return {
            "multi_match": {
                "query": self.text,
                "fields": list(self.fields),
                "fuzziness": self.fuzziness,
                "slop": self.slop,
                "type": self.type,
                "operator": self.operator,
            }
        }


@dataclass(frozen=True)
class PrefixMatch:
    """Autocomplete match on the start of the exact name."""

    value: str
    field: str = "exact_name"

    def to_dict(self) -> dict[str, Any]:
        return {"prefix": {self.field: self.value}}


InnerQuery = MatchAll | MultiFieldMatch | PrefixMatch


def popularity_sort() -> list[dict[str, str]]:
    """Most popular first: rank, then stars, both descending."""
    return [{"rank": "desc"}, {"stars": "desc"}]


class QueryBuilder:
    """Builds search requests against the projects index.

    The retired-platform denylist is owned by the builder so deployments
    (and tests) can supply their own through configuration.
    """

    def __init__(
        self,
        schema: FieldConfiguration | None = None,
        retired_platforms: tuple[str, ...] | list[str] = RETIRED_PLATFORMS,
        facet_config: FacetConfiguration | None = None,
    ):
        self.schema = schema or PROJECT_SCHEMA
        self.retired_platforms = tuple(retired_platforms)
        self.facet_config = facet_config or FacetConfiguration()

    def build(
        self,
        query_text: str,
        options: SearchOptions | Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Build the full search request.

        Args:
            query_text: Free text, possibly empty
            options: Typed options or raw request parameters

        Returns:
            Request body with query, optional post_filter, aggs and suggest,
            sort and pagination
        """
        options = coerce_options(options)
        query_text = query_text or ""
        filters = normalize_filters(options.filters)

        inner = self.inner_query(query_text, options)
        logger.debug(
            f"Building {type(inner).__name__} request with filters on "
            f"{list(filters) or 'no fields'}"
        )

        request: dict[str, Any] = {"query": self.scored_query(inner)}

        user_filters = self.filter_clauses(filters)
        if user_filters:
            request["post_filter"] = {"bool": {"filter": user_filters}}

        if not options.api:
            request["aggs"] = self.aggregations(options)
            if query_text.strip():
                request["suggest"] = self.suggestion(query_text)

        request["sort"] = self.sort_spec(query_text, options)
        request["from"] = (options.page - 1) * options.per_page
        request["size"] = options.per_page
        return request

    def facets_request(
        self, options: SearchOptions | Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Request computing only facet counts, for pages without results.

        Aggregations are always included here, even for API callers.
        """
        options = coerce_options(options)
        if options.api:
            options = msgspec.structs.replace(options, api=False)

        request = self.build("", options)
        return {"query": request["query"], "aggs": request["aggs"], "size": 0}

    def inner_query(self, query_text: str, options: SearchOptions) -> InnerQuery:
        """Choose the text query: prefix, multi-field match or match-all."""
        if options.prefix and query_text.strip():
            return PrefixMatch(query_text)
        if query_text.strip():
            return MultiFieldMatch(query_text, tuple(self.schema.weighted_fields()))
        return MatchAll()

    def scored_query(self, inner: InnerQuery) -> dict[str, Any]:
        """Wrap the inner query with exclusions and the popularity boost."""
        return {
            "function_score": {
                "query": {
                    "bool": {
                        "must": inner.to_dict(),
                        "must_not": self.exclusion_clauses(),
                    }
                },
                "field_value_factor": {"field": "rank", "modifier": "square"},
            }
        }

    def exclusion_clauses(self) -> list[dict[str, Any]]:
        """Unconditional exclusions: hidden/removed and retired platforms."""
        clauses: list[dict[str, Any]] = [
            {"term": {"status": status}} for status in EXCLUDED_STATUSES
        ]
        if self.retired_platforms:
            clauses.append({"terms": {"platform": list(self.retired_platforms)}})
        return clauses

    def filter_clauses(
        self,
        filters: Mapping[str, Any] | None,
        exclude: str | None = None,
    ) -> list[dict[str, Any]]:
        """One ``terms`` clause per filter field, optionally skipping one.

        Values within a field are alternatives; separate clauses must all
        match. Field names are not checked against the schema.
        """
        return [
            {"terms": {field: list(values)}}
            for field, values in normalize_filters(filters).items()
            if field != exclude
        ]

    def aggregation_spec(
        self,
        facet_field: str,
        limit: int,
        options: SearchOptions | Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Terms aggregation for one facet, scoped by every other filter.

        The facet's own filter is left out so its buckets show the values
        that relaxing only that filter would offer.
        """
        options = coerce_options(options)
        return {
            "filter": {
                "bool": {
                    "filter": self.filter_clauses(options.filters, exclude=facet_field)
                }
            },
            "aggs": {facet_field: {"terms": {"field": facet_field, "size": limit}}},
        }

    def aggregations(self, options: SearchOptions) -> dict[str, Any]:
        return {
            name: self.aggregation_spec(field, options.facet_limit, options)
            for name, field in self.facet_config.items()
        }

    def suggestion(self, query_text: str) -> dict[str, Any]:
        """Single best alternative term for the name field."""
        return {
            SUGGESTION_NAME: {"text": query_text, "term": {"size": 1, "field": "name"}}
        }

    def sort_spec(
        self, query_text: str, options: SearchOptions
    ) -> list[dict[str, str]]:
        if options.prefix:
            return popularity_sort()
        if options.sort:
            return [{options.sort: options.order or "desc"}]
        if query_text.strip():
            return [{"_score": options.order or "desc"}]
        return popularity_sort()


def coerce_options(options: SearchOptions | Mapping[str, Any] | None) -> SearchOptions:
    """Accept typed options, raw parameters or nothing."""
    if options is None:
        return SearchOptions()
    if isinstance(options, SearchOptions):
        return options
    return SearchOptions.from_params(options)


_default_builder = QueryBuilder()


def build(
    query_text: str, options: SearchOptions | Mapping[str, Any] | None = None
) -> dict[str, Any]:
    """Build a request with the default schema and denylist."""
    return _default_builder.build(query_text, options)


def aggregation_spec(
    facet_field: str,
    limit: int,
    options: SearchOptions | Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Per-facet aggregation with the default builder."""
    return _default_builder.aggregation_spec(facet_field, limit, options)
