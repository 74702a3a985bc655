"""Search service for the projects index."""

import copy
import logging
import threading
import time
from collections.abc import Mapping
from typing import Any

from .backends.base import SearchBackend
from .backends.memory import MemoryBackend
from .facets import FacetParser
from .options import SearchOptions
from .query import SUGGESTION_NAME, QueryBuilder, coerce_options
from .results import Facet, SearchResponse, parse_hits, parse_suggestion

logger = logging.getLogger(__name__)

DEFAULT_FACET_CACHE_TTL = 3600


class SearchService:
    """Runs built requests against an engine and parses the responses.

    Facet-only lookups are cached per normalized options for
    ``facet_cache_ttl`` seconds; a TTL of 0 disables the cache.
    """

    def __init__(
        self,
        backend: SearchBackend,
        index_name: str,
        builder: QueryBuilder | None = None,
        facet_cache_ttl: float = DEFAULT_FACET_CACHE_TTL,
    ):
        self.backend = backend
        self.index_name = index_name
        self.builder = builder or QueryBuilder()
        self.facet_parser = FacetParser(self.builder.facet_config)
        self.facet_cache_ttl = facet_cache_ttl
        self._facet_cache: dict[str, tuple[float, dict[str, Facet]]] = {}
        self._cache_lock = threading.Lock()

    def request(
        self,
        query_text: str,
        options: SearchOptions | Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """The request body ``search`` would send, without sending it."""
        return self.builder.build(query_text, options)

    def search(
        self,
        query_text: str,
        options: SearchOptions | Mapping[str, Any] | None = None,
    ) -> SearchResponse:
        """Execute a search.

        Args:
            query_text: Free text, possibly empty
            options: Typed options or raw request parameters

        Returns:
            Parsed response with hits, facets and suggestion

        Raises:
            SearchError: If the engine fails or rejects the request
        """
        options = coerce_options(options).normalized()
        request = self.builder.build(query_text, options)
        raw = self.backend.search(self.index_name, request)

        hits, total = parse_hits(raw)
        response = SearchResponse(
            query=query_text,
            hits=hits,
            total=total,
            page=options.page,
            per_page=options.per_page,
            facets=self.facet_parser.parse(raw.get("aggregations"), options.filters),
            suggestion=parse_suggestion(raw, query_text, SUGGESTION_NAME),
            took_ms=raw.get("took"),
        )
        logger.debug(
            f"Search {query_text!r} on {self.index_name}: {total} hits, "
            f"page {options.page}"
        )
        return response

    def facets(
        self, options: SearchOptions | Mapping[str, Any] | None = None
    ) -> dict[str, Facet]:
        """Facet counts for the given filters, with no text query.

        Returns:
            Facets keyed by aggregation name
        """
        options = coerce_options(options).normalized()
        # Only filters and the bucket size shape a facet request.
        options = SearchOptions(
            filters=options.filters, facet_limit=options.facet_limit
        )
        key = options.cache_key()

        cached = self._cached_facets(key)
        if cached is not None:
            logger.debug(f"Facet cache hit for {key}")
            return cached

        request = self.builder.facets_request(options)
        raw = self.backend.search(self.index_name, request)
        facets = self.facet_parser.parse(raw.get("aggregations"), options.filters)

        if self.facet_cache_ttl > 0:
            with self._cache_lock:
                self._purge_expired()
                self._facet_cache[key] = (
                    time.monotonic() + self.facet_cache_ttl,
                    copy.deepcopy(facets),
                )
        return facets

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._facet_cache.clear()

    def get_statistics(self) -> dict[str, Any]:
        stats = self.backend.get_statistics(self.index_name)
        with self._cache_lock:
            stats["cached_facet_sets"] = len(self._facet_cache)
        return stats

    def _purge_expired(self) -> None:
        now = time.monotonic()
        for key, (expires_at, _) in list(self._facet_cache.items()):
            if now >= expires_at:
                del self._facet_cache[key]

    def _cached_facets(self, key: str) -> dict[str, Facet] | None:
        if self.facet_cache_ttl <= 0:
            return None

        with self._cache_lock:
            entry = self._facet_cache.get(key)
            if entry is None:
                return None
            expires_at, facets = entry
            if time.monotonic() >= expires_at:
                del self._facet_cache[key]
                return None
            return copy.deepcopy(facets)


def create_memory_service(
    index_name: str = "projects-development",
    builder: QueryBuilder | None = None,
    facet_cache_ttl: float = DEFAULT_FACET_CACHE_TTL,
) -> SearchService:
    """Create a service backed by the in-memory engine."""
    return SearchService(
        MemoryBackend(),
        index_name,
        builder=builder,
        facet_cache_ttl=facet_cache_ttl,
    )
