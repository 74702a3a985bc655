"""Search over the package catalog.

Main components:
- QueryBuilder: request bodies for the document-search engine
- SearchService: executes searches and caches facet lookups
- DocumentProjector / IndexingHook: keep the index in step with the catalog
- MemoryBackend: in-process engine for tests and the CLI
"""

from .backends import (
    EngineRejected,
    IndexingError,
    MemoryBackend,
    QueryError,
    SearchBackend,
    SearchError,
)
from .engine import SearchService, create_memory_service
from .facets import FacetConfiguration, FacetParser
from .indexing import (
    PROJECT_SCHEMA,
    DocumentProjector,
    FieldConfiguration,
    FieldDefinition,
    FieldType,
    IndexedDocument,
    IndexingHook,
    index_name_for,
)
from .options import SearchOptions
from .query import (
    RETIRED_PLATFORMS,
    MatchAll,
    MultiFieldMatch,
    PrefixMatch,
    QueryBuilder,
    aggregation_spec,
    build,
)
from .results import Facet, FacetValue, SearchHit, SearchResponse

__all__ = [
    # Main classes
    "QueryBuilder",
    "SearchService",
    "SearchOptions",
    "create_memory_service",
    "build",
    "aggregation_spec",
    "RETIRED_PLATFORMS",
    # Inner queries
    "MatchAll",
    "MultiFieldMatch",
    "PrefixMatch",
    # Results
    "SearchResponse",
    "SearchHit",
    "Facet",
    "FacetValue",
    "FacetConfiguration",
    "FacetParser",
    # Indexing
    "PROJECT_SCHEMA",
    "FieldConfiguration",
    "FieldDefinition",
    "FieldType",
    "DocumentProjector",
    "IndexedDocument",
    "IndexingHook",
    "index_name_for",
    # Backends
    "SearchBackend",
    "MemoryBackend",
    "SearchError",
    "IndexingError",
    "QueryError",
    "EngineRejected",
]
