"""Indexing subsystem: schema, analysis, projection and index upkeep."""

from .analyzers import (
    AnalyzerManager,
    KeywordAnalyzer,
    StandardAnalyzer,
    StemmingAnalyzer,
    TextAnalyzer,
)
from .fields import PROJECT_SCHEMA, FieldConfiguration, FieldDefinition, FieldType
from .hooks import IndexingHook, index_name_for
from .projector import DocumentProjector, IndexedDocument, extra_searchable_names

__all__ = [
    "PROJECT_SCHEMA",
    "FieldConfiguration",
    "FieldDefinition",
    "FieldType",
    "TextAnalyzer",
    "StandardAnalyzer",
    "StemmingAnalyzer",
    "KeywordAnalyzer",
    "AnalyzerManager",
    "DocumentProjector",
    "IndexedDocument",
    "extra_searchable_names",
    "IndexingHook",
    "index_name_for",
]
