"""Base search engine client interface."""

from abc import ABC, abstractmethod
from typing import Any


class SearchBackend(ABC):
    """Abstract interface for document-search engine clients.

    Requests and responses use the engine's JSON structures; the query
    builder produces the request bodies passed to ``search``.
    """

    @abstractmethod
    def index(self, index: str, doc_id: str | int, document: dict[str, Any]) -> None:
        """Insert or replace a single document.

        Args:
            index: Index name
            doc_id: Identity of the document
            document: Field names to values

        Raises:
            IndexingError: If indexing fails
        """

    @abstractmethod
    def delete(self, index: str, doc_id: str | int) -> bool:
        """Delete a document from the index.

        Args:
            index: Index name
            doc_id: Identity of the document

        Returns:
            True if document was deleted, False if not found
        """

    @abstractmethod
    def search(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        """Execute a search request.

        Args:
            index: Index name
            body: Request body (query, post_filter, aggs, suggest, sort, ...)

        Returns:
            Raw engine response with ``hits`` and optional ``aggregations``
            and ``suggest`` sections

        Raises:
            QueryError: If the request cannot be executed
        """

    @abstractmethod
    def clear(self, index: str) -> None:
        """Remove all documents from the index."""

    @abstractmethod
    def get_statistics(self, index: str) -> dict[str, Any]:
        """Get index statistics such as the document count."""


class SearchError(Exception):
    """Base exception for search-related errors."""


class IndexingError(SearchError):
    """Error during document indexing operations."""


class QueryError(SearchError):
    """Error during query execution."""


class EngineRejected(QueryError):
    """The engine refused the request (unknown clause, bad sort, ...)."""
