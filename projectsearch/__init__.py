"""Search indexing and query construction for a package catalog."""

__version__ = "1.0.0"
