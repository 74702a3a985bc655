"""Project search CLI.

Command-line interface for querying the package catalog search index.
Built with Click and Rich.
"""

from projectsearch.cli.main import cli

__all__ = ["cli"]
