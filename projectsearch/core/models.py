"""Core data models for catalog projects.

A Project is a single package published on a package manager platform
(Maven, npm, Clojars, ...). The search subsystem never owns projects; it
only reads them to build index documents.
"""

import enum
from datetime import datetime
from typing import Any
from urllib.parse import urlparse

import msgspec


class ProjectStatus(str, enum.Enum):
    """Lifecycle status of a project, using the stored casing."""

    ACTIVE = "Active"
    DEPRECATED = "Deprecated"
    UNMAINTAINED = "Unmaintained"
    HELP_WANTED = "Help Wanted"
    REMOVED = "Removed"
    HIDDEN = "Hidden"


class Project(msgspec.Struct, frozen=True, kw_only=True):
    """Immutable catalog project.

    Popularity signals are optional because they are filled in by
    background jobs; consumers treat a missing signal as zero.
    """

    id: int
    name: str
    platform: str
    description: str | None = None
    homepage: str | None = None
    repository_url: str | None = None
    language: str | None = None
    licenses: str | None = None
    normalized_licenses: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    latest_release_number: str | None = None
    status: ProjectStatus | None = None

    rank: int | None = None
    stars: int | None = None
    dependents_count: int | None = None
    dependent_repos_count: int | None = None
    contributions_count: int | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None
    latest_release_published_at: datetime | None = None

    @property
    def repo_name(self) -> str | None:
        """Repository full name (``owner/repo``) derived from the URL."""
        if not self.repository_url:
            return None

        path = urlparse(self.repository_url).path.strip("/")
        parts = [p for p in path.split("/") if p]
        if len(parts) < 2:
            return None

        repo = parts[1]
        if repo.endswith(".git"):
            repo = repo[:-4]
        return f"{parts[0]}/{repo}"

    @property
    def is_visible(self) -> bool:
        """Whether the project may appear in search results at all."""
        return self.status not in (ProjectStatus.HIDDEN, ProjectStatus.REMOVED)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        data = msgspec.to_builtins(self)
        return {
            k: list(v) if isinstance(v, tuple) else v
            for k, v in data.items()
            if v is not None
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        """Create a Project from a plain dictionary.

        Accepts keywords and licenses either as lists or comma-separated
        strings, and ISO-8601 strings for timestamps.
        """
        data = dict(data)
        for list_field in ("keywords", "normalized_licenses"):
            value = data.get(list_field)
            if isinstance(value, str):
                data[list_field] = tuple(
                    part.strip() for part in value.split(",") if part.strip()
                )
            elif value is None and list_field in data:
                del data[list_field]

        return msgspec.convert(data, cls)
