"""Projection of catalog projects into flat index documents."""

from datetime import datetime
from typing import Any

import msgspec

from ...core.models import Project

# Platforms whose package names are composite identifiers, and the
# separator between their components.
COMPOSITE_NAME_SEPARATORS = {
    "Maven": ":",
    "Clojars": "/",
}


class IndexedDocument(msgspec.Struct, frozen=True, kw_only=True):
    """Denormalized, regenerable search view of a Project.

    Never edited by hand: it is rebuilt from the project on every write.
    """

    id: int
    name: str
    exact_name: str
    extra_searchable_names: tuple[str, ...] = ()
    platform: str
    description: str | None = None
    homepage: str | None = None
    repository_url: str | None = None
    repo_name: str | None = None
    language: str | None = None
    keywords_array: tuple[str, ...] = ()
    normalized_licenses: tuple[str, ...] = ()
    latest_release_number: str | None = None
    status: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None
    latest_release_published_at: datetime | None = None

    rank: int = 0
    stars: int = 0
    dependents_count: int = 0
    dependent_repos_count: int = 0
    contributions_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation submitted to the search engine.

        Array fields are lists, as they would be after a JSON round trip.
        """
        data = msgspec.to_builtins(self)
        return {k: list(v) if isinstance(v, tuple) else v for k, v in data.items()}


def extra_searchable_names(name: str, platform: str) -> list[str]:
    """Split composite package identifiers into their components.

    ``org.apache:commons`` on Maven becomes ``["org.apache", "commons"]``;
    platforms without composite names yield an empty list.
    """
    separator = COMPOSITE_NAME_SEPARATORS.get(platform)
    if separator is None:
        return []
    return name.split(separator)


class DocumentProjector:
    """Converts projects into indexed documents."""

    def project(self, project: Project) -> IndexedDocument:
        """Build the index document for a project.

        Args:
            project: Source project

        Returns:
            IndexedDocument matching the projects index schema
        """
        return IndexedDocument(
            id=project.id,
            name=project.name,
            exact_name=project.name,
            extra_searchable_names=tuple(
                extra_searchable_names(project.name, project.platform)
            ),
            platform=project.platform,
            description=project.description,
            homepage=project.homepage,
            repository_url=project.repository_url,
            repo_name=project.repo_name,
            language=project.language,
            keywords_array=tuple(project.keywords),
            normalized_licenses=tuple(project.normalized_licenses),
            latest_release_number=project.latest_release_number,
            status=project.status.value if project.status else None,
            created_at=project.created_at,
            updated_at=project.updated_at,
            latest_release_published_at=project.latest_release_published_at,
            rank=project.rank or 0,
            stars=project.stars or 0,
            dependents_count=project.dependents_count or 0,
            dependent_repos_count=project.dependent_repos_count or 0,
            contributions_count=project.contributions_count or 0,
        )

    def project_all(self, projects: list[Project]) -> list[IndexedDocument]:
        return [self.project(p) for p in projects]


_default_projector = DocumentProjector()


def project(entity: Project) -> IndexedDocument:
    """Module-level projection used by persistence hooks."""
    return _default_projector.project(entity)
