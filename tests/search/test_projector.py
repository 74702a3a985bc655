"""Tests for projecting projects into index documents."""

from datetime import datetime

import pytest

from projectsearch.core.models import Project, ProjectStatus
from projectsearch.search.indexing.projector import (
    DocumentProjector,
    extra_searchable_names,
    project,
)


class TestExtraSearchableNames:
    """Composite identifiers are split per platform."""

    def test_maven(self):
        assert extra_searchable_names("org.apache:commons", "Maven") == [
            "org.apache",
            "commons",
        ]

    def test_clojars(self):
        assert extra_searchable_names("foo/bar", "Clojars") == ["foo", "bar"]

    @pytest.mark.parametrize("platform", ["NPM", "Pypi", "Rubygems", "maven"])
    def test_other_platforms(self, platform):
        assert extra_searchable_names("org.apache:commons", platform) == []


class TestDocumentProjector:
    @pytest.fixture
    def maven_project(self):
        return Project(
            id=42,
            name="org.apache:commons",
            platform="Maven",
            description="Common utilities",
            repository_url="https://github.com/apache/commons-lang.git",
            language="Java",
            keywords=("utils", "apache"),
            normalized_licenses=("Apache-2.0",),
            status=ProjectStatus.DEPRECATED,
            rank=12,
            created_at=datetime(2020, 1, 2, 3, 4, 5),
        )

    def test_derived_fields(self, maven_project):
        document = DocumentProjector().project(maven_project)

        assert document.exact_name == maven_project.name
        assert document.extra_searchable_names == ("org.apache", "commons")
        assert document.repo_name == "apache/commons-lang"
        assert document.keywords_array == ("utils", "apache")
        assert document.status == "Deprecated"

    def test_missing_signals_default_to_zero(self, maven_project):
        document = project(maven_project)

        assert document.rank == 12
        assert document.stars == 0
        assert document.dependents_count == 0
        assert document.dependent_repos_count == 0
        assert document.contributions_count == 0

    def test_to_dict_is_json_ready(self, maven_project):
        data = project(maven_project).to_dict()

        assert data["id"] == 42
        assert data["extra_searchable_names"] == ["org.apache", "commons"]
        assert data["created_at"] == "2020-01-02T03:04:05"
        assert data["status"] == "Deprecated"

    def test_no_status(self):
        document = project(Project(id=1, name="left-pad", platform="NPM"))

        assert document.status is None
        assert document.repo_name is None
        assert document.extra_searchable_names == ()

    def test_project_all(self, sample_projects):
        documents = DocumentProjector().project_all(sample_projects)

        assert [d.id for d in documents] == [p.id for p in sample_projects]
        assert all(d.exact_name == d.name for d in documents)
