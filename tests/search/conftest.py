"""Shared fixtures for search module tests."""

from datetime import datetime

import pytest

from projectsearch.core.models import Project, ProjectStatus
from projectsearch.search.backends.memory import MemoryBackend
from projectsearch.search.engine import SearchService
from projectsearch.search.indexing.hooks import IndexingHook
from projectsearch.search.query import QueryBuilder
from projectsearch.storage.events import EventBus
from projectsearch.storage.repository import ProjectRepository

INDEX = "projects-test"


@pytest.fixture
def sample_projects() -> list[Project]:
    """Catalog projects with diverse platforms, languages and statuses."""
    return [
        Project(
            id=1,
            name="rails",
            platform="Rubygems",
            description="Ruby on Rails web application framework",
            homepage="https://rubyonrails.org",
            repository_url="https://github.com/rails/rails",
            language="Ruby",
            licenses="MIT",
            normalized_licenses=("MIT",),
            keywords=("web", "framework"),
            rank=30,
            stars=50000,
            created_at=datetime(2009, 7, 25),
        ),
        Project(
            id=2,
            name="react",
            platform="NPM",
            description="A declarative library for building user interfaces",
            repository_url="https://github.com/facebook/react",
            language="JavaScript",
            normalized_licenses=("MIT",),
            keywords=("ui", "frontend", "web"),
            rank=28,
            stars=200000,
        ),
        Project(
            id=3,
            name="django",
            platform="Pypi",
            description="The Web framework for perfectionists with deadlines",
            repository_url="https://github.com/django/django.git",
            language="Python",
            normalized_licenses=("BSD-3-Clause",),
            keywords=("web", "framework"),
            rank=27,
            stars=70000,
        ),
        Project(
            id=4,
            name="org.apache.commons:commons-lang3",
            platform="Maven",
            description="Apache Commons Lang utility classes",
            language="Java",
            normalized_licenses=("Apache-2.0",),
            keywords=("utilities",),
            rank=20,
            stars=2500,
        ),
        Project(
            id=5,
            name="ring/ring-core",
            platform="Clojars",
            description="Clojure HTTP server abstraction",
            language="Clojure",
            normalized_licenses=("MIT",),
            keywords=("web", "http"),
            rank=15,
            stars=3000,
        ),
        Project(
            id=6,
            name="flask",
            platform="Pypi",
            description="A simple framework for building complex web applications",
            language="Python",
            normalized_licenses=("BSD-3-Clause",),
            keywords=("web", "microframework"),
            rank=25,
            stars=60000,
        ),
        Project(
            id=7,
            name="hidden-gem",
            platform="Rubygems",
            description="web framework",
            language="Ruby",
            normalized_licenses=("MIT",),
            keywords=("web",),
            status=ProjectStatus.HIDDEN,
            rank=40,
        ),
        Project(
            id=8,
            name="removed-pkg",
            platform="NPM",
            description="web framework",
            language="JavaScript",
            status=ProjectStatus.REMOVED,
            rank=40,
        ),
        Project(
            id=9,
            name="sublime-linter",
            platform="Sublime",
            description="web framework linter",
            language="Python",
            keywords=("web",),
            rank=40,
        ),
        Project(
            id=10,
            name="express",
            platform="NPM",
            description="Fast, unopinionated, minimalist web framework",
            language="JavaScript",
            normalized_licenses=("MIT",),
            keywords=("web", "framework", "http"),
            status=ProjectStatus.ACTIVE,
            rank=29,
            stars=60000,
        ),
    ]


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def repository(event_bus, memory_backend) -> ProjectRepository:
    """Repository whose commits are indexed into the memory backend."""
    IndexingHook(memory_backend, INDEX).attach(event_bus)
    return ProjectRepository(event_bus)


@pytest.fixture
def populated_backend(repository, memory_backend, sample_projects) -> MemoryBackend:
    repository.save_all(sample_projects)
    return memory_backend


@pytest.fixture
def search_service(populated_backend) -> SearchService:
    return SearchService(populated_backend, INDEX, builder=QueryBuilder())
