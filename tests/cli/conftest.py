"""Fixtures for CLI tests."""

import json

import pytest
from click.testing import CliRunner

from projectsearch.cli.main import cli


@pytest.fixture
def projects_data():
    return [
        {
            "id": 1,
            "name": "rails",
            "platform": "Rubygems",
            "language": "Ruby",
            "description": "Web application framework",
            "keywords": "web,framework",
            "normalized_licenses": ["MIT"],
            "rank": 30,
            "stars": 50000,
        },
        {
            "id": 2,
            "name": "django",
            "platform": "Pypi",
            "language": "Python",
            "description": "The Web framework for perfectionists",
            "keywords": ["web", "framework"],
            "normalized_licenses": ["BSD-3-Clause"],
            "rank": 27,
            "stars": 70000,
        },
        {
            "id": 3,
            "name": "left-pad",
            "platform": "NPM",
            "language": "JavaScript",
            "description": "String padding",
            "rank": 5,
        },
        {
            "id": 4,
            "name": "old-theme",
            "platform": "Wordpress",
            "description": "Web framework theme",
            "rank": 50,
        },
    ]


@pytest.fixture
def data_file(tmp_path, projects_data):
    path = tmp_path / "projects.json"
    path.write_text(json.dumps(projects_data))
    return path


@pytest.fixture
def cli_runner():
    """CLI runner bound to the application group."""

    class Runner(CliRunner):
        def invoke(self, args, **kwargs):
            return super().invoke(cli, args, **kwargs)

    return Runner()
