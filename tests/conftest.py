"""Pytest configuration and fixtures."""

import os

import pytest


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Isolate environment variables and config lookup for each test.

    Configuration files are searched relative to the working directory and
    XDG_CONFIG_HOME, so both point into a fresh temporary directory.
    """
    original_env = os.environ.copy()
    for name in list(os.environ):
        if name.startswith("PROJECTSEARCH_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)

    yield

    os.environ.clear()
    os.environ.update(original_env)
