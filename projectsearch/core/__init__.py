"""Core catalog models."""

from .models import Project, ProjectStatus

__all__ = ["Project", "ProjectStatus"]
